"""
Priorities board router.

Mounts under ``/api/board`` (prefix set in ``main.py``).

The board's data lives in the Remote Sync Gateway; every endpoint here
builds a short-lived ``PriorityBoard`` for the requested user, forwards the
caller's bearer token to the gateway, and returns the freshly reloaded board.

Endpoints
---------
GET  /                               — Both week buckets, grouped by status column.
GET  /columns                        — The eight droppable zone ids and their labels.
POST /drag-end                       — Apply a drag-and-drop result.
PUT  /priorities/{id}/status         — Change a priority's status from the card menu.
GET  /priorities/{id}/comments       — Audit trail / comments of one priority.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from app.config import get_settings
from app.schemas.board import (
    BoardCoordinate,
    BoardResponse,
    DragEndResponse,
    DroppableZoneResponse,
    DropResult,
    InvalidCoordinateError,
)
from app.schemas.priority import Comment, StatusChangeRequest
from app.services.board_controller import PriorityBoard
from app.services.board_store import BoardStore, build_board_response
from app.services.gateway import GatewayError, RemoteSyncGateway, get_gateway
from app.utils.weeks import get_board_weeks, now_in_board_timezone

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tablero"])


# ---------------------------------------------------------------------------
# Shared dependency: one board session per request
# ---------------------------------------------------------------------------


def _board_session(
    gateway: Annotated[RemoteSyncGateway, Depends(get_gateway)],
    user_id: Annotated[
        str,
        Query(description="ID del usuario dueño de las prioridades.", min_length=1),
    ],
    reference_date: Annotated[
        date | None,
        Query(description="Fecha de referencia para la semana actual. Omitir para hoy."),
    ] = None,
) -> PriorityBoard:
    """Build a ``PriorityBoard`` for *user_id* anchored at *reference_date*.

    Args:
        gateway: Gateway client bound to the caller's token.
        user_id: Owner of the board.
        reference_date: Any day of the week to show as "current".

    Returns:
        A board session with an empty snapshot (not yet loaded).
    """
    settings = get_settings()
    reference = reference_date or now_in_board_timezone(settings.BOARD_TIMEZONE)
    store = BoardStore(
        gateway,
        user_id=user_id,
        windows=get_board_weeks(reference),
        initiatives_active_only=settings.INITIATIVES_ACTIVE_ONLY,
    )
    return PriorityBoard(store)


def _bad_gateway(exc: GatewayError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Error comunicándose con el servicio de prioridades: {exc.detail}",
    )


# ---------------------------------------------------------------------------
# GET /
# ---------------------------------------------------------------------------


@router.get(
    "/",
    response_model=BoardResponse,
    summary="Tablero de prioridades",
    description=(
        "Retorna las prioridades de la semana actual y de la siguiente, "
        "enriquecidas con sus iniciativas y agrupadas por columna de estado."
    ),
    responses={
        200: {"description": "Tablero cargado."},
        502: {"description": "El servicio de prioridades no respondió correctamente."},
    },
)
async def get_board(
    board: Annotated[PriorityBoard, Depends(_board_session)],
) -> BoardResponse:
    logger.debug("GET /board user_id=%s", board.store.user_id)
    try:
        snapshot = await board.load()
    except GatewayError as exc:
        raise _bad_gateway(exc) from exc
    return build_board_response(snapshot)


# ---------------------------------------------------------------------------
# GET /columns
# ---------------------------------------------------------------------------


@router.get(
    "/columns",
    response_model=list[DroppableZoneResponse],
    summary="Zonas de destino del tablero",
)
def get_columns() -> list[DroppableZoneResponse]:
    """Return every droppable zone id with its week and status labels."""
    return [
        DroppableZoneResponse(
            droppable_id=coordinate.serialize(),
            bucket=coordinate.week_bucket,
            bucket_label=coordinate.week_bucket.label,
            status=coordinate.status,
            status_label=coordinate.status.label,
        )
        for coordinate in BoardCoordinate.all()
    ]


# ---------------------------------------------------------------------------
# POST /drag-end
# ---------------------------------------------------------------------------


@router.post(
    "/drag-end",
    response_model=DragEndResponse,
    summary="Aplicar un movimiento de arrastrar y soltar",
    description=(
        "Interpreta el resultado del arrastre (cambio de estado, de semana o ambos), "
        "actualiza la prioridad, registra un comentario de sistema y recarga el tablero. "
        "Si la actualización falla, el tablero se recarga y se devuelve una alerta."
    ),
    responses={
        200: {"description": "Movimiento procesado (aplicado, fallido o sin cambios)."},
        422: {"description": "Zona de origen o destino inválida."},
    },
)
async def drag_end(
    result: Annotated[DropResult, Body()],
    board: Annotated[PriorityBoard, Depends(_board_session)],
) -> DragEndResponse:
    """Apply a drop and return its outcome with the reloaded board.

    Raises:
        HTTPException 422: If a droppable id is not a board column.
    """
    logger.debug(
        "POST /board/drag-end draggable=%s source=%s destination=%s",
        result.draggable_id,
        result.source.droppable_id,
        result.destination.droppable_id if result.destination else None,
    )
    try:
        outcome = await board.on_drag_end(result)
    except InvalidCoordinateError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    transition = outcome.transition
    return DragEndResponse(
        outcome=outcome.outcome,
        priority_id=outcome.priority_id,
        update=transition.update.to_payload() if transition else None,
        audit_message=transition.audit_message if transition else None,
        comment_recorded=outcome.comment_recorded,
        alert=outcome.alert,
        errors=outcome.errors,
        board=build_board_response(outcome.snapshot) if outcome.snapshot is not None else None,
    )


# ---------------------------------------------------------------------------
# PUT /priorities/{id}/status
# ---------------------------------------------------------------------------


@router.put(
    "/priorities/{priority_id}/status",
    response_model=DragEndResponse,
    summary="Cambiar el estado de una prioridad",
    responses={
        200: {"description": "Cambio procesado; ver ``outcome`` y ``alert``."},
        422: {"description": "Estado no disponible en el tablero."},
        502: {"description": "No se pudo recargar el tablero."},
    },
)
async def change_status(
    priority_id: Annotated[str, Path(description="ID de la prioridad.")],
    payload: Annotated[StatusChangeRequest, Body()],
    board: Annotated[PriorityBoard, Depends(_board_session)],
) -> DragEndResponse:
    if not payload.status.is_board_column:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"El estado {payload.status.value} no es una columna del tablero",
        )
    logger.debug("PUT /board/priorities/%s/status status=%s", priority_id, payload.status.value)
    try:
        outcome = await board.change_status(priority_id, payload.status)
    except GatewayError as exc:
        raise _bad_gateway(exc) from exc

    return DragEndResponse(
        outcome=outcome.outcome,
        priority_id=priority_id,
        update={"status": payload.status.value},
        alert=outcome.alert,
        errors=outcome.errors,
        board=build_board_response(outcome.snapshot),
    )


# ---------------------------------------------------------------------------
# GET /priorities/{id}/comments
# ---------------------------------------------------------------------------


@router.get(
    "/priorities/{priority_id}/comments",
    response_model=list[Comment],
    summary="Comentarios de una prioridad",
    description="Incluye los comentarios de sistema generados por los movimientos del tablero.",
)
async def get_comments(
    priority_id: Annotated[str, Path(description="ID de la prioridad.")],
    gateway: Annotated[RemoteSyncGateway, Depends(get_gateway)],
) -> list[Comment]:
    try:
        return await gateway.list_comments(priority_id)
    except GatewayError as exc:
        raise _bad_gateway(exc) from exc
