"""
Drag Transition Resolver.

Turns a drag-end event into a semantic board transition and applies it:

1. ``resolve_transition`` parses the source and destination droppable ids,
   stages the fields that change (``status`` and/or ``weekStart`` +
   ``weekEnd``) and writes one human-readable clause per change.
2. ``apply_drop`` sends the partial update, appends the system audit
   comment on success, and always reloads the board afterwards.

Failure handling
----------------
- Update rejected or unreachable → no audit comment, one alert, reload.
- Update accepted but comment rejected → logged and ignored; the audit
  trail simply misses that entry.
- Reload failed → logged; the outcome keeps the last board the gateway
  actually sent, or none at all.
- Anything other than a ``GatewayError`` propagates to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from app.schemas.board import (
    BoardCoordinate,
    BoardWeeks,
    DragOutcomeStatus,
    DropResult,
)
from app.schemas.priority import CommentCreate, PriorityUpdate
from app.services.board_store import BoardSnapshot, BoardStore
from app.services.gateway import GatewayError
from app.utils.constants import (
    ALERTA_ERROR_ACTUALIZACION,
    PREFIJO_COMENTARIO_SISTEMA,
    SEPARADOR_CLAUSULAS,
)
from app.utils.weeks import get_bucket_heading

logger = logging.getLogger(__name__)

AlertSink = Callable[[str], None]


# ---------------------------------------------------------------------------
# Resolution (pure)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transition:
    """What a drop means for one priority.

    Attributes:
        priority_id: The dragged priority.
        source: Column the card left.
        destination: Column the card was dropped on.
        update: Exactly the fields to send to the gateway.
        clauses: One Spanish sentence per changed dimension, status first.
    """

    priority_id: str
    source: BoardCoordinate
    destination: BoardCoordinate
    update: PriorityUpdate
    clauses: tuple[str, ...] = ()

    @property
    def audit_message(self) -> str | None:
        if not self.clauses:
            return None
        return f"{PREFIJO_COMENTARIO_SISTEMA} {SEPARADOR_CLAUSULAS.join(self.clauses)}"


def resolve_transition(result: DropResult, windows: BoardWeeks) -> Transition | None:
    """Interpret a drag-end event.

    Args:
        result: The drag library's drop result.
        windows: Week windows the board is showing; used to turn the
            destination bucket into concrete ``weekStart``/``weekEnd`` values
            and to label both weeks in the audit clause.

    Returns:
        The transition, or ``None`` when nothing has to change (dropped
        outside the board, or back on its own column).

    Raises:
        InvalidCoordinateError: If a droppable id is not a board column.
    """
    if result.is_noop:
        return None

    source = BoardCoordinate.parse(result.source.droppable_id)
    destination = BoardCoordinate.parse(result.destination.droppable_id)

    staged: dict[str, object] = {}
    clauses: list[str] = []

    if source.status is not destination.status:
        staged["status"] = destination.status
        clauses.append(
            f'Estado cambiado de "{source.status.label}" a "{destination.status.label}"'
        )

    if source.week_bucket is not destination.week_bucket:
        old_window = windows.window_for(source.week_bucket)
        new_window = windows.window_for(destination.week_bucket)
        staged["week_start"] = new_window.monday
        staged["week_end"] = new_window.friday
        clauses.append(
            f'Reprogramado de "{get_bucket_heading(source.week_bucket, old_window)}" '
            f'a "{get_bucket_heading(destination.week_bucket, new_window)}"'
        )

    if not staged:
        return None

    return Transition(
        priority_id=result.draggable_id,
        source=source,
        destination=destination,
        update=PriorityUpdate(**staged),
        clauses=tuple(clauses),
    )


# ---------------------------------------------------------------------------
# Application (async, talks to the gateway)
# ---------------------------------------------------------------------------


@dataclass
class DragOutcome:
    """Everything that happened while handling one drop.

    ``snapshot`` is the board as last received from the gateway.  It is
    ``None`` when nothing was reloaded, or when the reload failed and the
    store had never been loaded.  ``errors`` collects the gateway messages
    of every step that failed, in order.
    """

    outcome: DragOutcomeStatus
    priority_id: str
    transition: Transition | None = None
    comment_recorded: bool = False
    alert: str | None = None
    snapshot: BoardSnapshot | None = None
    errors: list[str] = field(default_factory=list)


async def _reload_quietly(store: BoardStore, outcome: DragOutcome) -> None:
    try:
        outcome.snapshot = await store.reload()
    except GatewayError as exc:
        logger.warning("Board reload failed after drop of %s: %s", outcome.priority_id, exc.detail)
        outcome.errors.append(exc.detail)
        outcome.snapshot = store.snapshot if store.loaded else None


async def apply_drop(
    result: DropResult,
    store: BoardStore,
    on_alert: AlertSink,
) -> DragOutcome:
    """Resolve *result* and synchronise it with the gateway.

    Ordering within one drop: update, then (on success) audit comment, then
    reload.  The reload runs whether the update succeeded or not; there is
    no local state to roll back because nothing is changed locally before
    the server confirms.

    Args:
        result: Drag-end event.
        store: Board store for the user whose card moved.
        on_alert: Called once with a user-facing message when the update fails.

    Returns:
        A ``DragOutcome`` describing the outcome.
    """
    transition = resolve_transition(result, store.windows)
    if transition is None:
        return DragOutcome(
            outcome=DragOutcomeStatus.SIN_CAMBIOS,
            priority_id=result.draggable_id,
        )

    gateway = store.gateway
    outcome = DragOutcome(
        outcome=DragOutcomeStatus.APLICADO,
        priority_id=transition.priority_id,
        transition=transition,
    )

    try:
        await gateway.update_priority(transition.priority_id, transition.update)
    except GatewayError as exc:
        logger.error(
            "Update of priority %s rejected (%s): %s",
            transition.priority_id, exc.status_code, exc.detail,
        )
        outcome.outcome = DragOutcomeStatus.FALLIDO
        outcome.alert = ALERTA_ERROR_ACTUALIZACION
        outcome.errors.append(exc.detail)
        on_alert(ALERTA_ERROR_ACTUALIZACION)
        await _reload_quietly(store, outcome)
        return outcome

    logger.info(
        "Priority %s moved %s -> %s",
        transition.priority_id,
        transition.source.serialize(),
        transition.destination.serialize(),
    )

    message = transition.audit_message
    if message:
        try:
            await gateway.create_comment(
                CommentCreate(
                    priority_id=transition.priority_id,
                    text=message,
                    is_system_comment=True,
                )
            )
            outcome.comment_recorded = True
        except GatewayError as exc:
            logger.warning(
                "Audit comment for priority %s not recorded: %s",
                transition.priority_id, exc.detail,
            )
            outcome.errors.append(exc.detail)

    await _reload_quietly(store, outcome)
    return outcome
