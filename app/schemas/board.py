"""
Schemas for the priorities Kanban board.

Covers the board's coordinate vocabulary (week bucket × status), the
drag-library ``DropResult`` payload received from the browser, and the
response shapes returned by ``/api/board``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.priority import EnrichedPriority, Initiative, PriorityStatus
from app.utils.constants import ETIQUETAS_SEMANA, SEMANA_ACTUAL, SEMANA_SIGUIENTE


# ---------------------------------------------------------------------------
# Week buckets and windows
# ---------------------------------------------------------------------------


class WeekBucket(str, Enum):
    CURRENT = SEMANA_ACTUAL
    NEXT = SEMANA_SIGUIENTE

    @property
    def label(self) -> str:
        return ETIQUETAS_SEMANA[self.value]


class WeekWindow(BaseModel):
    """Monday 00:00:00.000 to Friday 23:59:59.999 of one week.

    Attributes:
        monday: First instant of the working week.
        friday: Last instant (millisecond precision) of the working week.
    """

    monday: datetime
    friday: datetime

    model_config = ConfigDict(frozen=True)


class BoardWeeks(BaseModel):
    """The pair of windows a board session works with."""

    current: WeekWindow
    next: WeekWindow

    model_config = ConfigDict(frozen=True)

    def window_for(self, bucket: WeekBucket) -> WeekWindow:
        return self.current if bucket is WeekBucket.CURRENT else self.next


# ---------------------------------------------------------------------------
# Board coordinate
# ---------------------------------------------------------------------------


class InvalidCoordinateError(ValueError):
    """Raised when a droppable id is not a ``<bucket>-<status>`` board column."""


@dataclass(frozen=True)
class BoardCoordinate:
    """A droppable column: one week bucket and one board status.

    Serialised as ``"<bucket>-<STATUS>"`` (e.g. ``"current-EN_RIESGO"``) only
    at the boundary with the drag library.
    """

    week_bucket: WeekBucket
    status: PriorityStatus

    def __post_init__(self) -> None:
        if not self.status.is_board_column:
            raise InvalidCoordinateError(
                f"El estado {self.status.value} no es una columna del tablero"
            )

    def serialize(self) -> str:
        return f"{self.week_bucket.value}-{self.status.value}"

    @classmethod
    def parse(cls, droppable_id: str) -> BoardCoordinate:
        bucket_raw, sep, status_raw = droppable_id.partition("-")
        if not sep:
            raise InvalidCoordinateError(f"Zona de destino inválida: {droppable_id!r}")
        try:
            bucket = WeekBucket(bucket_raw)
            status = PriorityStatus(status_raw)
        except ValueError as exc:
            raise InvalidCoordinateError(f"Zona de destino inválida: {droppable_id!r}") from exc
        return cls(week_bucket=bucket, status=status)

    @classmethod
    def all(cls) -> list[BoardCoordinate]:
        """Every droppable column, week by week in board order."""
        return [
            cls(week_bucket=bucket, status=status)
            for bucket in WeekBucket
            for status in PriorityStatus.board_columns()
        ]


# ---------------------------------------------------------------------------
# Drag-library payload
# ---------------------------------------------------------------------------


class DraggableLocation(BaseModel):
    droppable_id: str = Field(..., alias="droppableId", description="Zona <semana>-<estado>.")
    index: int = Field(0, ge=0, description="Posición dentro de la columna (ignorada).")

    model_config = ConfigDict(populate_by_name=True)


class DropResult(BaseModel):
    """Drag-end event as emitted by the browser drag-and-drop library.

    ``destination`` is ``None`` when the card was dropped outside every
    droppable zone.
    """

    draggable_id: str = Field(..., alias="draggableId", description="ID de la prioridad arrastrada.")
    source: DraggableLocation
    destination: DraggableLocation | None = None

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "draggableId": "652f1c0e9b1e8a0012ab34cd",
                "source": {"droppableId": "current-EN_RIESGO", "index": 0},
                "destination": {"droppableId": "next-EN_TIEMPO", "index": 2},
            }
        },
    )

    @property
    def is_noop(self) -> bool:
        return (
            self.destination is None
            or self.destination.droppable_id == self.source.droppable_id
        )


# ---------------------------------------------------------------------------
# Board responses
# ---------------------------------------------------------------------------


class BoardColumnResponse(BaseModel):
    status: PriorityStatus
    label: str
    droppable_id: str = Field(..., alias="droppableId")
    priorities: list[EnrichedPriority] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class BoardWeekResponse(BaseModel):
    """One week bucket of the board, ready to render.

    Attributes:
        bucket: ``"current"`` or ``"next"``.
        heading: e.g. ``"Semana Actual (12 oct - 16 oct 2026)"``.
        window: Monday/Friday boundaries of the week.
        priorities: Every priority of the week, including legacy
            ``REPROGRAMADO`` ones that have no column.
        columns: One entry per board status, in display order.
        count: ``len(priorities)``.
        count_label: ``"1 prioridad"`` / ``"N prioridades"``.
    """

    bucket: WeekBucket
    heading: str
    window: WeekWindow
    priorities: list[EnrichedPriority]
    columns: list[BoardColumnResponse]
    count: int = Field(..., ge=0)
    count_label: str


class BoardResponse(BaseModel):
    current_week: BoardWeekResponse
    next_week: BoardWeekResponse
    initiatives: list[Initiative] = Field(default_factory=list)


class DroppableZoneResponse(BaseModel):
    droppable_id: str = Field(..., alias="droppableId")
    bucket: WeekBucket
    bucket_label: str
    status: PriorityStatus
    status_label: str

    model_config = ConfigDict(populate_by_name=True)


class DragOutcomeStatus(str, Enum):
    SIN_CAMBIOS = "SIN_CAMBIOS"
    APLICADO = "APLICADO"
    FALLIDO = "FALLIDO"


class DragEndResponse(BaseModel):
    """Result of ``POST /api/board/drag-end``.

    Attributes:
        outcome: ``SIN_CAMBIOS`` (nothing sent), ``APLICADO`` (update
            accepted) or ``FALLIDO`` (update rejected; board resynchronised).
        priority_id: The dragged priority.
        update: Exact partial-update body that was sent, if any.
        audit_message: System comment text generated for the transition.
        comment_recorded: Whether the audit comment was stored.
        alert: User-facing error message to show, if any.
        errors: Gateway messages of the steps that failed (update, audit
            comment, reload), in the order they happened.
        board: Reloaded board; ``None`` for no-op drags and when the
            board could not be reloaded.
    """

    outcome: DragOutcomeStatus
    priority_id: str
    update: dict[str, Any] | None = None
    audit_message: str | None = None
    comment_recorded: bool = False
    alert: str | None = None
    errors: list[str] = Field(default_factory=list)
    board: BoardResponse | None = None
