"""
Pydantic v2 schemas for priorities, initiatives and audit comments.

These models mirror the JSON documents served by the Remote Sync Gateway.
Field names keep the gateway's camelCase spelling through aliases so that
the same models parse gateway responses and serialise board responses
without manual key mapping.  Unknown gateway fields (``isCarriedOver``,
``azureDevOps``, ...) are preserved untouched.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.utils.constants import ESTADOS_TABLERO, ETIQUETAS_ESTADO


# ---------------------------------------------------------------------------
# Status vocabulary
# ---------------------------------------------------------------------------


class PriorityStatus(str, Enum):
    """Closed set of priority states.

    The first four members are the board columns.  ``REPROGRAMADO`` is a
    legacy value that can still appear in stored priorities but is never a
    drop target on the board.
    """

    EN_TIEMPO = "EN_TIEMPO"
    EN_RIESGO = "EN_RIESGO"
    BLOQUEADO = "BLOQUEADO"
    COMPLETADO = "COMPLETADO"
    REPROGRAMADO = "REPROGRAMADO"

    @property
    def label(self) -> str:
        return ETIQUETAS_ESTADO[self.value]

    @property
    def is_board_column(self) -> bool:
        return self.value in ESTADOS_TABLERO

    @classmethod
    def board_columns(cls) -> list[PriorityStatus]:
        return [cls(value) for value in ESTADOS_TABLERO]


# ---------------------------------------------------------------------------
# Initiative
# ---------------------------------------------------------------------------


class Initiative(BaseModel):
    """Strategic category that priorities can be tagged with (read-only here).

    Attributes:
        id: Opaque gateway identifier (``_id`` on the wire).
        name: Display name.
        color: CSS colour used for the tag chip.
        is_active: Whether the initiative is still selectable.
    """

    id: str = Field(..., alias="_id", description="Identificador de la iniciativa.")
    name: str = Field(..., description="Nombre visible de la iniciativa.")
    color: str | None = Field(None, description="Color de la etiqueta.")
    is_active: bool = Field(True, alias="isActive", description="Si la iniciativa está activa.")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------


class Priority(BaseModel):
    """A weekly work item as stored by the gateway.

    ``initiative_id`` is the legacy single-initiative field; newer documents
    carry ``initiative_ids`` instead.  ``user_id`` may come back populated
    as an object (``{_id, name, email}``) rather than a plain id.
    """

    id: str = Field(..., alias="_id", description="Identificador de la prioridad.")
    title: str = Field(..., description="Título de la prioridad.")
    description: str | None = Field(None, description="Descripción opcional.")
    week_start: datetime = Field(..., alias="weekStart", description="Lunes de la semana asignada.")
    week_end: datetime = Field(..., alias="weekEnd", description="Viernes de la semana asignada.")
    status: PriorityStatus = Field(..., description="Estado actual (columna del tablero).")
    completion_percentage: int = Field(
        0,
        ge=0,
        le=100,
        alias="completionPercentage",
        description="Porcentaje de avance (informativo).",
    )
    user_id: str | dict[str, Any] | None = Field(None, alias="userId")
    initiative_id: str | None = Field(None, alias="initiativeId")
    initiative_ids: list[str] | None = Field(None, alias="initiativeIds")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class EnrichedPriority(Priority):
    """Priority joined with its resolved ``Initiative`` records for display."""

    initiatives: list[Initiative] = Field(
        default_factory=list,
        description="Iniciativas vinculadas que aún existen.",
    )


class PriorityUpdate(BaseModel):
    """Partial update accepted by ``PUT /priorities/{id}``.

    Only the fields that were explicitly staged are sent; see
    :meth:`to_payload`.
    """

    status: PriorityStatus | None = None
    week_start: datetime | None = Field(None, alias="weekStart")
    week_end: datetime | None = Field(None, alias="weekEnd")

    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body carrying exactly the staged fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def is_empty(self) -> bool:
        return not self.to_payload()


class StatusChangeRequest(BaseModel):
    """Body of ``PUT /api/board/priorities/{id}/status``."""

    status: PriorityStatus = Field(..., description="Nuevo estado de la prioridad.")

    model_config = ConfigDict(
        json_schema_extra={"example": {"status": "EN_RIESGO"}},
    )


# ---------------------------------------------------------------------------
# Comments (audit trail)
# ---------------------------------------------------------------------------


class CommentCreate(BaseModel):
    """Body of ``POST /comments``."""

    priority_id: str = Field(..., alias="priorityId")
    text: str = Field(..., min_length=1)
    is_system_comment: bool = Field(False, alias="isSystemComment")

    model_config = ConfigDict(populate_by_name=True)


class Comment(BaseModel):
    """A comment attached to a priority, as listed by the gateway."""

    id: str = Field(..., alias="_id")
    priority_id: str = Field(..., alias="priorityId")
    text: str
    is_system_comment: bool = Field(False, alias="isSystemComment")
    user_id: str | dict[str, Any] | None = Field(None, alias="userId")
    created_at: datetime | None = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, extra="allow")
