"""
Shared Pydantic v2 schemas reused across modules.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Generic message envelope for endpoints that do not return a resource.

    Attributes:
        message: Short human-readable result summary.
        detail: Optional extended information (service name, hint, etc.).
    """

    message: str = Field(..., description="Resumen del resultado de la operación.")
    detail: str | None = Field(
        default=None,
        description="Información adicional (contexto, sugerencia, etc.).",
    )
