"""
Application-wide constants for the priorities board.

Defines the priority status vocabulary, its Spanish display labels, the
week-bucket identifiers, and the fixed text fragments used when composing
system audit comments.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Priority statuses
# ---------------------------------------------------------------------------

# Columns of the Kanban board, in display order.
ESTADOS_TABLERO: Final[list[str]] = [
    "EN_TIEMPO",
    "EN_RIESGO",
    "BLOQUEADO",
    "COMPLETADO",
]

# Legacy status: still recognised in stored data, never a drop target.
ESTADO_REPROGRAMADO: Final[str] = "REPROGRAMADO"

ETIQUETAS_ESTADO: Final[dict[str, str]] = {
    "EN_TIEMPO": "En Tiempo",
    "EN_RIESGO": "En Riesgo",
    "BLOQUEADO": "Bloqueado",
    "COMPLETADO": "Completado",
    "REPROGRAMADO": "Reprogramado",
}

# ---------------------------------------------------------------------------
# Week buckets
# ---------------------------------------------------------------------------

SEMANA_ACTUAL: Final[str] = "current"
SEMANA_SIGUIENTE: Final[str] = "next"

ETIQUETAS_SEMANA: Final[dict[str, str]] = {
    SEMANA_ACTUAL: "Semana Actual",
    SEMANA_SIGUIENTE: "Siguiente Semana",
}

MESES_CORTOS: Final[list[str]] = [
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sep", "oct", "nov", "dic",
]

# ---------------------------------------------------------------------------
# Audit comments
# ---------------------------------------------------------------------------

PREFIJO_COMENTARIO_SISTEMA: Final[str] = "🤖"
SEPARADOR_CLAUSULAS: Final[str] = " • "

# ---------------------------------------------------------------------------
# User-facing alerts
# ---------------------------------------------------------------------------

ALERTA_ERROR_ACTUALIZACION: Final[str] = "Error al actualizar la prioridad"
ALERTA_ERROR_ESTADO: Final[str] = "Error al actualizar el estado de la prioridad"
