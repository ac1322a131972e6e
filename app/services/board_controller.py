"""
PriorityBoard: the drag-and-drop callbacks of the priorities Kanban board.

Wires the Board State Store, the Drag Transition Resolver and the optional
Scroll/Viewport Guard behind the three callbacks a drag library invokes:
``on_drag_start``, ``on_drag_update`` and ``on_drag_end``.
"""

from __future__ import annotations

import logging

from app.schemas.board import DragOutcomeStatus, DropResult
from app.schemas.priority import PriorityStatus, PriorityUpdate
from app.services.board_store import BoardSnapshot, BoardStore
from app.services.gateway import GatewayError
from app.services.transition_service import AlertSink, DragOutcome, apply_drop
from app.services.viewport_guard import Viewport, ViewportGuard
from app.utils.constants import ALERTA_ERROR_ESTADO

logger = logging.getLogger(__name__)


def _log_alert(message: str) -> None:
    logger.warning("ALERTA: %s", message)


class PriorityBoard:
    """One user's board session.

    Args:
        store: Board State Store holding both week buckets.
        viewport: Page viewport to lock while dragging; ``None`` when the
            board runs headless (e.g. behind the HTTP API).
        on_alert: Receives user-facing error messages.
    """

    def __init__(
        self,
        store: BoardStore,
        viewport: Viewport | None = None,
        on_alert: AlertSink | None = None,
    ) -> None:
        self.store = store
        self.guard = ViewportGuard(viewport) if viewport is not None else None
        self.on_alert = on_alert or _log_alert

    @property
    def snapshot(self) -> BoardSnapshot:
        return self.store.snapshot

    async def load(self) -> BoardSnapshot:
        return await self.store.reload()

    def on_drag_start(self) -> None:
        if self.guard is not None:
            self.guard.freeze()

    def on_drag_update(self) -> None:
        if self.guard is not None:
            self.guard.freeze()

    async def on_drag_end(self, result: DropResult) -> DragOutcome:
        """Handle a drop; the viewport is released however this exits."""
        try:
            return await apply_drop(result, self.store, self.on_alert)
        finally:
            if self.guard is not None:
                self.guard.release()

    async def change_status(self, priority_id: str, status: PriorityStatus) -> DragOutcome:
        """Set a priority's status directly (card menu), without an audit comment.

        The board is reloaded whether or not the gateway accepted the change.

        Raises:
            GatewayError: If the reload itself fails.
        """
        outcome = DragOutcome(outcome=DragOutcomeStatus.APLICADO, priority_id=priority_id)
        try:
            await self.store.gateway.update_priority(priority_id, PriorityUpdate(status=status))
        except GatewayError as exc:
            logger.error("Status change of %s rejected: %s", priority_id, exc.detail)
            outcome.outcome = DragOutcomeStatus.FALLIDO
            outcome.alert = ALERTA_ERROR_ESTADO
            outcome.errors.append(exc.detail)
            self.on_alert(ALERTA_ERROR_ESTADO)
        outcome.snapshot = await self.store.reload()
        return outcome
