"""
Board State Store.

Holds the two week buckets of enriched priorities shown on the board.
The store never patches individual items: every mutation on the board is
followed by :meth:`BoardStore.reload`, which refetches everything from the
gateway and swaps in a brand-new snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from app.schemas.board import (
    BoardColumnResponse,
    BoardCoordinate,
    BoardResponse,
    BoardWeekResponse,
    BoardWeeks,
    WeekBucket,
)
from app.schemas.priority import EnrichedPriority, Initiative, PriorityStatus
from app.services.enrichment_service import enrich_priorities
from app.services.gateway import RemoteSyncGateway
from app.utils.weeks import get_bucket_heading

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardSnapshot:
    """Immutable view of the board at one reload."""

    windows: BoardWeeks
    current: list[EnrichedPriority] = field(default_factory=list)
    next: list[EnrichedPriority] = field(default_factory=list)
    initiatives: list[Initiative] = field(default_factory=list)

    def bucket(self, bucket: WeekBucket) -> list[EnrichedPriority]:
        return self.current if bucket is WeekBucket.CURRENT else self.next

    def find(self, priority_id: str) -> tuple[WeekBucket, EnrichedPriority] | None:
        for bucket in WeekBucket:
            for priority in self.bucket(bucket):
                if priority.id == priority_id:
                    return bucket, priority
        return None


class BoardStore:
    """In-memory cache of one user's board.

    Args:
        gateway: Client used to fetch priorities and initiatives.
        user_id: Owner of the priorities shown.
        windows: Current/next week windows, fixed for the store's lifetime.
        initiatives_active_only: Passed through to the initiatives listing.
    """

    def __init__(
        self,
        gateway: RemoteSyncGateway,
        user_id: str,
        windows: BoardWeeks,
        initiatives_active_only: bool = True,
    ) -> None:
        self.gateway = gateway
        self.user_id = user_id
        self.windows = windows
        self.initiatives_active_only = initiatives_active_only
        self._snapshot = BoardSnapshot(windows=windows)
        self._loaded = False

    @property
    def snapshot(self) -> BoardSnapshot:
        return self._snapshot

    @property
    def loaded(self) -> bool:
        """Whether the snapshot came from the gateway at least once."""
        return self._loaded

    async def reload(self) -> BoardSnapshot:
        """Refetch both week buckets and the initiatives, then swap the snapshot.

        The three requests run concurrently.  The new snapshot replaces the
        old one in a single assignment, so readers see either the previous
        board or the new one, never a mix.  Overlapping reloads are not
        serialised: whichever finishes last wins.

        Returns:
            The snapshot installed by this call.

        Raises:
            GatewayError: If any of the fetches fails; the previous snapshot
                is kept in that case.
        """
        # All three fetches are awaited to completion before any failure is
        # raised, so none is left running against a discarded reload.
        results = await asyncio.gather(
            self.gateway.list_initiatives(active_only=self.initiatives_active_only),
            self.gateway.list_priorities(self.user_id, self.windows.current),
            self.gateway.list_priorities(self.user_id, self.windows.next),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        initiatives, current_raw, next_raw = results
        snapshot = BoardSnapshot(
            windows=self.windows,
            current=enrich_priorities(current_raw, initiatives),
            next=enrich_priorities(next_raw, initiatives),
            initiatives=initiatives,
        )
        self._snapshot = snapshot
        self._loaded = True
        logger.info(
            "Board reloaded for user %s: %d current, %d next",
            self.user_id, len(snapshot.current), len(snapshot.next),
        )
        return snapshot


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------


def _count_label(count: int) -> str:
    return f"{count} {'prioridad' if count == 1 else 'prioridades'}"


def _week_response(snapshot: BoardSnapshot, bucket: WeekBucket) -> BoardWeekResponse:
    window = snapshot.windows.window_for(bucket)
    priorities = snapshot.bucket(bucket)
    columns = [
        BoardColumnResponse(
            status=status,
            label=status.label,
            droppable_id=BoardCoordinate(week_bucket=bucket, status=status).serialize(),
            priorities=[p for p in priorities if p.status is status],
        )
        for status in PriorityStatus.board_columns()
    ]
    return BoardWeekResponse(
        bucket=bucket,
        heading=get_bucket_heading(bucket, window),
        window=window,
        priorities=priorities,
        columns=columns,
        count=len(priorities),
        count_label=_count_label(len(priorities)),
    )


def build_board_response(snapshot: BoardSnapshot) -> BoardResponse:
    """Group a snapshot into the per-week, per-column shape the UI renders."""
    return BoardResponse(
        current_week=_week_response(snapshot, WeekBucket.CURRENT),
        next_week=_week_response(snapshot, WeekBucket.NEXT),
        initiatives=snapshot.initiatives,
    )
