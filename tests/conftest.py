from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from app.schemas.board import BoardWeeks, DropResult
from app.schemas.priority import Comment, CommentCreate, Initiative, Priority, PriorityUpdate
from app.services.board_store import BoardStore
from app.services.gateway import GatewayError
from app.utils.weeks import get_board_weeks

# Wednesday 14 Oct 2026: current week 12–16 Oct, next week 19–23 Oct.
REFERENCE = datetime(2026, 10, 14, 10, 30)
USER_ID = "user-1"


class FakeGateway:
    """In-memory stand-in for ``RemoteSyncGateway``.

    Reads snapshot the server state at call time, then yield once to the
    event loop so concurrent calls interleave the way real I/O would.
    """

    def __init__(self, priorities: list[dict], initiatives: list[dict]) -> None:
        self.rows = {row["_id"]: dict(row) for row in priorities}
        self.initiatives = [Initiative.model_validate(i) for i in initiatives]
        self.comments: list[CommentCreate] = []
        self.calls: list[tuple[str, object]] = []
        self.fail_updates: set[str] = set()
        self.fail_comments = False
        self.initiative_gates: list[asyncio.Event] = []

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def reset_calls(self) -> None:
        self.calls.clear()

    async def list_initiatives(self, active_only: bool = True) -> list[Initiative]:
        self.calls.append(("list_initiatives", active_only))
        result = list(self.initiatives)
        gate = self.initiative_gates.pop(0) if self.initiative_gates else None
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(0)
        return result

    async def list_priorities(self, user_id, window) -> list[Priority]:
        self.calls.append(("list_priorities", window.monday))
        rows = [
            Priority.model_validate(row)
            for row in self.rows.values()
            if row["userId"] == user_id and row["weekStart"] == window.monday
        ]
        await asyncio.sleep(0)
        return rows

    async def update_priority(self, priority_id: str, update: PriorityUpdate):
        self.calls.append(("update_priority", (priority_id, update.to_payload())))
        await asyncio.sleep(0)
        if priority_id in self.fail_updates:
            raise GatewayError("Prioridad no encontrada", status_code=404)
        self.rows[priority_id].update(update.model_dump(by_alias=True, exclude_none=True))
        return self.rows[priority_id]

    async def create_comment(self, comment: CommentCreate):
        self.calls.append(("create_comment", comment))
        await asyncio.sleep(0)
        if self.fail_comments:
            raise GatewayError("Servicio de comentarios no disponible", status_code=503)
        self.comments.append(comment)
        return {"_id": f"c{len(self.comments)}"}

    async def list_comments(self, priority_id: str) -> list[Comment]:
        self.calls.append(("list_comments", priority_id))
        return [
            Comment(
                _id=f"c{n}",
                priorityId=c.priority_id,
                text=c.text,
                isSystemComment=c.is_system_comment,
            )
            for n, c in enumerate(self.comments, start=1)
            if c.priority_id == priority_id
        ]


def make_drop(priority_id: str, source: str, destination: str | None) -> DropResult:
    return DropResult.model_validate(
        {
            "draggableId": priority_id,
            "source": {"droppableId": source, "index": 0},
            "destination": (
                {"droppableId": destination, "index": 1} if destination else None
            ),
        }
    )


@pytest.fixture
def windows() -> BoardWeeks:
    return get_board_weeks(REFERENCE)


@pytest.fixture
def gateway(windows: BoardWeeks) -> FakeGateway:
    current, nxt = windows.current, windows.next
    priorities = [
        {
            "_id": "p1",
            "title": "Cerrar propuesta comercial",
            "weekStart": current.monday,
            "weekEnd": current.friday,
            "status": "EN_RIESGO",
            "completionPercentage": 40,
            "userId": USER_ID,
            "initiativeIds": ["i1", "i-deleted"],
        },
        {
            "_id": "p2",
            "title": "Migrar reportes",
            "weekStart": current.monday,
            "weekEnd": current.friday,
            "status": "EN_TIEMPO",
            "completionPercentage": 10,
            "userId": USER_ID,
            "initiativeId": "i2",
        },
        {
            "_id": "p3",
            "title": "Preparar capacitación",
            "weekStart": nxt.monday,
            "weekEnd": nxt.friday,
            "status": "EN_TIEMPO",
            "completionPercentage": 0,
            "userId": USER_ID,
        },
        {
            "_id": "other",
            "title": "De otro usuario",
            "weekStart": current.monday,
            "weekEnd": current.friday,
            "status": "BLOQUEADO",
            "completionPercentage": 0,
            "userId": "user-2",
        },
    ]
    initiatives = [
        {"_id": "i1", "name": "Crecimiento", "color": "#2563eb", "isActive": True},
        {"_id": "i2", "name": "Eficiencia", "color": "#16a34a", "isActive": True},
    ]
    return FakeGateway(priorities, initiatives)


@pytest.fixture
def store(gateway: FakeGateway, windows: BoardWeeks) -> BoardStore:
    return BoardStore(gateway, user_id=USER_ID, windows=windows)
