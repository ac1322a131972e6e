import pytest
from fastapi.testclient import TestClient

from app.config import get_settings
from app.main import app
from app.services.gateway import GatewayError, get_gateway

from conftest import USER_ID

PARAMS = {"user_id": USER_ID, "reference_date": "2026-10-14"}


@pytest.fixture
def client(gateway):
    app.dependency_overrides[get_gateway] = lambda: gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/api/health").json() == {
        "message": "ok",
        "detail": get_settings().APP_NAME,
    }


def test_get_board_groups_weeks_and_columns(client):
    response = client.get("/api/board/", params=PARAMS)
    assert response.status_code == 200
    body = response.json()

    current = body["current_week"]
    assert current["heading"] == "Semana Actual (12 oct - 16 oct 2026)"
    assert current["count"] == 2
    assert current["count_label"] == "2 prioridades"
    assert [c["droppableId"] for c in current["columns"]] == [
        "current-EN_TIEMPO",
        "current-EN_RIESGO",
        "current-BLOQUEADO",
        "current-COMPLETADO",
    ]
    at_risk = current["columns"][1]["priorities"]
    assert [p["_id"] for p in at_risk] == ["p1"]
    assert [i["name"] for i in at_risk[0]["initiatives"]] == ["Crecimiento"]

    assert body["next_week"]["count_label"] == "1 prioridad"
    assert body["next_week"]["heading"].startswith("Siguiente Semana (19 oct")


def test_columns_endpoint(client):
    zones = client.get("/api/board/columns").json()
    assert len(zones) == 8
    assert zones[4] == {
        "droppableId": "next-EN_TIEMPO",
        "bucket": "next",
        "bucket_label": "Siguiente Semana",
        "status": "EN_TIEMPO",
        "status_label": "En Tiempo",
    }


def test_drag_end_applies_transition(client, gateway):
    drop = {
        "draggableId": "p1",
        "source": {"droppableId": "current-EN_RIESGO", "index": 0},
        "destination": {"droppableId": "next-COMPLETADO", "index": 0},
    }
    body = client.post("/api/board/drag-end", params=PARAMS, json=drop).json()

    assert body["outcome"] == "APLICADO"
    assert set(body["update"]) == {"status", "weekStart", "weekEnd"}
    assert body["audit_message"].startswith("🤖 Estado cambiado")
    assert body["comment_recorded"] is True
    assert body["alert"] is None
    assert body["errors"] == []
    next_completed = body["board"]["next_week"]["columns"][3]["priorities"]
    assert [p["_id"] for p in next_completed] == ["p1"]
    assert gateway.comments[0].text == body["audit_message"]


def test_drag_end_outside_board_is_noop(client, gateway):
    drop = {"draggableId": "p1", "source": {"droppableId": "current-EN_RIESGO", "index": 0}}
    body = client.post("/api/board/drag-end", params=PARAMS, json=drop).json()
    assert body["outcome"] == "SIN_CAMBIOS"
    assert body["board"] is None
    assert gateway.calls == []


def test_drag_end_failure_returns_alert(client, gateway):
    gateway.fail_updates.add("p1")
    drop = {
        "draggableId": "p1",
        "source": {"droppableId": "current-EN_RIESGO", "index": 0},
        "destination": {"droppableId": "current-COMPLETADO", "index": 0},
    }
    body = client.post("/api/board/drag-end", params=PARAMS, json=drop).json()
    assert body["outcome"] == "FALLIDO"
    assert body["alert"] == "Error al actualizar la prioridad"
    assert body["comment_recorded"] is False
    assert body["errors"] == ["Prioridad no encontrada"]
    at_risk = body["board"]["current_week"]["columns"][1]["priorities"]
    assert [p["_id"] for p in at_risk] == ["p1"]


def test_drag_end_rejects_unknown_zone(client):
    drop = {
        "draggableId": "p1",
        "source": {"droppableId": "current-EN_RIESGO", "index": 0},
        "destination": {"droppableId": "archive-EN_RIESGO", "index": 0},
    }
    response = client.post("/api/board/drag-end", params=PARAMS, json=drop)
    assert response.status_code == 422


def test_change_status(client, gateway):
    response = client.put(
        "/api/board/priorities/p2/status", params=PARAMS, json={"status": "BLOQUEADO"}
    )
    body = response.json()
    assert body["outcome"] == "APLICADO"
    assert gateway.comments == []
    blocked = body["board"]["current_week"]["columns"][2]["priorities"]
    assert [p["_id"] for p in blocked] == ["p2"]


def test_change_status_rejects_rescheduled(client):
    response = client.put(
        "/api/board/priorities/p2/status", params=PARAMS, json={"status": "REPROGRAMADO"}
    )
    assert response.status_code == 422


def test_comments_listing(client, gateway):
    drop = {
        "draggableId": "p3",
        "source": {"droppableId": "next-EN_TIEMPO", "index": 0},
        "destination": {"droppableId": "next-EN_RIESGO", "index": 0},
    }
    client.post("/api/board/drag-end", params=PARAMS, json=drop)
    comments = client.get("/api/board/priorities/p3/comments").json()
    assert len(comments) == 1
    assert comments[0]["isSystemComment"] is True
    assert comments[0]["text"] == '🤖 Estado cambiado de "En Tiempo" a "En Riesgo"'


def _broken_initiatives(detail):
    async def broken(active_only=True):
        raise GatewayError(detail)

    return broken


def test_drag_end_reload_failure_returns_no_board(client, gateway):
    gateway.fail_updates.add("p1")
    gateway.list_initiatives = _broken_initiatives("timeout")
    drop = {
        "draggableId": "p1",
        "source": {"droppableId": "current-EN_RIESGO", "index": 0},
        "destination": {"droppableId": "current-COMPLETADO", "index": 0},
    }
    body = client.post("/api/board/drag-end", params=PARAMS, json=drop).json()

    assert body["outcome"] == "FALLIDO"
    assert body["alert"] == "Error al actualizar la prioridad"
    assert body["errors"] == ["Prioridad no encontrada", "timeout"]
    assert body["board"] is None


def test_drag_end_committed_but_reload_failed(client, gateway):
    gateway.list_initiatives = _broken_initiatives("timeout")
    drop = {
        "draggableId": "p3",
        "source": {"droppableId": "next-EN_TIEMPO", "index": 0},
        "destination": {"droppableId": "next-BLOQUEADO", "index": 0},
    }
    body = client.post("/api/board/drag-end", params=PARAMS, json=drop).json()

    assert body["outcome"] == "APLICADO"
    assert body["comment_recorded"] is True
    assert body["alert"] is None
    assert body["errors"] == ["timeout"]
    assert body["board"] is None
    assert gateway.rows["p3"]["status"] == "BLOQUEADO"


def test_drag_end_comment_failure_is_reported(client, gateway):
    gateway.fail_comments = True
    drop = {
        "draggableId": "p2",
        "source": {"droppableId": "current-EN_TIEMPO", "index": 0},
        "destination": {"droppableId": "current-EN_RIESGO", "index": 0},
    }
    body = client.post("/api/board/drag-end", params=PARAMS, json=drop).json()

    assert body["outcome"] == "APLICADO"
    assert body["comment_recorded"] is False
    assert body["errors"] == ["Servicio de comentarios no disponible"]
    at_risk = body["board"]["current_week"]["columns"][1]["priorities"]
    assert sorted(p["_id"] for p in at_risk) == ["p1", "p2"]
