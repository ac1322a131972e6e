"""
Remote Sync Gateway client.

The gateway is the external REST backend that owns priorities, initiatives
and comments.  This module wraps the handful of endpoints the board needs
behind an async client built on ``httpx.AsyncClient``.

Every transport error, every non-2xx response and every 2xx response whose
body cannot be decoded into the expected models is converted to a
``GatewayError`` so that callers deal with a single failure type.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, TypeVar
from urllib.parse import quote

import httpx
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError

from app.config import get_settings
from app.schemas.board import WeekWindow
from app.schemas.priority import Comment, CommentCreate, Initiative, Priority, PriorityUpdate

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GatewayError(Exception):
    """A gateway call failed.

    Attributes:
        status_code: HTTP status of the rejected response, or ``None`` when
            the request never produced one (timeout, connection refused...).
        detail: The gateway's ``error`` message when it sent one.
    """

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase


class RemoteSyncGateway:
    """Thin async wrapper around the gateway's REST endpoints.

    The underlying ``httpx.AsyncClient`` is owned by the caller (the
    application lifespan in production, the test in tests) and must already
    point at the gateway's base URL.
    """

    def __init__(self, client: httpx.AsyncClient, token: str | None = None) -> None:
        self._client = client
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(
                method, path, headers=self._headers, **kwargs
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise GatewayError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            detail = _error_detail(response)
            logger.warning(
                "%s %s -> %d %s", method, path, response.status_code, detail
            )
            raise GatewayError(detail, status_code=response.status_code)
        return response

    @staticmethod
    def _decode(method: str, path: str, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s -> %d with a non-JSON body", method, path, response.status_code)
            raise GatewayError(
                f"Respuesta no válida del servicio en {method} {path}",
                status_code=response.status_code,
            ) from exc

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._send(method, path, **kwargs)
        return self._decode(method, path, response)

    async def _read_list(self, model: type[ModelT], path: str, **kwargs: Any) -> list[ModelT]:
        """GET *path* and validate every item of the returned array as *model*."""
        response = await self._send("GET", path, **kwargs)
        data = self._decode("GET", path, response)
        try:
            return [model.model_validate(item) for item in data or []]
        except (TypeError, ValidationError) as exc:
            logger.warning("GET %s -> unexpected %s payload: %s", path, model.__name__, exc)
            raise GatewayError(
                f"Respuesta no válida del servicio en GET {path}",
                status_code=response.status_code,
            ) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_priorities(self, user_id: str, window: WeekWindow) -> list[Priority]:
        return await self._read_list(
            Priority,
            "/priorities",
            params={
                "userId": user_id,
                "weekStart": window.monday.isoformat(),
                "weekEnd": window.friday.isoformat(),
            },
        )

    async def list_initiatives(self, active_only: bool = True) -> list[Initiative]:
        params = {"activeOnly": "true"} if active_only else {}
        return await self._read_list(Initiative, "/initiatives", params=params)

    async def list_comments(self, priority_id: str) -> list[Comment]:
        return await self._read_list(Comment, "/comments", params={"priorityId": priority_id})

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def update_priority(self, priority_id: str, update: PriorityUpdate) -> Any:
        """Send a partial update carrying only the staged fields."""
        return await self._request(
            "PUT", f"/priorities/{quote(priority_id, safe='')}", json=update.to_payload()
        )

    async def create_comment(self, comment: CommentCreate) -> Any:
        return await self._request(
            "POST", "/comments", json=comment.model_dump(mode="json", by_alias=True)
        )


# ---------------------------------------------------------------------------
# FastAPI wiring
# ---------------------------------------------------------------------------


def build_http_client() -> httpx.AsyncClient:
    """Create the application-wide client pointed at ``GATEWAY_BASE_URL``."""
    settings = get_settings()
    return httpx.AsyncClient(
        base_url=settings.GATEWAY_BASE_URL,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    )


_bearer = HTTPBearer(auto_error=False)


def get_gateway(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> RemoteSyncGateway:
    """FastAPI dependency returning a gateway bound to the caller's token.

    The caller's bearer token is forwarded so that the gateway applies its
    own authorisation; ``GATEWAY_API_TOKEN`` is used when none is supplied.
    """
    token = credentials.credentials if credentials else get_settings().GATEWAY_API_TOKEN
    return RemoteSyncGateway(request.app.state.http_client, token=token)
