import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.schemas.common import MessageResponse
from app.services.gateway import build_http_client

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: one pooled HTTP client shared by every gateway call
    app.state.http_client = build_http_client()
    logger.info("Remote Sync Gateway at %s", settings.GATEWAY_BASE_URL)
    try:
        yield
    finally:
        await app.state.http_client.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health", response_model=MessageResponse)
def health_check() -> MessageResponse:
    return MessageResponse(message="ok", detail=settings.APP_NAME)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

# Priorities Kanban board
from app.routers import board  # noqa: E402

app.include_router(
    board.router,
    prefix=f"{settings.API_PREFIX}/board",
    tags=["Tablero"],
)
