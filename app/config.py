from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Tablero de Prioridades"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # CORS — se puede sobreescribir con env var CORS_ORIGINS como JSON array
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:5173",
    ]

    # Remote Sync Gateway (REST backend that owns priorities and comments)
    GATEWAY_BASE_URL: str = "http://localhost:3000/api"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0
    GATEWAY_API_TOKEN: str | None = None

    # Board
    BOARD_TIMEZONE: str = "UTC"
    INITIATIVES_ACTIVE_ONLY: bool = True

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
