# undercover/settings.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel
import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "y", "on")


class Settings(BaseModel):
    APP_NAME: str = "undercover-server"

    # Store
    STORE_BACKEND: Literal["redis", "memory"] = "redis"
    REDIS_URL: str = "redis://localhost:6379/0"
    # idle expiry for waiting/playing rooms, 0 = never
    ROOM_TTL_SEC: int = 0
    # grace period a finished room is kept around
    FINISHED_ROOM_TTL_SEC: int = 300

    # Game
    MIN_PLAYERS: int = 3
    ROLE_SEED: Optional[int] = None
    WORD_PAIRS_PATH: str = ""

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Dev
    LOG_LEVEL: str = "INFO"

    # WebSocket origin policy (comma-separated, "*" allows any)
    WS_ALLOWED_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173,null"
    # Dev helper: allow any private LAN origin
    WS_ALLOW_LAN_ORIGINS: bool = True


def get_settings() -> Settings:
    seed = os.getenv("ROLE_SEED", "").strip()
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "undercover-server"),
        STORE_BACKEND=os.getenv("STORE_BACKEND", "redis").strip().lower(),
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        ROOM_TTL_SEC=int(os.getenv("ROOM_TTL_SEC", "0")),
        FINISHED_ROOM_TTL_SEC=int(os.getenv("FINISHED_ROOM_TTL_SEC", "300")),
        MIN_PLAYERS=int(os.getenv("MIN_PLAYERS", "3")),
        ROLE_SEED=int(seed) if seed else None,
        WORD_PAIRS_PATH=os.getenv("WORD_PAIRS_PATH", ""),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "8000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        WS_ALLOWED_ORIGINS=os.getenv(
            "WS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,null",
        ),
        WS_ALLOW_LAN_ORIGINS=_env_bool("WS_ALLOW_LAN_ORIGINS", "true"),
    )
