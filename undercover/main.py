# undercover/main.py
from __future__ import annotations

import logging
import random

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from undercover.domain.helpers.word_pairs import load_word_pairs
from undercover.domain.session.manager import RoomSessionManager
from undercover.settings import Settings, get_settings
from undercover.store.memory_repo import MemoryRepo
from undercover.store.redis_repo import RedisRepo
from undercover.transport.rooms import router as rooms_router
from undercover.transport.ws import router as ws_router
from undercover.transport.ws_manager import WSManager

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    allowed_origins = [o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()]
    if "null" not in allowed_origins:
        allowed_origins.append("null")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup() -> None:
        if settings.STORE_BACKEND == "memory":
            app.state.redis = None
            repo = MemoryRepo(
                room_ttl_sec=settings.ROOM_TTL_SEC,
                finished_ttl_sec=settings.FINISHED_ROOM_TTL_SEC,
            )
        else:
            r = Redis.from_url(settings.REDIS_URL, decode_responses=False)
            app.state.redis = r
            repo = RedisRepo(
                r,
                room_ttl_sec=settings.ROOM_TTL_SEC,
                finished_ttl_sec=settings.FINISHED_ROOM_TTL_SEC,
            )
            await r.ping()

        app.state.repo = repo
        app.state.wsman = WSManager()
        app.state.sessions = RoomSessionManager(
            repo,
            catalog=load_word_pairs(settings.WORD_PAIRS_PATH),
            rng=random.Random(settings.ROLE_SEED) if settings.ROLE_SEED is not None else None,
            min_players=settings.MIN_PLAYERS,
        )
        logger.info("%s started (store=%s)", settings.APP_NAME, settings.STORE_BACKEND)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        r = getattr(app.state, "redis", None)
        if r is not None:
            await r.aclose()

    @app.get("/health")
    async def health():
        r = getattr(app.state, "redis", None)
        if r is None:
            return {"ok": True, "store": settings.STORE_BACKEND}
        pong = await r.ping()
        return {"ok": True, "store": settings.STORE_BACKEND, "redis": str(pong)}

    app.include_router(ws_router)
    app.include_router(rooms_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    s = get_settings()
    uvicorn.run("undercover.main:app", host=s.HOST, port=s.PORT, log_level=s.LOG_LEVEL.lower())
