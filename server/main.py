from __future__ import annotations

from contextlib import asynccontextmanager
import logging

import httpx
import uvicorn
from fastapi import FastAPI

from relay.api.router import api_router
from relay.core.settings import Settings, load_settings
from relay.services.upstream import build_chat_relay

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A missing .env aborts startup here, uvicorn then exits the process
    settings = getattr(app.state, "settings", None) or load_settings()
    app.state.settings = settings
    if not settings.open_api_key:
        logger.warning("OPEN_API_KEY is not set; upstream calls will be unauthenticated.")

    app.state.relay = await build_chat_relay(
        settings, http_client=getattr(app.state, "http_client", None)
    )

    yield

    logger.info("Shutting down...")
    await app.state.relay.aclose()


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    app = FastAPI(
        title="GPT Chat Relay",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.http_client = http_client

    app.include_router(api_router)

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    return app


app = create_app()


def run() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
