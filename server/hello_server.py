"""
Hello-world HTTP server that restarts instead of exiting on SIGINT/SIGTERM.

On a signal the listener is shut down gracefully (bounded by a grace period),
the process pauses, and a fresh listener is bound on the same address. There
is no terminal state; only SIGKILL or a signal landing while the loop is not
waiting ends the process.
"""

from __future__ import annotations

import asyncio
import contextlib
from enum import Enum
import logging
import signal
import sys
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GREETING = "Hello, World!\n"

logger = logging.getLogger(__name__)


class HelloSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HELLO_", env_file=".env", extra="ignore"
    )

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    grace_period_seconds: float = Field(default=10.0)
    restart_pause_seconds: float = Field(default=2.0)
    log_level: str = Field(default="info")


class ServerState(str, Enum):
    SERVING = "serving"
    RESTARTING = "restarting"


def create_app() -> FastAPI:
    app = FastAPI(title="Hello Restart Server", version="0.1.0")

    @app.get("/", response_class=PlainTextResponse)
    async def hello():
        return GREETING

    return app


class SignalFreeServer(uvicorn.Server):
    """uvicorn server that leaves SIGINT/SIGTERM to the restart loop."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def build_server(settings: HelloSettings) -> uvicorn.Server:
    config = uvicorn.Config(
        create_app(),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        lifespan="off",
        timeout_graceful_shutdown=settings.grace_period_seconds,
    )
    return SignalFreeServer(config)


class RestartingServer:
    """
    Two-state lifecycle around a uvicorn server: SERVING and RESTARTING.

    ``server_factory`` builds a new server object for each listener; it must
    expose ``serve()``, ``should_exit`` and ``force_exit`` like
    ``uvicorn.Server``.
    """

    def __init__(
        self,
        settings: HelloSettings,
        server_factory: Optional[Callable[[HelloSettings], uvicorn.Server]] = None,
    ):
        self.settings = settings
        self._server_factory = server_factory or build_server
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None
        self.state: Optional[ServerState] = None
        self.restarts = 0

    @property
    def server(self) -> Optional[uvicorn.Server]:
        return self._server

    async def start(self) -> None:
        self._server = self._server_factory(self.settings)
        self._task = asyncio.create_task(self._serve(self._server))
        self.state = ServerState.SERVING
        logger.info(f"Serving on {self.settings.host}:{self.settings.port}")

    async def _serve(self, server: uvicorn.Server) -> None:
        try:
            await server.serve()
        except (OSError, SystemExit) as e:
            # uvicorn calls sys.exit(1) when it cannot bind
            logger.error(
                f"Listener on {self.settings.host}:{self.settings.port} failed: {e!r}"
            )

    async def stop(self) -> None:
        """Stop accepting connections and let in-flight requests finish."""
        server, task = self._server, self._task
        self.state = ServerState.RESTARTING
        if server is None or task is None:
            return

        logger.info("Shutting down listener...")
        server.should_exit = True
        try:
            await asyncio.wait_for(
                asyncio.shield(task), timeout=self.settings.grace_period_seconds
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Graceful shutdown exceeded {self.settings.grace_period_seconds}s; forcing close"
            )
            server.force_exit = True
            try:
                await task
            except Exception as e:
                logger.error(f"Forced shutdown failed: {e}")
        except Exception as e:
            logger.error(f"Shutdown failed: {e}")
        finally:
            self._server = None
            self._task = None

    async def restart(self) -> None:
        await self.stop()
        await asyncio.sleep(self.settings.restart_pause_seconds)
        await self.start()
        self.restarts += 1
        logger.info(f"Restarted ({self.restarts})")

    async def run_forever(self, trigger: asyncio.Event) -> None:
        """Serve, and restart every time ``trigger`` is set. Never returns."""
        if self._server is None:
            await self.start()

        while True:
            await trigger.wait()
            trigger.clear()
            logger.info("Restart requested")
            await self.restart()


def install_restart_signals(trigger: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, trigger.set)


async def serve(settings: HelloSettings) -> None:
    trigger = asyncio.Event()
    install_restart_signals(trigger)
    await RestartingServer(settings).run_forever(trigger)


def main() -> None:
    settings = HelloSettings()
    logging.basicConfig(
        stream=sys.stdout,
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
