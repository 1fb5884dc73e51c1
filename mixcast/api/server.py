"""
FastAPI status surface for a mixcast session.

The API is read-only: it reports what the session built and how it is
running, and never changes the pipeline. It runs uvicorn on a daemon thread
so the control loop keeps the main thread.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from fastapi import FastAPI

from ..config import load_profiles
from . import schemas
from .state import PipelineStatus

LOG = logging.getLogger(__name__)


def create_app(*, status: Optional[PipelineStatus] = None) -> FastAPI:
    session_status = status or PipelineStatus()

    app = FastAPI(title="mixcast status API")

    @app.get("/healthz", response_model=schemas.HealthModel)
    async def healthz() -> schemas.HealthModel:
        snapshot = session_status.snapshot()
        return schemas.HealthModel(status="ok", state=snapshot["state"], profile=snapshot["profile"])

    @app.get("/pipeline", response_model=schemas.PipelineStatusModel)
    async def get_pipeline() -> schemas.PipelineStatusModel:
        return schemas.PipelineStatusModel(**session_status.snapshot())

    @app.get("/profiles")
    async def list_profiles() -> dict:
        return {"profiles": load_profiles()}

    return app


class StatusServer:
    def __init__(self, status: PipelineStatus, *, host: str = "127.0.0.1", port: int = 8080) -> None:
        self.status = status
        self.host = host
        self.port = port
        self._server = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        import uvicorn

        if self._thread and self._thread.is_alive():
            return

        config = uvicorn.Config(
            app=create_app(status=self.status),
            host=self.host,
            port=self.port,
            log_config=None,
            log_level="warning",
        )
        self._server = uvicorn.Server(config=config)
        self._thread = threading.Thread(target=self._server.run, name="mixcast-status", daemon=True)
        self._thread.start()
        LOG.info("Status API listening on http://%s:%d", self.host, self.port)

    def stop(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
        thread = self._thread
        if thread and thread.is_alive():
            thread.join(timeout=2.0)
        self._thread = None
        self._server = None
