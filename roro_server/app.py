"""
Roro Recommendation & Experimentation API - FastAPI app factory.

Use: uvicorn roro_server.app:app
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roro_engine.errors import ExperimentConfigError, StorageError

from .config import get_config
from .logging_setup import configure_logging
from .routes import register_routes
from .state import get_state

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build FastAPI app with CORS, error handlers, routes, and startup."""
    configure_logging(get_config().log_level)
    app = FastAPI(
        title="Roro Recommendation & Experimentation API",
        description="Event recommendations, sticky A/B assignment and click telemetry",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ExperimentConfigError)
    async def _experiment_config_error(request: Request, exc: ExperimentConfigError):
        return JSONResponse(status_code=400, content={"ok": False, "error": str(exc)})

    @app.exception_handler(ValueError)
    async def _value_error(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"ok": False, "error": str(exc)})

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError):
        logger.error("[storage] %s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"ok": False, "error": "storage_unavailable"})

    register_routes(app)

    @app.on_event("startup")
    def _startup():
        state = get_state()
        logger.info("[startup] Roro API starting (store=%s)", state.store_name)
        logger.info("[startup] Default weights: %s", state.engine_config.default_weights.as_dict())

    return app


app = create_app()
