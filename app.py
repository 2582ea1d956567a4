from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL
from logging_config import get_logger, setup_logging
from registry import ConnectionRegistry
from routers.rooms import rooms_router
from routers.signaling import signaling_router
from signaling import SignalingRouter
from transport import WebSocketTransport

setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


def create_app(registry: Optional[ConnectionRegistry] = None) -> FastAPI:
    app = FastAPI(title="Signaling Relay")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Room state lives for the lifetime of this app instance only
    app.state.registry = registry if registry is not None else ConnectionRegistry()
    app.state.transport = WebSocketTransport()
    app.state.signaling = SignalingRouter(app.state.registry, app.state.transport)

    app.include_router(rooms_router)
    app.include_router(signaling_router)

    logger.info("FastAPI application initialized")
    return app


app = create_app()
