from fastapi import Depends, FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from connection import ConnectionHandler
from constants import LOG_FILE, LOG_LEVEL
from dependencies import get_room_registry
from logging_config import get_logger, setup_logging
from registry import RoomRegistry
from routers.health import health_router
from routers.rooms import rooms_router

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


async def relay_endpoint(websocket: WebSocket, registry: RoomRegistry = Depends(get_room_registry)):
    """One task per client: read frames until the client goes away."""
    handler = ConnectionHandler(websocket, registry)
    await handler.serve()


def create_app() -> FastAPI:
    app = FastAPI(title="Pairing Relay")

    # Configure CORS to allow all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One registry per application; handlers and routes receive it through get_room_registry
    app.state.room_registry = RoomRegistry()

    app.include_router(health_router)
    app.include_router(rooms_router)
    app.add_api_websocket_route("/", relay_endpoint)

    logger.info("FastAPI application initialized")
    return app


app = create_app()
