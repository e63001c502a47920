from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from constants import LIVENESS_MESSAGE
from dependencies import get_room_registry
from logging_config import get_logger
from registry import RoomRegistry
from schemas.http import HealthResponse

logger = get_logger(__name__)

health_router = APIRouter(tags=["health"])


@health_router.get("/", response_class=PlainTextResponse)
async def root():
    return LIVENESS_MESSAGE


@health_router.get("/health", response_model=HealthResponse)
async def health(registry: RoomRegistry = Depends(get_room_registry)):
    logger.debug(f"Health check: {registry.room_count} active rooms")
    return HealthResponse(activeRooms=registry.room_count)
