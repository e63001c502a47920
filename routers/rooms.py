from fastapi import APIRouter, Depends, HTTPException

from dependencies import get_room_registry
from logging_config import get_logger
from registry import RoomRegistry
from schemas.http import RoomDetailsResponse

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/{room_code}", response_model=RoomDetailsResponse)
async def get_room_details(room_code: str, registry: RoomRegistry = Depends(get_room_registry)):
    """
    Inspect a live room.

    Returns:
    - roomCode: the code clients joined with
    - state: "waiting" with one participant, "active" with two
    - participants: connection ids in join order

    Rooms that do not exist (never joined, or emptied) are a 404.
    """
    room = registry.describe(room_code)
    if room is None:
        logger.info(f"Room details failed: Room {room_code} not found")
        raise HTTPException(status_code=404, detail="Room not found")
    return RoomDetailsResponse(**room)
