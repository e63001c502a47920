from pydantic import BaseModel
from typing import Literal


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    activeRooms: int

class RoomDetailsResponse(BaseModel):
    roomCode: str
    state: Literal["waiting", "active"]
    participants: list[str]
