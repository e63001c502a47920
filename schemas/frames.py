from pydantic import BaseModel, ConfigDict
from typing import Any, Literal


# Inbound frames (client -> server)

class InboundFrame(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str

class JoinFrame(BaseModel):
    type: Literal["join"] = "join"
    roomCode: str

class MessageFrame(BaseModel):
    type: Literal["message"] = "message"
    content: Any = None


# Outbound frames (server -> client)

class JoinedFrame(BaseModel):
    type: Literal["joined"] = "joined"
    roomCode: str

class ConnectedFrame(BaseModel):
    type: Literal["connected"] = "connected"

class RelayedMessageFrame(BaseModel):
    type: Literal["message"] = "message"
    content: Any = None

class DisconnectedFrame(BaseModel):
    type: Literal["disconnected"] = "disconnected"

class ErrorFrame(BaseModel):
    type: Literal["error"] = "error"
    reason: str
    roomCode: str
