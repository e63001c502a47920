import json
import uuid
from typing import Union

import anyio
from fastapi import WebSocket
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from exceptions import RelayError
from logging_config import get_logger
from registry import RoomRegistry
from schemas.frames import ErrorFrame, InboundFrame, JoinFrame, MessageFrame

logger = get_logger(__name__)


class ConnectionHandler:
    """Owns one client WebSocket and dispatches its frames to the room registry."""

    def __init__(self, websocket: WebSocket, registry: RoomRegistry):
        self.websocket = websocket
        self.registry = registry
        self.connection_id = uuid.uuid4().hex
        self.frames_received = 0

    @property
    def writable(self) -> bool:
        return (
            self.websocket.application_state == WebSocketState.CONNECTED
            and self.websocket.client_state == WebSocketState.CONNECTED
        )

    async def on_connect(self):
        await self.websocket.accept()
        client = self.websocket.client
        logger.info(f"New client connected: {self.connection_id} from {client.host if client else 'unknown'}")

    async def on_frame(self, raw: Union[str, bytes]):
        self.frames_received += 1
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            data = json.loads(raw)
            frame = InboundFrame.model_validate(data)
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring malformed frame #{self.frames_received} from {self.connection_id}: {e}")
            return

        logger.debug(f"Received {frame.type!r} frame #{self.frames_received} from {self.connection_id}")

        if frame.type == "join":
            try:
                join = JoinFrame.model_validate(data)
            except ValidationError as e:
                logger.warning(f"Ignoring join frame without a valid roomCode from {self.connection_id}: {e}")
                return
            try:
                await self.registry.join(self, join.roomCode)
            except RelayError as e:
                await self.send(ErrorFrame(reason=e.reason, roomCode=e.room_code).model_dump())
        elif frame.type == "message":
            message = MessageFrame.model_validate(data)
            await self.registry.relay(self, message.content)
        else:
            logger.debug(f"Ignoring unknown frame type {frame.type!r} from {self.connection_id}")

    async def on_disconnect(self):
        left = await self.registry.leave(self)
        logger.info(f"Client disconnected: {self.connection_id} (was in a room: {left})")

    async def send(self, frame: dict) -> bool:
        """Write ``frame`` as JSON text. Returns False if the socket was not writable."""
        if not self.writable:
            logger.debug(f"Skipping send to {self.connection_id}: connection not open")
            return False
        try:
            await self.websocket.send_text(json.dumps(frame))
        except Exception as e:
            logger.debug(f"Error sending to connection {self.connection_id}: {e}")
            return False
        return True

    async def serve(self):
        await self.on_connect()
        try:
            while True:
                message = await self.websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.debug(f"Connection {self.connection_id} closed with code {message.get('code')}")
                    break
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes")
                if raw is None:
                    continue
                try:
                    await self.on_frame(raw)
                except Exception as e:
                    logger.error(f"Error processing frame from {self.connection_id}: {e}", exc_info=True)
        except Exception as e:
            logger.error(f"WebSocket error for connection {self.connection_id}: {e}", exc_info=True)
        finally:
            with anyio.CancelScope(shield=True):
                await self.on_disconnect()
