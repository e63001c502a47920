import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from constants import MAX_ROOM_PARTICIPANTS
from exceptions import AlreadyJoinedError, RoomFullError
from logging_config import get_logger
from schemas.frames import ConnectedFrame, DisconnectedFrame, JoinedFrame, RelayedMessageFrame

if TYPE_CHECKING:
    from connection import ConnectionHandler

logger = get_logger(__name__)


class RoomState(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"


@dataclass
class Participant:
    """Registry-side handle for one connection.

    The registry never owns the transport; it only keeps a reference to the
    handler that does. Identity is the handler's ``connection_id``.
    """
    connection: "ConnectionHandler"
    room_code: str

    @property
    def connection_id(self) -> str:
        return self.connection.connection_id


@dataclass
class Room:
    code: str
    participants: List[Participant] = field(default_factory=list)
    # Serializes writes to this room's participants, in the order they were queued
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def state(self) -> RoomState:
        if len(self.participants) >= MAX_ROOM_PARTICIPANTS:
            return RoomState.ACTIVE
        return RoomState.WAITING

    def others(self, connection_id: str) -> List[Participant]:
        return [p for p in self.participants if p.connection_id != connection_id]


Delivery = Tuple["ConnectionHandler", dict]


class RoomRegistry:
    """In-memory map of room code -> Room.

    Membership changes run under one registry-wide asyncio.Lock that is never
    held across a socket write. The frames a change triggers are written
    afterwards under the room's own ``send_lock``, so a slow peer can only
    hold up its own room. Rooms with no participants are deleted, never
    retained.
    """

    def __init__(self, max_participants: int = MAX_ROOM_PARTICIPANTS):
        self.max_participants = max_participants
        self._rooms: Dict[str, Room] = {}
        # connection_id -> Participant, for rooms the connection is currently in
        self._members: Dict[str, Participant] = {}
        self._lock = asyncio.Lock()

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    @property
    def participant_count(self) -> int:
        return len(self._members)

    def room_of(self, connection: "ConnectionHandler") -> Optional[str]:
        participant = self._members.get(connection.connection_id)
        return participant.room_code if participant else None

    def describe(self, room_code: str) -> Optional[dict]:
        room = self._rooms.get(room_code)
        if room is None:
            return None
        return {
            "roomCode": room.code,
            "state": room.state.value,
            "participants": [p.connection_id for p in room.participants],
        }

    async def _deliver(self, room: Room, deliveries: List[Delivery]) -> int:
        # Callers reach this with no suspension point after releasing self._lock,
        # and asyncio.Lock wakes waiters first in, first out, so each room sees
        # its frames in the order its membership changed.
        if not deliveries:
            return 0
        delivered = 0
        async with room.send_lock:
            for connection, frame in deliveries:
                if await connection.send(frame):
                    delivered += 1
        return delivered

    async def join(self, connection: "ConnectionHandler", room_code: str) -> str:
        """Add ``connection`` to ``room_code``, creating the room if needed.

        Sends ``joined`` to the joiner, then ``connected`` to both participants
        when this join fills the room. Raises AlreadyJoinedError if the
        connection is already in a room and RoomFullError if the room is full.
        """
        async with self._lock:
            current = self._members.get(connection.connection_id)
            if current is not None:
                logger.warning(
                    f"Connection {connection.connection_id} tried to join {room_code} "
                    f"while already in room {current.room_code}"
                )
                raise AlreadyJoinedError(room_code)

            room = self._rooms.get(room_code)
            if room is not None and len(room.participants) >= self.max_participants:
                logger.info(f"Rejected join of {connection.connection_id}: room {room_code} is full")
                raise RoomFullError(room_code)

            if room is None:
                room = Room(code=room_code)
                self._rooms[room_code] = room
                logger.info(f"Created room {room_code}")

            participant = Participant(connection=connection, room_code=room_code)
            room.participants.append(participant)
            self._members[participant.connection_id] = participant
            logger.info(
                f"Connection {participant.connection_id} joined room {room_code} "
                f"({len(room.participants)}/{self.max_participants})"
            )

            deliveries: List[Delivery] = [(connection, JoinedFrame(roomCode=room_code).model_dump())]
            if len(room.participants) == self.max_participants:
                logger.info(f"Room {room_code} is now active")
                frame = ConnectedFrame().model_dump()
                deliveries.extend((p.connection, frame) for p in room.participants)

        await self._deliver(room, deliveries)
        return room_code

    async def relay(self, connection: "ConnectionHandler", content: Any) -> int:
        """Forward ``content`` to the other participants of the sender's room.

        Returns how many connections the frame was written to; participants
        whose socket is not open are skipped. Senders that are not in a room
        are ignored.
        """
        async with self._lock:
            participant = self._members.get(connection.connection_id)
            if participant is None:
                logger.debug(f"Dropping message from {connection.connection_id}: not in a room")
                return 0

            room = self._rooms[participant.room_code]
            frame = RelayedMessageFrame(content=content).model_dump()
            deliveries = [(other.connection, frame) for other in room.others(participant.connection_id)]

        delivered = await self._deliver(room, deliveries)
        logger.debug(f"Relayed message in room {room.code} to {delivered} connection(s)")
        return delivered

    async def leave(self, connection: "ConnectionHandler") -> bool:
        """Remove ``connection`` from its room. Safe to call more than once."""
        async with self._lock:
            participant = self._members.pop(connection.connection_id, None)
            if participant is None:
                return False

            room = self._rooms[participant.room_code]
            room.participants = room.others(participant.connection_id)
            logger.info(f"Connection {participant.connection_id} left room {room.code}")

            if not room.participants:
                del self._rooms[room.code]
                logger.info(f"Room {room.code} is empty, removed")
                return True

            frame = DisconnectedFrame().model_dump()
            deliveries = [(remaining.connection, frame) for remaining in room.participants]

        await self._deliver(room, deliveries)
        return True
