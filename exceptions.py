class RelayError(Exception):
    """Base class for join rejections reported back to the client."""

    reason = "error"

    def __init__(self, room_code: str, message: str = None):
        self.room_code = room_code
        super().__init__(message or f"{self.reason}: {room_code}")


class RoomFullError(RelayError):
    reason = "room_full"


class AlreadyJoinedError(RelayError):
    reason = "already_joined"
