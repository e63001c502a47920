from fastapi.requests import HTTPConnection

from registry import RoomRegistry


def get_room_registry(connection: HTTPConnection) -> RoomRegistry:
    """The registry owned by the running application, for HTTP and WebSocket routes alike."""
    return connection.app.state.room_registry
