import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 10000))
RELOAD = os.getenv("RELOAD", "false").lower() == "true"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

# A room pairs exactly two clients
MAX_ROOM_PARTICIPANTS = 2

LIVENESS_MESSAGE = "Device Communication Relay Server is running! 🚀"
