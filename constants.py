import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))
RELOAD = os.getenv("RELOAD", "false").lower() == "true"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Client-facing messages
JOIN_ACK_MESSAGE = "Joined room successfully!"
ROOM_REQUIRED_MESSAGE = "Room name is required for join."
NOT_IN_ROOM_MESSAGE = "You must join a room before sending WebRTC signals."

# Seconds a single outbound frame may wait on a slow peer before it is dropped
SEND_TIMEOUT = float(os.getenv("SEND_TIMEOUT", 5))
