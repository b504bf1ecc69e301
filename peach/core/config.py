# peach/core/config.py
import os
from dotenv import load_dotenv

class Settings:
    """
    Setup environment variables.
        - HOST / PORT the address the chat server listens on
        - READ_CHUNK_SIZE the number of bytes requested per socket read
        - SUBSCRIBER_BUFFER how many undelivered messages a subscriber may hold
        - DEFAULT_ROOM the room every new session starts in
        - API_ENABLED / API_HOST / API_PORT the read-only admin HTTP API
        - LOG_LEVEL the server log level
        - BROADCAST_LOG_LEVEL level for per-message fan-out and lag logs
        - SESSION_LOG_LEVEL level for connection and room-switch logs
    """

    # Load environment variables from the .env file
    load_dotenv()

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "5000"))

    READ_CHUNK_SIZE: int = int(os.getenv("READ_CHUNK_SIZE", "256"))
    SUBSCRIBER_BUFFER: int = int(os.getenv("SUBSCRIBER_BUFFER", "100"))
    DEFAULT_ROOM: str = os.getenv("DEFAULT_ROOM", "general")

    API_ENABLED: bool = os.getenv("API_ENABLED", "true").lower() in ("1", "true", "yes")
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    BROADCAST_LOG_LEVEL: str = os.getenv("BROADCAST_LOG_LEVEL", "WARNING").upper()
    SESSION_LOG_LEVEL: str = os.getenv("SESSION_LOG_LEVEL", "INFO").upper()

settings = Settings()
