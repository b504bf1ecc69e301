# peach/api/routes/root.py

from fastapi import APIRouter

from peach.core.config import settings

router = APIRouter()


@router.get("/")
async def root():
    """
    Root endpoint - API information.

    Returns basic info about the chat server and this read-only API.
    """
    return {
        "message": "Peach - anonymous multi-room chat",
        "version": "1.0",
        "chat": {"host": settings.HOST, "port": settings.PORT, "protocol": "tcp, line oriented"},
        "default_room": settings.DEFAULT_ROOM,
        "endpoints": {
            "rooms": "/rooms",
            "health": "/health",
            "metrics": "/metrics",
        },
    }
