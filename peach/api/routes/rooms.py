# peach/api/routes/rooms.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from peach.api.routes.utils import get_registry, room_detail, room_summary
from peach.models.models import RoomDetail, RoomSummary
from peach.services.room_manager import RoomRegistry

router = APIRouter()

# ============================================================================
# ROOM READ ENDPOINTS
# ============================================================================

@router.get("/rooms", response_model=List[RoomSummary])
async def list_rooms(registry: RoomRegistry = Depends(get_registry)):
    """
    List every room created since startup.

    Rooms are created by the first /join and never removed, so empty
    rooms are listed too.
    """
    return [room_summary(room) for room in registry.list_rooms()]


@router.get("/rooms/{name}", response_model=RoomDetail)
async def get_room(name: str, registry: RoomRegistry = Depends(get_registry)):
    """
    Get one room including its transcript.

    Raises:
        HTTPException: 404 if no client ever joined this room
    """
    room = registry.get_room(name)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    return room_detail(room)
