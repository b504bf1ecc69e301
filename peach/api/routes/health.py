# peach/api/routes/health.py

from fastapi import APIRouter, Depends

from peach.api.routes.utils import get_registry
from peach.models.models import HealthStatus
from peach.services.room_manager import RoomRegistry

router = APIRouter()

@router.get("/health", response_model=HealthStatus)
async def health(registry: RoomRegistry = Depends(get_registry)):
    """
    Health check endpoint.

    Returns current system status, connection counts, and room counts.

    Returns:
        HealthStatus: status, connection count, room count, active room count
    """
    rooms = registry.list_rooms()
    return HealthStatus(
        status="healthy",
        connections=registry.active_connections,
        rooms=len(rooms),
        active_rooms_with_members=sum(1 for r in rooms if r.subscriber_count),
    )
