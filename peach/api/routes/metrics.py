# peach/api/routes/metrics.py
from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from peach.api.routes.utils import get_registry
from peach.services.room_manager import RoomRegistry

router = APIRouter()

@router.get("/metrics")
async def get_metrics(registry: RoomRegistry = Depends(get_registry)):
    """
    Traffic and capacity metrics.

    Returns:
        dict: message statistics, capacity, and slow-subscriber losses

    Example Response:
        {
            "total_messages": 1200,
            "uptime_hours": 3.5,
            "messages_per_second": 0.1,
            "concurrent_connections": 12,
            "total_rooms": 4,
            "active_rooms_with_members": 2,
            "subscriber_buffer": 100
        }
    """
    uptime_seconds = (datetime.now(timezone.utc) - registry.started_at).total_seconds()

    if uptime_seconds > 0:
        messages_per_second = registry.messages_published / uptime_seconds
    else:
        messages_per_second = 0

    rooms = registry.list_rooms()

    return {
        # Statistics
        "total_messages": registry.messages_published,
        "uptime_hours": round(uptime_seconds / 3600, 2) if uptime_seconds > 0 else 0,
        "messages_per_second": round(messages_per_second, 2),
        "transcript_lines": sum(len(r.transcript) for r in rooms),

        # Capacity
        "concurrent_connections": registry.active_connections,
        "total_rooms": len(rooms),
        "active_rooms_with_members": sum(1 for r in rooms if r.subscriber_count),
        "subscribers": sum(r.subscriber_count for r in rooms),
        "subscriber_buffer": registry.capacity,
    }
