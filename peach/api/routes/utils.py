# peach/api/routes/utils.py

from __future__ import annotations

from fastapi import Request

from peach.models.models import RoomDetail, RoomSummary
from peach.services.room_manager import Room, RoomRegistry


def get_registry(request: Request) -> RoomRegistry:
    """Dependency returning the registry the chat server is running with."""
    return request.app.state.registry


def room_summary(room: Room) -> RoomSummary:
    return RoomSummary(
        name=room.name,
        subscriber_count=room.subscriber_count,
        transcript_lines=len(room.transcript),
        created_at=room.created_at,
    )


def room_detail(room: Room) -> RoomDetail:
    return RoomDetail(
        **room_summary(room).model_dump(),
        transcript=room.transcript.lines(),
    )
