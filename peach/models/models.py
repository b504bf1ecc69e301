# peach/models/models.py
from datetime import datetime
from pydantic import BaseModel
from typing import List

class RoomSummary(BaseModel):
    name: str
    subscriber_count: int = 0
    transcript_lines: int = 0
    created_at: datetime

class RoomDetail(RoomSummary):
    transcript: List[str] = []

class HealthStatus(BaseModel):
    status: str
    connections: int
    rooms: int
    active_rooms_with_members: int
