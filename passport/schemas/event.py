from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from .award import AwardRead

class EventForm(BaseModel):
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    points_allocation: int = 0
    award_ids: Optional[List[int]] = None
    image_url: Optional[str] = None

class EventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    organizer_id: Optional[int] = None
    points_allocation: int
    image_url: Optional[str] = None
    awards: List[AwardRead] = []

class AttendeeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str

class EventDeleted(BaseModel):
    message: str = "Event and related data deleted"
    event_id: int
    attendances_removed: int
    users_deducted: int
    points_per_user: int
