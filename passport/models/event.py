from typing import List, Optional
from datetime import datetime, timezone
from sqlmodel import Field, SQLModel, Relationship
from .award import Award
from .link_models import EventAward


class Event(SQLModel, table=True):
    __tablename__ = "events"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[datetime] = Field(default=None, index=True)
    end_time: Optional[datetime] = None
    organizer_id: Optional[int] = Field(default=None, foreign_key="users.id")
    # Points credited to each attendee; read-only for the ledger
    points_allocation: int = Field(default=0)
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    awards: List[Award] = Relationship(link_model=EventAward)
