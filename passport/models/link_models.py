from typing import Optional
from datetime import datetime, timezone
from sqlmodel import Field, SQLModel

class EventAward(SQLModel, table=True):
    __tablename__ = "event_awards"
    event_id: int = Field(foreign_key="events.id", primary_key=True)
    award_id: int = Field(foreign_key="awards.id", primary_key=True)

class UserAward(SQLModel, table=True):
    """A grant: the user has reached the award's points threshold."""
    __tablename__ = "user_awards"
    user_id: int = Field(foreign_key="users.id", primary_key=True)
    award_id: int = Field(foreign_key="awards.id", primary_key=True)
    granted_at: Optional[datetime] = Field(default_factory=lambda: datetime.now(timezone.utc))
