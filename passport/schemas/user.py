from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from passport.models import PointSource, UserRole
from .award import AwardRead

class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    current_points: int
    grad_year: Optional[int] = None
    awards: List[AwardRead] = []

class PointEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    delta: int
    reason: Optional[str] = None
    source: PointSource
    event_id: Optional[int] = None
    created_at: datetime
