from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

class AwardForm(BaseModel):
    name: str
    description: Optional[str] = None
    icon_url: Optional[str] = None
    points: int = 0

class AwardRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    icon_url: Optional[str] = None
    points: int
    created_at: datetime
