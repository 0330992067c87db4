from typing import Optional
from datetime import datetime, timezone
from enum import Enum
from sqlmodel import Field, SQLModel
from sqlalchemy import CheckConstraint, Index


class PointSource(str, Enum):
    ATTENDANCE = "attendance"
    ATTENDANCE_REMOVED = "attendance_removed"
    EVENT_DELETED = "event_deleted"


class PointLedger(SQLModel, table=True):
    """Audit trail of balance changes; users.current_points stays authoritative."""
    __tablename__ = "point_ledger"
    __table_args__ = (
        CheckConstraint("delta <> 0", name="ck_ledger_delta_nonzero"),
        Index("ix_ledger_user_created", "user_id", "created_at"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id")
    delta: int
    reason: Optional[str] = None
    source: PointSource
    # No foreign key: history outlives deleted events
    event_id: Optional[int] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
