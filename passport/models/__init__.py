from .award import Award
from .link_models import EventAward, UserAward
from .user import User, UserRole, UserStatus
from .event import Event
from .attendance import Attendance
from .point_ledger import PointLedger, PointSource

__all__ = [
    "User", "UserRole", "UserStatus",
    "Event", "EventAward",
    "Award", "UserAward",
    "Attendance",
    "PointLedger", "PointSource",
]
