from typing import Any, List
from pydantic import BaseModel
from passport.exceptions import InvalidInputError
from .user import UserRead


def parse_identifiers(payload: Any) -> List[str]:
    """Accept a bare list of strings or {"identifiers": [...]}."""
    if isinstance(payload, dict):
        if "identifiers" not in payload:
            raise InvalidInputError("Request body must contain 'identifiers'")
        payload = payload["identifiers"]
    if not isinstance(payload, list):
        raise InvalidInputError("Identifiers must be a list of strings")
    if not all(isinstance(item, str) for item in payload):
        raise InvalidInputError("Every identifier must be a string")
    return payload


class AttendanceAdded(BaseModel):
    message: str = "Attendance processed"
    new_attendees: int
    duplicates: int
    points_added: int
    new_awards_granted: int
    processed_users: List[UserRead]
    invalid_identifiers: List[str]


class AttendanceRemoved(BaseModel):
    message: str = "Attendance removed"
    removed_count: int
    points_deducted: int
    processed_users: List[UserRead]
    invalid_identifiers: List[str]
