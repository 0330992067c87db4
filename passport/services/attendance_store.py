from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence, Set

from sqlalchemy import delete, insert, select
from sqlmodel import Session

from passport.config import settings
from passport.models import Attendance

_attendance = Attendance.__table__


def existing_attendees(session: Session, event_id: int, user_ids: Iterable[int]) -> Set[int]:
    """Return the subset of `user_ids` already recorded as attending `event_id`."""
    ids = set(user_ids)
    if not ids:
        return set()
    rows = session.connection().execute(
        select(_attendance.c.user_id)
        .where(_attendance.c.event_id == event_id, _attendance.c.user_id.in_(sorted(ids)))
    )
    return {row.user_id for row in rows}


def attendee_ids(session: Session, event_id: int) -> List[int]:
    rows = session.connection().execute(
        select(_attendance.c.user_id)
        .where(_attendance.c.event_id == event_id)
        .order_by(_attendance.c.user_id)
    )
    return [row.user_id for row in rows]


def insert_batch(session: Session, rows: Sequence[Mapping], batch_size: Optional[int] = None) -> int:
    """Insert attendance rows in chunks inside the caller's transaction.

    Each row needs user_id, event_id and scanned_time. A failing chunk
    raises; the caller rolls back every chunk together.
    """
    size = settings.ATTENDANCE_BATCH_SIZE if batch_size is None else batch_size
    if size <= 0:
        raise ValueError("batch_size must be positive")
    conn = session.connection()
    count = 0
    for start in range(0, len(rows), size):
        chunk = [dict(r) for r in rows[start:start + size]]
        conn.execute(insert(_attendance), chunk)
        count += len(chunk)
    return count


def delete_by_event_and_users(session: Session, event_id: int, user_ids: Iterable[int]) -> int:
    """Delete matching rows; returns the number actually removed."""
    ids = set(user_ids)
    if not ids:
        return 0
    result = session.connection().execute(
        delete(_attendance)
        .where(_attendance.c.event_id == event_id, _attendance.c.user_id.in_(sorted(ids)))
    )
    return result.rowcount


def delete_by_event(session: Session, event_id: int) -> int:
    result = session.connection().execute(
        delete(_attendance).where(_attendance.c.event_id == event_id)
    )
    return result.rowcount
