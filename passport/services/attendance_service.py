"""
Attendance transactions: record or revoke attendance for a batch of users,
move their point balances and grant newly reached awards as one unit.

Every public function here runs inside a single database transaction on the
given session and either commits all of its writes or none of them.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from passport.config import settings
from passport.exceptions import ConflictError, LedgerError, NotFoundError, StorageError
from passport.models import Event, EventAward, PointSource, User
from passport.services import attendance_store, points_ledger
from passport.services.awarding import grant_qualifying
from passport.services.identifiers import resolve_identifiers

log = logging.getLogger(__name__)


@dataclass
class AddAttendanceResult:
    new_attendees: int = 0
    duplicates: int = 0
    points_added: int = 0
    new_awards_granted: int = 0
    processed_users: List[User] = field(default_factory=list)
    invalid_identifiers: List[str] = field(default_factory=list)


@dataclass
class RemoveAttendanceResult:
    removed_count: int = 0
    points_deducted: int = 0
    processed_users: List[User] = field(default_factory=list)
    invalid_identifiers: List[str] = field(default_factory=list)


@dataclass
class EventDeletionResult:
    event_id: int
    attendances_removed: int
    users_deducted: int
    points_per_user: int


@contextmanager
def ledger_transaction(session: Session, action: str) -> Iterator[Session]:
    """Commit on success; roll back on any failure and re-raise.

    Database errors are translated: IntegrityError becomes ConflictError,
    any other SQLAlchemyError becomes StorageError.
    """
    try:
        yield session
        session.commit()
    except LedgerError:
        session.rollback()
        raise
    except IntegrityError as exc:
        session.rollback()
        log.exception("%s rolled back on constraint violation", action)
        raise ConflictError(f"Conflicting concurrent update during {action}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        log.exception("%s rolled back on storage failure", action)
        raise StorageError(f"Storage failure during {action}") from exc
    except Exception:
        session.rollback()
        log.exception("%s rolled back", action)
        raise


def _load_event(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


def _load_users(session: Session, user_ids: List[int]) -> List[User]:
    if not user_ids:
        return []
    users = session.exec(select(User).where(col(User.id).in_(user_ids))).all()
    order = {uid: i for i, uid in enumerate(user_ids)}
    return sorted(users, key=lambda u: order[u.id])


def add_attendance(
    session: Session,
    event_id: int,
    identifiers: Iterable[str],
    *,
    batch_size: Optional[int] = None,
) -> AddAttendanceResult:
    """Record attendance for every resolved user not already attending.

    Only the newly recorded users are credited the event's points, and only
    they are checked for new awards (after the credit, so thresholds see the
    new balances).
    """
    with ledger_transaction(session, "add attendance"):
        resolved = resolve_identifiers(session, identifiers)
        if not resolved.users:
            return AddAttendanceResult(invalid_identifiers=resolved.invalid)

        event = _load_event(session, event_id)
        allocation = event.points_allocation
        user_ids = resolved.user_ids
        existing = attendance_store.existing_attendees(session, event.id, user_ids)
        new_ids = [uid for uid in user_ids if uid not in existing]

        now = datetime.now(timezone.utc)
        inserted = attendance_store.insert_batch(
            session,
            [dict(user_id=uid, event_id=event.id, scanned_time=now) for uid in new_ids],
            batch_size=batch_size,
        )
        points_ledger.adjust(
            session, new_ids, allocation,
            source=PointSource.ATTENDANCE,
            reason=f"Attended: {event.name}",
            event_id=event.id,
        )
        granted = grant_qualifying(session, new_ids, granted_at=now)

    log.info(
        "Event %s: %d new attendees, %d duplicates, %d awards granted",
        event_id, inserted, resolved.matched - inserted, granted,
    )
    return AddAttendanceResult(
        new_attendees=inserted,
        duplicates=resolved.matched - inserted,
        points_added=allocation * inserted,
        new_awards_granted=granted,
        processed_users=_load_users(session, new_ids),
        invalid_identifiers=resolved.invalid,
    )


def remove_attendance(session: Session, event_id: int, identifiers: Iterable[str]) -> RemoveAttendanceResult:
    """Delete attendance rows for the resolved users and take back points.

    With REMOVAL_DEDUCTS_RESOLVED_USERS (the default) every resolved user is
    deducted the event's allocation whether or not a row existed for them;
    otherwise only users whose row was removed are. Awards are never revoked.
    """
    with ledger_transaction(session, "remove attendance"):
        resolved = resolve_identifiers(session, identifiers)
        if not resolved.users:
            return RemoveAttendanceResult(invalid_identifiers=resolved.invalid)

        event = _load_event(session, event_id)
        allocation = event.points_allocation
        user_ids = resolved.user_ids
        attended = attendance_store.existing_attendees(session, event.id, user_ids)
        removed = attendance_store.delete_by_event_and_users(session, event.id, user_ids)

        if settings.REMOVAL_DEDUCTS_RESOLVED_USERS:
            targets = user_ids
            absent = [uid for uid in user_ids if uid not in attended]
            if absent and allocation:
                log.warning(
                    "Event %s: deducting %d points from users without attendance: %s",
                    event_id, allocation, absent,
                )
        else:
            targets = [uid for uid in user_ids if uid in attended]

        points_ledger.adjust(
            session, targets, -allocation,
            source=PointSource.ATTENDANCE_REMOVED,
            reason=f"Attendance removed: {event.name}",
            event_id=event.id,
        )

    log.info("Event %s: removed %d attendances", event_id, removed)
    return RemoveAttendanceResult(
        removed_count=removed,
        points_deducted=allocation * removed,
        processed_users=_load_users(session, user_ids),
        invalid_identifiers=resolved.invalid,
    )


def delete_event(session: Session, event_id: int) -> EventDeletionResult:
    """Delete an event after taking its points back from every attendee.

    Awards earned through the event stay granted.
    """
    with ledger_transaction(session, "delete event"):
        event = _load_event(session, event_id)
        allocation = event.points_allocation
        attendees = attendance_store.attendee_ids(session, event.id)
        points_ledger.adjust(
            session, attendees, -allocation,
            source=PointSource.EVENT_DELETED,
            reason=f"Event deleted: {event.name}",
            event_id=event.id,
        )
        removed = attendance_store.delete_by_event(session, event.id)

        conn = session.connection()
        conn.execute(delete(EventAward.__table__).where(EventAward.__table__.c.event_id == event.id))
        conn.execute(delete(Event.__table__).where(Event.__table__.c.id == event.id))
        session.expunge(event)

    log.info("Event %s deleted with %d attendances", event_id, removed)
    return EventDeletionResult(
        event_id=event_id,
        attendances_removed=removed,
        users_deducted=len(attendees),
        points_per_user=allocation,
    )
