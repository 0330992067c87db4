from datetime import datetime
from typing import Any, List, Literal
from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import TypeAdapter, ValidationError
from sqlmodel import Session, col, select

from passport.db import get_session
from passport.dependencies import get_current_user, require_role
from passport.exceptions import InvalidInputError, NotFoundError
from passport.models import Attendance, Award, Event, User, UserRole
from passport.schemas.attendance import AttendanceAdded, AttendanceRemoved, parse_identifiers
from passport.schemas.event import AttendeeRead, EventDeleted, EventForm, EventRead
from passport.services import attendance_service

router = APIRouter(prefix="/events", tags=["events"])

require_organizer = require_role(UserRole.ADMIN, UserRole.STAFF)

_timestamp = TypeAdapter(datetime)


def _parse_between(value: str) -> tuple[datetime, datetime]:
    """Parse "start,end" into two timestamps with start before end."""
    parts = value.split(",")
    if len(parts) != 2:
        raise InvalidInputError("between_time must contain exactly 2 comma-separated timestamps")
    try:
        start, end = (_timestamp.validate_python(p.strip()) for p in parts)
    except ValidationError as exc:
        raise InvalidInputError("Invalid timestamp in between_time") from exc
    try:
        reversed_range = start > end
    except TypeError as exc:
        raise InvalidInputError("between_time timestamps must both carry a timezone or both omit it") from exc
    if reversed_range:
        raise InvalidInputError("Start time must be before end time in between_time")
    return start, end


@router.get("/", response_model=List[EventRead])
def list_events(
    before_time: datetime | None = Query(None),
    after_time: datetime | None = Query(None),
    between_time: str | None = Query(None),
    order: Literal["asc", "desc"] = Query("desc"),
    limit: int | None = Query(None, gt=0),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    start = col(Event.start_time)
    query = select(Event)
    if before_time:
        query = query.where(start < before_time)
    if after_time:
        query = query.where(start > after_time)
    if between_time:
        low, high = _parse_between(between_time)
        query = query.where(start.between(low, high))
    query = query.order_by(start.asc() if order == "asc" else start.desc(), col(Event.id))
    if limit:
        query = query.limit(limit)
    return session.exec(query).all()


@router.post("/", response_model=EventRead, status_code=status.HTTP_201_CREATED)
def create_event(
    form: EventForm,
    current_user: User = Depends(require_organizer),
    session: Session = Depends(get_session),
):
    if (form.start_time is None) != (form.end_time is None):
        raise InvalidInputError("start_time and end_time must both be set or both be empty")
    if form.start_time and form.start_time >= form.end_time:
        raise InvalidInputError("start_time must be before end_time")
    if form.points_allocation < 0:
        raise InvalidInputError("points_allocation must not be negative")

    awards = []
    if form.award_ids:
        wanted = set(form.award_ids)
        awards = session.exec(select(Award).where(col(Award.id).in_(sorted(wanted)))).all()
        if len(awards) != len(wanted):
            raise InvalidInputError("Some award IDs not found")

    event = Event(
        name=form.name,
        description=form.description,
        location=form.location,
        start_time=form.start_time,
        end_time=form.end_time,
        organizer_id=current_user.id,
        points_allocation=form.points_allocation,
        image_url=form.image_url,
        awards=list(awards),
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@router.get("/{event_id}", response_model=EventRead)
def get_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    event = session.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    return event


@router.delete("/{event_id}", response_model=EventDeleted)
def delete_event(
    event_id: int,
    current_user: User = Depends(require_organizer),
    session: Session = Depends(get_session),
):
    result = attendance_service.delete_event(session, event_id)
    return EventDeleted.model_validate(result, from_attributes=True)


@router.get("/{event_id}/attendees", response_model=List[AttendeeRead])
def list_attendees(
    event_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if not session.get(Event, event_id):
        raise NotFoundError("Event not found")
    return session.exec(
        select(User)
        .join(Attendance, col(Attendance.user_id) == col(User.id))
        .where(Attendance.event_id == event_id)
        .order_by(col(Attendance.scanned_time), col(User.id))
    ).all()


@router.post("/{event_id}/attendances", response_model=AttendanceAdded)
def add_attendances(
    event_id: int,
    payload: Any = Body(None),
    current_user: User = Depends(require_organizer),
    session: Session = Depends(get_session),
):
    identifiers = parse_identifiers(payload)
    result = attendance_service.add_attendance(session, event_id, identifiers)
    return AttendanceAdded.model_validate(result, from_attributes=True)


@router.delete("/{event_id}/attendances", response_model=AttendanceRemoved)
def remove_attendances(
    event_id: int,
    payload: Any = Body(None),
    current_user: User = Depends(require_organizer),
    session: Session = Depends(get_session),
):
    identifiers = parse_identifiers(payload)
    result = attendance_service.remove_attendance(session, event_id, identifiers)
    return AttendanceRemoved.model_validate(result, from_attributes=True)
