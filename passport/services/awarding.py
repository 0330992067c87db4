from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import and_, insert, literal, select
from sqlmodel import Session

from passport.models import Award, User, UserAward

_users = User.__table__
_awards = Award.__table__
_grants = UserAward.__table__


def grant_qualifying(session: Session, user_ids: Iterable[int], granted_at: Optional[datetime] = None) -> int:
    """
    Grant every award whose threshold the listed users now meet and that
    they do not already hold, in a single INSERT ... SELECT.

    The "already granted" check is part of the statement, so it sees the
    transaction's own balance updates and any grant committed before it
    runs. Grants are never removed here. Returns the number inserted.
    """
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return 0

    granted_at = granted_at or datetime.now(timezone.utc)
    held = _grants.alias("held")
    qualifying = (
        select(
            _users.c.id,
            _awards.c.id,
            literal(granted_at, type_=_grants.c.granted_at.type),
        )
        .select_from(
            _users.join(_awards, _awards.c.points <= _users.c.current_points)
            .outerjoin(held, and_(held.c.user_id == _users.c.id, held.c.award_id == _awards.c.id))
        )
        .where(_users.c.id.in_(ids), held.c.user_id.is_(None))
    )
    result = session.connection().execute(
        insert(_grants).from_select(["user_id", "award_id", "granted_at"], qualifying)
    )
    return result.rowcount
