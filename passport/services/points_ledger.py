from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import insert, update
from sqlmodel import Session

from passport.models import PointLedger, PointSource, User

_users = User.__table__
_ledger = PointLedger.__table__


def adjust(
    session: Session,
    user_ids: Iterable[int],
    delta: int,
    *,
    source: PointSource,
    reason: Optional[str] = None,
    event_id: Optional[int] = None,
) -> int:
    """
    Add `delta` to every listed user's balance with one relative UPDATE
    (current_points = current_points + delta) and append one history row per
    user. Balances are not clamped at zero. Returns the number of balances
    changed; a zero delta or empty list is a no-op.
    """
    ids = list(dict.fromkeys(user_ids))
    if not ids or delta == 0:
        return 0

    conn = session.connection()
    result = conn.execute(
        update(_users)
        .where(_users.c.id.in_(ids))
        .values(current_points=_users.c.current_points + delta)
    )

    now = datetime.now(timezone.utc)
    conn.execute(
        insert(_ledger),
        [
            dict(user_id=uid, delta=delta, reason=reason, source=source,
                 event_id=event_id, created_at=now)
            for uid in ids
        ],
    )
    return result.rowcount
