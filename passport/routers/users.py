from typing import List
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, col, select

from passport.db import get_session
from passport.dependencies import get_current_user
from passport.exceptions import NotFoundError
from passport.models import PointLedger, User
from passport.schemas.user import PointEntryRead, UserRead

router = APIRouter(prefix="/users", tags=["users"])


def _get_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return _get_user(session, user_id)


@router.get("/{user_id}/points", response_model=List[PointEntryRead])
def point_history(
    user_id: int,
    limit: int = Query(50, gt=0, le=500),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    _get_user(session, user_id)
    return session.exec(
        select(PointLedger)
        .where(PointLedger.user_id == user_id)
        .order_by(col(PointLedger.created_at).desc(), col(PointLedger.id).desc())
        .limit(limit)
    ).all()
