from typing import List
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select

from passport.db import get_session
from passport.dependencies import get_current_user, require_role
from passport.exceptions import InvalidInputError
from passport.models import Award, User, UserRole
from passport.schemas.award import AwardForm, AwardRead

router = APIRouter(prefix="/awards", tags=["awards"])


@router.get("/", response_model=List[AwardRead])
def list_awards(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return session.exec(select(Award).order_by(Award.points, Award.name)).all()


@router.post("/", response_model=AwardRead, status_code=status.HTTP_201_CREATED)
def create_award(
    form: AwardForm,
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.STAFF)),
    session: Session = Depends(get_session),
):
    if form.points < 0:
        raise InvalidInputError("points must not be negative")
    if not form.name.strip():
        raise InvalidInputError("name is required")
    award = Award(
        name=form.name.strip(),
        description=form.description,
        icon_url=form.icon_url,
        points=form.points,
    )
    session.add(award)
    session.commit()
    session.refresh(award)
    return award
