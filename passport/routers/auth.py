from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlmodel import Session, select

from passport.db import get_session
from passport.models import User, UserRole, UserStatus
from passport.schemas.auth import LoginForm, RefreshForm, TokenResponse
from passport.security import REFRESH_TOKEN, TokenError, create_access_token, create_refresh_token, decode_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(form: LoginForm, session: Session = Depends(get_session)):
    email = form.email.strip()
    user = session.exec(select(User).where(User.email == email)).first()
    if user is None:
        folded = session.exec(select(User).where(func.lower(User.email) == email.lower())).all()
        user = folded[0] if len(folded) == 1 else None
    if not user or not user.check_password(form.password) or user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    return TokenResponse(
        access_token=create_access_token(user.id, UserRole(user.role).value),
        refresh_token=create_refresh_token(user.id),
    )


@router.post("/refresh", response_model=TokenResponse)
def refresh(form: RefreshForm, session: Session = Depends(get_session)):
    try:
        payload = decode_token(form.refresh_token, expected_type=REFRESH_TOKEN)
    except TokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    user = session.get(User, int(payload["sub"]))
    if not user or user.status != UserStatus.ACTIVE:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    # Role is re-read so a changed role takes effect on refresh
    return TokenResponse(access_token=create_access_token(user.id, UserRole(user.role).value))
