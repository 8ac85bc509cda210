from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..schemas.auth import LoginIn, RegisterIn, TokenOut
from ..schemas.user import UserOut
from ..core.errors import Forbidden, Unauthorized, ValidationError
from ..core.permissions import USER_ROLE
from ..core.security import hash_password, verify_password, create_access_token
from ..models.user import User
from ..db import get_session

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: RegisterIn, session: Session = Depends(get_session)):
    email = payload.email.lower()
    if session.scalar(select(User.id).where(User.email == email)):
        raise ValidationError("Email is already registered.")
    user = User(
        name=payload.name,
        email=email,
        password_hash=hash_password(payload.password),
        role=USER_ROLE,
        is_active=True,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user

@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, session: Session = Depends(get_session)):
    user = session.scalar(select(User).where(User.email == payload.email.lower()))
    if not user or not verify_password(payload.password, user.password_hash):
        raise Unauthorized("Invalid credentials.")
    if not user.is_active:
        raise Forbidden("Account is disabled.")
    return TokenOut(access_token=create_access_token(str(user.id)))
