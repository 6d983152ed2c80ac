from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import func
from knowledge_base.db.session import get_db
from knowledge_base.core.config import settings
from knowledge_base.core.response import ok
from knowledge_base.core.errors import auth_invalid_credentials
from knowledge_base.core.security import create_access_token, verify_password
from knowledge_base.schemas.auth import LoginIn, TokenOut
from knowledge_base.api.deps import get_optional_user
from knowledge_base.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


def user_out(u: User) -> dict:
    return {"id": u.id, "username": u.username, "email": u.email, "role": u.role}


@router.post("/login")
def login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    u = (
        db.query(User)
        .filter(func.lower(User.username) == payload.username.lower(), User.is_active == True)  # noqa: E712
        .first()
    )
    if not u or not verify_password(payload.password, u.password_hash):
        raise auth_invalid_credentials()
    u.last_login_at = datetime.now(timezone.utc)
    db.commit()
    token = create_access_token(u.id, u.username, u.role)
    out = TokenOut(token=token, expires_in=settings.ACCESS_TOKEN_EXPIRES_SECONDS, user=user_out(u))
    return ok(request, out.model_dump())


@router.get("/me")
def me(request: Request, user: User | None = Depends(get_optional_user)):
    return ok(request, {"user": user_out(user) if user else None})
