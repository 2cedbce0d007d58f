from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Header
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rehearsal.config import settings
from rehearsal.db.models import User
from rehearsal.db.session import get_db
from rehearsal.utils.errors import AuthenticationError, ConfigurationError, ConflictError

DEV_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
DEV_USER_EMAIL = "rehearsal@dev.local"
DEV_USER_NAME = "Dev Rehearser"
JWT_ALGORITHM = "HS256"
JWT_ISSUER = "the-rehearsal-ai"
JWT_AUDIENCE = "rehearsal-users"


class CurrentUser(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    role: str = "user"


def _secret() -> str:
    return str(settings.jwt_secret or "").strip()


def create_access_token(user_id: uuid.UUID | str, email: str, name: str = "", role: str = "user") -> str:
    secret = _secret()
    if not secret:
        raise ConfigurationError("JWT secret not configured")
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "role": role,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.jwt_exp_minutes)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def _decode(token: str, secret: str) -> dict:
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except ExpiredSignatureError as exc:
        raise AuthenticationError("Access token expired", code="TOKEN_EXPIRED") from exc
    except JWTError as exc:
        raise AuthenticationError("Invalid access token", code="INVALID_TOKEN") from exc


def _upsert_user(db: Session, *, user_id: uuid.UUID, email: str, name: str, role: str) -> User:
    user = db.get(User, user_id)
    if user is not None:
        return user

    email = email or f"{user_id}@rehearsal.local"
    owner = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if owner is not None:
        if owner.id == user_id:
            return owner
        raise ConflictError("Email is already linked to another account", code="EMAIL_IN_USE")

    user = User(id=user_id, email=email, display_name=name, role=role)
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # a concurrent first request inserted the same subject or email
        db.rollback()
        user = db.get(User, user_id)
        if user is None:
            raise ConflictError("Email is already linked to another account", code="EMAIL_IN_USE") from None
    return user


def _bearer_token(authorization: str | None) -> str:
    raw = str(authorization or "").strip()
    if not raw.lower().startswith("bearer "):
        return ""
    return raw.split(" ", 1)[1].strip()


def get_current_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> CurrentUser:
    secret = _secret()
    if not secret:
        if settings.env != "dev":
            raise ConfigurationError("JWT secret not configured")
        user = _upsert_user(db, user_id=DEV_USER_ID, email=DEV_USER_EMAIL, name=DEV_USER_NAME, role="user")
        db.commit()
        return CurrentUser(id=user.id, email=user.email, name=user.display_name, role=user.role)

    token = _bearer_token(authorization)
    if not token:
        raise AuthenticationError("Access token required", code="UNAUTHORIZED")

    claims = _decode(token, secret)
    try:
        user_id = uuid.UUID(str(claims.get("sub") or ""))
    except ValueError as exc:
        raise AuthenticationError("Invalid access token", code="INVALID_TOKEN") from exc

    user = _upsert_user(
        db,
        user_id=user_id,
        email=str(claims.get("email") or ""),
        name=str(claims.get("name") or ""),
        role=str(claims.get("role") or "user"),
    )
    db.commit()
    return CurrentUser(id=user.id, email=user.email, name=user.display_name, role=user.role)
