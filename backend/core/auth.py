import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi_users.jwt import decode_jwt, generate_jwt
from fastapi_users.password import PasswordHelper
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.errors import AuthError, ForbiddenError, NotFoundError, StorageError, ValidationError
from db.users import User

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
TOKEN_AUDIENCE = ["egg-ledger:auth"]

password_helper = PasswordHelper()
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity carried by the bearer token."""
    id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def _secret() -> str:
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET is not configured")
    return settings.jwt_secret


def issue_token(user: User) -> str:
    data = {
        "sub": str(user.id),
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "aud": TOKEN_AUDIENCE,
    }
    return generate_jwt(data, _secret(), settings.jwt_lifetime_seconds)


def verify_token(token: str) -> CurrentUser:
    try:
        payload = decode_jwt(token, _secret(), TOKEN_AUDIENCE)
        return CurrentUser(
            id=int(payload["id"]),
            username=str(payload["username"]),
            role=str(payload.get("role") or ""),
        )
    except (jwt.PyJWTError, KeyError, TypeError, ValueError):
        raise AuthError("Token invalid")


async def register_user(
    db: AsyncSession, username: Optional[str], password: Optional[str], role: Optional[str] = None
) -> User:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("username and password required")

    user = User(
        username=username,
        hashed_password=password_helper.hash(password),
        role=(role or "").strip() or settings.default_role,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("username already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("[auth] register failed")
        raise StorageError(f"Failed to register user: {e}") from e

    logger.info("Registered user %s (%s)", user.username, user.role)
    return user


async def authenticate(db: AsyncSession, username: Optional[str], password: Optional[str]) -> str:
    """Check credentials and return a fresh bearer token."""
    if not username or not password:
        raise ValidationError("username and password required")

    try:
        res = await db.execute(select(User).where(User.username == username.strip()))
    except SQLAlchemyError as e:
        logger.exception("[auth] user lookup failed")
        raise StorageError(f"Failed to look up user: {e}") from e
    user = res.scalar_one_or_none()
    if user is None:
        raise NotFoundError("user not found")

    verified, updated_hash = password_helper.verify_and_update(password, user.hashed_password)
    if not verified:
        raise ValidationError("invalid credentials")
    if updated_hash is not None:
        user.hashed_password = updated_hash
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("[auth] password rehash failed")
            raise StorageError(f"Failed to update password hash: {e}") from e

    return issue_token(user)


async def current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None:
        # A header that is present but not "Bearer <token>" counts as a bad token.
        if request.headers.get("Authorization"):
            raise AuthError("Token invalid")
        raise AuthError("No token")
    return verify_token(credentials.credentials)


async def current_admin(user: CurrentUser = Depends(current_user)) -> CurrentUser:
    if not user.is_admin:
        raise ForbiddenError("forbidden")
    return user
