"""
auth.py — JWT session tokens, password hashing, and the request guards.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from config import Config
from database import get_db
from errors import Forbidden, InvalidCredentials, NotFound, Unauthenticated
from models import DEFAULT_USER_SETTINGS, User
from utils import logger

# ── Password hashing ─────────────────────────────────

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


# ── JWT helpers ───────────────────────────────────────

def create_access_token(config: Config, data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed session token with an optional custom expiry."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta is not None else timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(config: Config, token: str) -> dict:
    """Verify signature and expiry; raise Forbidden on any failure."""
    try:
        return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning("JWT decode failed: %s", e)
        raise Forbidden()


def login(db: Session, config: Config, username: str, password: str) -> str:
    """Check credentials and return a fresh session token."""
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        logger.warning("Failed login, unknown username: %s", username)
        raise InvalidCredentials(InvalidCredentials.USERNAME_NOT_FOUND)
    if not verify_password(password, user.hashed_password):
        logger.warning("Failed login, wrong password for: %s", username)
        raise InvalidCredentials(InvalidCredentials.INCORRECT_PASSWORD)

    token = create_access_token(config, {"userId": str(user.id), "username": user.username})
    logger.info("Token issued for user: %s", user.username)
    return token


def seed_default_user(db: Session, config: Config) -> Optional[User]:
    """Create the configured admin account when no account exists yet."""
    if db.query(User).count() > 0:
        return None
    user = User(
        username=config.ADMIN_USERNAME,
        email=config.ADMIN_EMAIL.strip().lower(),
        hashed_password=hash_password(config.ADMIN_PASSWORD),
        settings=dict(DEFAULT_USER_SETTINGS),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Default user created: %s", user.username)
    return user


# ── Request guards ────────────────────────────────────

def get_token_payload(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    """Require a valid bearer token; 401 when absent, 403 when bad or expired."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return decode_access_token(request.app.state.config, credentials.credentials)


def get_current_user(
    payload: dict = Depends(get_token_payload),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the token's account, or raise 403/404."""
    user_id = payload.get("userId")
    if not user_id:
        logger.warning("Token payload missing userId: %s", payload)
        raise Forbidden("Invalid token payload: User ID missing.")
    try:
        user = db.get(User, int(user_id))
    except (TypeError, ValueError):
        raise Forbidden("Invalid user ID format in token.")
    if user is None:
        logger.error("User not found in database for ID: %s", user_id)
        raise NotFound("User not found")
    return user
