"""
password_reset.py — Reset-token issuance and redemption.

Tokens are random and opaque. Only their SHA-256 digest is stored, so the
emailed link is looked up directly by digest.
"""

import hashlib
import secrets
from datetime import timedelta
from urllib.parse import quote

from sqlalchemy import func
from sqlalchemy.orm import Session

from auth import hash_password
from config import Config
from errors import InvalidOrExpiredToken, NotFound, TokenExpired, ValidationFailure
from mailer import Mailer, render_reset_email, resolve_reset_template
from models import User
from utils import as_utc, logger, utc_now

# token_urlsafe(48) encodes 48 random bytes as exactly 64 characters
TOKEN_BYTES = 48


def digest_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def new_reset_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def request_password_reset(db: Session, config: Config, mailer: Mailer, email: str) -> str:
    """Store a fresh token for the account behind ``email`` and mail the link. Returns the token."""
    email = (email or "").strip()
    if not email:
        raise ValidationFailure("Email is required")

    user = db.query(User).filter(func.lower(User.email) == email.lower()).first()
    if user is None:
        logger.info("Password reset requested for unknown email: %s", email)
        raise NotFound("No account found with this email address.")

    token = new_reset_token()
    user.reset_token_hash = digest_token(token)
    user.reset_token_expires = utc_now() + timedelta(minutes=config.RESET_TOKEN_EXPIRE_MINUTES)
    db.commit()

    reset_url = f"{config.PUBLIC_BASE_URL.rstrip('/')}/reset-password.html?t={quote(token)}"
    template = resolve_reset_template((user.email_templates or {}).get("passwordReset"))
    mailer.send(user.email, template["subject"], render_reset_email(template, reset_url))
    logger.info("Password reset link sent to %s", user.email)
    return token


def reset_password(db: Session, token: str, new_password: str) -> User:
    """Redeem ``token``: set the new password and clear the outstanding token."""
    if not token or not new_password:
        raise ValidationFailure("Token and new password are required")

    user = db.query(User).filter(User.reset_token_hash == digest_token(token)).first()
    if user is None:
        logger.info("No account holds the presented reset token")
        raise InvalidOrExpiredToken()

    expires = as_utc(user.reset_token_expires)
    if expires is None or utc_now() > expires:
        logger.info("Reset token expired for user: %s", user.username)
        raise TokenExpired()

    user.hashed_password = hash_password(new_password)
    user.reset_token_hash = None
    user.reset_token_expires = None
    db.commit()
    logger.info("Password reset for user: %s", user.username)
    return user
