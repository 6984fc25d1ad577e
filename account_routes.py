"""
account_routes.py — Login, password reset, and account self-service routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

import password_reset
from auth import get_current_user, hash_password, login
from config import Config
from database import get_db
from deps import get_config, get_mailer
from errors import UpstreamFailure, ValidationFailure
from mailer import DEFAULT_RESET_TEMPLATE, Mailer, resolve_reset_template
from models import DEFAULT_USER_SETTINGS, User
from schemas import EmailTemplate, LoginRequest, PasswordResetConfirm, PasswordResetRequest, ThemeUpdate, Token
from uploads import IMAGE_POLICY, accept_upload, remove_asset
from utils import logger, now_iso

router = APIRouter()


def user_payload(user: User, include_templates: bool = True) -> dict:
    """Account fields safe to send to the dashboard (never the password hash)."""
    data = {
        "_id": str(user.id),
        "username": user.username,
        "email": user.email,
        "avatar": user.avatar,
        "settings": user.settings or dict(DEFAULT_USER_SETTINGS),
    }
    if include_templates:
        data["emailTemplates"] = user.email_templates
    return data


# ── Login ─────────────────────────────────────────────

@router.post("/login", response_model=Token)
def login_route(payload: LoginRequest, db: Session = Depends(get_db), config: Config = Depends(get_config)):
    """Authenticate and return a signed session token."""
    logger.info("Login attempt for username: %s", payload.username)
    if not payload.username or not payload.password:
        raise ValidationFailure("Username and password are required")
    return {"token": login(db, config, payload.username, payload.password)}


# ── Password reset ────────────────────────────────────

@router.post("/auth/request-password-reset")
def request_password_reset(
    payload: PasswordResetRequest,
    db: Session = Depends(get_db),
    config: Config = Depends(get_config),
    mailer: Mailer = Depends(get_mailer),
):
    try:
        password_reset.request_password_reset(db, config, mailer, payload.email)
    except UpstreamFailure:
        raise UpstreamFailure("Could not send password reset email.")
    return {"message": "If your email is registered, you will receive a password reset link shortly."}


@router.post("/auth/reset-password")
def reset_password(payload: PasswordResetConfirm, db: Session = Depends(get_db)):
    password_reset.reset_password(db, payload.token, payload.password)
    return {"message": "Password has been reset successfully."}


# ── Settings ──────────────────────────────────────────

@router.get("/user/settings")
def get_settings(user: User = Depends(get_current_user)):
    return user_payload(user)


@router.put("/user/settings")
def update_settings(
    username: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    theme: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    removeAvatar: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    config: Config = Depends(get_config),
):
    upload = accept_upload(avatar, IMAGE_POLICY)

    if username and username.strip():
        new_username = username.strip()
        taken = db.query(User).filter(User.username == new_username, User.id != user.id).first()
        if taken:
            raise ValidationFailure("Username is already taken")
        user.username = new_username
    if email and email.strip():
        new_email = email.strip().lower()
        taken = db.query(User).filter(User.email == new_email, User.id != user.id).first()
        if taken:
            raise ValidationFailure("Email is already registered")
        user.email = new_email
    if theme:
        user.settings = {**(user.settings or {}), "theme": theme}
    if password and password.strip():
        user.hashed_password = hash_password(password.strip())

    old_avatar = user.avatar
    if upload:
        user.avatar = upload.save(config.PUBLIC_DIR)
    elif removeAvatar == "true":
        user.avatar = None

    db.commit()
    db.refresh(user)
    if old_avatar and old_avatar != user.avatar:
        remove_asset(config.PUBLIC_DIR, old_avatar)

    logger.info("Settings updated for user: %s", user.username)
    return {"message": "Settings updated successfully", "user": user_payload(user, include_templates=False)}


@router.put("/user/theme")
def update_theme(payload: ThemeUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not payload.theme:
        raise ValidationFailure("Theme preference is required")
    user.settings = {**(user.settings or {}), "theme": payload.theme, "lastUpdated": now_iso()}
    db.commit()
    return {"theme": payload.theme}


# ── Email templates ───────────────────────────────────

@router.get("/email-templates/password-reset")
def get_reset_template(user: User = Depends(get_current_user)):
    stored = (user.email_templates or {}).get("passwordReset")
    return stored or dict(DEFAULT_RESET_TEMPLATE)


@router.put("/email-templates/password-reset")
def update_reset_template(
    payload: EmailTemplate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    template = resolve_reset_template(payload.model_dump())
    user.email_templates = {**(user.email_templates or {}), "passwordReset": template}
    db.commit()
    logger.info("Password reset template updated for user: %s", user.username)
    return template
