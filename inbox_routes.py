"""
inbox_routes.py — Contact form, inbox management, and visit/CV counters.
"""

from fastapi import APIRouter, Depends, status

from auth import get_token_payload
from config import Config
from deps import contact_rate_limit, get_config, get_mailer, get_resources
from errors import UpstreamFailure
from mailer import Mailer, render_message_notification
from resources import Resources
from schemas import ContactRequest, MessageCreate
from utils import logger

router = APIRouter()


# ── Public submission ─────────────────────────────────

@router.post("/contact", dependencies=[Depends(contact_rate_limit)])
def send_contact(
    payload: ContactRequest,
    config: Config = Depends(get_config),
    mailer: Mailer = Depends(get_mailer),
):
    """Forward a project inquiry by email; nothing is stored."""
    logger.info("Contact form submission from %s", payload.email)
    try:
        mailer.send(
            config.NOTIFY_EMAIL,
            f"[IMPORTANT] New Project Inquiry from {payload.name}",
            render_message_notification(payload.model_dump()),
        )
    except UpstreamFailure:
        raise UpstreamFailure("Failed to send message. Please try again.")
    return {"message": "Message sent successfully!"}


@router.post("/messages", status_code=status.HTTP_201_CREATED)
def create_message(
    payload: MessageCreate,
    resources: Resources = Depends(get_resources),
    config: Config = Depends(get_config),
    mailer: Mailer = Depends(get_mailer),
):
    """Store the message (newest first), then notify the owner."""
    message = resources.messages.insert({**payload.model_dump(), "read": False}, front=True)
    logger.info("Message stored: %s from %s", message["id"], message["email"])

    try:
        mailer.send(
            config.NOTIFY_EMAIL,
            f"New Portfolio Message from {message['name']}",
            render_message_notification(message),
        )
    except UpstreamFailure:
        logger.error("Message %s saved but notification email failed", message["id"])
        raise UpstreamFailure("Message saved but the notification email could not be sent.", id=message["id"])
    return message


# ── Inbox management ──────────────────────────────────

@router.get("/messages")
def list_messages(resources: Resources = Depends(get_resources), _token: dict = Depends(get_token_payload)):
    return resources.messages_newest_first()


# Registered before /messages/{message_id} so the literal path is not captured as an id
@router.get("/messages/unread-count")
def unread_count(resources: Resources = Depends(get_resources), _token: dict = Depends(get_token_payload)):
    return {"count": resources.unread_count()}


@router.get("/messages/{message_id}")
def get_message(message_id: str, resources: Resources = Depends(get_resources), _token: dict = Depends(get_token_payload)):
    return resources.messages.get(message_id)


@router.put("/messages/{message_id}/read")
def mark_message_read(
    message_id: str,
    resources: Resources = Depends(get_resources),
    _token: dict = Depends(get_token_payload),
):
    return resources.mark_read(message_id)


@router.delete("/messages/{message_id}")
def delete_message(
    message_id: str,
    resources: Resources = Depends(get_resources),
    _token: dict = Depends(get_token_payload),
):
    resources.messages.delete(message_id)
    logger.info("Message deleted: %s", message_id)
    return {"message": "Message deleted successfully"}


# ── Stats ─────────────────────────────────────────────

@router.get("/stats")
def get_stats(resources: Resources = Depends(get_resources), _token: dict = Depends(get_token_payload)):
    return resources.stats_snapshot()


@router.post("/stats/cv-view")
def record_cv_view(resources: Resources = Depends(get_resources)):
    resources.increment_counter("cvViews")
    return {"success": True}


@router.post("/stats/cv-download")
def record_cv_download(resources: Resources = Depends(get_resources)):
    resources.increment_counter("cvDownloads")
    return {"success": True}


@router.post("/stats/visitor")
def record_visitor(resources: Resources = Depends(get_resources)):
    resources.record_visitor()
    return {"success": True}
