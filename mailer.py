"""
mailer.py — Outgoing email: SMTP delivery plus the HTML bodies we send.
"""

import html
import re
import smtplib
from datetime import datetime
from email.message import EmailMessage
from typing import Optional

from config import Config
from errors import UpstreamFailure
from utils import logger

DEFAULT_RESET_TEMPLATE = {
    "subject": "Reset Your Portfolio Password",
    "headerColor": "#111111",
    "buttonColor": "linear-gradient(135deg, #d4af37 0%, #f2d068 100%)",
    "logoUrl": "https://i.imgur.com/yJDxBo7.png",
    "customMessage": (
        "We received a password reset request for your portfolio dashboard account. "
        "To set a new password, simply click the button below:"
    ),
}

_HEX_COLOR = re.compile(r"#[a-fA-F0-9]{6}|#[a-fA-F0-9]{3}")


class Mailer:
    """Thin SMTP sender. With no SMTP host configured, mail is logged and dropped."""

    def __init__(self, config: Config):
        self.config = config

    @property
    def enabled(self) -> bool:
        return bool(self.config.SMTP_HOST)

    def send(self, to: str, subject: str, html_body: str) -> None:
        if not self.enabled:
            logger.info("Email delivery disabled; dropping '%s' to %s", subject, to)
            return

        msg = EmailMessage()
        msg["From"] = self.config.MAIL_FROM
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self.config.SMTP_HOST, self.config.SMTP_PORT, timeout=30) as smtp:
                if self.config.SMTP_USE_TLS:
                    smtp.starttls()
                if self.config.SMTP_USERNAME:
                    smtp.login(self.config.SMTP_USERNAME, self.config.SMTP_PASSWORD)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email '%s' to %s: %s", subject, to, e)
            raise UpstreamFailure()
        logger.info("Email '%s' sent to %s", subject, to)


# ── Bodies ────────────────────────────────────────────

def resolve_reset_template(stored: Optional[dict]) -> dict:
    """Stored template fields, each falling back to its default when blank."""
    stored = stored or {}
    return {key: stored.get(key) or default for key, default in DEFAULT_RESET_TEMPLATE.items()}


def button_colors(button_color: str):
    """First two hex colors of a gradient, or the plain color twice."""
    if "linear-gradient" in button_color:
        matches = _HEX_COLOR.findall(button_color)
        if len(matches) >= 2:
            return matches[0], matches[1]
        return "#d4af37", "#f2d068"
    return button_color, button_color


def render_reset_email(template: dict, reset_url: str) -> str:
    start, end = button_colors(template["buttonColor"])
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta http-equiv="Content-Type" content="text/html; charset=utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(template["subject"])}</title>
</head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f4f5f7; color: #333;">
    <table border="0" cellpadding="0" cellspacing="0" width="100%" style="max-width: 600px; margin: 20px auto; background-color: #ffffff; border-radius: 8px;">
        <tr>
            <td align="center" bgcolor="{html.escape(template["headerColor"])}" style="padding: 30px 0;">
                <img src="{html.escape(template["logoUrl"])}" alt="Portfolio Dashboard" width="64" style="border-radius: 50%;">
                <h2 style="color: {start}; margin: 15px 0; font-size: 24px;">Portfolio Dashboard</h2>
            </td>
        </tr>
        <tr>
            <td style="padding: 40px 30px; text-align: center;">
                <h1 style="color: #222; font-size: 24px; margin: 0 0 25px;">Reset Your Password</h1>
                <p style="font-size: 18px; color: #444; font-weight: bold;">Hello,</p>
                <p style="margin: 25px 0; color: #555; font-size: 16px; line-height: 1.7;">{html.escape(template["customMessage"])}</p>
                <div style="margin: 35px 0;">
                    <a href="{html.escape(reset_url)}" style="background: linear-gradient(135deg, {start} 0%, {end} 100%); background-color: {start}; color: #111; text-decoration: none; padding: 15px 40px; font-weight: bold; font-size: 16px; border-radius: 8px; display: inline-block;">Reset Password</a>
                </div>
                <p style="font-size: 15px; color: #755800;"><strong>Time-Sensitive:</strong> This link will expire in 1 hour for security purposes.</p>
                <p style="font-size: 15px; color: #666;">If you didn't request this reset, please disregard this email.</p>
            </td>
        </tr>
        <tr>
            <td align="center" bgcolor="#f5f5f7" style="padding: 20px; font-size: 13px; color: #666;">
                <p style="margin: 5px 0;">&copy; {datetime.now().year} Portfolio Dashboard</p>
                <p style="margin: 5px 0;">This is an automated message. Please do not reply.</p>
            </td>
        </tr>
    </table>
</body>
</html>
"""


def render_message_notification(message: dict) -> str:
    def field(key, fallback="Not specified"):
        return html.escape(str(message.get(key) or fallback))

    requirements = ", ".join(message.get("requirements") or []) or "Not specified"
    return f"""<h2>New Message Received</h2>
<p><strong>From:</strong> {field("name")} ({field("email")})</p>
<p><strong>Company:</strong> {field("company")}</p>
<p><strong>Project Type:</strong> {field("projectType")}</p>
<p><strong>Timeline:</strong> {field("timeline")}</p>
<p><strong>Priority:</strong> {field("projectPriority")}</p>
<p><strong>Requirements:</strong> {html.escape(requirements)}</p>
<h3>Message:</h3>
<p>{field("message", "")}</p>
"""
