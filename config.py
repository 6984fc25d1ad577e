"""
config.py — Environment-driven settings, resolved once at process start.
"""

import os

from dotenv import load_dotenv

# Pull variables from a local .env file, if present
load_dotenv()

DEFAULT_SECRET = "dev-secret-change-me"


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """All tunables for the service. Keyword overrides win over the environment."""

    def __init__(self, **overrides):
        self.JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", DEFAULT_SECRET)
        self.JWT_ALGORITHM = "HS256"
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60))
        self.RESET_TOKEN_EXPIRE_MINUTES = int(os.environ.get("RESET_TOKEN_EXPIRE_MINUTES", 60))

        self.DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./portfolio.db")
        self.DATA_DIR = os.environ.get("DATA_DIR", os.path.join(os.getcwd(), "data"))
        self.PUBLIC_DIR = os.environ.get("PUBLIC_DIR", os.path.join(os.getcwd(), "public"))
        self.PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:3001")

        # First-boot account, only used while the account table is empty
        self.ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
        self.ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin123")
        self.ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@example.com")

        self.SMTP_HOST = os.environ.get("SMTP_HOST", "")
        self.SMTP_PORT = int(os.environ.get("SMTP_PORT", 587))
        self.SMTP_USERNAME = os.environ.get("SMTP_USERNAME", "")
        self.SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
        self.SMTP_USE_TLS = _env_bool("SMTP_USE_TLS", True)
        self.MAIL_FROM = os.environ.get("MAIL_FROM", '"Portfolio Dashboard" <noreply@portfolio-dashboard.com>')
        self.NOTIFY_EMAIL = os.environ.get("NOTIFY_EMAIL", self.SMTP_USERNAME)

        self.CONTACT_RATE_LIMIT = int(os.environ.get("CONTACT_RATE_LIMIT", 5))
        self.CONTACT_RATE_WINDOW_SECONDS = int(os.environ.get("CONTACT_RATE_WINDOW_SECONDS", 15 * 60))

        self.MESSAGE_ARCHIVE_DAYS = int(os.environ.get("MESSAGE_ARCHIVE_DAYS", 30))
        self.SCHEDULER_ENABLED = _env_bool("SCHEDULER_ENABLED", True)

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown config key: {key}")
            setattr(self, key, value)

    @property
    def uses_default_secret(self) -> bool:
        return self.JWT_SECRET_KEY == DEFAULT_SECRET
