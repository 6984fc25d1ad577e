"""
uploads.py — Validation and storage of uploaded images and certificates.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Optional

from fastapi import UploadFile
from werkzeug.utils import secure_filename

from errors import UploadRejected
from utils import generate_id, logger


@dataclass(frozen=True)
class UploadPolicy:
    subdir: str
    max_bytes: int
    allowed_types: FrozenSet[str]
    type_error: str


IMAGE_POLICY = UploadPolicy(
    subdir="images",
    max_bytes=5 * 1024 * 1024,
    allowed_types=frozenset({"image/jpeg", "image/png", "image/gif"}),
    type_error="Invalid file type",
)

CERTIFICATE_POLICY = UploadPolicy(
    subdir="certificates",
    max_bytes=10 * 1024 * 1024,
    allowed_types=frozenset({"application/pdf", "image/jpeg", "image/png", "image/gif"}),
    type_error="Invalid file type. Only PDF and image files are allowed.",
)


@dataclass
class PendingUpload:
    """An accepted upload held in memory until the record change is known to succeed."""

    policy: UploadPolicy
    filename: str
    content: bytes

    @property
    def web_path(self) -> str:
        return f"/assets/{self.policy.subdir}/{self.filename}"

    def save(self, public_dir) -> str:
        target = Path(public_dir) / "assets" / self.policy.subdir / self.filename
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as buffer:
            buffer.write(self.content)
        logger.info("File saved: %s", target)
        return self.web_path


def accept_upload(file: Optional[UploadFile], policy: UploadPolicy) -> Optional[PendingUpload]:
    """
    Validate mime type and size. Returns None when no file was sent and raises
    UploadRejected before anything touches disk or the record store.
    """
    if file is None or not file.filename:
        return None
    if file.content_type not in policy.allowed_types:
        logger.warning("Rejected upload %s with type %s", file.filename, file.content_type)
        raise UploadRejected(policy.type_error)

    content = file.file.read(policy.max_bytes + 1)
    if len(content) > policy.max_bytes:
        logger.warning("Rejected upload %s: larger than %d bytes", file.filename, policy.max_bytes)
        raise UploadRejected("File too large")

    stored_name = f"{generate_id()}-{secure_filename(file.filename) or 'upload'}"
    return PendingUpload(policy=policy, filename=stored_name, content=content)


def remove_asset(public_dir, web_path: Optional[str]) -> None:
    """Delete a previously stored asset; a missing file is only logged."""
    if not web_path or not web_path.startswith("/assets/"):
        return
    root = Path(public_dir).resolve()
    target = (root / web_path.lstrip("/")).resolve()
    if root not in target.parents:
        logger.warning("Refusing to delete asset outside public dir: %s", web_path)
        return
    try:
        target.unlink()
        logger.info("Deleted asset: %s", target)
    except FileNotFoundError:
        logger.warning("Asset not found, skipping delete: %s", target)
    except OSError as e:
        logger.error("Error deleting asset %s: %s", target, e)
