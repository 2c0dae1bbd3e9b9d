"""
Attachment storage on the local filesystem.
Handles saving uploaded parts, resolving download paths, and reclaiming
files that no stored email references any more.
"""

import logging
import re
from pathlib import Path
from typing import List
from uuid import uuid4

from app import db
from app.errors import NotFoundError
from app.models.email import Attachment
from app.services.email_store import load_all_emails

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/attachments/"

_SAFE_NAME = re.compile(r"^[\w\-.]+$")


def sanitize_filename(filename: str | None) -> str:
    """Replace spaces and special chars with underscores."""
    if not filename:
        return "attachment"
    return re.sub(r'[^\w\-.]', '_', filename)


def save_attachment(content: bytes, filename: str | None = None) -> Attachment:
    """
    Write an uploaded file under the attachments directory.

    Stored name: {uuid}-{sanitized_filename}. The random prefix keeps two
    uploads with the same name from overwriting each other.

    Args:
        content: Raw bytes of the uploaded part
        filename: Name the client gave the part (may be None)

    Returns:
        Attachment with the original filename and its public path
        (e.g. "/attachments/9c1d...-report.pdf")
    """
    stored_name = f"{uuid4().hex}-{sanitize_filename(filename)}"

    db.ATTACHMENTS_DIR.mkdir(parents=True, exist_ok=True)
    (db.ATTACHMENTS_DIR / stored_name).write_bytes(content)

    logger.info(f"Stored attachment {stored_name} ({len(content)} bytes)")
    return Attachment(
        filename=filename or "attachment",
        path=PUBLIC_PREFIX + stored_name,
    )


def stored_name_from_path(path: str) -> str:
    """Extract the stored file name from a public path like /attachments/<name>."""
    if path.startswith(PUBLIC_PREFIX):
        return path[len(PUBLIC_PREFIX):]
    return Path(path).name


def resolve_attachment(stored_name: str) -> Path:
    """
    Map a stored name to its file on disk.

    Raises:
        NotFoundError: if the name is not a plain file name or no such file exists
    """
    if not _SAFE_NAME.match(stored_name or "") or stored_name in (".", ".."):
        raise NotFoundError("Attachment not found")

    file_path = db.ATTACHMENTS_DIR / stored_name
    if not file_path.is_file():
        raise NotFoundError("Attachment not found")
    return file_path


def find_orphaned_attachments() -> List[str]:
    """
    Return stored attachment names that no email record references.

    Permanent deletion leaves attachment files behind; this is how they are
    found again.
    """
    if not db.ATTACHMENTS_DIR.exists():
        return []

    referenced = {
        stored_name_from_path(attachment.path)
        for email in load_all_emails()
        for attachment in email.attachments
    }
    return sorted(
        p.name for p in db.ATTACHMENTS_DIR.iterdir()
        if p.is_file() and p.name not in referenced
    )


def purge_orphaned_attachments(dry_run: bool = False) -> List[str]:
    """
    Delete every orphaned attachment file.

    Args:
        dry_run: Only report what would be deleted

    Returns:
        Names of the orphaned files (deleted unless dry_run)
    """
    orphans = find_orphaned_attachments()
    if dry_run:
        return orphans

    for name in orphans:
        (db.ATTACHMENTS_DIR / name).unlink(missing_ok=True)

    if orphans:
        logger.info(f"Purged {len(orphans)} orphaned attachment(s)")
    return orphans
