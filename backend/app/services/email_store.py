"""
Email store: one JSON file per message, named <id>.json.

No locking; concurrent writers to the same record are last-write-wins.
"""

import json
import logging
import re
from pathlib import Path
from typing import List, Optional

from app import db
from app.models.email import Email

logger = logging.getLogger(__name__)

# Ids come straight from URL path segments; anything else could escape EMAILS_DIR.
_SAFE_ID = re.compile(r"^[\w\-]+$")


def _record_path(email_id: str) -> Optional[Path]:
    if not email_id or not _SAFE_ID.match(email_id):
        return None
    return db.EMAILS_DIR / f"{email_id}.json"


def _read_record(path: Path) -> Email:
    return Email.model_validate(json.loads(path.read_text()))


def save_email(email: Email) -> None:
    """Create or overwrite the record file for ``email``."""
    path = _record_path(email.id)
    if path is None:
        raise ValueError(f"Unsafe email id: {email.id!r}")

    db.EMAILS_DIR.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(email.model_dump(mode="json", by_alias=True), indent=2)
    )


def load_all_emails() -> List[Email]:
    """
    Read every stored record.

    Files are visited in sorted name order so callers get a stable
    enumeration. This is a full scan on every call.
    """
    if not db.EMAILS_DIR.exists():
        return []
    return [_read_record(path) for path in sorted(db.EMAILS_DIR.glob("*.json"))]


def load_email(email_id: str) -> Optional[Email]:
    """Return the record with ``email_id``, or None if there is none."""
    path = _record_path(email_id)
    if path is None or not path.exists():
        return None
    return _read_record(path)


def delete_email(email_id: str) -> bool:
    """
    Remove the record file.

    Returns:
        True if a record was removed, False if none existed.
    """
    path = _record_path(email_id)
    if path is None or not path.exists():
        return False
    path.unlink()
    return True
