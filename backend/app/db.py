"""
Flat-file storage configuration.
Users live in a single JSON collection, emails one JSON file per message,
uploaded attachments as raw files.
"""

import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.getenv("WEBMAIL_DATA_DIR", "data")).resolve()

USERS_FILE = DATA_DIR / "users.json"
EMAILS_DIR = DATA_DIR / "emails"
ATTACHMENTS_DIR = DATA_DIR / "attachments"


def configure(data_dir) -> None:
    """
    Point the store at another data directory.

    Stores read these module attributes at call time, so this takes effect
    for every later operation.
    """
    global DATA_DIR, USERS_FILE, EMAILS_DIR, ATTACHMENTS_DIR

    DATA_DIR = Path(data_dir).resolve()
    USERS_FILE = DATA_DIR / "users.json"
    EMAILS_DIR = DATA_DIR / "emails"
    ATTACHMENTS_DIR = DATA_DIR / "attachments"


def ensure_storage() -> None:
    """
    Create the data directory layout if it does not exist yet.

    Safe to call repeatedly; an existing users.json is never overwritten.
    """
    EMAILS_DIR.mkdir(parents=True, exist_ok=True)
    ATTACHMENTS_DIR.mkdir(parents=True, exist_ok=True)

    if not USERS_FILE.exists():
        USERS_FILE.write_text(json.dumps([]))
        logger.info(f"Created empty user store at {USERS_FILE}")
