"""
User store backed by a single JSON array in users.json.
"""

import json
import logging
from typing import List, Optional

from app import db
from app.models.user import User

logger = logging.getLogger(__name__)


def load_users() -> List[User]:
    """Return every stored user, or an empty list if the store is missing."""
    if not db.USERS_FILE.exists():
        return []
    raw = json.loads(db.USERS_FILE.read_text() or "[]")
    return [User(**row) for row in raw]


def save_users(users: List[User]) -> None:
    db.USERS_FILE.parent.mkdir(parents=True, exist_ok=True)
    db.USERS_FILE.write_text(
        json.dumps([u.model_dump() for u in users], indent=2)
    )


def find_user(email: str) -> Optional[User]:
    """Look up a user by exact email match."""
    for user in load_users():
        if user.email == email:
            return user
    return None


def append_user(user: User) -> None:
    """
    Append a user record to the collection.

    Uniqueness is the caller's responsibility (see accounts.register).
    """
    users = load_users()
    users.append(user)
    save_users(users)
    logger.debug(f"User store now holds {len(users)} record(s)")
