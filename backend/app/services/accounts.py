"""
Account registration and login against the flat-file user store.

Passwords are stored and compared as plaintext, the same format existing
users.json files hold.
"""

import logging
from typing import Optional

from app.errors import AuthError, ConflictError, ValidationError
from app.models.user import User
from app.services.user_store import append_user, find_user, load_users

logger = logging.getLogger(__name__)


def register(email: Optional[str], password: Optional[str]) -> User:
    """
    Create a new account.

    Raises:
        ValidationError: if email or password is missing or empty
        ConflictError: if the email is already registered
    """
    if not email or not password:
        raise ValidationError("Missing fields")

    if find_user(email) is not None:
        logger.info(f"Registration rejected, already registered: {email}")
        raise ConflictError("Email already registered")

    user = User(email=email, password=password)
    append_user(user)
    logger.info(f"Registered user {email}")
    return user


def login(email: Optional[str], password: Optional[str]) -> str:
    """
    Check credentials and return the matched email as the session identity.

    Raises:
        AuthError: unless a stored record matches both fields exactly
    """
    for user in load_users():
        if user.email == email and user.password == password:
            return user.email

    logger.info(f"Failed login for {email!r}")
    raise AuthError("Invalid email or password")
