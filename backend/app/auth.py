"""
Optional session tokens and mailbox access checks.

By default the service keeps the legacy contract: login returns the user's
email and every later request is trusted to name its own user. Setting
WEBMAIL_JWT_SECRET switches on token mode:

- login also returns an HS256 JWT (python-jose) whose ``sub`` is the email;
- folder listings and delete/restore routes require ``Authorization: Bearer``
  and may only touch the token owner's mailbox and messages.
"""

import logging
import os
import time
from typing import Optional

from fastapi import Header
from jose import ExpiredSignatureError, JWTError, jwt

from app.errors import AuthError, ForbiddenError
from app.models.email import Email

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL_SECONDS = 86400


def _jwt_secret() -> Optional[str]:
    return os.environ.get("WEBMAIL_JWT_SECRET") or None


def _token_ttl() -> int:
    return int(os.environ.get("WEBMAIL_TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS))


def token_mode_enabled() -> bool:
    return _jwt_secret() is not None


def issue_token(email: str) -> Optional[str]:
    """
    Create a session token for ``email``.

    Returns None when token mode is off.
    """
    secret = _jwt_secret()
    if not secret:
        return None

    now = int(time.time())
    claims = {"sub": email, "iat": now, "exp": now + _token_ttl()}
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


async def get_session_user(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """
    Resolve the caller's identity from the Authorization header.

    Args:
        authorization: Authorization header with format "Bearer <token>"

    Returns:
        The token subject (an email) in token mode, None otherwise.

    Raises:
        AuthError: in token mode, if the header is missing or the token is
            malformed, wrongly signed or expired
    """
    if not token_mode_enabled():
        return None

    if not authorization:
        raise AuthError("Not authenticated")

    # Extract token from "Bearer <token>" format
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise AuthError("Not authenticated")

    return _verify_token(parts[1])


def _verify_token(token: str) -> str:
    try:
        payload = jwt.decode(token, _jwt_secret(), algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError("Token expired")
    except JWTError:
        raise AuthError("Invalid token")

    email: Optional[str] = payload.get("sub")
    if not email:
        raise AuthError("Invalid token")

    return email


def verify_mailbox_access(user: str, session_user: Optional[str]) -> None:
    """
    Check that the caller may act on ``user``'s mailbox.

    A None session_user means token mode is off and the caller is trusted.

    Raises:
        ForbiddenError: if the token belongs to someone else
    """
    if session_user is not None and session_user != user:
        logger.warning(f"{session_user} tried to access mailbox of {user}")
        raise ForbiddenError("You are not authorized to access this mailbox")


def verify_email_access(email: Email, session_user: Optional[str]) -> None:
    """
    Check that the caller sent or received ``email``.

    Raises:
        ForbiddenError: if the token owner is neither sender nor recipient
    """
    if session_user is not None and not email.involves(session_user):
        logger.warning(f"{session_user} tried to access email {email.id}")
        raise ForbiddenError("You are not authorized to access this email")
