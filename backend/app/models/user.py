"""
Pydantic models for user accounts.
"""

from typing import Optional
from pydantic import BaseModel


class Credentials(BaseModel):
    """
    Request body for POST /register and POST /login.

    Both fields are optional at the schema level so that a missing field is
    reported as ``{"error": "Missing fields"}`` by the account service rather
    than as a framework validation error.
    """
    email: Optional[str] = None
    password: Optional[str] = None


class User(BaseModel):
    """Stored user record. The password is kept as entered."""
    email: str
    password: str


class LoginResponse(BaseModel):
    success: bool = True
    email: str
    token: Optional[str] = None  # only issued when WEBMAIL_JWT_SECRET is set
