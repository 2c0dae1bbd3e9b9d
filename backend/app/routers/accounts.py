"""
Account API endpoints: registration and login.
"""

from typing import Optional

from fastapi import APIRouter

from app.auth import issue_token
from app.models.email import SuccessResponse
from app.models.user import Credentials, LoginResponse
from app.services import accounts

router = APIRouter()


@router.post(
    "/register",
    response_model=SuccessResponse,
    responses={
        400: {"description": "Missing fields or email already registered"},
    },
)
async def register(credentials: Optional[Credentials] = None):
    """
    Create an account from ``{email, password}``.
    """
    credentials = credentials or Credentials()
    accounts.register(credentials.email, credentials.password)
    return SuccessResponse()


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    responses={
        401: {"description": "Invalid email or password"},
    },
)
async def login(credentials: Optional[Credentials] = None):
    """
    Check ``{email, password}`` and return the email as the session identity.

    When WEBMAIL_JWT_SECRET is configured the response also carries a bearer
    ``token`` for the mailbox endpoints.
    """
    credentials = credentials or Credentials()
    email = accounts.login(credentials.email, credentials.password)
    return LoginResponse(email=email, token=issue_token(email))
