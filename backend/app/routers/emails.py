"""
Mailbox API endpoints: send, folder listings, trash lifecycle.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.auth import get_session_user, verify_email_access, verify_mailbox_access
from app.models.email import AttachmentUpload, Email, Folder, SuccessResponse
from app.services import mailbox

router = APIRouter()


async def _read_uploads(files: Optional[List[UploadFile]]) -> List[AttachmentUpload]:
    """Read multipart file parts, skipping empty ones from blank file inputs."""
    uploads: List[AttachmentUpload] = []
    for file in files or []:
        content = await file.read()
        if not file.filename and not content:
            continue
        uploads.append(
            AttachmentUpload(
                filename=file.filename,
                content=content,
            )
        )
    return uploads


@router.post(
    "/send",
    response_model=SuccessResponse,
    responses={400: {"description": "Missing fields"}},
)
async def send(
    sender: Optional[str] = Form(None, alias="from"),
    to: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    body: Optional[str] = Form(None),
    attachments: Optional[List[UploadFile]] = File(None),
):
    """
    Send a message. Multipart form with ``from``, ``to``, ``subject``,
    ``body`` and any number of file parts named ``attachments``.
    """
    uploads = await _read_uploads(attachments)
    mailbox.send_email(sender, to, subject, body, uploads)
    return SuccessResponse()


def _list(folder: Folder, user: str, session_user: Optional[str]) -> List[Email]:
    verify_mailbox_access(user, session_user)
    return mailbox.list_folder(folder, user)


@router.get("/inbox/{user}", response_model=List[Email])
async def inbox(user: str, session_user: Optional[str] = Depends(get_session_user)):
    """Messages addressed to ``user`` and not in trash, newest first."""
    return _list(Folder.INBOX, user, session_user)


@router.get("/outbox/{user}", response_model=List[Email])
async def outbox(user: str, session_user: Optional[str] = Depends(get_session_user)):
    """Messages sent by ``user`` and not in trash, newest first."""
    return _list(Folder.OUTBOX, user, session_user)


@router.get("/trash/{user}", response_model=List[Email])
async def trash(user: str, session_user: Optional[str] = Depends(get_session_user)):
    """Soft-deleted messages ``user`` sent or received, newest first."""
    return _list(Folder.TRASH, user, session_user)


def _check_access(email_id: str, user: Optional[str], session_user: Optional[str]) -> None:
    if session_user is None:
        return
    if user is not None:
        verify_mailbox_access(user, session_user)
    verify_email_access(mailbox.get_email(email_id), session_user)


@router.post(
    "/delete/{email_id}/{user}",
    response_model=SuccessResponse,
    responses={404: {"description": "Email not found"}},
)
async def soft_delete(
    email_id: str,
    user: str,
    session_user: Optional[str] = Depends(get_session_user),
):
    """Move a message to trash."""
    _check_access(email_id, user, session_user)
    mailbox.soft_delete(email_id)
    return SuccessResponse()


@router.post(
    "/restore/{email_id}/{user}",
    response_model=SuccessResponse,
    responses={404: {"description": "Email not found"}},
)
async def restore(
    email_id: str,
    user: str,
    session_user: Optional[str] = Depends(get_session_user),
):
    """Take a message back out of trash."""
    _check_access(email_id, user, session_user)
    mailbox.restore(email_id)
    return SuccessResponse()


@router.delete(
    "/permadelete/{email_id}",
    response_model=SuccessResponse,
    responses={404: {"description": "Email not found"}},
)
async def permanent_delete(
    email_id: str,
    session_user: Optional[str] = Depends(get_session_user),
):
    """
    Remove a message for good. Its attachment files stay on disk until
    scripts/purge_orphaned_attachments.py is run.
    """
    _check_access(email_id, None, session_user)
    mailbox.permanent_delete(email_id)
    return SuccessResponse()
