"""
Mailbox operations: sending, folder listings, and the delete/restore lifecycle.

Folders are not stored. Inbox, outbox and trash are computed on every call
by scanning all records (see Email.in_folder), so listing cost grows with the
total number of stored emails.

Lifecycle per email:

    active --soft_delete--> deleted --restore--> active
    active | deleted --permanent_delete--> removed
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from uuid import uuid4

from app.errors import NotFoundError, ValidationError
from app.models.email import AttachmentUpload, Email, Folder
from app.services.attachments import save_attachment
from app.services.email_store import (
    delete_email,
    load_all_emails,
    load_email,
    save_email,
)

logger = logging.getLogger(__name__)


def send_email(
    sender: Optional[str],
    to: Optional[str],
    subject: Optional[str],
    body: Optional[str],
    uploads: Sequence[AttachmentUpload] = (),
) -> Email:
    """
    Store a new message with its attachments.

    Fields are validated before any attachment is written, so a rejected
    send leaves nothing behind.

    Raises:
        ValidationError: if from, to, subject or body is missing or empty
    """
    if not sender or not to or not subject or not body:
        raise ValidationError("Missing fields")

    attachments = [save_attachment(u.content, u.filename) for u in uploads]

    email = Email(
        id=uuid4().hex,
        sender=sender,
        to=to,
        subject=subject,
        body=body,
        date=datetime.now(timezone.utc),
        attachments=attachments,
        read=False,
        deleted=False,
    )
    save_email(email)

    logger.info(
        f"Sent email {email.id} from {sender} to {to} "
        f"with {len(attachments)} attachment(s)"
    )
    return email


def list_folder(folder: Folder, user: str) -> List[Email]:
    """
    Return ``user``'s messages in ``folder``, most recent first.

    sorted() is stable, so messages with equal dates keep the store's
    enumeration order.
    """
    emails = [e for e in load_all_emails() if e.in_folder(folder, user)]
    return sorted(emails, key=lambda e: e.date, reverse=True)


def list_inbox(user: str) -> List[Email]:
    return list_folder(Folder.INBOX, user)


def list_outbox(user: str) -> List[Email]:
    return list_folder(Folder.OUTBOX, user)


def list_trash(user: str) -> List[Email]:
    return list_folder(Folder.TRASH, user)


def get_email(email_id: str) -> Email:
    """
    Fetch a single message.

    Raises:
        NotFoundError: if no message has this id
    """
    email = load_email(email_id)
    if email is None:
        raise NotFoundError("Email not found")
    return email


def _set_deleted(email_id: str, deleted: bool) -> Email:
    email = get_email(email_id)
    email.deleted = deleted
    save_email(email)
    return email


def soft_delete(email_id: str) -> Email:
    """Move a message to trash. Deleting an already-deleted message is a no-op."""
    email = _set_deleted(email_id, True)
    logger.info(f"Moved email {email_id} to trash")
    return email


def restore(email_id: str) -> Email:
    """Take a message back out of trash. Idempotent."""
    email = _set_deleted(email_id, False)
    logger.info(f"Restored email {email_id}")
    return email


def permanent_delete(email_id: str) -> None:
    """
    Remove a message record for good.

    Attachment files are left in place; purge_orphaned_attachments()
    reclaims them.

    Raises:
        NotFoundError: if no message has this id
    """
    if not delete_email(email_id):
        raise NotFoundError("Email not found")
    logger.info(f"Permanently deleted email {email_id}")
