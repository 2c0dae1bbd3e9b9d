"""
Pydantic models for stored email messages.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class Folder(str, Enum):
    INBOX = "inbox"
    OUTBOX = "outbox"
    TRASH = "trash"


class AttachmentUpload(BaseModel):
    """A file part received with a send request, already read to raw bytes."""

    filename: Optional[str] = None
    content: bytes


class Attachment(BaseModel):
    """Reference to an uploaded file, retrievable at ``path``."""
    filename: str   # original name as uploaded
    path: str       # e.g. "/attachments/3f2a...-report.pdf"


class Email(BaseModel):
    """
    A single stored message.

    The sender is serialized under the JSON key ``from``; since that is a
    Python keyword the attribute is called ``sender``.
    """
    id: str
    sender: str = Field(alias="from")
    to: str
    subject: str
    body: str
    date: datetime
    attachments: List[Attachment] = Field(default_factory=list)
    read: bool = False
    deleted: bool = False

    class Config:
        populate_by_name = True

    @field_validator("date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Records without a UTC offset were written in UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def in_folder(self, folder: Folder, user: str) -> bool:
        """Return True if this message shows up in ``user``'s ``folder``."""
        if folder == Folder.INBOX:
            return self.to == user and not self.deleted
        if folder == Folder.OUTBOX:
            return self.sender == user and not self.deleted
        return self.deleted and (self.to == user or self.sender == user)

    def involves(self, user: str) -> bool:
        """True if ``user`` sent or received this message."""
        return self.sender == user or self.to == user


class SuccessResponse(BaseModel):
    success: bool = True
