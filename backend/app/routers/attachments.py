"""
Attachment download endpoint.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.services.attachments import resolve_attachment

router = APIRouter()


@router.get("/attachments/{stored_name}", responses={404: {"description": "Attachment not found"}})
async def download_attachment(stored_name: str):
    """Serve an uploaded file by the path recorded in its email."""
    return FileResponse(resolve_attachment(stored_name))
