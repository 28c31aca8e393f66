import mimetypes

from fastapi import APIRouter
from fastapi.responses import FileResponse

from college_events.services.attachment_service import resolve_upload

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.get("/{filename}")
async def serve_upload(filename: str):
    path = resolve_upload(filename)
    media_type, _ = mimetypes.guess_type(path.name)
    return FileResponse(path=str(path), media_type=media_type or "application/octet-stream")
