import asyncio
import logging
import mimetypes
import uuid

from fastapi import APIRouter, Depends, File, UploadFile

from ..deps import get_current_user, get_object_store
from ..errors import InvalidInput, UpstreamFailure
from ..models import User
from ..schemas import UploadResponse
from ..settings import settings
from ..storage.s3_compat import S3CompatStore

logger = logging.getLogger("fridgechef.upload")

router = APIRouter()


def upload_key(user_id: str, content_type: str) -> str:
    ext = mimetypes.guess_extension(content_type) or ""
    if ext == ".jpe":
        ext = ".jpg"
    return f"uploads/{user_id}/{uuid.uuid4()}{ext}"


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    user: User = Depends(get_current_user),
    file: UploadFile = File(...),
    store: S3CompatStore = Depends(get_object_store),
):
    """Store a fridge photo in the bucket and return its public URL."""
    content_type = (file.content_type or "").lower()
    if content_type not in settings.allowed_upload_types:
        raise InvalidInput(f"Unsupported file type: {content_type or 'unknown'}")

    # read one byte past the limit so oversize files are detected without buffering them whole
    data = await file.read(settings.max_upload_bytes + 1)
    if not data:
        raise InvalidInput("Uploaded file is empty")
    if len(data) > settings.max_upload_bytes:
        raise InvalidInput(f"File exceeds {settings.max_upload_bytes} bytes")

    try:
        result = await asyncio.to_thread(
            store.put_bytes,
            key=upload_key(user.id, content_type),
            content_type=content_type,
            data=data,
        )
    except Exception as e:
        logger.error(f"Upload failed for user {user.id}: {e}")
        raise UpstreamFailure("Failed to upload image")

    return UploadResponse(url=result.public_url)
