from __future__ import annotations
import io
import secrets
from PIL import Image, UnidentifiedImageError
from memevsmeme.config import settings
from memevsmeme.errors import UploadRejected


ALLOWED_MIME = {"image/jpeg", "image/png", "image/gif"}
EXT_FOR_MIME = {"image/jpeg": "jpg", "image/png": "png", "image/gif": "gif"}
_FORMAT_TO_MIME = {"JPEG": "image/jpeg", "PNG": "image/png", "GIF": "image/gif"}

def sniff_mime(data: bytes) -> str | None:
    # Trust the bytes, not the client-declared content type
    try:
        with Image.open(io.BytesIO(data)) as img:
            return _FORMAT_TO_MIME.get(img.format)
    except (UnidentifiedImageError, OSError):
        return None

def validate_upload(data: bytes, max_bytes: int | None = None) -> str:
    """
    Check an uploaded meme image and return its mime type.
    Raises UploadRejected for empty, oversized, corrupt or non JPEG/PNG/GIF data.
    """
    limit = max_bytes or settings.max_upload_bytes
    if not data:
        raise UploadRejected("No file uploaded")
    if len(data) > limit:
        raise UploadRejected(f"File too large (max {limit // (1024 * 1024)}MB)")
    mime = sniff_mime(data)
    if mime not in ALLOWED_MIME:
        raise UploadRejected("Invalid file type, only JPEG, PNG and GIF is allowed!")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise UploadRejected("Invalid image file")
    return mime

def ext_for_mime(mime: str) -> str:
    return EXT_FOR_MIME.get(mime) or mime.split("/")[-1] or "bin"

def new_object_key(prefix: str, mime: str, nbytes: int = 6) -> str:
    """e.g. uploads/meme-3fa9c1d2e0b4.png"""
    return f"{prefix}/meme-{secrets.token_hex(nbytes)}.{ext_for_mime(mime)}"
