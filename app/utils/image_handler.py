from fastapi import HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError
from app.config.settings import settings
import base64
import io
import logging

logger = logging.getLogger(__name__)

MAGIC_NUMBERS = {
    b'\xFF\xD8\xFF': 'image/jpeg',
    b'\x89PNG\r\n\x1a\n': 'image/png',
    b'RIFF': 'image/webp',
}

VALID_CONTENT_TYPES = {'image/jpeg', 'image/jpg', 'image/png', 'image/webp'}

def detect_mime_type(content: bytes) -> str | None:
    for magic, mime_type in MAGIC_NUMBERS.items():
        if content.startswith(magic):
            if mime_type == 'image/webp' and content[8:12] != b'WEBP':
                continue
            return mime_type
    return None

def process_image(content: bytes, view: str, max_size: int = None) -> str:
    """
    Validates raw photo bytes and returns them as a base64 data URI.

    Checks size, magic number and that Pillow can actually parse the image.
    """
    max_size = max_size or settings.MAX_PHOTO_SIZE
    if not content:
        raise HTTPException(status_code=400, detail=f"The {view} photo is empty")

    if len(content) > max_size:
        raise HTTPException(
            status_code=400,
            detail=f"The {view} photo exceeds the maximum size of {max_size // (1024 * 1024)}MB"
        )

    mime_type = detect_mime_type(content)
    if not mime_type:
        raise HTTPException(status_code=400, detail=f"The {view} photo must be a JPEG, PNG or WebP image")

    try:
        with Image.open(io.BytesIO(content)) as image:
            image.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        logger.error(f"Invalid {view} photo: {str(e)}")
        raise HTTPException(status_code=400, detail=f"The {view} photo could not be read")

    encoded = base64.b64encode(content).decode('ascii')
    return f"data:{mime_type};base64,{encoded}"

async def read_photo(file: UploadFile, view: str) -> str:
    if file.content_type and file.content_type.lower() not in VALID_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid Content-Type for the {view} photo")

    # Read one byte past the limit to detect oversized uploads
    content = await file.read(settings.MAX_PHOTO_SIZE + 1)
    return process_image(content, view)
