from typing import Optional
from fastapi import HTTPException, UploadFile

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
MAX_IMAGE_BYTES = 10 << 20


# Read an optional image upload into memory, rejecting other content types
def read_image(file: Optional[UploadFile]) -> Optional[bytes]:
    if file is None or not file.filename:
        return None
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail="Invalid file type")
    try:
        data = file.file.read(MAX_IMAGE_BYTES + 1)
    finally:
        file.file.close()
    if len(data) > MAX_IMAGE_BYTES:
        raise HTTPException(status_code=400, detail="Image is larger than 10MB")
    return data
