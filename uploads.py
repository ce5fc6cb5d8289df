# uploads.py
import logging
import secrets
import time
from pathlib import Path

from fastapi import HTTPException, UploadFile

import config

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
CHUNK_SIZE = 64 * 1024


async def save_image(upload: UploadFile, subdir: str, upload_dir: Path = None,
                     max_bytes: int = None) -> str:
    """Store an uploaded image and return its public path."""
    upload_dir = Path(upload_dir or config.UPLOAD_DIR)
    max_bytes = max_bytes or config.MAX_UPLOAD_BYTES

    extension = Path(upload.filename or "").suffix.lower()
    if extension not in ALLOWED_EXTENSIONS or upload.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Apenas imagens são permitidas (jpeg, jpg, png, webp)")

    target_dir = upload_dir / subdir
    target_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{extension}"
    target = target_dir / filename

    size = 0
    try:
        with target.open("wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise HTTPException(status_code=413, detail="Imagem maior que 5MB")
                out.write(chunk)
    except HTTPException:
        target.unlink(missing_ok=True)
        raise

    logger.info("Stored upload %s (%d bytes)", target, size)
    return f"/attached_assets/{subdir}/{filename}"
