# backend/utils/uploads.py
import shutil
import uuid
from pathlib import Path
from typing import Iterable, Optional

from fastapi import HTTPException, UploadFile

from config import settings

# Accepted picture types and the extension each one is stored under
IMAGE_TYPES = {"image/jpeg": ".jpg", "image/png": ".png", "image/webp": ".webp"}

def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path

def save_upload(
    file: UploadFile,
    *,
    subdir: str = "",
    allowed_types: Optional[Iterable[str]] = IMAGE_TYPES,
    base_dir: Optional[Path] = None,
) -> Path:
    """Store an uploaded file under a random name and return its path on disk."""
    if allowed_types is not None and file.content_type not in allowed_types:
        raise HTTPException(status_code=400, detail="Invalid file type")

    target_dir = (base_dir or upload_dir()) / subdir
    target_dir.mkdir(parents=True, exist_ok=True)

    if file.content_type in IMAGE_TYPES:
        ext = IMAGE_TYPES[file.content_type]
    elif allowed_types is None:
        # Model files never land under the public /uploads mount
        ext = Path(file.filename or "").suffix.lower() or ".bin"
    else:
        ext = ".bin"
    save_path = target_dir / f"{uuid.uuid4()}{ext}"
    try:
        with open(save_path, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"File save error: {e}")
    finally:
        file.file.close()
    return save_path

def save_image(file: UploadFile, subdir: str) -> str:
    """Store a picture and return the public /uploads/... URL."""
    path = save_upload(file, subdir=subdir)
    return "/uploads/" + path.relative_to(upload_dir()).as_posix()

def remove_image(url: Optional[str]) -> None:
    if not url or not url.startswith("/uploads/"):
        return
    old_path = upload_dir() / url[len("/uploads/"):]
    if old_path.is_file():
        old_path.unlink()
