import os
import secrets
import time
from pathlib import Path
from knowledge_base.core.config import settings

CONTENT_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "bmp": "image/bmp",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def allowed_image_exts() -> set[str]:
    return {x.strip().lower() for x in settings.ALLOWED_IMAGE_EXT.split(",") if x.strip()}


def file_ext(filename: str | None) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def content_type_for(filename: str) -> str:
    return CONTENT_TYPES.get(file_ext(filename), DEFAULT_CONTENT_TYPE)


def generate_upload_name(ext: str) -> str:
    """Editor upload name: image-<epoch ms>-<random>.<ext>."""
    return f"image-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}.{ext.lower()}"


def upload_url(filename: str) -> str:
    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{filename}"


def save_file_local(file_obj, storage_path: str | Path, max_bytes: int) -> int:
    size = 0
    storage_path = str(storage_path)
    os.makedirs(os.path.dirname(storage_path), exist_ok=True)
    with open(storage_path, "wb") as f:
        while True:
            chunk = file_obj.read(1024 * 1024)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                f.close()
                os.remove(storage_path)
                raise ValueError("FILE_TOO_LARGE")
            f.write(chunk)
    return size
