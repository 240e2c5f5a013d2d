# app/core/storage_utils.py
import uuid

from storage3.utils import StorageException
from supabase import AsyncClient

from app.core.errors import DataAccessError

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}


def validate_image(content_type: str, file_bytes: bytes) -> str:
    """
    Check type and size of an uploaded image and return its file extension.

    Raises:
        ValueError: unsupported type or file too large.
    """
    if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
        raise ValueError("Unsupported image type. Allowed: JPEG, PNG, WEBP, SVG.")
    if len(file_bytes) > MAX_IMAGE_BYTES:
        raise ValueError("Image too large (max 5MB).")
    return ALLOWED_IMAGE_CONTENT_TYPES[content_type]


async def upload_to_storage(
    client: AsyncClient,
    bucket: str,
    path: str,
    file_bytes: bytes,
    content_type: str,
) -> str:
    """
    Upload raw bytes to Supabase Storage and return the public URL.

    Args:
        bucket: target bucket name.
        path: full object path inside the bucket,
              e.g. "products/<product_id>/<uuid>.png"

    Raises:
        DataAccessError: if the upload is rejected.
    """
    try:
        await client.storage.from_(bucket).upload(
            path, file_bytes, {"content-type": content_type, "upsert": "true"}
        )
        return await client.storage.from_(bucket).get_public_url(path)
    except StorageException as e:
        raise DataAccessError("upload_to_storage", str(e)) from e


async def delete_from_storage(client: AsyncClient, bucket: str, paths: list[str]) -> None:
    """
    Delete objects from a bucket by their paths (relative to the bucket).
    """
    if not paths:
        return
    try:
        await client.storage.from_(bucket).remove(paths)
    except StorageException as e:
        raise DataAccessError("delete_from_storage", str(e)) from e


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")
    """
    return f"{uuid.uuid4()}.{ext}"
