"""
Multipart upload checks.

Files are read fully into memory, so every upload is bounded by a size
limit before it reaches the asset store.
"""
import os
from typing import Iterable, Optional

from fastapi import UploadFile

from buildings_api.lib.config import settings
from buildings_api.lib.errors import InvalidUploadError


async def read_upload(
    file: UploadFile,
    max_bytes: int,
    allowed_content_types: Optional[Iterable[str]] = None,
    allowed_extensions: Optional[Iterable[str]] = None,
    **extra,
) -> bytes:
    if allowed_content_types is not None and file.content_type not in allowed_content_types:
        raise InvalidUploadError(f"Unsupported file type: {file.content_type}", **extra)

    if allowed_extensions is not None:
        ext = os.path.splitext(file.filename or "")[1].lower()
        if ext not in allowed_extensions:
            raise InvalidUploadError(f"Unsupported file extension: {ext or '(none)'}", **extra)

    # Read one byte past the limit so oversized files are detected
    # without buffering them completely.
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise InvalidUploadError(
            f"File too large (limit {max_bytes // (1024 * 1024)} MB)", **extra
        )
    return content


async def read_frame(file: UploadFile) -> bytes:
    return await read_upload(
        file,
        max_bytes=settings.max_frame_size_bytes,
        allowed_content_types=settings.frame_content_types,
        success=False,
    )


async def read_model(file: UploadFile) -> bytes:
    return await read_upload(
        file,
        max_bytes=settings.max_model_size_bytes,
        allowed_extensions=settings.model_extensions,
    )
