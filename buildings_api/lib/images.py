"""
Frame image normalization.

Frames are stored as lossy WebP whatever format they were uploaded in.
"""
from typing import Optional

import pyvips

from buildings_api.lib.config import settings
from buildings_api.lib.errors import InvalidUploadError

WEBP_CONTENT_TYPE = "image/webp"


def to_webp(content: bytes, quality: Optional[int] = None) -> bytes:
    """Decode any image libvips understands and re-encode it as lossy WebP."""
    try:
        image = pyvips.Image.new_from_buffer(content, "", access="sequential")
        return image.webpsave_buffer(Q=quality or settings.frame_webp_quality)
    except pyvips.Error as e:
        raise InvalidUploadError("Frame is not a readable image", success=False) from e
