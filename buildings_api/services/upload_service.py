"""
Upload Service

Building-aware naming on top of an asset store.

Path conventions:
- Frames: buildings/{id}/frames/frame_{NNN} (always WebP)
- Models: buildings/{id}/models/model
"""
import asyncio
from typing import Optional, Union

from buildings_api.infra.asset_store import AssetStore
from buildings_api.lib.images import WEBP_CONTENT_TYPE, to_webp

FRAME_NUMBER_WIDTH = 3
FRAME_FORMAT = "webp"
MODEL_PUBLIC_ID = "model"


def pad_frame_number(frame_number: Union[int, str]) -> str:
    """Left-pad with zeros to three characters. Longer numbers are kept whole."""
    return str(frame_number).rjust(FRAME_NUMBER_WIDTH, "0")


def frame_public_id(frame_number: Union[int, str]) -> str:
    return f"frame_{pad_frame_number(frame_number)}"


class UploadService:
    """Uploads building frames and models. Does not touch building records."""

    def __init__(self, store: AssetStore):
        self.store = store
        self.base_prefix = "buildings"

    # --- Path Generation ---

    def get_frames_folder(self, building_id: str) -> str:
        return f"{self.base_prefix}/{building_id}/frames"

    def get_models_folder(self, building_id: str) -> str:
        return f"{self.base_prefix}/{building_id}/models"

    # --- Upload Operations ---

    async def upload_frame(
        self,
        building_id: str,
        frame_number: Union[int, str],
        content: bytes,
    ) -> str:
        """
        Upload one frame image as lossy WebP, replacing any frame with the
        same number.

        Returns the public URL of the stored frame.
        """
        webp = await asyncio.to_thread(to_webp, content)
        return await self.store.upload(
            webp,
            self.get_frames_folder(building_id),
            frame_public_id(frame_number),
            resource_type="image",
            format=FRAME_FORMAT,
            overwrite=True,
            content_type=WEBP_CONTENT_TYPE,
        )

    async def upload_model(
        self,
        building_id: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload the building's 3D model. A building has a single model slot,
        so a new upload replaces the previous one.
        """
        return await self.store.upload(
            content,
            self.get_models_folder(building_id),
            MODEL_PUBLIC_ID,
            resource_type="raw",
            overwrite=True,
            content_type=content_type,
        )
