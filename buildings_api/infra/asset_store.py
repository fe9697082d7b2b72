"""
Asset store interface.

Route handlers and services depend on this shape only, never on a
provider SDK.
"""
from abc import ABC, abstractmethod
from typing import Optional


class AssetStore(ABC):

    @abstractmethod
    async def upload(
        self,
        content: bytes,
        folder: str,
        public_id: str,
        *,
        resource_type: str = "raw",
        format: Optional[str] = None,
        overwrite: bool = True,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Store ``content`` as ``public_id`` inside ``folder``.

        Returns a public URL for the stored asset. Raises
        UploadChannelError when the remote store rejects the upload or
        cannot be reached.
        """
