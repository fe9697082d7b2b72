"""
Cloudflare R2 Asset Store

S3-compatible object storage for building frames and models.
"""
import asyncio
import logging
from functools import lru_cache
from typing import Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from buildings_api.infra.asset_store import AssetStore
from buildings_api.lib.config import settings
from buildings_api.lib.errors import UploadChannelError

logger = logging.getLogger(__name__)


def get_s3_client():
    """Initialize S3-compatible client for Cloudflare R2."""
    return boto3.client(
        's3',
        endpoint_url=settings.r2_endpoint,
        aws_access_key_id=settings.r2_access_key_id,
        aws_secret_access_key=settings.r2_secret_access_key,
        region_name=settings.r2_region,
        config=Config(
            signature_version='s3v4',
            # Uploads are never retried
            retries={'max_attempts': 1, 'mode': 'standard'},
        )
    )


class R2AssetStore(AssetStore):
    """
    Stores each asset as a single object at ``{folder}/{public_id}``.

    Content is stored as given; callers encode it (frames arrive as WebP)
    and ``format`` is recorded as object metadata.
    """

    def __init__(self, client=None, bucket: Optional[str] = None, cdn_base_url: Optional[str] = None):
        self.client = client or get_s3_client()
        self.bucket = bucket or settings.r2_bucket
        cdn_base = settings.cdn_base_url if cdn_base_url is None else cdn_base_url
        self.cdn_base = cdn_base.rstrip('/') if cdn_base else None

    def get_public_url(self, key: str) -> str:
        if self.cdn_base:
            return f"{self.cdn_base}/{key}"
        # Fallback to endpoint-based URL for local dev
        return f"{settings.r2_endpoint.rstrip('/')}/{self.bucket}/{key}"

    def _exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise

    def _put(
        self,
        key: str,
        content: bytes,
        content_type: str,
        metadata: Dict[str, str],
        overwrite: bool,
    ) -> None:
        if not overwrite and self._exists(key):
            raise UploadChannelError(f"Asset already exists: {key}")

        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=content,
            ContentType=content_type,
            Metadata=metadata,
        )

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
        key = f"{folder}/{public_id}"
        metadata = {'resource-type': resource_type}
        if format:
            metadata['format'] = format

        try:
            await asyncio.to_thread(
                self._put,
                key,
                content,
                content_type or 'application/octet-stream',
                metadata,
                overwrite,
            )
        except (ClientError, BotoCoreError) as e:
            raise UploadChannelError(f"Upload failed: {e}") from e

        logger.info("Uploaded %s (%d bytes)", key, len(content))
        return self.get_public_url(key)


@lru_cache
def get_asset_store() -> AssetStore:
    """FastAPI dependency for the asset store, built once per process."""
    return R2AssetStore()
