# recipe_box/app/infra/storage/r2_provider.py
"""
Cloudflare R2 upload strategy.
R2 is S3-compatible, so we use boto3 with custom endpoint.
"""
from __future__ import annotations

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from recipe_box.app.domain.errors import StorageError
from recipe_box.app.infra.storage.base import (
    UploadStrategy,
    content_type_for,
    normalize_extension,
)

logger = logging.getLogger(__name__)


class R2UploadStrategy(UploadStrategy):
    """
    Stores images in an R2 bucket exposed through a public URL.

    Only built when R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY,
    R2_BUCKET_NAME and R2_PUBLIC_URL are all configured.
    """

    name = "r2"

    def __init__(
        self,
        account_id: str,
        access_key_id: str,
        secret_access_key: str,
        bucket_name: str,
        public_url: str,
        prefix: str = "images",
        client: Optional[object] = None,
    ):
        if not all([account_id, access_key_id, secret_access_key, bucket_name, public_url]):
            raise StorageError(
                "Missing R2 configuration. Required: R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, "
                "R2_SECRET_ACCESS_KEY, R2_BUCKET_NAME, R2_PUBLIC_URL"
            )

        self.bucket_name = bucket_name
        self.public_url = public_url.rstrip("/")
        self.prefix = prefix
        self.endpoint_url = f"https://{account_id}.r2.cloudflarestorage.com"

        self._client = client or boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(signature_version="s3v4"),
            region_name="auto",  # R2 uses 'auto' as region
        )

        logger.info(
            "R2UploadStrategy initialized: bucket=%s, endpoint=%s",
            self.bucket_name,
            self.endpoint_url,
        )

    def upload(self, user_id: str, data: bytes, extension: str) -> str:
        ext = normalize_extension(extension)
        object_key = self.generate_object_key(user_id, ext, prefix=self.prefix)
        try:
            self._client.put_object(
                Bucket=self.bucket_name,
                Key=object_key,
                Body=data,
                ContentType=content_type_for(ext),
                CacheControl="max-age=3600",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to upload to R2: key=%s error=%s", object_key, e)
            raise StorageError(f"Failed to upload {object_key}: {e}") from e

        logger.debug("Uploaded to R2: key=%s size=%d bytes", object_key, len(data))
        return f"{self.public_url}/{object_key}"
