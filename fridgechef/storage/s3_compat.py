import io
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import boto3

from ..settings import settings

logger = logging.getLogger("fridgechef.storage")


@dataclass
class PutResult:
    key: str
    public_url: str


class S3CompatStore:
    """Public-read bucket holding fridge uploads and generated dish photos.

    Works against AWS S3 or any S3-compatible endpoint (R2, MinIO).
    """

    def __init__(self, *, bucket: str, public_base_url: str, client=None, **client_kwargs):
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self.s3 = client or boto3.client("s3", **client_kwargs)

    @classmethod
    def from_settings(cls) -> "S3CompatStore":
        return cls(
            bucket=settings.object_store_bucket,
            public_base_url=settings.object_public_base_url,
            endpoint_url=settings.object_store_endpoint,
            region_name=settings.object_store_region,
            aws_access_key_id=settings.object_store_access_key_id,
            aws_secret_access_key=settings.object_store_secret_access_key,
        )

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def key_for_url(self, url: Optional[str]) -> Optional[str]:
        """Map a public URL in this bucket back to its key; None for foreign URLs."""
        if not url:
            return None
        prefix = f"{self.public_base_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):] or None

    def put_bytes(self, *, key: str, content_type: str, data: bytes) -> PutResult:
        if not key or key.startswith("/") or ".." in key:
            raise ValueError(f"Invalid storage key: {key!r}")
        self.s3.upload_fileobj(
            io.BytesIO(data),
            self.bucket,
            key,
            ExtraArgs={"ContentType": content_type},
        )
        logger.info(f"Stored {len(data)} bytes at {self.bucket}/{key}")
        return PutResult(key=key, public_url=self.url_for(key))

    def delete(self, key: str) -> None:
        self.s3.delete_object(Bucket=self.bucket, Key=key)
        logger.info(f"Deleted {self.bucket}/{key}")

    def healthcheck(self) -> bool:
        # raises on bad credentials or an unreachable endpoint
        self.s3.head_bucket(Bucket=self.bucket)
        return True


@lru_cache(maxsize=1)
def get_store() -> S3CompatStore:
    """One boto3 client per process; boto3 clients are thread-safe."""
    return S3CompatStore.from_settings()
