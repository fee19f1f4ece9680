import logging
import os
import time
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.exceptions import AppException, NotFoundError

logger = logging.getLogger(__name__)


class StorageError(AppException):
    def __init__(self, message: str):
        super().__init__(message=message, status_code=502, error_code="STORAGE_ERROR")


def build_object_key(user_id: str, file_name: str) -> str:
    """`{user_id}/{epoch_millis}.{ext}`, the layout resumes are stored under."""
    extension = os.path.splitext(file_name)[1].lstrip(".").lower() or "bin"
    return f"{user_id}/{int(time.time() * 1000)}.{extension}"


class LocalStorage:
    """Files under LOCAL_STORAGE_PATH, served back through the API."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.storage.local_path)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        # Keys are owner-prefixed; a ".." segment could step into another owner's folder
        if ".." in key.replace("\\", "/").split("/"):
            raise NotFoundError("File not found")
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise NotFoundError("File not found")
        return path

    def upload(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info(f"Stored {len(data)} bytes at {path}")
        return key

    def download(self, key: str) -> bytes:
        path = self._path(key)
        if not path.exists():
            raise NotFoundError("File not found")
        return path.read_bytes()

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def public_url(self, key: str) -> str:
        return f"{settings.api_prefix}/storage/{quote(key)}"

    def signed_url(self, key: str, expires_in: Optional[int] = None) -> str:
        # Local files are only reachable through the authenticated download route
        return self.public_url(key)


class S3Storage:
    """Private bucket; reads go through presigned URLs."""

    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or settings.storage.bucket
        self.client = client or boto3.client(
            "s3",
            region_name=settings.storage.region,
            endpoint_url=settings.storage.endpoint_url,
        )

    def upload(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading to S3: {e}")
            raise StorageError("Failed to upload resume file")
        return key

    def download(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise NotFoundError("File not found")
            logger.error(f"Error downloading from S3: {e}")
            raise StorageError("Failed to download resume file")
        except BotoCoreError as e:
            logger.error(f"Error downloading from S3: {e}")
            raise StorageError("Failed to download resume file")
        return response["Body"].read()

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting from S3: {e}")
            raise StorageError("Failed to delete resume file")

    def public_url(self, key: str) -> str:
        return f"s3://{self.bucket}/{key}"

    def signed_url(self, key: str, expires_in: Optional[int] = None) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in or settings.storage.signed_url_ttl,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error signing S3 URL: {e}")
            raise StorageError("Failed to sign resume file URL")


_storage = None


def get_storage():
    """Process-wide storage backend chosen by STORAGE_BACKEND."""
    global _storage
    if _storage is None:
        if settings.storage.backend == "s3":
            _storage = S3Storage()
        else:
            _storage = LocalStorage()
    return _storage
