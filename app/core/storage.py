import os
import uuid
import logging
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import settings

logger = logging.getLogger(__name__)


class StoredObject:
    """Bytes of a stored media object plus its content type"""

    def __init__(self, body: bytes, content_type: str):
        self.body = body
        self.content_type = content_type


class ObjectStorage:
    """Stores media in Cloudflare R2, falling back to the local uploads directory.

    Objects are addressed by a relative path (``posts/<uuid>.jpg``); the path is
    what gets persisted, the URL is derived from it on every read.
    """

    def __init__(
        self,
        upload_directory: Optional[str] = None,
        bucket: Optional[str] = None,
        public_url: Optional[str] = None,
        client=None,
    ):
        self.upload_directory = Path(upload_directory or settings.UPLOAD_DIRECTORY)
        self.bucket = bucket or settings.R2_BUCKET_NAME
        self.public_url = settings.R2_PUBLIC_URL if public_url is None else public_url.rstrip("/")
        self.client = client if client is not None else self._create_client()

    def _create_client(self):
        if not all([settings.R2_ENDPOINT, settings.R2_ACCESS_KEY_ID, settings.R2_SECRET_ACCESS_KEY]):
            missing = [
                name for name in ("R2_ENDPOINT", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY")
                if not getattr(settings, name)
            ]
            logger.warning(f"R2 storage not configured - missing: {', '.join(missing)}. Using local storage.")
            return None

        logger.info(f"Creating S3 client for R2 bucket '{self.bucket}' at {settings.R2_ENDPOINT}")
        return boto3.client(
            "s3",
            endpoint_url=settings.R2_ENDPOINT,
            aws_access_key_id=settings.R2_ACCESS_KEY_ID,
            aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
        )

    def store(self, content: bytes, prefix: str, extension: str = "", content_type: Optional[str] = None) -> str:
        """Store ``content`` under a generated path inside ``prefix`` and return the path"""
        path = f"{prefix}/{uuid.uuid4().hex}{extension.lower()}"

        if self.client:
            logger.info(f"Uploading {len(content)} bytes to R2 bucket '{self.bucket}' with key '{path}'")
            self.client.put_object(
                Bucket=self.bucket,
                Key=path,
                Body=content,
                ContentType=content_type or "application/octet-stream",
            )
        else:
            local_path = self.upload_directory / path
            local_path.parent.mkdir(parents=True, exist_ok=True)
            local_path.write_bytes(content)
            logger.info(f"Saved file locally at {local_path}")

        return path

    def url_for(self, path: str) -> str:
        """Public URL of a stored object"""
        if self.public_url:
            return f"{self.public_url}/{path}"
        # Served by the media router
        return f"{settings.BASE_URL}{settings.API_V1_STR}/media/{path}"

    def open(self, path: str) -> Optional[StoredObject]:
        """Read a stored object, or None when it does not exist"""
        if self.client:
            try:
                response = self.client.get_object(Bucket=self.bucket, Key=path)
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                    return None
                raise
            return StoredObject(
                response["Body"].read(),
                response.get("ContentType") or "application/octet-stream",
            )

        local_path = self._local_path(path)
        if local_path is None or not local_path.is_file():
            return None
        return StoredObject(local_path.read_bytes(), _guess_content_type(path))

    def delete(self, path: str) -> bool:
        """Delete a stored object. Failures are logged, not raised."""
        if not path:
            logger.error("No path provided for file deletion")
            return False

        if self.client:
            try:
                self.client.delete_object(Bucket=self.bucket, Key=path)
            except (BotoCoreError, ClientError) as e:
                logger.error(f"Failed to delete '{path}' from R2: {e}")
                return False
            logger.info(f"Deleted '{path}' from R2")
            return True

        local_path = self._local_path(path)
        if local_path is None or not local_path.exists():
            logger.warning(f"File {path} not found in local storage")
            return False
        try:
            os.remove(local_path)
        except OSError as e:
            logger.error(f"Failed to delete local file {local_path}: {e}")
            return False
        logger.info(f"Deleted local file {local_path}")
        return True

    def _local_path(self, path: str) -> Optional[Path]:
        root = self.upload_directory.resolve()
        candidate = (root / path).resolve()
        # Reject paths escaping the uploads directory
        if root not in candidate.parents:
            return None
        return candidate


def _guess_content_type(path: str) -> str:
    lowered = path.lower()
    if lowered.endswith((".jpg", ".jpeg")):
        return "image/jpeg"
    elif lowered.endswith(".png"):
        return "image/png"
    elif lowered.endswith(".webp"):
        return "image/webp"
    return "application/octet-stream"


# Global instance for app-wide usage
storage = ObjectStorage()
