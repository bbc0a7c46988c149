"""S3-compatible storage for owner branding logos."""

from datetime import datetime, timezone
from typing import Optional

import boto3
from botocore.exceptions import ClientError
from structlog import get_logger

from src.aws.client_factory import get_boto3_client_kwargs
from src.config import settings

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


class LogoUploadError(Exception):
    """Raised when a logo cannot be stored or removed."""

    pass


class LogoStorage:
    """Uploads and removes logo objects in the public logo bucket."""

    def __init__(self, s3_client=None):
        """Initialize with an S3 client pointed at the storage gateway."""
        self.s3_client = s3_client or boto3.client("s3", **get_boto3_client_kwargs())
        self.bucket = settings.storage.logo_bucket
        self.public_base_url = (
            f"{settings.supabase.storage_url}/object/public/{self.bucket}"
        )

    def public_url(self, key: str) -> str:
        """Public URL for an object key."""
        return f"{self.public_base_url}/{key}"

    def key_from_url(self, url: Optional[str]) -> Optional[str]:
        """Recover the object key from a public URL; None if it is not ours."""
        prefix = f"{self.public_base_url}/"
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    def upload(self, owner_id: str, content: bytes, content_type: str) -> str:
        """Upload a logo and return its public URL.

        Args:
            owner_id: Owner the logo belongs to (first path segment)
            content: Image bytes
            content_type: MIME type, one of ALLOWED_CONTENT_TYPES

        Returns:
            Public URL of the stored object

        Raises:
            LogoUploadError: If the upload fails
        """
        extension = ALLOWED_CONTENT_TYPES.get(content_type, "png")
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        key = f"{owner_id}/logo-{timestamp}.{extension}"

        logger.info("Uploading logo", owner_id=owner_id, key=key, size_bytes=len(content))
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
                Metadata={
                    "owner-id": owner_id,
                    "upload-timestamp": datetime.now(timezone.utc).isoformat(),
                },
            )
        except ClientError as e:
            logger.error("Failed to upload logo", owner_id=owner_id, error=str(e))
            raise LogoUploadError(f"Failed to upload logo: {str(e)}") from e

        return self.public_url(key)

    def remove(self, key: str) -> None:
        """Delete a logo object.

        Raises:
            LogoUploadError: If the delete fails
        """
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=key)
            logger.info("Removed logo", key=key)
        except ClientError as e:
            logger.error("Failed to remove logo", key=key, error=str(e))
            raise LogoUploadError(f"Failed to remove logo: {str(e)}") from e
