"""Object storage package."""

from src.aws.logo_storage import LogoStorage, LogoUploadError

__all__ = [
    "LogoStorage",
    "LogoUploadError",
]
