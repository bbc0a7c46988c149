"""Boto3 client factory for the S3-compatible storage gateway.

If STORAGE_ACCESS_KEY_ID and STORAGE_SECRET_ACCESS_KEY are set, use them;
otherwise fall back to the default boto3 credential chain.
"""

import os
from typing import Any

from src.config import settings


def get_boto3_client_kwargs() -> dict[str, Any]:
    """Return kwargs for boto3.client("s3", ...).

    The endpoint always points at the storage gateway. Explicit credentials
    are included only when both variables are set in the environment.

    Returns:
        Dict with 'region_name' and 'endpoint_url', plus credentials when set.
    """
    kwargs: dict[str, Any] = {
        "region_name": settings.storage.region,
        "endpoint_url": settings.storage_endpoint_url,
    }
    access_key = os.environ.get("STORAGE_ACCESS_KEY_ID", "").strip()
    secret_key = os.environ.get("STORAGE_SECRET_ACCESS_KEY", "").strip()
    if access_key and secret_key:
        kwargs["aws_access_key_id"] = access_key
        kwargs["aws_secret_access_key"] = secret_key
    return kwargs
