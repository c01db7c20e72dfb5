# core/s3_client.py
import threading
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from core.config import settings, logger
from core.models import StorageErrorKind

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}
AUTH_FAILURE_CODES = {
    "403", "AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch",
    "ExpiredToken", "InvalidToken", "AllAccessDisabled",
}

# Process-wide client built from settings
_s3_client = None
_init_lock = threading.Lock()


def create_s3_client(key: str, secret: str, region: Optional[str] = None, endpoint_url: Optional[str] = None):
    """
    Builds a boto3 S3 client bound to the given credentials.

    Credentials are not validated here; a malformed pair surfaces on the
    first request the client makes.
    """
    config = Config(
        signature_version="s3v4",
        retries={"max_attempts": settings.S3_MAX_ATTEMPTS},
    )
    options = {
        "aws_access_key_id": key,
        "aws_secret_access_key": secret,
        "config": config,
    }
    if region is not None:
        options["region_name"] = region
    if endpoint_url is not None:
        options["endpoint_url"] = endpoint_url

    return boto3.client("s3", **options)


def get_s3_client():
    """Initializes (once) and returns the S3 client configured from settings."""
    global _s3_client

    if _s3_client is None:
        with _init_lock:
            # Double check after acquiring lock
            if _s3_client is None:
                if not settings.S3_ACCESS_KEY or not settings.S3_SECRET_KEY:
                    logger.error("S3 access key/secret not configured. Cannot create client.")
                    raise ValueError("S3 access key/secret not configured")

                logger.info(f"Initializing S3 client (region={settings.S3_REGION or 'default'})...")
                try:
                    _s3_client = create_s3_client(
                        settings.S3_ACCESS_KEY,
                        settings.S3_SECRET_KEY,
                        region=settings.S3_REGION,
                        endpoint_url=settings.S3_ENDPOINT_URL,
                    )
                    logger.info("S3 client initialized successfully.")
                except Exception as e:
                    logger.error(f"Failed to initialize S3 client: {e}", exc_info=True)
                    raise RuntimeError(f"Failed to initialize S3 client: {e}")

    return _s3_client


def error_code(exc: Exception) -> Optional[str]:
    """The service error code of a ClientError, None for anything else."""
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code", "")) or None
    return None


def is_not_found(exc: Exception) -> bool:
    """True when the key is absent. A missing bucket is a failed call, not an absent key."""
    code = error_code(exc)
    return code in NOT_FOUND_CODES and code != "NoSuchBucket"


def classify_error(exc: Exception) -> StorageErrorKind:
    """Maps an SDK exception onto the storage error taxonomy."""
    if isinstance(exc, ClientError):
        code = error_code(exc)
        if code in NOT_FOUND_CODES:
            return StorageErrorKind.NOT_FOUND
        if code in AUTH_FAILURE_CODES:
            return StorageErrorKind.AUTH_FAILURE
        return StorageErrorKind.UNKNOWN
    if isinstance(exc, (NoCredentialsError, PartialCredentialsError)):
        return StorageErrorKind.AUTH_FAILURE
    if isinstance(exc, (BotoConnectionError, HTTPClientError)):
        return StorageErrorKind.NETWORK_ERROR
    return StorageErrorKind.UNKNOWN
