# core/storage.py
"""
Core Storage Utilities.

`ObjectStore` is a bucket-scoped facade over an S3 client. It offers upload,
delete, existence-check and copy against a default bucket, overridable per
call, and hides the SDK's exception-based error model behind `StorageResult`
values (and behind plain booleans / None for callers that only need a yes/no).

Usage:

    store = ObjectStore(bucket="my-bucket", key="AKIA...", secret="...", region="eu-west-1")
    url = store.upload_file("/path/to/file", "docs/unique_file_name.pdf")
"""
import logging
import os
from typing import Any, Mapping, Optional
from urllib.parse import quote, urlsplit

from core.config import settings
from core.mime import detect_mime_type
from core.models import StorageErrorKind, StorageResult
from core.s3_client import classify_error, create_s3_client, get_s3_client, is_not_found

logger = logging.getLogger("ObjectStore_Core").getChild("ObjectStore")


def build_object_url(endpoint_url: str, bucket: str, key: str, path_style: bool = False) -> str:
    """
    Public URL of `(bucket, key)` served from `endpoint_url`.

    Virtual-hosted style (`https://bucket.s3.region.amazonaws.com/key`) is used
    unless `path_style` is set or the bucket name cannot be a DNS label.
    """
    parts = urlsplit(endpoint_url)
    scheme = parts.scheme or "https"
    host = parts.netloc or parts.path
    quoted_key = quote(key, safe="/~")

    if path_style or not _is_dns_compatible(bucket):
        return f"{scheme}://{host}/{bucket}/{quoted_key}"
    return f"{scheme}://{bucket}.{host}/{quoted_key}"


def _is_dns_compatible(bucket: str) -> bool:
    if not 3 <= len(bucket) <= 63 or "." in bucket:
        return False
    if bucket[0] == "-" or bucket[-1] == "-":
        return False
    return all(c.islower() or c.isdigit() or c == "-" for c in bucket)


class ObjectStore:
    """Object operations scoped to one default bucket."""

    def __init__(
        self,
        bucket: str,
        key: Optional[str] = None,
        secret: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Any = None,
        acl: str = "public-read",
    ):
        if not bucket:
            raise ValueError("A default bucket is required")

        if client is None:
            if not key or not secret:
                raise ValueError("S3 key and secret are required when no client is supplied")
            client = create_s3_client(key, secret, region=region, endpoint_url=endpoint_url)

        self._bucket = bucket
        self._region = region
        self._endpoint_url = endpoint_url
        self._acl = acl
        self._client = client
        logger.info(f"ObjectStore ready. Default bucket='{bucket}', region={region or 'default'}")

    @classmethod
    def from_config(cls, config: Mapping[str, Any], client: Any = None) -> "ObjectStore":
        """Builds a store from a `{key, secret, bucket, region?, endpoint_url?}` mapping."""
        return cls(
            bucket=config.get("bucket"),
            key=config.get("key"),
            secret=config.get("secret"),
            region=config.get("region"),
            endpoint_url=config.get("endpoint_url"),
            client=client,
            acl=config.get("acl", "public-read"),
        )

    @classmethod
    def from_settings(cls, client: Any = None) -> "ObjectStore":
        """Builds a store from `core.config.settings` over the process-wide S3 client."""
        if not settings.S3_BUCKET:
            raise ValueError("A default bucket is required")
        return cls(
            bucket=settings.S3_BUCKET,
            region=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            client=client if client is not None else get_s3_client(),
            acl=settings.S3_UPLOAD_ACL,
        )

    @property
    def default_bucket(self) -> str:
        return self._bucket

    @property
    def region(self) -> Optional[str]:
        return self._region

    @property
    def client(self):
        return self._client

    def _resolve_bucket(self, bucket: Optional[str]) -> str:
        return bucket or self._bucket

    def _failed(self, operation: str, bucket: str, key: str, exc: Exception) -> StorageResult:
        kind = classify_error(exc)
        logger.error(f"{operation} failed for '{bucket}/{key}' [{kind.value}]: {exc}")
        return StorageResult.failure(kind, str(exc))

    def object_url(self, remote_key: str, bucket: Optional[str] = None) -> str:
        endpoint = self._endpoint_url or self._client.meta.endpoint_url
        return build_object_url(
            endpoint,
            self._resolve_bucket(bucket),
            remote_key,
            path_style=self._endpoint_url is not None,
        )

    # --- Result-typed operations ---

    def upload(self, local_path: str, remote_key: str, bucket: Optional[str] = None) -> StorageResult:
        """Uploads a local file as a publicly readable object; value is the object URL."""
        bucket = self._resolve_bucket(bucket)

        if not os.path.isfile(local_path) or not os.access(local_path, os.R_OK):
            logger.error(f"Upload aborted: local file '{local_path}' is missing or unreadable.")
            return StorageResult.failure(StorageErrorKind.UNKNOWN, f"Local file not readable: {local_path}")

        content_type = detect_mime_type(local_path)
        logger.info(f"Uploading '{local_path}' to '{bucket}/{remote_key}' ({content_type})")
        try:
            with open(local_path, "rb") as body:
                self._client.put_object(
                    ACL=self._acl,
                    Bucket=bucket,
                    Key=remote_key,
                    Body=body,
                    ContentType=content_type,
                )
        except Exception as e:
            return self._failed("Upload", bucket, remote_key, e)

        return StorageResult.success(self.object_url(remote_key, bucket))

    def check_exists(self, remote_key: str, bucket: Optional[str] = None) -> StorageResult:
        """Live existence query. A missing key is a successful answer of False."""
        bucket = self._resolve_bucket(bucket)
        try:
            self._client.head_object(Bucket=bucket, Key=remote_key)
        except Exception as e:
            if is_not_found(e):
                logger.debug(f"Object '{bucket}/{remote_key}' does not exist.")
                return StorageResult.success(False)
            return self._failed("Existence check", bucket, remote_key, e)
        return StorageResult.success(True)

    def delete(self, remote_key: str, bucket: Optional[str] = None) -> StorageResult:
        """
        Deletes a key and confirms it is gone.

        S3 answers a delete the same way whether or not the key existed, so the
        key is queried again afterwards; value is True when it no longer exists.
        """
        bucket = self._resolve_bucket(bucket)
        try:
            self._client.delete_object(Bucket=bucket, Key=remote_key)
        except Exception as e:
            return self._failed("Delete", bucket, remote_key, e)

        exists = self.check_exists(remote_key, bucket)
        if not exists.ok:
            return exists
        if exists.value:
            logger.warning(f"Object '{bucket}/{remote_key}' still exists after delete.")
        else:
            logger.info(f"Deleted '{bucket}/{remote_key}'.")
        return StorageResult.success(not exists.value)

    def copy(self, from_key: str, to_key: str, bucket: Optional[str] = None) -> StorageResult:
        """Server-side copy within one bucket; value is True when the destination exists afterwards."""
        bucket = self._resolve_bucket(bucket)
        try:
            self._client.copy_object(
                Bucket=bucket,
                Key=to_key,
                CopySource={"Bucket": bucket, "Key": from_key},
            )
        except Exception as e:
            return self._failed("Copy", bucket, f"{from_key} -> {to_key}", e)

        logger.info(f"Copied '{bucket}/{from_key}' to '{bucket}/{to_key}'.")
        return self.check_exists(to_key, bucket)

    # --- Boolean facade ---

    def upload_file(self, local_path: str, remote_key: str, bucket: Optional[str] = None) -> Optional[str]:
        """Returns the public URL of the uploaded object, or None on any failure."""
        result = self.upload(local_path, remote_key, bucket)
        return result.value if result.ok else None

    def delete_file(self, remote_key: str, bucket: Optional[str] = None) -> bool:
        result = self.delete(remote_key, bucket)
        return result.ok and bool(result.value)

    def does_file_exist(self, remote_key: str, bucket: Optional[str] = None) -> bool:
        # False for both "absent" and "query failed"; use check_exists() to tell them apart
        result = self.check_exists(remote_key, bucket)
        return result.ok and bool(result.value)

    def copy_file(self, from_key: str, to_key: str, bucket: Optional[str] = None) -> bool:
        result = self.copy(from_key, to_key, bucket)
        return result.ok and bool(result.value)
