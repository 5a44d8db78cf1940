import os
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.config import Config


DEFAULT_BUCKET = "skin-images"
CACHE_CONTROL = "max-age=3600"


def get_bucket() -> str:
    return os.getenv("AWS_S3_BUCKET", DEFAULT_BUCKET)


def get_s3_client():
    region = os.getenv("AWS_REGION")
    if not region:
        return None
    return boto3.client("s3", config=Config(region_name=region))


def upload_bytes_to_s3_key(
    content: bytes,
    key: str,
    content_type: str = "image/jpeg",
    upsert: bool = False,
) -> None:
    """Store ``content`` under ``key`` in the history bucket.

    With ``upsert`` false the write is conditional on the key not existing
    yet, so a second upload to the same key fails with a ``ClientError``
    (``PreconditionFailed``) instead of replacing the object.
    """
    s3 = get_s3_client()
    if s3 is None:
        raise RuntimeError("S3 is not configured")
    params = {
        "Bucket": get_bucket(),
        "Key": key,
        "Body": content,
        "ContentType": content_type,
        "CacheControl": CACHE_CONTROL,
    }
    if not upsert:
        params["IfNoneMatch"] = "*"
    s3.put_object(**params)


def get_public_url(key: str, base_url: Optional[str] = None) -> str:
    base_url = base_url or os.getenv("S3_PUBLIC_BASE_URL")
    if base_url:
        return f"{base_url.rstrip('/')}/{quote(key)}"
    region = os.getenv("AWS_REGION")
    if not region:
        raise RuntimeError("S3 is not configured")
    return f"https://{get_bucket()}.s3.{region}.amazonaws.com/{quote(key)}"
