import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from storefront.errors import StorageError


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


def _bucket(bucket):
    return bucket or current_app.config["GALLERY_BUCKET"]


def upload(storage_key, data, content_type="image/png", bucket=None):
    """Upload bytes as a public object, replacing any object at the key."""
    client = _get_client()
    try:
        client.put_object(
            Bucket=_bucket(bucket),
            Key=storage_key,
            Body=data,
            ContentType=content_type,
            ACL="public-read",
        )
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"Failed to upload {storage_key}: {e}")


def get_public_url(storage_key, bucket=None):
    """Return the public CDN URL for a storage key."""
    base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
    if not base:
        endpoint = (current_app.config["S3_ENDPOINT_URL"] or "").rstrip("/")
        base = f"{endpoint}/{_bucket(bucket)}"
    return f"{base}/{storage_key}"


def delete(storage_key, bucket=None):
    """Delete an object from S3."""
    client = _get_client()
    client.delete_object(Bucket=_bucket(bucket), Key=storage_key)
