"""
S3 Tools

Read-only access to the uploaded object: metadata, content and the
bucket's region. Every ClientError surfaces as ObjectAccessError.
"""

from contextlib import closing, contextmanager
from typing import Iterator

import boto3
from botocore.exceptions import ClientError
import structlog

from textract_trigger.config import Settings, get_settings
from textract_trigger.exceptions import ObjectAccessError
from textract_trigger.models import ObjectMetadata, ObjectReference

log = structlog.get_logger()


def _get_client(settings: Settings | None = None):
    """Get S3 client."""
    settings = settings or get_settings()
    return boto3.client("s3", **settings.s3_config)


@contextmanager
def open_client(settings: Settings | None = None) -> Iterator:
    """Yield an S3 client that is closed when the block exits."""
    with closing(_get_client(settings)) as client:
        yield client


def _access_error(operation: str, bucket: str, key: str | None, e: ClientError):
    error = e.response.get("Error", {})
    return ObjectAccessError(
        operation=operation,
        bucket=bucket,
        key=key,
        error_code=error.get("Code"),
        error_message=error.get("Message") or str(e),
    )


def get_object_metadata(client, ref: ObjectReference) -> ObjectMetadata:
    """
    Look up the object's metadata with HeadObject.

    Args:
        client: S3 client
        ref: Object to inspect

    Returns:
        ObjectMetadata with content type, size, ETag and modification time

    Raises:
        ObjectAccessError: If the object is missing or not readable
    """
    try:
        response = client.head_object(Bucket=ref.bucket, Key=ref.key)
    except ClientError as e:
        log.error(
            "s3_head_object_failed",
            bucket=ref.bucket,
            key=ref.key,
            error=str(e),
        )
        raise _access_error("head_object", ref.bucket, ref.key, e) from e

    metadata = ObjectMetadata.from_head_object(ref, response)

    log.debug(
        "object_metadata_loaded",
        s3_uri=ref.s3_uri,
        content_type=metadata.content_type,
        content_length=metadata.content_length,
    )

    return metadata


def read_object(client, ref: ObjectReference) -> bytes:
    """
    Download the object's content.

    Args:
        client: S3 client
        ref: Object to download

    Returns:
        Object content as bytes

    Raises:
        ObjectAccessError: If download fails
    """
    try:
        response = client.get_object(Bucket=ref.bucket, Key=ref.key)
        with closing(response["Body"]) as body:
            content = body.read()
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code")

        if error_code == "NoSuchKey":
            log.warning("object_not_found", s3_uri=ref.s3_uri)
        else:
            log.error("s3_get_object_failed", s3_uri=ref.s3_uri, error=str(e))

        raise _access_error("get_object", ref.bucket, ref.key, e) from e

    log.debug(
        "object_downloaded",
        s3_uri=ref.s3_uri,
        size_bytes=len(content),
    )

    return content


def get_bucket_region(client, bucket: str) -> str:
    """
    Resolve the region a bucket lives in.

    GetBucketLocation returns no constraint for us-east-1.

    Raises:
        ObjectAccessError: If the location cannot be read
    """
    try:
        response = client.get_bucket_location(Bucket=bucket)
    except ClientError as e:
        log.error("s3_bucket_location_failed", bucket=bucket, error=str(e))
        raise _access_error("get_bucket_location", bucket, None, e) from e

    region = response.get("LocationConstraint") or "us-east-1"
    # Legacy constraint for eu-west-1
    if region == "EU":
        region = "eu-west-1"
    return region
