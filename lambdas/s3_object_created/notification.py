"""
Notification Parser Module

Extracts the object reference from an S3 "object created" notification.
Only the first record of an event is used.
"""

from typing import Any
from urllib.parse import unquote_plus

from textract_trigger.models import ObjectReference


def _get_any(data: dict[str, Any], *names: str) -> Any:
    """Return the first present key, so both `s3` and `S3` casings work."""
    for name in names:
        if name in data:
            return data[name]
    return None


def _parse_record(record: dict[str, Any]) -> ObjectReference | None:
    s3 = _get_any(record, "s3", "S3")
    if not s3:
        return None

    bucket = _get_any(_get_any(s3, "bucket", "Bucket") or {}, "name", "Name")
    key = _get_any(_get_any(s3, "object", "Object") or {}, "key", "Key")

    if not bucket or not key:
        raise ValueError(
            f"S3 notification record has no bucket/key (event source: "
            f"{_get_any(record, 'eventSource', 'EventSource')})"
        )

    # Keys are URL-encoded in notifications ("my file.pdf" -> "my+file.pdf")
    return ObjectReference(bucket=bucket, key=unquote_plus(key))


def extract_object_reference(event: dict[str, Any]) -> ObjectReference | None:
    """
    Extract the uploaded object's bucket and key from a Lambda event.

    Handles both:
    - S3 notification format ({"Records": [{"s3": {...}}]})
    - Direct invocation format ({"bucket": ..., "key": ...}, for testing)

    Args:
        event: Lambda event payload

    Returns:
        ObjectReference for Records[0], or None if the event has no records
        or Records[0] carries no S3 entity

    Raises:
        ValueError: If the S3 entity is present but names no bucket/key
    """
    if "bucket" in event and "key" in event:
        return ObjectReference(bucket=event["bucket"], key=event["key"])

    records = _get_any(event, "Records", "records")
    if not records:
        return None

    return _parse_record(records[0])
