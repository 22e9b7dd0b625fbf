"""
Custom Exceptions for the S3 Text Detection Trigger

All exceptions follow the pattern of specific, actionable errors
with context needed for debugging and logging.

A job that Textract reports as FAILED is not an exception: it is
absorbed by the controller and reported through the logs.
"""

from dataclasses import dataclass
from typing import Any


class TextractTriggerError(Exception):
    """Base exception for the text detection trigger."""

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


@dataclass
class ObjectAccessError(TextractTriggerError):
    """S3 object could not be read (missing, wrong region, access denied)."""

    operation: str  # "head_object", "get_object", "get_bucket_location"
    bucket: str
    key: str | None = None
    error_code: str | None = None

    def __init__(
        self,
        operation: str,
        bucket: str,
        key: str | None = None,
        error_code: str | None = None,
        error_message: str | None = None,
    ) -> None:
        self.operation = operation
        self.bucket = bucket
        self.key = key
        self.error_code = error_code
        super().__init__(
            f"S3 {operation} failed for s3://{bucket}/{key or '*'}: "
            f"{error_message or 'Unknown error'}",
            operation=operation,
            bucket=bucket,
            key=key,
            error_code=error_code,
            error_message=error_message,
        )


@dataclass
class RegionMismatchError(ObjectAccessError):
    """Bucket lives in a region the Textract endpoint cannot read from."""

    bucket_region: str | None = None
    service_region: str | None = None

    def __init__(
        self,
        bucket: str,
        bucket_region: str,
        service_region: str,
        key: str | None = None,
    ) -> None:
        self.bucket_region = bucket_region
        self.service_region = service_region
        super().__init__(
            operation="region_check",
            bucket=bucket,
            key=key,
            error_code="RegionMismatch",
            error_message=(
                f"bucket is in {bucket_region} but Textract runs in {service_region}"
            ),
        )


@dataclass
class JobSubmissionError(ObjectAccessError):
    """StartDocumentTextDetection was rejected."""

    def __init__(
        self,
        bucket: str,
        key: str,
        error_code: str | None = None,
        error_message: str | None = None,
    ) -> None:
        super().__init__(
            operation="start_document_text_detection",
            bucket=bucket,
            key=key,
            error_code=error_code,
            error_message=error_message,
        )


@dataclass
class JobStatusError(TextractTriggerError):
    """GetDocumentTextDetection failed for a submitted job."""

    job_id: str
    operation: str  # "poll", "fetch_page"
    error_code: str | None = None

    def __init__(
        self,
        job_id: str,
        operation: str,
        error_code: str | None = None,
        error_message: str | None = None,
    ) -> None:
        self.job_id = job_id
        self.operation = operation
        self.error_code = error_code
        super().__init__(
            f"Textract {operation} failed for job '{job_id}': "
            f"{error_message or 'Unknown error'}",
            job_id=job_id,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
        )


@dataclass
class DetectionTimeoutError(TextractTriggerError):
    """Job was still in progress when the wait budget ran out."""

    job_id: str
    waited_seconds: float
    max_wait_seconds: float

    def __init__(
        self,
        job_id: str,
        waited_seconds: float,
        max_wait_seconds: float,
    ) -> None:
        self.job_id = job_id
        self.waited_seconds = waited_seconds
        self.max_wait_seconds = max_wait_seconds
        super().__init__(
            f"Job '{job_id}' still in progress after {waited_seconds:.1f}s "
            f"(limit {max_wait_seconds:.1f}s)",
            job_id=job_id,
            waited_seconds=round(waited_seconds, 3),
            max_wait_seconds=max_wait_seconds,
        )


@dataclass
class InvalidJobTransitionError(TextractTriggerError):
    """Attempted invalid job status transition."""

    current_status: str
    new_status: str
    allowed_transitions: list[str]

    def __init__(
        self,
        current_status: str,
        new_status: str,
        allowed_transitions: list[str],
    ) -> None:
        self.current_status = current_status
        self.new_status = new_status
        self.allowed_transitions = allowed_transitions
        super().__init__(
            f"Cannot transition from '{current_status}' to '{new_status}'. "
            f"Allowed transitions: {allowed_transitions}",
            current_status=current_status,
            new_status=new_status,
            allowed_transitions=allowed_transitions,
        )
