"""
S3ObjectCreated Lambda Handler

Main entry point for running Textract text detection on newly uploaded
S3 objects. Detected text blocks are written to the log.

Trigger: S3 bucket notification (s3:ObjectCreated:*)
Output: one `text_block_detected` log record per block

Flow:
1. Extract bucket/key from Records[0] of the notification
2. Read object metadata (and content) from S3
3. Check the bucket is in the Textract region
4. Start a text detection job and poll until it finishes
5. Page through the results, logging each block
6. Return the object's content type
"""

import logging
import time
from typing import Any

import structlog

from lambdas.s3_object_created.notification import extract_object_reference
from textract_trigger.config import Settings, get_settings
from textract_trigger.controller import JobLifecycleController, build_request_token
from textract_trigger.exceptions import RegionMismatchError
from textract_trigger.models import ObjectReference
from textract_trigger.tools import s3, textract

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logging.getLogger().setLevel(get_settings().log_level)

log = structlog.get_logger()

ACCESS_HINT = (
    "Make sure they exist and your bucket is in the same region as this function."
)


def _max_wait_seconds(settings: Settings, context: Any) -> float:
    """
    Wait budget for the poll loop.

    The configured limit, narrowed to the Lambda's remaining time minus
    a safety margin when the context can report it.
    """
    budget = settings.poll_max_wait_seconds

    get_remaining = getattr(context, "get_remaining_time_in_millis", None)
    if callable(get_remaining):
        remaining = get_remaining() / 1000 - settings.timeout_safety_margin_seconds
        budget = min(budget, max(remaining, 0.0))

    return budget


def _check_bucket_region(s3_client, object_ref: ObjectReference, settings: Settings) -> None:
    """
    Textract can only read objects from buckets in its own region.

    Raises:
        RegionMismatchError: If the regions differ
    """
    bucket_region = s3.get_bucket_region(s3_client, object_ref.bucket)
    if bucket_region != settings.textract_region_name:
        raise RegionMismatchError(
            bucket=object_ref.bucket,
            key=object_ref.key,
            bucket_region=bucket_region,
            service_region=settings.textract_region_name,
        )


def lambda_handler(event: dict[str, Any], context: Any) -> str | None:
    """
    AWS Lambda handler for S3 object-created notifications.

    Args:
        event: S3 notification (or direct {"bucket", "key"} payload)
        context: Lambda context

    Returns:
        The object's content type, or None if the event has no records
        (or its first record has no S3 entity).
        A Textract job that FAILED still returns the content type.

    Raises:
        Any error from S3 or Textract, after logging it with the
        bucket/key context. A malformed record raises ValueError after
        an `invalid_notification` log.
    """
    start_time = time.time()
    request_id = getattr(context, "aws_request_id", "local")

    try:
        object_ref = extract_object_reference(event)
    except ValueError as e:
        log.exception(
            "invalid_notification",
            request_id=request_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise

    if object_ref is None:
        log.info("no_records_in_event", request_id=request_id)
        return None

    record_count = len(event.get("Records", []))
    if record_count > 1:
        log.warning(
            "extra_records_ignored",
            request_id=request_id,
            record_count=record_count,
        )

    settings = get_settings()

    log.info(
        "processing_object",
        request_id=request_id,
        bucket=object_ref.bucket,
        key=object_ref.key,
    )

    try:
        with s3.open_client(settings) as s3_client, \
             textract.open_client(settings) as textract_client:
            metadata = s3.get_object_metadata(s3_client, object_ref)

            log.info(
                "object_loaded",
                bucket=object_ref.bucket,
                key=object_ref.key,
                size_bytes=metadata.content_length,
                content_type=metadata.content_type,
            )

            if settings.download_object:
                s3.read_object(s3_client, object_ref)

            if settings.verify_bucket_region:
                _check_bucket_region(s3_client, object_ref, settings)

            controller = JobLifecycleController(textract_client, settings)
            outcome = controller.run(
                object_ref,
                max_wait=_max_wait_seconds(settings, context),
                client_request_token=build_request_token(metadata),
            )

    except Exception as e:
        log.exception(
            "object_processing_failed",
            request_id=request_id,
            bucket=object_ref.bucket,
            key=object_ref.key,
            hint=ACCESS_HINT,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise

    duration_ms = int((time.time() - start_time) * 1000)

    log.info(
        "successfully_executed",
        request_id=request_id,
        job_id=outcome.job.job_id,
        job_status=outcome.job.status.value,
        blocks_emitted=outcome.blocks_emitted,
        content_type=metadata.content_type,
        duration_ms=duration_ms,
    )

    return metadata.content_type
