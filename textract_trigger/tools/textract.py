"""
Textract Tools

Thin wrappers around the asynchronous text detection API.
Error translation happens in the controller, which knows the job context.
"""

from contextlib import closing, contextmanager
from typing import Any, Iterator

import boto3

from textract_trigger.config import Settings, get_settings
from textract_trigger.models import ObjectReference


def _get_client(settings: Settings | None = None):
    """Get Textract client."""
    settings = settings or get_settings()
    return boto3.client("textract", **settings.textract_config)


@contextmanager
def open_client(settings: Settings | None = None) -> Iterator:
    """Yield a Textract client that is closed when the block exits."""
    with closing(_get_client(settings)) as client:
        yield client


def start_text_detection(
    client,
    ref: ObjectReference,
    *,
    client_request_token: str | None = None,
    job_tag: str | None = None,
) -> str:
    """
    Start an async StartDocumentTextDetection job for an S3 object.

    Returns:
        Textract JobId

    Raises:
        botocore.exceptions.ClientError: If Textract rejects the request
    """
    request: dict[str, Any] = {
        "DocumentLocation": {
            "S3Object": {
                "Bucket": ref.bucket,
                "Name": ref.key,
            }
        },
    }

    if client_request_token:
        request["ClientRequestToken"] = client_request_token[:64]
    if job_tag:
        request["JobTag"] = job_tag

    response = client.start_document_text_detection(**request)
    return response["JobId"]


def get_text_detection(
    client,
    job_id: str,
    *,
    next_token: str | None = None,
    max_results: int | None = None,
) -> dict[str, Any]:
    """
    Fetch one GetDocumentTextDetection response.

    NextToken is only sent when non-empty.

    Raises:
        botocore.exceptions.ClientError: If the request fails
    """
    params: dict[str, Any] = {"JobId": job_id}
    if next_token:
        params["NextToken"] = next_token
    if max_results:
        params["MaxResults"] = max_results

    return client.get_document_text_detection(**params)
