"""
Pytest Configuration and Shared Fixtures

Provides moto AWS mocking, sample events, and test utilities.
"""

import os
from typing import Any

import boto3
import pytest
from moto import mock_aws

# Set test environment before importing application modules
os.environ["TEXTRACT_TRIGGER_AWS_REGION"] = "us-west-2"
os.environ["TEXTRACT_TRIGGER_POLL_INTERVAL_SECONDS"] = "1"
os.environ["AWS_DEFAULT_REGION"] = "us-west-2"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

from tests.mocks.mock_textract import MockTextractClient  # noqa: E402
from textract_trigger.config import Settings  # noqa: E402


# --- Time Fixtures ---


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    """Deterministic clock/sleep pair for the poll loop."""
    return FakeClock()


# --- Settings Fixtures ---


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment files."""
    return Settings(
        _env_file=None,
        aws_region="us-west-2",
        poll_interval_seconds=1.0,
        poll_max_wait_seconds=60.0,
        timeout_safety_margin_seconds=5.0,
    )


# --- AWS Mocking Fixtures ---


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    return {
        "aws_access_key_id": "testing",
        "aws_secret_access_key": "testing",
        "region_name": "us-west-2",
    }


@pytest.fixture
def bucket_name() -> str:
    """Sample upload bucket."""
    return "test-uploads"


@pytest.fixture
def object_key() -> str:
    """Sample uploaded document key."""
    return "incoming/invoice 2025-01.pdf"


@pytest.fixture
def mock_s3(aws_credentials, bucket_name: str, object_key: str):
    """Create a mocked S3 bucket in us-west-2 holding one PDF."""
    with mock_aws():
        s3 = boto3.client("s3", **aws_credentials)
        s3.create_bucket(
            Bucket=bucket_name,
            CreateBucketConfiguration={"LocationConstraint": "us-west-2"},
        )
        s3.put_object(
            Bucket=bucket_name,
            Key=object_key,
            Body=b"%PDF-1.4 fake document",
            ContentType="application/pdf",
        )
        yield s3


@pytest.fixture
def mock_textract() -> MockTextractClient:
    """Scripted Textract client."""
    return MockTextractClient()


# --- Event Fixtures ---


@pytest.fixture
def s3_put_event(bucket_name: str) -> dict[str, Any]:
    """Sample S3 ObjectCreated:Put notification (key is URL-encoded)."""
    return {
        "Records": [
            {
                "eventVersion": "2.1",
                "eventSource": "aws:s3",
                "awsRegion": "us-west-2",
                "eventTime": "2025-02-06T10:30:00.000Z",
                "eventName": "ObjectCreated:Put",
                "s3": {
                    "s3SchemaVersion": "1.0",
                    "configurationId": "textract-trigger",
                    "bucket": {
                        "name": bucket_name,
                        "arn": f"arn:aws:s3:::{bucket_name}",
                    },
                    "object": {
                        "key": "incoming/invoice+2025-01.pdf",
                        "size": 22,
                        "eTag": "0123456789abcdef0123456789abcdef",
                        "sequencer": "0055AED6DCD90281E5",
                    },
                },
            }
        ]
    }


@pytest.fixture
def empty_event() -> dict[str, Any]:
    """Event without notification records."""
    return {"Records": []}


@pytest.fixture
def lambda_context():
    """Minimal Lambda context with 60 seconds remaining."""

    class _Context:
        aws_request_id = "req-0001"
        function_name = "s3-textract-trigger"

        def get_remaining_time_in_millis(self) -> int:
            return 60_000

    return _Context()
