"""
Integration test fixtures and configuration.

Integration tests run the Lambda handler against moto-backed S3
and the scripted Textract client to test complete upload flows.
"""

from typing import Any, Dict
from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws

from tests.mocks.mock_textract import MockTextractClient
from tests.utils.event_generator import MockEventGenerator


@pytest.fixture
def integration_aws_setup():
    """
    Set up the AWS environment for integration tests.

    Provides a mocked S3 with an upload bucket in the function's region
    and a second bucket in another region.
    """
    with mock_aws():
        s3 = boto3.client("s3", region_name="us-west-2")

        # Create S3 buckets (requires LocationConstraint for non us-east-1 regions)
        s3.create_bucket(
            Bucket="uploads-integration",
            CreateBucketConfiguration={"LocationConstraint": "us-west-2"},
        )
        s3_eu = boto3.client("s3", region_name="eu-central-1")
        s3_eu.create_bucket(
            Bucket="uploads-integration-eu",
            CreateBucketConfiguration={"LocationConstraint": "eu-central-1"},
        )

        yield {
            "s3": s3,
            "s3_eu": s3_eu,
            "bucket": "uploads-integration",
            "foreign_bucket": "uploads-integration-eu",
        }


@pytest.fixture
def event_generator() -> MockEventGenerator:
    """Seeded generator for reproducible documents."""
    return MockEventGenerator(seed=2025)


@pytest.fixture
def integration_textract(settings) -> Dict[str, Any]:
    """Route the handler's Textract client to a scripted mock."""
    textract = MockTextractClient(job_id="integration-job-001")
    fast = settings.model_copy(update={"poll_interval_seconds": 0.01})

    with patch("lambdas.s3_object_created.handler.get_settings", return_value=fast), \
         patch("textract_trigger.tools.textract._get_client", return_value=textract):
        yield {"client": textract, "settings": fast}
