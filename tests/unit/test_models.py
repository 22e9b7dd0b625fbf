"""
Test Pydantic Models

Unit tests for object references, text blocks, result pages and jobs.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from textract_trigger.exceptions import InvalidJobTransitionError
from textract_trigger.job_status import JobStatus
from textract_trigger.models import (
    BlockType,
    DetectionJob,
    DetectionOutcome,
    ObjectMetadata,
    ObjectReference,
    ResultPage,
    TextBlock,
)


class TestObjectReference:
    """Tests for ObjectReference model."""

    def test_s3_uri(self):
        ref = ObjectReference(bucket="docs", key="a/b.pdf")
        assert ref.s3_uri == "s3://docs/a/b.pdf"

    def test_from_s3_uri(self):
        ref = ObjectReference.from_s3_uri("s3://docs//a/b.pdf")
        assert ref == ObjectReference(bucket="docs", key="a/b.pdf")

    def test_from_s3_uri_invalid_scheme(self):
        with pytest.raises(ValueError, match="Invalid S3 URI scheme"):
            ObjectReference.from_s3_uri("https://docs/a.pdf")

    def test_from_s3_uri_without_key(self):
        with pytest.raises(ValueError, match="Invalid S3 URI"):
            ObjectReference.from_s3_uri("s3://docs/")

    def test_empty_bucket_rejected(self):
        with pytest.raises(ValidationError):
            ObjectReference(bucket="", key="a.pdf")

    def test_frozen(self):
        ref = ObjectReference(bucket="docs", key="a.pdf")
        with pytest.raises(ValidationError):
            ref.key = "b.pdf"


class TestObjectMetadata:
    """Tests for ObjectMetadata model."""

    def test_from_head_object(self):
        ref = ObjectReference(bucket="docs", key="a.pdf")
        modified = datetime(2025, 2, 6, tzinfo=timezone.utc)

        metadata = ObjectMetadata.from_head_object(ref, {
            "ContentType": "application/pdf",
            "ContentLength": 2048,
            "ETag": '"abc"',
            "LastModified": modified,
            "ResponseMetadata": {"HTTPStatusCode": 200},
        })

        assert metadata.content_type == "application/pdf"
        assert metadata.content_length == 2048
        assert metadata.etag == '"abc"'
        assert metadata.last_modified == modified


class TestTextBlock:
    """Tests for TextBlock model."""

    def test_from_textract(self):
        block = TextBlock.from_textract({
            "BlockType": "LINE",
            "Text": "Invoice total",
            "Id": "b-1",
            "Page": 2,
            "Confidence": 99.1,
            "Geometry": {},
        })

        assert block.block_type == BlockType.LINE
        assert block.text == "Invoice total"
        assert block.page == 2

    def test_page_block_has_no_text(self):
        block = TextBlock.from_textract({"BlockType": "PAGE", "Id": "p-1"})
        assert block.text is None

    def test_unknown_block_type_kept_as_string(self):
        block = TextBlock.from_textract({"BlockType": "PARAGRAPH", "Text": "x"})

        assert block.block_type == "PARAGRAPH"
        assert not isinstance(block.block_type, BlockType)
        assert block.type_name == "PARAGRAPH"

    def test_known_block_type_is_enum(self):
        block = TextBlock.from_textract({"BlockType": "WORD", "Text": "x"})

        assert block.block_type is BlockType.WORD
        assert block.type_name == "WORD"


class TestResultPage:
    """Tests for ResultPage model."""

    def test_from_response_keeps_block_order(self):
        page = ResultPage.from_response({
            "JobStatus": "SUCCEEDED",
            "Blocks": [
                {"BlockType": "LINE", "Text": "B"},
                {"BlockType": "LINE", "Text": "A"},
            ],
            "NextToken": "t1",
        })

        assert [b.text for b in page.blocks] == ["B", "A"]
        assert page.has_more is True

    def test_missing_token_ends_pagination(self):
        page = ResultPage.from_response({"JobStatus": "SUCCEEDED", "Blocks": []})
        assert page.has_more is False

    def test_empty_token_ends_pagination(self):
        """An empty string token means the same as no token."""
        page = ResultPage.from_response(
            {"JobStatus": "SUCCEEDED", "Blocks": [], "NextToken": ""}
        )
        assert page.has_more is False

    def test_failed_page_status(self):
        page = ResultPage.from_response(
            {"JobStatus": "FAILED", "StatusMessage": "bad format"}
        )
        assert page.status == JobStatus.FAILED
        assert page.status_message == "bad format"


class TestDetectionJob:
    """Tests for DetectionJob model."""

    @pytest.fixture
    def job(self) -> DetectionJob:
        return DetectionJob(
            job_id="job-1",
            object_ref=ObjectReference(bucket="docs", key="a.pdf"),
        )

    def test_starts_submitted(self, job):
        assert job.status == JobStatus.SUBMITTED
        assert job.is_terminal is False

    def test_with_status_keeps_job_id(self, job):
        running = job.with_status(JobStatus.IN_PROGRESS)
        done = running.with_status(JobStatus.SUCCEEDED)

        assert done.job_id == "job-1"
        assert done.succeeded is True
        assert job.status == JobStatus.SUBMITTED  # original untouched

    def test_with_status_records_message(self, job):
        failed = job.with_status(JobStatus.FAILED, "bad format")
        assert failed.status_message == "bad format"

    def test_terminal_job_cannot_change(self, job):
        done = job.with_status(JobStatus.SUCCEEDED)
        with pytest.raises(InvalidJobTransitionError):
            done.with_status(JobStatus.IN_PROGRESS)

    def test_outcome_succeeded(self, job):
        outcome = DetectionOutcome(job=job.with_status(JobStatus.SUCCEEDED), blocks_emitted=3)
        assert outcome.succeeded is True
