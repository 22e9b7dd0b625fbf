"""
Detection Models

Pydantic models for the objects that flow through one invocation:
the S3 object reference, the detection job and its result pages.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

from textract_trigger.job_status import JobStatus, validate_transition


class ObjectReference(BaseModel):
    """Identifies the uploaded document. Consumed once per invocation."""

    model_config = ConfigDict(frozen=True)

    bucket: str = Field(..., min_length=1, description="S3 bucket name")
    key: str = Field(..., min_length=1, description="S3 object key")

    @property
    def s3_uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    @classmethod
    def from_s3_uri(cls, s3_uri: str) -> "ObjectReference":
        """
        Parse an S3 URI into a reference.

        Raises:
            ValueError: If the URI is not s3://bucket/key
        """
        parsed = urlparse(s3_uri)
        if parsed.scheme != "s3":
            raise ValueError(f"Invalid S3 URI scheme: {parsed.scheme}")

        key = parsed.path.lstrip("/")
        if not parsed.netloc or not key:
            raise ValueError(f"Invalid S3 URI: {s3_uri}")

        return cls(bucket=parsed.netloc, key=key)


class ObjectMetadata(BaseModel):
    """Subset of the HeadObject response the handler cares about."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    content_type: str | None = None
    content_length: int | None = Field(default=None, ge=0)
    etag: str | None = None
    last_modified: datetime | None = None

    @classmethod
    def from_head_object(
        cls,
        ref: ObjectReference,
        response: dict[str, Any],
    ) -> "ObjectMetadata":
        return cls(
            bucket=ref.bucket,
            key=ref.key,
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength"),
            etag=response.get("ETag"),
            last_modified=response.get("LastModified"),
        )


class BlockType(str, Enum):
    """Textract block types."""

    PAGE = "PAGE"
    LINE = "LINE"
    WORD = "WORD"
    KEY_VALUE_SET = "KEY_VALUE_SET"
    TABLE = "TABLE"
    CELL = "CELL"
    MERGED_CELL = "MERGED_CELL"
    SELECTION_ELEMENT = "SELECTION_ELEMENT"
    TITLE = "TITLE"
    QUERY = "QUERY"
    QUERY_RESULT = "QUERY_RESULT"
    SIGNATURE = "SIGNATURE"
    TABLE_TITLE = "TABLE_TITLE"
    TABLE_FOOTER = "TABLE_FOOTER"
    LAYOUT_TEXT = "LAYOUT_TEXT"
    LAYOUT_TITLE = "LAYOUT_TITLE"
    LAYOUT_HEADER = "LAYOUT_HEADER"
    LAYOUT_FOOTER = "LAYOUT_FOOTER"
    LAYOUT_SECTION_HEADER = "LAYOUT_SECTION_HEADER"
    LAYOUT_PAGE_NUMBER = "LAYOUT_PAGE_NUMBER"
    LAYOUT_LIST = "LAYOUT_LIST"
    LAYOUT_FIGURE = "LAYOUT_FIGURE"
    LAYOUT_TABLE = "LAYOUT_TABLE"
    LAYOUT_KEY_VALUE = "LAYOUT_KEY_VALUE"


class TextBlock(BaseModel):
    """One recognized element (page, line, word...) of the document."""

    model_config = ConfigDict(frozen=True)

    # Block types Textract adds later are kept as the raw string
    block_type: BlockType | str = Field(
        ..., union_mode="left_to_right", description="Textract BlockType"
    )
    text: str | None = Field(default=None, description="Recognized text, if any")
    id: str | None = Field(default=None, description="Textract block Id")
    page: int | None = Field(default=None, ge=1, description="1-based page number")
    confidence: float | None = Field(default=None, ge=0.0, le=100.0)

    @property
    def type_name(self) -> str:
        return getattr(self.block_type, "value", self.block_type)

    @classmethod
    def from_textract(cls, block: dict[str, Any]) -> "TextBlock":
        return cls(
            block_type=block["BlockType"],
            text=block.get("Text"),
            id=block.get("Id"),
            page=block.get("Page"),
            confidence=block.get("Confidence"),
        )


class ResultPage(BaseModel):
    """One GetDocumentTextDetection response page."""

    model_config = ConfigDict(frozen=True)

    status: JobStatus
    blocks: tuple[TextBlock, ...] = ()
    next_token: str | None = None
    status_message: str | None = None

    @property
    def has_more(self) -> bool:
        """An empty token ends pagination just like a missing one."""
        return bool(self.next_token)

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "ResultPage":
        return cls(
            status=JobStatus.from_service(response.get("JobStatus")),
            blocks=tuple(
                TextBlock.from_textract(block)
                for block in response.get("Blocks", [])
            ),
            next_token=response.get("NextToken"),
            status_message=response.get("StatusMessage"),
        )


class DetectionJob(BaseModel):
    """
    An asynchronous text detection job.

    Immutable: a status change produces a new instance with the same
    job_id, after the transition has been validated.
    """

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(..., min_length=1, description="Textract JobId")
    object_ref: ObjectReference
    status: JobStatus = JobStatus.SUBMITTED
    status_message: str | None = None
    submitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.SUCCEEDED

    def with_status(
        self,
        status: JobStatus,
        status_message: str | None = None,
    ) -> "DetectionJob":
        validate_transition(self.status, status)
        return self.model_copy(
            update={"status": status, "status_message": status_message}
        )


class DetectionOutcome(BaseModel):
    """Summary of one controller run."""

    model_config = ConfigDict(frozen=True)

    job: DetectionJob
    polls: int = Field(default=0, ge=0)
    pages_fetched: int = Field(default=0, ge=0)
    blocks_emitted: int = Field(default=0, ge=0)

    @property
    def succeeded(self) -> bool:
        return self.job.succeeded
