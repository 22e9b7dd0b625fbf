# Shared Infrastructure for the S3 Text Detection Trigger
"""
Shared components for the S3-triggered Textract text detection Lambda.

This package provides:
- Job status state machine (JobStatus, valid transitions)
- Pydantic models for object references, jobs and result pages
- The job lifecycle controller (submit, poll, paginate)
- Tool implementations for S3 and Textract
- Configuration management
- Custom exceptions
"""

from textract_trigger.config import Settings, get_settings
from textract_trigger.controller import JobLifecycleController
from textract_trigger.emitter import emit_block
from textract_trigger.exceptions import (
    DetectionTimeoutError,
    InvalidJobTransitionError,
    JobStatusError,
    JobSubmissionError,
    ObjectAccessError,
    RegionMismatchError,
    TextractTriggerError,
)
from textract_trigger.job_status import JobStatus, VALID_TRANSITIONS, validate_transition
from textract_trigger.models import (
    BlockType,
    DetectionJob,
    DetectionOutcome,
    ObjectMetadata,
    ObjectReference,
    ResultPage,
    TextBlock,
)

__all__ = [
    # State machine
    "JobStatus",
    "VALID_TRANSITIONS",
    "validate_transition",
    # Models
    "BlockType",
    "DetectionJob",
    "DetectionOutcome",
    "ObjectMetadata",
    "ObjectReference",
    "ResultPage",
    "TextBlock",
    # Controller
    "JobLifecycleController",
    "emit_block",
    # Exceptions
    "TextractTriggerError",
    "ObjectAccessError",
    "RegionMismatchError",
    "JobSubmissionError",
    "JobStatusError",
    "DetectionTimeoutError",
    "InvalidJobTransitionError",
    # Config
    "Settings",
    "get_settings",
]
