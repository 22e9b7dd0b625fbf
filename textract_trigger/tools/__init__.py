# Shared Tools
"""
AWS tool implementations for the text detection trigger.

Clients are opened with each module's `open_client()` context manager
and passed explicitly to the tool functions.
"""

from textract_trigger.tools import s3, textract
from textract_trigger.tools.s3 import (
    get_bucket_region,
    get_object_metadata,
    read_object,
)
from textract_trigger.tools.textract import (
    get_text_detection,
    start_text_detection,
)

__all__ = [
    "s3",
    "textract",
    # S3 tools
    "get_object_metadata",
    "read_object",
    "get_bucket_region",
    # Textract tools
    "start_text_detection",
    "get_text_detection",
]
