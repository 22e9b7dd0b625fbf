"""
S3ObjectCreated Lambda

Triggered by S3 object-created notifications.
Runs Textract text detection on the new object and logs every text block.

Trigger: S3 bucket notification (s3:ObjectCreated:*)
Output: structured log records

Flow:
1. Parse Records[0] of the notification
2. Read object metadata from S3
3. Submit a text detection job and wait for it
4. Log every detected block, page by page
"""

from lambdas.s3_object_created.handler import lambda_handler
from lambdas.s3_object_created.notification import extract_object_reference

__all__ = [
    "lambda_handler",
    "extract_object_reference",
]
