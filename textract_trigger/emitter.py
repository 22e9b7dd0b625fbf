"""
Result Emission

Writes each detected text block to the log as it is produced.
"""

import structlog

from textract_trigger.models import TextBlock

log = structlog.get_logger()


def emit_block(block: TextBlock) -> None:
    """Log one text block as a `text_block_detected` record."""
    log.info(
        "text_block_detected",
        block_type=block.type_name,
        text=block.text,
        block_id=block.id,
        page=block.page,
        confidence=block.confidence,
    )
