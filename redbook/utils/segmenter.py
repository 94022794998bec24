"""Splits a bulk grant file into one text chunk per grant document."""

import re
from typing import List

import structlog

from ..models.patent import BulkFormat
from .errors import UnsupportedFormatError

logger = structlog.get_logger(__name__)

GRANT_V4_DOCUMENT = re.compile(r'<us-patent-grant\s.*?</us-patent-grant>', re.IGNORECASE | re.DOTALL)
GRANT_V2_DOCUMENT = re.compile(r'<PATDOC\s.*?</PATDOC>', re.IGNORECASE | re.DOTALL)
PFTAPS_RECORD_HEADER = re.compile(r'PATN\r?\n')


class DocumentSegmenter:
    """Segmenter for the three bulk grant encodings."""

    def segment(self, text: str, bulk_format: BulkFormat) -> List[str]:
        """Return the document chunks of a bulk file in file order."""
        if bulk_format is BulkFormat.VARIANT_A:
            chunks = GRANT_V4_DOCUMENT.findall(text)
        elif bulk_format is BulkFormat.VARIANT_B:
            chunks = GRANT_V2_DOCUMENT.findall(text)
        elif bulk_format is BulkFormat.LINE_TAGGED:
            # Everything before the first header is file preamble
            chunks = PFTAPS_RECORD_HEADER.split(text)[1:]
        else:
            raise UnsupportedFormatError(
                f"Unsupported bulk format: {bulk_format}",
                {"bulk_format": str(bulk_format)},
            )

        logger.debug("Segmented bulk file", bulk_format=bulk_format.value, chunks=len(chunks))
        return chunks
