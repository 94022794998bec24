"""Bulk converter for turning USPTO Red Book grant files into patent records."""

import json
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Union

import structlog

from ...config import get_settings
from ...models.patent import BulkFormat, PatentRecord
from ...utils.errors import UnparsableDocumentError, UnsupportedFormatError
from ...utils.observability import Metrics, metrics as default_metrics, track_duration
from ...utils.pftaps_parser import PftapsPatentParser
from ...utils.segmenter import DocumentSegmenter
from ...utils.xml_parser import XMLPatentParser

logger = structlog.get_logger(__name__)

# Fields that a source document can fail to provide
EXTRACTED_FIELDS = ('patent_number', 'published_date', 'claims', 'invention_title')


class BulkConverter:
    """Converter for whole bulk grant files.

    Splits a bulk file into documents, extracts each document with the parser
    for its format and returns the records in document order.
    """

    def __init__(self, max_workers: Optional[int] = None, metrics: Optional[Metrics] = None):
        self.segmenter = DocumentSegmenter()
        self.xml_parser = XMLPatentParser()
        self.pftaps_parser = PftapsPatentParser()
        self.max_workers = max_workers if max_workers is not None else get_settings().max_workers
        self.metrics = metrics or default_metrics
        self.extractors = {
            BulkFormat.VARIANT_A: self.xml_parser.parse_grant_v4,
            BulkFormat.VARIANT_B: self.xml_parser.parse_grant_v2,
            BulkFormat.LINE_TAGGED: self.pftaps_parser.parse,
        }

    def convert(self, text: str, bulk_format: Union[BulkFormat, str]) -> List[PatentRecord]:
        """Convert the full text of one bulk file.

        A PATDOC document that cannot be parsed abandons the whole file: the
        result is then a single record with every field empty.
        """
        bulk_format = self._resolve_format(bulk_format)
        chunks = self.segmenter.segment(text, bulk_format)
        if not chunks:
            logger.info("No grant documents found", bulk_format=bulk_format.value)
            return []

        extractor = self.extractors[bulk_format]
        with track_duration(self.metrics.conversion_duration, bulk_format=bulk_format.value):
            try:
                records = self._extract_all(chunks, extractor)
            except UnparsableDocumentError as e:
                logger.warning("Bulk file abandoned after unparsable document",
                               bulk_format=bulk_format.value,
                               chunk_index=e.chunk_index,
                               documents=len(chunks),
                               reason=e.reason)
                self.metrics.file_fallbacks.labels(bulk_format=bulk_format.value).inc()
                return [PatentRecord.empty()]

        self._record_metrics(records, bulk_format)
        logger.info("Bulk file converted", bulk_format=bulk_format.value, records=len(records))
        return records

    def convert_member(self, member_name: str, content: Union[bytes, str]) -> List[PatentRecord]:
        """Convert a bulk archive member, choosing the format from its name."""
        bulk_format = BulkFormat.from_member_name(member_name)
        if isinstance(content, bytes):
            content = content.decode('utf-8', errors='replace')

        logger.info("Converting bulk archive member", member_name=member_name, bulk_format=bulk_format.value)
        return self.convert(content, bulk_format)

    def _resolve_format(self, bulk_format: Union[BulkFormat, str]) -> BulkFormat:
        try:
            return BulkFormat(bulk_format)
        except ValueError as e:
            raise UnsupportedFormatError(
                f"Unsupported bulk format: {bulk_format}",
                {"bulk_format": str(bulk_format)},
            ) from e

    def _extract_all(self, chunks: List[str], extractor: Callable[[str], PatentRecord]) -> List[PatentRecord]:
        def extract(index: int, chunk: str) -> PatentRecord:
            try:
                return extractor(chunk)
            except UnparsableDocumentError as e:
                e.chunk_index = index
                e.details["chunk_index"] = index
                raise

        if self.max_workers > 1 and len(chunks) > 1:
            # map yields in submission order, so records keep document order
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                return list(executor.map(extract, range(len(chunks)), chunks))

        return [extract(index, chunk) for index, chunk in enumerate(chunks)]

    def _record_metrics(self, records: List[PatentRecord], bulk_format: BulkFormat):
        self.metrics.documents_processed.labels(bulk_format=bulk_format.value).inc(len(records))
        for record in records:
            for field in EXTRACTED_FIELDS:
                if getattr(record, field) is None:
                    self.metrics.field_misses.labels(bulk_format=bulk_format.value, field=field).inc()
                    logger.debug("Field unavailable", bulk_format=bulk_format.value,
                                 patent_number=record.patent_number, field=field)


def records_to_json(records: Sequence[PatentRecord]) -> str:
    """Serialize records to a JSON array of six-field objects."""
    return json.dumps([record.model_dump() for record in records])
