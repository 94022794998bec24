"""XML patent parser for USPTO Red Book grant documents (ipg and pg0 files)."""

import re
from typing import List, Optional

import structlog
from lxml import etree

from ..models.patent import PatentClaim, PatentRecord
from .errors import UnparsableDocumentError
from .normalizer import PatentNormalizer

logger = structlog.get_logger(__name__)

# Claims are read from the raw document text, not from the parsed tree
GRANT_V4_CLAIM = re.compile(r'<claim.*?>.*?</claim>', re.DOTALL)
GRANT_V4_CLAIM_NUMBER = re.compile(r'num="([0-9]*)"')
GRANT_V2_CLAIM = re.compile(r'<CL>.*?</CL>', re.DOTALL)
GRANT_V2_CLAIM_NUMBER = re.compile(r'ID="CLM-([0-9]*)"')


class XMLPatentParser:
    """Parser for the two XML grant encodings of the bulk files.

    Each document chunk becomes one ``PatentRecord``. Fields that cannot be
    found are left as None without affecting their siblings.
    """

    def __init__(self):
        self.normalizer = PatentNormalizer()

    def parse_grant_v4(self, chunk: str) -> PatentRecord:
        """Parse one ``us-patent-grant`` document (ipg files, 2005 onward)."""
        root = self._parse_tree(chunk)
        if root is None:
            logger.warning("Grant document is not well-formed, keeping raw-text fields only")

        return PatentRecord(
            patent_number=self._extract_v4_patent_number(root),
            published_date=self._extract_v4_published_date(root),
            claims=self._extract_v4_claims(chunk),
            invention_title=self._extract_v4_title(root),
        )

    def parse_grant_v2(self, chunk: str) -> PatentRecord:
        """Parse one ``PATDOC`` document (pg0 files, 2001-2004).

        Raises:
            UnparsableDocumentError: the document is not well-formed even
                after its entity references are removed.
        """
        cleaned = self.normalizer.strip_entity_references(chunk)
        try:
            root = etree.fromstring(cleaned.encode('utf-8'), self._new_parser())
        except etree.XMLSyntaxError as e:
            raise UnparsableDocumentError("PATDOC document could not be parsed", reason=str(e)) from e

        return PatentRecord(
            patent_number=self._extract_v2_patent_number(root),
            published_date=self._extract_v2_published_date(root),
            claims=self._extract_v2_claims(chunk),
            invention_title=self._extract_v2_title(root),
        )

    def _new_parser(self) -> etree.XMLParser:
        # lxml parsers must not be shared between threads
        return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)

    def _parse_tree(self, chunk: str):
        try:
            return etree.fromstring(chunk.encode('utf-8'), self._new_parser())
        except etree.XMLSyntaxError as e:
            logger.debug("XML syntax error", error=str(e))
            return None

    def _find_path(self, element, *steps: str):
        """Follow child tags from ``element``, returning None on the first miss."""
        for step in steps:
            if element is None:
                return None
            element = element.find(step)
        return element

    def _text(self, element) -> Optional[str]:
        """Direct text of an element, without the text of its children."""
        if element is None:
            return None
        return ''.join(element.xpath('text()'))

    def _scan_claims(self, chunk: str, block_pattern, number_pattern) -> Optional[List[PatentClaim]]:
        """Collect claim blocks from the raw document text.

        The scan is all-or-nothing: no blocks, or a block without a claim
        number, yields None for the whole claim list.
        """
        blocks = block_pattern.findall(chunk)
        if not blocks:
            return None

        claims = []
        for block in blocks:
            number_match = number_pattern.search(block)
            if number_match is None:
                logger.debug("Claim block without a claim number")
                return None
            claims.append(PatentClaim(
                claim_number=self.normalizer.strip_leading_zeros(number_match.group(1)),
                claim_text=self.normalizer.strip_markup(block).strip(),
            ))
        return claims

    # us-patent-grant extraction methods
    def _extract_v4_patent_number(self, root) -> Optional[str]:
        doc_number = self._text(self._find_path(
            root, 'us-bibliographic-data-grant', 'publication-reference', 'document-id', 'doc-number'
        ))
        if doc_number is None:
            return None
        return self.normalizer.strip_leading_zeros(doc_number)

    def _extract_v4_published_date(self, root) -> Optional[str]:
        if root is None:
            return None
        date_publ = root.get('date-publ')
        if date_publ is None:
            return None
        return self.normalizer.reformat_date(date_publ, '%Y%m%d', '%Y-%m-%d')

    def _extract_v4_claims(self, chunk: str) -> Optional[List[PatentClaim]]:
        return self._scan_claims(chunk, GRANT_V4_CLAIM, GRANT_V4_CLAIM_NUMBER)

    def _extract_v4_title(self, root) -> Optional[str]:
        return self._text(self._find_path(root, 'us-bibliographic-data-grant', 'invention-title'))

    # PATDOC extraction methods
    def _extract_v2_patent_number(self, root) -> Optional[str]:
        doc_number = self._text(self._find_path(root, 'SDOBI', 'B100', 'B110', 'DNUM', 'PDAT'))
        if doc_number is None:
            return None
        return self.normalizer.strip_leading_zeros(doc_number)

    def _extract_v2_published_date(self, root) -> Optional[str]:
        return self._text(self._find_path(root, 'SDOBI', 'B200', 'B220', 'DATE', 'PDAT'))

    def _extract_v2_claims(self, chunk: str) -> Optional[List[PatentClaim]]:
        return self._scan_claims(chunk, GRANT_V2_CLAIM, GRANT_V2_CLAIM_NUMBER)

    def _extract_v2_title(self, root) -> Optional[str]:
        return self._text(self._find_path(root, 'SDOBI', 'B500', 'B540', 'STEXT', 'PDAT'))
