"""Parser for the tagged-text (pftaps) bulk grant documents, 1976-2001."""

import re
from typing import List, Optional

import structlog

from ..models.patent import PatentClaim, PatentRecord
from .normalizer import PatentNormalizer

logger = structlog.get_logger(__name__)

LINE_BREAK = re.compile(r'\r?\n')
CLAIMS_SECTION_HEADER = re.compile(r'(?:CLMS|DCLM)\r?\n')
CLAIM_NUMBER_LINE = re.compile(r'NUM\s{2}([0-9]+\.)')
STATEMENT_LINE = re.compile(r'STM\s{2}')
CONTINUATION_TAG = re.compile(r'^(?:PAR\s{2}[0-9]+\.|(?:PA1|PAR|PAL)\s{2})')


def _complete_claim(claim_number: str, accumulator: str) -> PatentClaim:
    return PatentClaim(
        claim_number=claim_number.rstrip('.').strip(),
        claim_text=accumulator.strip(),
    )


def reconstruct_claims(lines: List[str]) -> List[PatentClaim]:
    """Merge the lines of a claims section into complete claims.

    A ``NUM  <n>.`` line closes the claim accumulated so far and starts the
    next one. ``STM`` lines are claim statements and are skipped. Every other
    line is claim text, with its paragraph tag removed.

    A claim is only emitted when the next ``NUM`` line is reached, so the
    last claim of a multi-line section is not part of the result. A section
    of a single line is emitted as claim "1".
    """
    claims = []
    claim_number = '1.'
    accumulator = ''

    for line in lines:
        number_match = CLAIM_NUMBER_LINE.fullmatch(line)
        if number_match:
            if accumulator:
                claims.append(_complete_claim(claim_number, accumulator))
            claim_number = number_match.group(1)
            accumulator = ''
            continue

        if STATEMENT_LINE.match(line):
            continue

        accumulator += CONTINUATION_TAG.sub('', line, count=1).strip() + ' '

        if len(lines) == 1:
            claims.append(_complete_claim(claim_number, accumulator))

    return claims


class PftapsPatentParser:
    """Parser for one ``PATN`` record of a pftaps bulk file."""

    def __init__(self):
        self.normalizer = PatentNormalizer()

    def parse(self, chunk: str) -> PatentRecord:
        """Parse one tagged-text grant record."""
        lines = LINE_BREAK.split(chunk)

        patent_number = self._tagged_value(lines, 'PNO')
        if patent_number is not None:
            patent_number = self.normalizer.strip_leading_zeros(patent_number)

        return PatentRecord(
            patent_number=patent_number,
            published_date=self._tagged_value(lines, 'ISD'),
            claims=self._extract_claims(chunk),
            invention_title=self._tagged_value(lines, 'TTL'),
        )

    def _tagged_value(self, lines: List[str], tag: str) -> Optional[str]:
        """Value of the first line carrying ``tag``."""
        prefix = f'{tag}  '
        for line in lines:
            if line.startswith(prefix):
                return line.split(prefix)[1]
        return None

    def _extract_claims(self, chunk: str) -> Optional[List[PatentClaim]]:
        sections = CLAIMS_SECTION_HEADER.split(chunk)
        if len(sections) == 1:
            logger.debug("No claims section in record")
            return None

        # Claims run from the last section header to the end of the record
        claim_lines = LINE_BREAK.split(sections[-1].strip())
        return reconstruct_claims(claim_lines)
