"""Patent normalizer for the field primitives shared by all bulk formats."""

import re
from datetime import datetime
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

MARKUP_TAG = re.compile(r'<[^>]*>')
ENTITY_REFERENCE = re.compile(r'&[a-zA-Z0-9]*?;')


class PatentNormalizer:
    """Normalizer for patent data fields."""

    def strip_leading_zeros(self, value: str) -> str:
        """Remove leading '0' characters from an identifier.

        This is a string operation, not a numeric parse: "D0468073" is left
        alone and "000" becomes "".
        """
        return value.lstrip('0')

    def reformat_date(
        self,
        value: str,
        from_format: str = '%Y%m%d',
        to_format: str = '%Y-%m-%d',
    ) -> Optional[str]:
        """Reparse a date string and render it in another format.

        Returns None when the value does not match ``from_format``. Fields
        must be written at full width, so "2012119" is rejected even though
        ``strptime`` alone would read it as 2012-11-09.
        """
        try:
            parsed_date = datetime.strptime(value, from_format)
        except ValueError:
            parsed_date = None
        if parsed_date is None or parsed_date.strftime(from_format) != value:
            logger.debug("Date does not match format", value=value, from_format=from_format)
            return None
        return parsed_date.strftime(to_format)

    def strip_markup(self, text: str) -> str:
        """Remove every tag from a markup fragment, keeping its text."""
        return MARKUP_TAG.sub('', text)

    def strip_entity_references(self, text: str) -> str:
        """Remove named entity references such as ``&lsquo;``.

        Numeric character references (``&#x2014;``) are kept.
        """
        return ENTITY_REFERENCE.sub('', text)
