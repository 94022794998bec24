"""Patent data models for the bulk grant converters."""

import posixpath
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..utils.errors import UnsupportedFormatError


class BulkFormat(str, Enum):
    """Encodings used by the USPTO Red Book bulk grant files.

    The value is the archive member filename prefix that identifies the
    encoding.
    """
    VARIANT_A = "ipg"       # 2005 onward XML, us-patent-grant root
    VARIANT_B = "pg0"       # 2001-2004 SGML-style XML, PATDOC root
    LINE_TAGGED = "pftaps"  # 1976-2001 tagged text, PATN header

    @classmethod
    def from_member_name(cls, member_name: str) -> "BulkFormat":
        """Resolve the format of a bulk archive member from its filename."""
        base_name = posixpath.basename(member_name.replace("\\", "/")).lower()
        for bulk_format in cls:
            if base_name.startswith(bulk_format.value):
                return bulk_format
        raise UnsupportedFormatError(
            f"Unrecognised bulk file name: {member_name}",
            {"member_name": member_name},
        )


class PatentClaim(BaseModel):
    """Model for a patent claim."""
    model_config = ConfigDict(frozen=True)

    claim_number: str
    claim_text: str


class PatentRecord(BaseModel):
    """Canonical record produced for every grant document in a bulk file."""
    model_config = ConfigDict(frozen=True)

    patent_number: Optional[str] = None
    expiration_date: None = None
    published_date: Optional[str] = None
    application_numbers: None = None
    claims: Optional[List[PatentClaim]] = None
    invention_title: Optional[str] = None

    @classmethod
    def empty(cls) -> "PatentRecord":
        """Record with every field unavailable."""
        return cls()
