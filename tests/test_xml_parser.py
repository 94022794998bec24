import pytest

from redbook.models.patent import BulkFormat, PatentClaim
from redbook.utils.errors import UnparsableDocumentError
from redbook.utils.segmenter import DocumentSegmenter
from redbook.utils.xml_parser import XMLPatentParser

PULMONARY_EDEMA_TITLE = (
    "Methods of reducing the risk of occurrence of pulmonary edema in children "
    "in need of treatment with inhaled nitric oxide"
)


def grant_v4(bibliographic: str = "", claims: str = "", date_publ: str = "20121009") -> str:
    return (
        f'<us-patent-grant lang="EN" date-publ="{date_publ}">'
        f'<us-bibliographic-data-grant>{bibliographic}</us-bibliographic-data-grant>'
        f'{claims}</us-patent-grant>'
    )


def patdoc(sdobi: str = "", claims: str = "") -> str:
    return f'<PATDOC DTD="2.4"><SDOBI>{sdobi}</SDOBI><SDOCL>{claims}</SDOCL></PATDOC>'


class TestGrantV4Parser:
    """Test extraction of us-patent-grant documents."""

    @pytest.fixture
    def parser(self):
        return XMLPatentParser()

    @pytest.fixture
    def sample_chunk(self, ipg_sample):
        return DocumentSegmenter().segment(ipg_sample, BulkFormat.VARIANT_A)[0]

    def test_parse_sample(self, parser, sample_chunk):
        """Test every field of the sample document."""
        record = parser.parse_grant_v4(sample_chunk)

        assert record.patent_number == "8282966"
        assert record.published_date == "2012-10-09"
        assert record.invention_title == PULMONARY_EDEMA_TITLE
        assert record.expiration_date is None
        assert record.application_numbers is None
        assert len(record.claims) == 29

    def test_claims_are_numbered_and_stripped(self, parser, sample_chunk):
        """Test claim numbers lose leading zeros and claim text loses markup."""
        claims = parser.parse_grant_v4(sample_chunk).claims

        assert [claim.claim_number for claim in claims] == [str(n) for n in range(1, 30)]
        assert claims[0].claim_text.startswith("1. A method of reducing the risk")
        assert claims[0].claim_text.endswith("(c) excluding the child from the treatment.")
        assert "<" not in claims[0].claim_text
        assert claims[1].claim_text == (
            "2. The method of claim 1, wherein the left ventricular dysfunction "
            "is assessed by echocardiography in step 2."
        )

    def test_missing_publication_reference(self, parser):
        """Test a missing path leaves only the patent number empty."""
        chunk = grant_v4(
            bibliographic='<invention-title id="t">Widget</invention-title>',
            claims='<claims><claim id="CLM-00001" num="00001"><claim-text>1. A widget.</claim-text></claim></claims>',
        )

        record = parser.parse_grant_v4(chunk)

        assert record.patent_number is None
        assert record.published_date == "2012-10-09"
        assert record.invention_title == "Widget"
        assert record.claims == [PatentClaim(claim_number="1", claim_text="1. A widget.")]

    def test_invalid_publication_date(self, parser):
        """Test a malformed date-publ attribute gives no date."""
        record = parser.parse_grant_v4(grant_v4(date_publ="2012-10-09"))

        assert record.published_date is None

    def test_missing_publication_date(self, parser):
        """Test a root without date-publ gives no date."""
        chunk = '<us-patent-grant lang="EN"><us-bibliographic-data-grant/></us-patent-grant>'

        assert parser.parse_grant_v4(chunk).published_date is None

    def test_no_claims(self, parser):
        """Test a document without claim blocks has no claim list."""
        assert parser.parse_grant_v4(grant_v4()).claims is None

    def test_claim_without_number_fails_whole_list(self, parser):
        """Test one unnumbered claim empties the whole claim list."""
        chunk = grant_v4(claims=(
            '<claims><claim id="CLM-00001" num="00001"><claim-text>1. A widget.</claim-text></claim>'
            '<claim id="CLM-00002"><claim-text>2. The widget of claim 1.</claim-text></claim></claims>'
        ))

        assert parser.parse_grant_v4(chunk).claims is None

    def test_malformed_document_keeps_raw_text_claims(self, parser):
        """Test a document that is not well-formed still yields its claims."""
        chunk = (
            '<us-patent-grant date-publ="20121009"><us-bibliographic-data-grant>'
            '<invention-title>Broken title</invention>'
            '</us-bibliographic-data-grant>'
            '<claims><claim id="CLM-00001" num="00001"><claim-text>1. A widget.</claim-text></claim></claims>'
            '</us-patent-grant>'
        )

        record = parser.parse_grant_v4(chunk)

        assert record.patent_number is None
        assert record.published_date is None
        assert record.invention_title is None
        assert record.claims == [PatentClaim(claim_number="1", claim_text="1. A widget.")]

    def test_title_keeps_direct_text_only(self, parser):
        """Test text inside child elements of the title is not included."""
        chunk = grant_v4(bibliographic='<invention-title id="t">Compound <i>X</i> salts</invention-title>')

        assert parser.parse_grant_v4(chunk).invention_title == "Compound  salts"


class TestGrantV2Parser:
    """Test extraction of PATDOC documents."""

    @pytest.fixture
    def parser(self):
        return XMLPatentParser()

    @pytest.fixture
    def sample_chunk(self, pg_sample):
        return DocumentSegmenter().segment(pg_sample, BulkFormat.VARIANT_B)[0]

    def test_parse_sample(self, parser, sample_chunk):
        """Test every field of the sample document."""
        record = parser.parse_grant_v2(sample_chunk)

        assert record.patent_number == "D0468073"
        assert record.published_date == "20010606"
        assert record.invention_title == "Popcorn ice cream"
        assert record.expiration_date is None
        assert record.application_numbers is None
        assert record.claims == [
            PatentClaim(
                claim_number="1",
                claim_text="The ornamental design for popcorn ice cream, as shown and described.",
            )
        ]

    def test_patent_number_leading_zeros(self, parser):
        """Test numeric patent numbers lose their leading zeros."""
        chunk = patdoc(sdobi='<B100><B110><DNUM><PDAT>06334567</PDAT></DNUM></B110></B100>')

        assert parser.parse_grant_v2(chunk).patent_number == "6334567"

    def test_missing_fields(self, parser):
        """Test every missing path is reported as None."""
        record = parser.parse_grant_v2(patdoc())

        assert record.patent_number is None
        assert record.published_date is None
        assert record.invention_title is None
        assert record.claims is None

    def test_claim_section_is_one_claim(self, parser):
        """Test a CL block counts as one claim numbered after its first CLM."""
        chunk = patdoc(claims=(
            '<CL><CLM ID="CLM-00001"><PARA><PTEXT><PDAT>1. A cone.</PDAT></PTEXT></PARA></CLM>'
            '<CLM ID="CLM-00002"><PARA><PTEXT><PDAT>2. The cone of claim 1.</PDAT></PTEXT></PARA></CLM></CL>'
        ))

        claims = parser.parse_grant_v2(chunk).claims

        assert claims == [PatentClaim(claim_number="1", claim_text="1. A cone.2. The cone of claim 1.")]

    def test_claim_block_without_identifier(self, parser):
        """Test a CL block without a CLM identifier empties the claim list."""
        chunk = patdoc(claims='<CL><PARA><PDAT>A cone.</PDAT></PARA></CL>')

        assert parser.parse_grant_v2(chunk).claims is None

    def test_undeclared_entities_are_tolerated(self, parser):
        """Test entity references are dropped before parsing."""
        chunk = patdoc(sdobi='<B500><B540><STEXT><PDAT>Caf&eacute; table</PDAT></STEXT></B540></B500>')

        assert parser.parse_grant_v2(chunk).invention_title == "Caf table"

    def test_unparsable_document(self, parser):
        """Test markup that is still broken after clean-up raises."""
        chunk = '<PATDOC DTD="2.4"><SDOBI><B100></SDOBI></PATDOC>'

        with pytest.raises(UnparsableDocumentError) as excinfo:
            parser.parse_grant_v2(chunk)

        assert excinfo.value.reason
