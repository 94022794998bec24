from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    # newline="" keeps the CRLF line endings of the pftaps sample
    with open(FIXTURES / name, encoding="utf-8", newline="") as fixture:
        return fixture.read()


@pytest.fixture
def ipg_sample() -> str:
    """Bulk ipg file holding a single us-patent-grant document."""
    return _read_fixture("ipg_sample.xml")


@pytest.fixture
def pg_sample() -> str:
    """Bulk pg0 file holding a single PATDOC document."""
    return _read_fixture("pg_sample.xml")


@pytest.fixture
def pftaps_sample() -> str:
    """Bulk pftaps file holding a single PATN record."""
    return _read_fixture("pftaps_sample.txt")
