"""
Pytest configuration and fixtures for CiteCheck tests.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


# =============================================================================
# Sample data fixtures
# =============================================================================


@pytest.fixture
def sample_response():
    """A grounded answer with caret citations and a References section."""
    return """## Answer

Metformin remains first-line therapy for type 2 diabetes ^[1]^. SGLT2
inhibitors reduce heart failure hospitalization ^[2]^, and the DAPA-HF
trial confirmed the benefit in patients without diabetes ^[3]^.

## References

1. Smith J, Doe A. Metformin in type 2 diabetes. JAMA. 2020;323(4):1-10.
   PMID: 12345678
2. Lee K, et al. SGLT2 inhibitors and heart failure. N Engl J Med. 2019.
   DOI: 10.1056/NEJMoa1911303.
3. DAPA-HF Investigators. Dapagliflozin in heart failure. NCT: NCT03036124

## Disclaimer

This answer is for clinicians.
"""


@pytest.fixture
def sample_evidence():
    """Evidence text containing all identifiers cited in sample_response."""
    return """
[Source 1] Metformin in type 2 diabetes. PMID:12345678
[Source 2] SGLT2 inhibitors and heart failure. DOI:10.1056/NEJMoa1911303
[Source 3] Dapagliflozin trial registry entry. NCT: NCT03036124
"""


@pytest.fixture
def make_response():
    """Build a response from body text and reference lines."""

    def _make(body: str = "", references: list[str] = None, heading: str = "## References"):
        text = body
        if references is not None:
            text += f"\n\n{heading}\n" + "\n".join(references) + "\n"
        return text

    return _make


@pytest.fixture
def response_file(tmp_path, sample_response):
    path = tmp_path / "answer.md"
    path.write_text(sample_response, encoding="utf-8")
    return path


@pytest.fixture
def evidence_file(tmp_path, sample_evidence):
    path = tmp_path / "evidence.txt"
    path.write_text(sample_evidence, encoding="utf-8")
    return path


@pytest.fixture
def telemetry_path(tmp_path, monkeypatch):
    """Enable telemetry and route it to a temporary JSONL file."""
    path = tmp_path / "logs" / "validation_runs.jsonl"
    monkeypatch.setenv("CITECHECK_TELEMETRY", "1")
    monkeypatch.setenv("CITECHECK_TELEMETRY_PATH", str(path))
    return path


# =============================================================================
# Pytest markers
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end validation scenarios"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with -m 'not slow')"
    )
