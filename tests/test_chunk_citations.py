"""
Tests for sentence-level PMID citation precision.
"""

import pytest

from citecheck.validation.chunk_citations import (
    EvidenceChunk,
    PrecisionValidator,
    make_chunk_id,
    validate_chunk_citations,
)


@pytest.fixture
def validator():
    return PrecisionValidator()


@pytest.fixture
def evidence_chunks():
    return [
        EvidenceChunk(pmid="12345678", text="Metformin lowers HbA1c.", sentence_index=0),
        EvidenceChunk(pmid="12345678", text="It is well tolerated.", sentence_index=1),
        EvidenceChunk(pmid="87654321", text="SGLT2 inhibitors reduce hospitalization."),
    ]


class TestEvidenceChunk:
    """Tests for chunk ids."""

    def test_make_chunk_id(self):
        assert make_chunk_id("123", 4) == "PMID:123:S:4"

    def test_id_from_sentence_index(self):
        assert EvidenceChunk(pmid="1", sentence_index=2).id == "PMID:1:S:2"

    def test_id_without_sentence_index(self):
        assert EvidenceChunk(pmid="1").id == "PMID:1"

    def test_explicit_id_kept(self):
        assert EvidenceChunk(pmid="1", sentence_index=2, id="custom").id == "custom"


class TestExtractCitations:
    """Tests for PMID citation extraction."""

    def test_empty(self, validator):
        assert validator.extract_citations("") == []

    def test_sentence_indexed(self, validator):
        citations = validator.extract_citations("Claim [PMID:12345678, S:2].")

        assert len(citations) == 1
        assert citations[0].pmid == "12345678"
        assert citations[0].sentence_index == 2
        assert citations[0].raw == "[PMID:12345678, S:2]"
        assert citations[0].position == 6

    def test_plain_pmid(self, validator):
        citations = validator.extract_citations("Claim [PMID:12345678].")

        assert citations[0].pmid == "12345678"
        assert citations[0].sentence_index is None

    def test_bare_pmid_needs_five_digits(self, validator):
        citations = validator.extract_citations("Ref [3] and PMID [12345] and [123456789]")

        assert [c.pmid for c in citations] == ["12345"]

    def test_non_ascii_digits_ignored(self, validator):
        citations = validator.extract_citations("[١٢٣٤٥٦] [PMID:١٢٣٤٥] [PMID:1٢, S:0]")
        assert citations == []

    def test_ordered_by_position(self, validator):
        text = "A [87654321]. B [PMID:1, S:0]. C [PMID:2]."
        citations = validator.extract_citations(text)

        assert [c.pmid for c in citations] == ["87654321", "1", "2"]
        assert citations == sorted(citations, key=lambda c: c.position)

    def test_each_marker_counted_once(self, validator):
        citations = validator.extract_citations("[PMID:12345678, S:1] [PMID:12345678, S:1]")
        assert len(citations) == 2


class TestValidateCitations:
    """Tests for precision scoring."""

    def test_no_citations_is_fully_precise(self, validator, evidence_chunks):
        result = validator.validate("No citations here.", evidence_chunks)

        assert result.total_citations == 0
        assert result.precision == 1.0
        assert result.is_fully_grounded

    def test_valid_sentence_citation(self, validator, evidence_chunks):
        result = validator.validate("Claim [PMID:12345678, S:1].", evidence_chunks)

        assert result.valid_citations == 1
        assert result.precision == 1.0
        assert result.details["pmid_valid"] == 1
        assert result.details["sentence_valid"] == 1

    def test_unknown_sentence(self, validator, evidence_chunks):
        result = validator.validate("Claim [PMID:12345678, S:9].", evidence_chunks)

        assert result.valid_citations == 0
        assert result.precision == 0.0
        assert result.details["pmid_valid"] == 1
        assert result.details["sentence_invalid"] == 1
        assert result.invalid_citations[0].sentence_index == 9

    def test_unknown_pmid(self, validator, evidence_chunks):
        result = validator.validate("Claim [PMID:11111111].", evidence_chunks)

        assert result.details["pmid_invalid"] == 1
        assert result.invalid_citations[0].pmid == "11111111"

    def test_mixed_precision(self, evidence_chunks):
        text = (
            "A [PMID:12345678, S:0]. B [87654321]. "
            "C [PMID:12345678, S:5]. D [99999999]."
        )
        result = validate_chunk_citations(text, evidence_chunks)

        assert result.total_citations == 4
        assert result.valid_citations == 2
        assert result.precision == pytest.approx(0.5)
        assert result.details == {
            "pmid_valid": 3,
            "sentence_valid": 1,
            "pmid_invalid": 1,
            "sentence_invalid": 1,
        }

    def test_empty_evidence(self):
        result = validate_chunk_citations("Claim [PMID:12345678].", [])

        assert result.precision == 0.0
        assert not result.is_fully_grounded

    def test_to_dict(self, evidence_chunks):
        data = validate_chunk_citations("X [PMID:11111111].", evidence_chunks).to_dict()

        assert data["precision"] == 0.0
        assert data["invalid_citations"] == [
            {"pmid": "11111111", "sentence_index": None, "position": 2, "raw": "[PMID:11111111]"}
        ]
