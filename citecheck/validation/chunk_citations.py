"""
Sentence-level citation precision.

For answers that cite evidence by PubMed ID rather than by reference
number, e.g. "[PMID:12345678, S:2]", "[PMID:12345678]" or "[12345678]".
Each citation is checked against the evidence chunks that were actually
retrieved; a sentence index must point at an existing chunk.
"""

import re
from dataclasses import dataclass, field
from typing import Optional


# [PMID:12345, S:2] - PMID plus sentence index
PMID_SENTENCE_CITATION_PATTERN = re.compile(r"\[PMID:([0-9]+),\s*S:([0-9]+)\]")

# [PMID:12345]
PMID_CITATION_PATTERN = re.compile(r"\[PMID:([0-9]+)\]")

# [12345678] - bare PMID; 5-8 digits so reference numbers like [3] are skipped
BARE_PMID_CITATION_PATTERN = re.compile(r"\[([0-9]{5,8})\]")


def make_chunk_id(pmid: str, sentence_index: int) -> str:
    """Chunk id used by the sentence splitter: PMID:<pmid>:S:<index>."""
    return f"PMID:{pmid}:S:{sentence_index}"


@dataclass
class EvidenceChunk:
    """One retrieved evidence sentence (or passage) of a PubMed record."""

    pmid: str
    text: str = ""
    sentence_index: Optional[int] = None
    id: str = ""

    def __post_init__(self):
        if not self.id:
            if self.sentence_index is not None:
                self.id = make_chunk_id(self.pmid, self.sentence_index)
            else:
                self.id = f"PMID:{self.pmid}"


@dataclass
class InlineCitation:
    """A PMID citation found in generated text."""

    pmid: str
    position: int
    raw: str
    sentence_index: Optional[int] = None
    text: str = ""


@dataclass
class PrecisionResult:
    """Precision of PMID citations against retrieved evidence."""

    total_citations: int = 0
    valid_citations: int = 0
    invalid_citations: list[InlineCitation] = field(default_factory=list)
    precision: float = 1.0
    details: dict[str, int] = field(
        default_factory=lambda: {
            "pmid_valid": 0,
            "sentence_valid": 0,
            "pmid_invalid": 0,
            "sentence_invalid": 0,
        }
    )

    @property
    def is_fully_grounded(self) -> bool:
        return not self.invalid_citations

    def to_dict(self) -> dict:
        return {
            "total_citations": self.total_citations,
            "valid_citations": self.valid_citations,
            "invalid_citations": [
                {
                    "pmid": c.pmid,
                    "sentence_index": c.sentence_index,
                    "position": c.position,
                    "raw": c.raw,
                }
                for c in self.invalid_citations
            ],
            "precision": self.precision,
            "details": dict(self.details),
        }


class PrecisionValidator:
    """
    Validate PMID citations in generated text against evidence chunks.

    Usage:
        validator = PrecisionValidator()
        result = validator.validate(answer, chunks)
        print(f"Precision: {result.precision:.1%}")
    """

    def extract_citations(self, text: str) -> list[InlineCitation]:
        """
        Extract PMID citations from generated text.

        A marker position yields at most one citation; the sentence-indexed
        form wins over the plain forms.

        Returns:
            Citations ordered by position in text
        """
        if not text:
            return []

        citations: dict[int, InlineCitation] = {}

        for match in PMID_SENTENCE_CITATION_PATTERN.finditer(text):
            citations[match.start()] = InlineCitation(
                pmid=match.group(1),
                sentence_index=int(match.group(2)),
                position=match.start(),
                raw=match.group(0),
            )

        for pattern in (PMID_CITATION_PATTERN, BARE_PMID_CITATION_PATTERN):
            for match in pattern.finditer(text):
                if match.start() in citations:
                    continue
                citations[match.start()] = InlineCitation(
                    pmid=match.group(1),
                    position=match.start(),
                    raw=match.group(0),
                )

        return [citations[pos] for pos in sorted(citations)]

    def validate_citations(
        self,
        citations: list[InlineCitation],
        evidence: list[EvidenceChunk],
    ) -> PrecisionResult:
        """
        Validate extracted citations against evidence chunks.

        Args:
            citations: Citations from extract_citations()
            evidence: Retrieved evidence chunks

        Returns:
            PrecisionResult with per-kind counts
        """
        pmids = {chunk.pmid for chunk in evidence}
        chunk_ids = {chunk.id for chunk in evidence}

        result = PrecisionResult(total_citations=len(citations))

        for citation in citations:
            if citation.pmid not in pmids:
                result.details["pmid_invalid"] += 1
                result.invalid_citations.append(citation)
                continue

            result.details["pmid_valid"] += 1

            if citation.sentence_index is not None:
                if make_chunk_id(citation.pmid, citation.sentence_index) not in chunk_ids:
                    result.details["sentence_invalid"] += 1
                    result.invalid_citations.append(citation)
                    continue
                result.details["sentence_valid"] += 1

            result.valid_citations += 1

        if citations:
            result.precision = result.valid_citations / len(citations)

        return result

    def validate(self, text: str, evidence: list[EvidenceChunk]) -> PrecisionResult:
        """Extract and validate citations in one step."""
        return self.validate_citations(self.extract_citations(text), evidence)


def validate_chunk_citations(text: str, evidence: list[EvidenceChunk]) -> PrecisionResult:
    """
    Convenience function for sentence-level citation precision.

    Args:
        text: Generated text with PMID citations
        evidence: Retrieved evidence chunks

    Returns:
        PrecisionResult
    """
    return PrecisionValidator().validate(text, evidence)
