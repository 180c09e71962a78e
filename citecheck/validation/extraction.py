"""
Citation, reference and evidence-identifier extraction.

Three independent passes over the raw strings:
1. Citation markers in the response body (^[N]^ and [N])
2. The numbered References section of the response
3. Every PMID / DOI / NCT ID mentioned in the evidence text

None of these raise on malformed input; a missing section or identifier
is simply an empty result.
"""

from dataclasses import dataclass
from typing import Optional

from citecheck.validation.patterns import (
    CITATION_PATTERNS,
    REFERENCES_SECTION_PATTERN,
    REFERENCE_ITEM_PATTERN,
    IdentifierType,
    find_all_identifiers,
    find_identifier,
)


@dataclass
class ParsedReference:
    """One numbered entry of a response's References section."""

    number: int
    text: str
    pmid: Optional[str] = None
    doi: Optional[str] = None
    nct_id: Optional[str] = None

    @property
    def has_identifier(self) -> bool:
        return bool(self.pmid or self.doi or self.nct_id)

    def identifiers(self) -> list[tuple[IdentifierType, str]]:
        """Present identifiers in verification order (PMID, DOI, NCT)."""
        found = [
            (IdentifierType.PMID, self.pmid),
            (IdentifierType.DOI, self.doi),
            (IdentifierType.NCT, self.nct_id),
        ]
        return [(kind, value) for kind, value in found if value]


@dataclass(frozen=True)
class EvidenceIdentifierIndex:
    """Identifiers found anywhere in the evidence text."""

    pmids: frozenset[str] = frozenset()
    dois: frozenset[str] = frozenset()
    nct_ids: frozenset[str] = frozenset()

    def contains(self, kind: IdentifierType, value: str) -> bool:
        if kind is IdentifierType.PMID:
            return value in self.pmids
        if kind is IdentifierType.DOI:
            return value in self.dois
        return value in self.nct_ids

    def __len__(self) -> int:
        return len(self.pmids) + len(self.dois) + len(self.nct_ids)


def extract_citations(response: str) -> list[str]:
    """
    Extract inline citation numbers from the response body.

    Caret markers (^[3]^) and bare brackets ([3]) are pooled and
    deduplicated.

    Returns:
        Citation numbers as strings, sorted by numeric value
    """
    if not response:
        return []

    citations = set()
    for pattern in CITATION_PATTERNS:
        for match in pattern.finditer(response):
            citations.add(match.group(1))

    return sorted(citations, key=int)


def extract_references_section(response: str) -> Optional[str]:
    """Return the body of the References section, or None if absent."""
    if not response:
        return None

    match = REFERENCES_SECTION_PATTERN.search(response)
    return match.group(1) if match else None


def extract_references(response: str) -> list[ParsedReference]:
    """
    Parse the numbered References section of a response.

    Wrapped continuation lines belong to the item above them. Each item is
    searched for its first PMID, DOI and NCT ID independently.

    Args:
        response: Full model answer

    Returns:
        References in the order written; empty if there is no section
    """
    section = extract_references_section(response)
    if section is None:
        return []

    references = []
    for match in REFERENCE_ITEM_PATTERN.finditer(section):
        text = match.group(2).strip()
        references.append(
            ParsedReference(
                number=int(match.group(1)),
                text=text,
                pmid=find_identifier(IdentifierType.PMID, text),
                doi=find_identifier(IdentifierType.DOI, text),
                nct_id=find_identifier(IdentifierType.NCT, text),
            )
        )

    return references


def extract_evidence_identifiers(evidence: str) -> EvidenceIdentifierIndex:
    """
    Index every PMID, DOI and NCT ID mentioned in the evidence text.

    DOIs are normalized the same way as reference DOIs so that a trailing
    sentence period on either side does not prevent a match.
    """
    if not evidence:
        return EvidenceIdentifierIndex()

    return EvidenceIdentifierIndex(
        pmids=frozenset(find_all_identifiers(IdentifierType.PMID, evidence)),
        dois=frozenset(find_all_identifiers(IdentifierType.DOI, evidence)),
        nct_ids=frozenset(find_all_identifiers(IdentifierType.NCT, evidence)),
    )
