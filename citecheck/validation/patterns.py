"""
Named patterns and source vocabularies used by citation validation.

Each marker, identifier and section pattern lives here as a compiled
regex so that new citation conventions or identifier kinds can be added
without touching the classifier in citations.py.
"""

import re
from enum import Enum
from typing import Iterable, Optional


class IdentifierType(Enum):
    """Identifier kinds understood by the validator, in verification order."""

    PMID = "PMID"
    DOI = "DOI"
    NCT = "NCT"


# =============================================================================
# Citation markers (response body)
# =============================================================================

# ^[3]^ - the format the model is prompted to use
CARET_CITATION_PATTERN = re.compile(r"\^\[([0-9]+)\]\^")

# [3] - tolerated fallback for models that drop the carets
BRACKET_CITATION_PATTERN = re.compile(r"\[([0-9]+)\]")

CITATION_PATTERNS = (CARET_CITATION_PATTERN, BRACKET_CITATION_PATTERN)


# =============================================================================
# References section
# =============================================================================

# "# References" / "## Reference list" up to the next H1/H2 or end of text.
# H3 and deeper headings stay inside the section.
REFERENCES_SECTION_PATTERN = re.compile(
    r"^#{1,2}[ \t]*references?\b[^\n]*\n(.*?)(?=^#{1,2}(?!#)|\Z)",
    re.IGNORECASE | re.MULTILINE | re.DOTALL,
)

# "12. Smith J, ..." plus wrapped lines until a blank line or the next item.
# The text may start on the line after a bare "12.".
# A period followed by a digit ("10.1001/...") does not start an item.
# Digits are ASCII only ([0-9], not \d).
_ITEM_START = r"[ \t]*[0-9]+\.(?![0-9])"
REFERENCE_ITEM_PATTERN = re.compile(
    r"^[ \t]*([0-9]+)\.(?![0-9])[ \t]*"
    rf"(?:\n(?!{_ITEM_START})[ \t]*)?"
    rf"([^\n]+(?:\n(?!{_ITEM_START})[^\n]+)*)",
    re.MULTILINE,
)


# =============================================================================
# Identifiers (reference text and evidence text)
# =============================================================================

PMID_PATTERN = re.compile(r"PMID:?\s*([0-9]+)", re.IGNORECASE)

DOI_PATTERN = re.compile(r"DOI:?\s*(10\.[0-9]{4,}/\S+)", re.IGNORECASE)

NCT_PATTERN = re.compile(r"NCT:?\s*(NCT[0-9]+)", re.IGNORECASE)

IDENTIFIER_PATTERNS = {
    IdentifierType.PMID: PMID_PATTERN,
    IdentifierType.DOI: DOI_PATTERN,
    IdentifierType.NCT: NCT_PATTERN,
}

DOI_TRAILING_PUNCTUATION = ".,;:"


def normalize_doi(doi: str) -> str:
    """Strip sentence punctuation that commonly trails a DOI."""
    return doi.rstrip(DOI_TRAILING_PUNCTUATION)


def normalize_identifier(kind: IdentifierType, value: str) -> str:
    if kind is IdentifierType.DOI:
        return normalize_doi(value)
    return value


def find_identifier(kind: IdentifierType, text: str) -> Optional[str]:
    """Return the first identifier of `kind` in text, normalized, or None."""
    match = IDENTIFIER_PATTERNS[kind].search(text)
    if not match:
        return None
    return normalize_identifier(kind, match.group(1))


def find_all_identifiers(kind: IdentifierType, text: str) -> set[str]:
    """Return every identifier of `kind` in text, normalized."""
    return {
        normalize_identifier(kind, m.group(1))
        for m in IDENTIFIER_PATTERNS[kind].finditer(text)
    }


# =============================================================================
# Exemption vocabulary
# =============================================================================
# Authoritative sources that are not indexed by PubMed, Crossref or
# ClinicalTrials.gov. Lowercase substrings matched against lowercased text.

FDA_SOURCE_PHRASES = (
    "fda faers",
    "openfda",
    "dailymed",
    "fda/openfda",
    "source: fda",
)

GUIDELINE_SOURCE_PHRASES = (
    "source: who",
    "source: cdc",
    "source: nice",
    "source: bmj",
    "source: ada",
    "source: acc",
    "source: aha",
    "american diabetes association",
    "who guidelines",
    "nice guideline",
    "bmj best practice",
    "standards of care in diabetes",
)

DEFAULT_EXEMPTION_PHRASES = FDA_SOURCE_PHRASES + GUIDELINE_SOURCE_PHRASES


def is_exempt_source(
    text: str,
    phrases: Optional[Iterable[str]] = None,
) -> bool:
    """Check whether text names a trusted, non-indexed source."""
    if phrases is None:
        phrases = DEFAULT_EXEMPTION_PHRASES
    lowered = text.lower()
    return any(phrase and phrase.lower() in lowered for phrase in phrases)
