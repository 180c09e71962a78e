"""
Citation validation for CiteCheck.

Catches fabricated references before an answer reaches the user:
1. Extraction: citation markers, References section, evidence identifiers
2. Classification: each reference against the evidence and trusted sources
3. Reporting: ValidationResult plus a printable summary
"""

from .citations import (
    Hallucination,
    ValidationResult,
    validate_citations,
    format_validation_results,
)
from .chunk_citations import (
    EvidenceChunk,
    InlineCitation,
    PrecisionResult,
    PrecisionValidator,
    validate_chunk_citations,
)
from .extraction import (
    EvidenceIdentifierIndex,
    ParsedReference,
    extract_citations,
    extract_evidence_identifiers,
    extract_references,
)
from .patterns import (
    DEFAULT_EXEMPTION_PHRASES,
    IdentifierType,
    is_exempt_source,
)

__all__ = [
    "Hallucination",
    "ValidationResult",
    "validate_citations",
    "format_validation_results",
    "EvidenceChunk",
    "InlineCitation",
    "PrecisionResult",
    "PrecisionValidator",
    "validate_chunk_citations",
    "EvidenceIdentifierIndex",
    "ParsedReference",
    "extract_citations",
    "extract_evidence_identifiers",
    "extract_references",
    "DEFAULT_EXEMPTION_PHRASES",
    "IdentifierType",
    "is_exempt_source",
]
