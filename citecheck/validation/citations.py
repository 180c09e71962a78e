"""
Citation validation against grounding evidence.

Cross-references every entry of a response's References section with the
identifiers found in the evidence text the model was given:

1. References with no PMID/DOI/NCT ID are accepted only when they name a
   trusted non-indexed source (FDA databases, guideline bodies).
2. References with identifiers are checked PMID -> DOI -> NCT ID; the
   first identifier found in the evidence makes the reference valid.
3. Every checked identifier that is missing from the evidence is recorded
   as a hallucination, even if a later identifier of the same reference
   matches. Findings are not retracted.

Structural mismatches (citation markers without a References section,
evidence that was never cited) are reported as warnings and do not affect
validity.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from citecheck.validation.extraction import (
    EvidenceIdentifierIndex,
    ParsedReference,
    extract_citations,
    extract_evidence_identifiers,
    extract_references,
)
from citecheck.validation.patterns import (
    DEFAULT_EXEMPTION_PHRASES,
    is_exempt_source,
)

logger = logging.getLogger(__name__)

# Characters of reference text shown for references without identifiers
CITATION_PREVIEW_LENGTH = 100


@dataclass(frozen=True)
class Hallucination:
    """A reference (or one of its identifiers) that failed validation."""

    citation: str
    reason: str

    def to_dict(self) -> dict:
        return {"citation": self.citation, "reason": self.reason}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one response against its evidence."""

    is_valid: bool
    total_citations: int
    valid_citations: int
    invalid_citations: int
    hallucinations: tuple[Hallucination, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Render with the camelCase keys consumed by the chat service."""
        return {
            "isValid": self.is_valid,
            "totalCitations": self.total_citations,
            "validCitations": self.valid_citations,
            "invalidCitations": self.invalid_citations,
            "hallucinations": [h.to_dict() for h in self.hallucinations],
            "warnings": list(self.warnings),
        }


def _classify_reference(
    ref: ParsedReference,
    evidence: EvidenceIdentifierIndex,
    exemption_phrases: Iterable[str],
) -> tuple[bool, list[Hallucination]]:
    """
    Classify one reference.

    Returns:
        Tuple of (counted_valid, findings). Findings may be non-empty for a
        reference counted valid when an earlier identifier missed.
    """
    if not ref.has_identifier:
        if is_exempt_source(ref.text, exemption_phrases):
            return True, []

        return False, [
            Hallucination(
                citation=f"[{ref.number}] {ref.text[:CITATION_PREVIEW_LENGTH]}...",
                reason=f"Reference {ref.number} has no PMID, DOI, or NCT ID",
            )
        ]

    findings = []
    for kind, value in ref.identifiers():
        if evidence.contains(kind, value):
            return True, findings

        label = f"{kind.value}:{value}"
        findings.append(
            Hallucination(
                citation=f"[{ref.number}] {label}",
                reason=f"{label} not found in provided evidence",
            )
        )

    return False, findings


def validate_citations(
    response: str,
    evidence_text: str,
    exemption_phrases: Optional[Iterable[str]] = None,
) -> ValidationResult:
    """
    Validate that the references of a response exist in the evidence.

    Args:
        response: Full model answer, optionally with ^[N]^ / [N] markers and
            a References section
        evidence_text: Concatenated source material the model was grounded on
        exemption_phrases: Lowercase phrases naming trusted sources without
            identifiers (defaults to FDA and clinical-guideline sources)

    Returns:
        ValidationResult; never raises for malformed text
    """
    response = response or ""
    evidence_text = evidence_text or ""
    if exemption_phrases is None:
        exemption_phrases = DEFAULT_EXEMPTION_PHRASES
    else:
        exemption_phrases = tuple(exemption_phrases)

    citations = extract_citations(response)
    references = extract_references(response)
    evidence = extract_evidence_identifiers(evidence_text)

    hallucinations: list[Hallucination] = []
    warnings: list[str] = []

    if len(citations) > len(references):
        warnings.append(
            f"Found {len(citations)} citations but only {len(references)} references. "
            "Some citations may be missing references."
        )

    valid_count = 0
    for ref in references:
        counted_valid, findings = _classify_reference(ref, evidence, exemption_phrases)
        hallucinations.extend(findings)
        if counted_valid:
            valid_count += 1

    if not references and citations:
        warnings.append("Citations found in text but no References section detected")

    if evidence_text and not references:
        warnings.append("Evidence was provided but no references were cited")

    result = ValidationResult(
        is_valid=not hallucinations,
        total_citations=len(references),
        valid_citations=valid_count,
        invalid_citations=len(hallucinations),
        hallucinations=tuple(hallucinations),
        warnings=tuple(warnings),
    )

    logger.debug(
        f"Validated {len(references)} references against {len(evidence)} evidence "
        f"identifiers ({len(citations)} citation markers)"
    )
    if not result.is_valid:
        logger.warning(
            f"Citation validation failed: {result.invalid_citations} hallucinated "
            f"citation(s) in {result.total_citations} references"
        )

    return result


def format_validation_results(result: ValidationResult) -> str:
    """Render a ValidationResult as a diagnostic block for logs or console."""
    lines = [
        "",
        "📊 CITATION VALIDATION RESULTS:",
        f"   Total References: {result.total_citations}",
        f"   Valid: {result.valid_citations} ✅",
        f"   Invalid: {result.invalid_citations} ❌",
    ]

    if result.warnings:
        lines.append("")
        lines.append("⚠️  WARNINGS:")
        for warning in result.warnings:
            lines.append(f"   - {warning}")

    if result.hallucinations:
        lines.append("")
        lines.append("🚨 HALLUCINATED CITATIONS DETECTED:")
        for h in result.hallucinations:
            lines.append(f"   ❌ {h.citation}")
            lines.append(f"      Reason: {h.reason}")

    lines.append("")
    if result.is_valid:
        lines.append("✅ All citations are valid and verifiable!")
    else:
        lines.append("❌ VALIDATION FAILED - Some citations are not in the provided evidence")

    return "\n".join(lines) + "\n"
