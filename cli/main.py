#!/usr/bin/env python3
"""
CiteCheck CLI.

Usage:
    citecheck validate answer.md --evidence evidence.txt
    citecheck extract answer.md
    citecheck precision answer.md --chunks chunks.json
    citecheck exemptions
    citecheck logs
"""

import json
import logging
import sys
from pathlib import Path

import click

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from citecheck import __version__
from citecheck.config import config
from citecheck.validation.inputs import InputValidationError


def _read_input(path: str) -> str:
    from citecheck.validation.inputs import read_text_input

    try:
        return read_text_input(path, max_size_mb=config.MAX_INPUT_MB)
    except InputValidationError as e:
        raise click.ClickException(str(e))


def _exemption_phrases() -> tuple[str, ...]:
    from citecheck.validation.patterns import DEFAULT_EXEMPTION_PHRASES

    return DEFAULT_EXEMPTION_PHRASES + config.EXTRA_EXEMPTION_PHRASES


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """CiteCheck - verify LLM citations against grounding evidence."""
    errors = config.validate()
    if errors:
        raise click.ClickException("Invalid configuration: " + "; ".join(errors))

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.LOG_LEVEL.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


# ============================================================================
# Validation Commands
# ============================================================================

@cli.command()
@click.argument("response_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-e", "--evidence", "evidence_path", type=click.Path(exists=True, dir_okay=False),
              help="Evidence text the answer was grounded on")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def validate(response_path: str, evidence_path: str, output_json: bool):
    """Check that every reference in RESPONSE_PATH appears in the evidence."""
    from citecheck.telemetry import TelemetryLogger
    from citecheck.validation.citations import format_validation_results, validate_citations

    response = _read_input(response_path)
    evidence = _read_input(evidence_path) if evidence_path else ""

    with TelemetryLogger(source="cli") as tl:
        tl.set_inputs(response, evidence)
        result = validate_citations(response, evidence, exemption_phrases=_exemption_phrases())
        tl.record_result(result)

    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(format_validation_results(result))

    if not result.is_valid:
        sys.exit(1)


@cli.command()
@click.argument("response_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def extract(response_path: str, output_json: bool):
    """Show citation markers and parsed references of RESPONSE_PATH."""
    from citecheck.validation.extraction import extract_citations, extract_references

    response = _read_input(response_path)
    citations = extract_citations(response)
    references = extract_references(response)

    if output_json:
        click.echo(json.dumps({
            "citations": citations,
            "references": [
                {
                    "number": r.number,
                    "text": r.text,
                    "pmid": r.pmid,
                    "doi": r.doi,
                    "nct_id": r.nct_id,
                }
                for r in references
            ],
        }, indent=2))
        return

    click.echo(f"\nCitation markers ({len(citations)}): {', '.join(citations) or 'none'}")
    click.echo(f"References ({len(references)}):\n")

    for r in references:
        click.echo(click.style(f"[{r.number}] {r.text[:120]}", fg="green", bold=True))
        if r.pmid:
            click.echo(f"    PMID: {r.pmid}")
        if r.doi:
            click.echo(f"    DOI: {r.doi}")
        if r.nct_id:
            click.echo(f"    NCT: {r.nct_id}")
        if not r.has_identifier:
            click.echo(click.style("    No identifier", fg="yellow"))


@cli.command()
@click.argument("response_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-c", "--chunks", "chunks_path", type=click.Path(exists=True, dir_okay=False),
              required=True, help="JSON list of evidence chunks")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def precision(response_path: str, chunks_path: str, output_json: bool):
    """Measure PMID citation precision of RESPONSE_PATH against evidence chunks."""
    from citecheck.validation.chunk_citations import validate_chunk_citations
    from citecheck.validation.inputs import load_evidence_chunks

    response = _read_input(response_path)
    try:
        chunks = load_evidence_chunks(chunks_path, max_size_mb=config.MAX_INPUT_MB)
    except InputValidationError as e:
        raise click.ClickException(str(e))

    result = validate_chunk_citations(response, chunks)

    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    color = "green" if result.is_fully_grounded else "red"
    click.echo(click.style(f"\nPrecision: {result.precision:.1%}", fg=color, bold=True))
    click.echo(f"Citations: {result.total_citations}")
    click.echo(f"  Valid: {result.valid_citations}")
    click.echo(f"  Invalid: {len(result.invalid_citations)}")

    for c in result.invalid_citations:
        click.echo(click.style(f"  ✗ {c.raw} (position {c.position})", fg="red"))


# ============================================================================
# Info Commands
# ============================================================================

@cli.command()
def exemptions():
    """List trusted sources accepted without PMID, DOI or NCT ID."""
    for phrase in _exemption_phrases():
        click.echo(f"  {phrase}")


@cli.command()
@click.option("-n", "--limit", default=20, help="Number of runs to show")
@click.option("--invalid-only", is_flag=True, help="Only runs with hallucinations")
def logs(limit: int, invalid_only: bool):
    """Show recent validation runs from the telemetry log."""
    from citecheck.telemetry import read_telemetry_logs

    records = read_telemetry_logs(limit=limit, invalid_only=invalid_only)
    if not records:
        click.echo("No telemetry records found.")
        return

    for r in records:
        status = "✓" if r.get("is_valid") else "✗"
        click.echo(
            f"{r.get('timestamp', '?')} {status} "
            f"{r.get('valid_citations', 0)}/{r.get('total_citations', 0)} valid, "
            f"{r.get('invalid_citations', 0)} hallucinated"
        )


if __name__ == "__main__":
    cli()
