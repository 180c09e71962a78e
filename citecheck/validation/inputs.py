"""
Input loading for the CLI.

The validation engine accepts any string; these helpers guard the file
boundary (existence, size, encoding) and parse evidence chunk files.
"""

import json
from pathlib import Path
from typing import Optional

from citecheck.validation.chunk_citations import EvidenceChunk


class InputValidationError(ValueError):
    """Raised when an input file cannot be used."""

    pass


def sanitize_text(value: str) -> str:
    """Remove control characters, keeping newlines, carriage returns and tabs."""
    return "".join(c for c in value if ord(c) >= 32 or c in "\n\r\t")


def validate_file_path(
    path: str | Path,
    allowed_extensions: Optional[list[str]] = None,
    max_size_mb: float = 10,
) -> Path:
    """
    Validate an input file path.

    Args:
        path: File path to validate
        allowed_extensions: List of allowed extensions (e.g., [".json"])
        max_size_mb: Maximum file size in MB

    Returns:
        Resolved Path object

    Raises:
        InputValidationError: If validation fails
    """
    if not isinstance(path, (str, Path)):
        raise InputValidationError("Path must be a string or Path object")

    try:
        resolved = Path(path).resolve()
    except (OSError, ValueError) as e:
        raise InputValidationError(f"Invalid path: {e}")

    if allowed_extensions and resolved.suffix.lower() not in allowed_extensions:
        raise InputValidationError(
            f"Invalid file type: {resolved.suffix}. Allowed: {allowed_extensions}"
        )

    if not resolved.exists():
        raise InputValidationError(f"File not found: {resolved}")

    if not resolved.is_file():
        raise InputValidationError(f"Not a file: {resolved}")

    try:
        size_mb = resolved.stat().st_size / (1024 * 1024)
    except OSError as e:
        raise InputValidationError(f"Cannot access file: {e}")

    if size_mb > max_size_mb:
        raise InputValidationError(
            f"File too large: {size_mb:.1f}MB (max: {max_size_mb}MB)"
        )

    return resolved


def read_text_input(path: str | Path, max_size_mb: float = 10) -> str:
    """
    Read a UTF-8 text file for validation.

    Raises:
        InputValidationError: If the file is missing, too large or not UTF-8
    """
    resolved = validate_file_path(path, max_size_mb=max_size_mb)

    try:
        text = resolved.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InputValidationError(f"File is not valid UTF-8: {resolved} ({e.reason})")
    except OSError as e:
        raise InputValidationError(f"Cannot read file: {e}")

    return sanitize_text(text)


def load_evidence_chunks(path: str | Path, max_size_mb: float = 10) -> list[EvidenceChunk]:
    """
    Load evidence chunks from a JSON file.

    Expected format: a list of objects with "pmid" and optional "text",
    "sentence_index" and "id" fields.

    Raises:
        InputValidationError: If the file is not a valid chunk list
    """
    resolved = validate_file_path(path, allowed_extensions=[".json"], max_size_mb=max_size_mb)

    try:
        data = json.loads(resolved.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InputValidationError(f"Invalid chunk file {resolved}: {e}")

    if not isinstance(data, list):
        raise InputValidationError("Chunk file must contain a JSON list")

    chunks = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or not item.get("pmid"):
            raise InputValidationError(f"Chunk {i} is missing a pmid")

        sentence_index = item.get("sentence_index")
        if sentence_index is not None and not isinstance(sentence_index, int):
            raise InputValidationError(f"Chunk {i} sentence_index must be an integer")

        chunks.append(
            EvidenceChunk(
                pmid=str(item["pmid"]),
                text=item.get("text", ""),
                sentence_index=sentence_index,
                id=item.get("id", ""),
            )
        )

    return chunks
