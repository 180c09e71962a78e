"""
Validation telemetry for CiteCheck.

Logs one JSONL record per validation run for auditing hallucination
rates and regression testing of the extraction patterns.

Enable with: CITECHECK_TELEMETRY=1
"""

import hashlib
import json
import logging
import time
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from citecheck.config import config
from citecheck.validation.citations import ValidationResult

logger = logging.getLogger(__name__)


def is_telemetry_enabled() -> bool:
    """Check if telemetry is enabled via environment variable."""
    return config.TELEMETRY_ENABLED


def hash_text(text: str) -> str:
    """Short hash for grouping runs over the same response."""
    normalized = " ".join((text or "").split())
    return hashlib.md5(normalized.encode()).hexdigest()[:12]


@dataclass
class ValidationTelemetry:
    """Telemetry data for a single validation run."""

    # Identifiers
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    source: str = "cli"

    # Inputs
    response_hash: str = ""
    response_chars: int = 0
    evidence_chars: int = 0

    # Outcome
    is_valid: Optional[bool] = None
    total_citations: int = 0
    valid_citations: int = 0
    invalid_citations: int = 0
    hallucination_reasons: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    # Timing
    total_latency_ms: float = 0.0

    # Errors
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return asdict(self)

    def record_result(self, result: ValidationResult):
        self.is_valid = result.is_valid
        self.total_citations = result.total_citations
        self.valid_citations = result.valid_citations
        self.invalid_citations = result.invalid_citations
        self.hallucination_reasons = [h.reason for h in result.hallucinations]
        self.warnings = list(result.warnings)


class TelemetryLogger:
    """
    Logger for validation telemetry.

    Usage:
        with TelemetryLogger(source="cli") as tl:
            tl.set_inputs(response, evidence)
            result = validate_citations(response, evidence)
            tl.record_result(result)
    """

    def __init__(self, log_path: Path = None, source: str = "cli", enabled: bool = None):
        """
        Initialize telemetry logger.

        Args:
            log_path: Path to JSONL log file (default: config.TELEMETRY_LOG_PATH)
            source: Caller label stored with each record
            enabled: Override the CITECHECK_TELEMETRY setting
        """
        self.log_path = log_path or config.TELEMETRY_LOG_PATH
        self.enabled = is_telemetry_enabled() if enabled is None else enabled
        self.telemetry = ValidationTelemetry(source=source)
        self._start_time = time.perf_counter()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.telemetry.errors.append(f"{exc_type.__name__}: {exc_val}")
        if self.enabled:
            self.finalize()
        return False

    def set_inputs(self, response: str, evidence: str):
        """Record input sizes; the texts themselves are not logged."""
        self.telemetry.response_hash = hash_text(response)
        self.telemetry.response_chars = len(response or "")
        self.telemetry.evidence_chars = len(evidence or "")

    def record_result(self, result: ValidationResult):
        self.telemetry.record_result(result)

    def add_error(self, error: str):
        """Record an error."""
        self.telemetry.errors.append(error)

    def finalize(self):
        """Calculate final timing and write to log."""
        if not self.enabled:
            return

        self.telemetry.total_latency_ms = (time.perf_counter() - self._start_time) * 1000
        _append_record(self.log_path, self.telemetry)


def _append_record(log_path: Path, telemetry: ValidationTelemetry):
    """Append telemetry to JSONL log file."""
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)

        with open(log_path, "a") as f:
            json.dump(telemetry.to_dict(), f)
            f.write("\n")

        logger.debug(f"Telemetry logged: {telemetry.run_id}")

    except OSError as e:
        logger.warning(f"Failed to write telemetry: {e}")


def log_validation(
    result: ValidationResult,
    latency_ms: float,
    source: str = "api",
    log_path: Path = None,
) -> None:
    """
    Log a finished validation result.

    For callers that already hold a result and do not need the
    TelemetryLogger context manager.
    """
    if not is_telemetry_enabled():
        return

    telemetry = ValidationTelemetry(source=source, total_latency_ms=latency_ms)
    telemetry.record_result(result)
    _append_record(log_path or config.TELEMETRY_LOG_PATH, telemetry)


def read_telemetry_logs(
    log_path: Path = None,
    limit: int = 100,
    invalid_only: bool = False,
) -> list[dict]:
    """
    Read telemetry logs from JSONL file.

    Args:
        log_path: Path to log file (default: config.TELEMETRY_LOG_PATH)
        limit: Maximum number of records to return (most recent)
        invalid_only: Only return runs that found hallucinations

    Returns:
        List of telemetry dicts
    """
    log_path = log_path or config.TELEMETRY_LOG_PATH

    if not log_path.exists():
        return []

    results = []
    with open(log_path, "r") as f:
        for line in f:
            if not line.strip():
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError:
                logger.warning(f"Skipping malformed telemetry line in {log_path}")
                continue
            if invalid_only and data.get("is_valid") is not False:
                continue
            results.append(data)

    return results[-limit:]
