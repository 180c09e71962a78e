"""
Centralized configuration for CiteCheck.

The validation engine itself takes no configuration; these settings drive
the CLI, logging and telemetry. Supports environment variable overrides
and a local .env file.
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _find_project_root() -> Path:
    """Find project root by looking for pyproject.toml or .git."""
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return current.parent


@dataclass
class Config:
    """CiteCheck configuration."""

    # ==========================================================================
    # Paths
    # ==========================================================================
    PROJECT_ROOT: Path = field(default_factory=_find_project_root)

    @property
    def TELEMETRY_LOG_PATH(self) -> Path:
        return Path(
            os.environ.get(
                "CITECHECK_TELEMETRY_PATH",
                str(self.PROJECT_ROOT / "logs" / "validation_runs.jsonl"),
            )
        )

    # ==========================================================================
    # Logging & Telemetry
    # ==========================================================================
    @property
    def LOG_LEVEL(self) -> str:
        return os.environ.get("LOG_LEVEL", "INFO")

    @property
    def TELEMETRY_ENABLED(self) -> bool:
        return os.environ.get("CITECHECK_TELEMETRY", "0") == "1"

    # ==========================================================================
    # Validation
    # ==========================================================================
    @property
    def EXTRA_EXEMPTION_PHRASES(self) -> tuple[str, ...]:
        """Additional trusted-source phrases, comma separated, lowercased."""
        raw = os.environ.get("CITECHECK_EXTRA_EXEMPTIONS", "")
        return tuple(p.strip().lower() for p in raw.split(",") if p.strip())

    @property
    def MAX_INPUT_MB(self) -> float:
        return float(os.environ.get("CITECHECK_MAX_INPUT_MB", "10"))

    def validate(self) -> list[str]:
        """Return list of configuration errors."""
        errors = []

        if self.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown LOG_LEVEL: {self.LOG_LEVEL}")

        try:
            if self.MAX_INPUT_MB <= 0:
                errors.append("CITECHECK_MAX_INPUT_MB must be positive")
        except ValueError:
            errors.append(
                f"CITECHECK_MAX_INPUT_MB is not a number: "
                f"{os.environ.get('CITECHECK_MAX_INPUT_MB')}"
            )

        return errors

    def __repr__(self) -> str:
        return (
            f"Config(\n"
            f"  PROJECT_ROOT={self.PROJECT_ROOT}\n"
            f"  LOG_LEVEL={self.LOG_LEVEL}\n"
            f"  TELEMETRY_ENABLED={self.TELEMETRY_ENABLED}\n"
            f"  EXTRA_EXEMPTION_PHRASES={self.EXTRA_EXEMPTION_PHRASES}\n"
            f")"
        )


# Global config instance
config = Config()
