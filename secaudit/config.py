"""
Configuration for secaudit.

Engines never read the environment themselves; AuditConfig is the only
place that does, and the CLI passes its values down explicitly.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


DEFAULT_SOURCE_EXTENSIONS = [
    ".py", ".java", ".kt", ".scala", ".groovy",
    ".js", ".jsx", ".ts", ".tsx",
    ".c", ".h", ".cc", ".cpp", ".hpp",
    ".cs", ".go", ".rb", ".php", ".rs", ".swift",
]

REPORT_FORMATS = ("markdown", "json")

DEFAULT_EXCLUDE_DIRS = [
    ".git",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".hypothesis",
    ".venv",
    "venv",
    "htmlcov",
]


@dataclass
class AuditConfig:
    """secaudit configuration."""

    # === Static scanning ===
    source_extensions: List[str] = field(
        default_factory=lambda: _env_list("SECAUDIT_EXTENSIONS", DEFAULT_SOURCE_EXTENSIONS)
    )
    exclude_dirs: List[str] = field(
        default_factory=lambda: _env_list("SECAUDIT_EXCLUDE_DIRS", DEFAULT_EXCLUDE_DIRS)
    )

    # === Execution Settings ===
    parallel_execution: bool = field(default_factory=lambda: _env_bool("SECAUDIT_PARALLEL", False))
    max_parallel_workers: int = field(default_factory=lambda: _env_int("SECAUDIT_MAX_WORKERS", 4))

    # === Fuzzing ===
    fuzz_iterations: int = field(default_factory=lambda: _env_int("SECAUDIT_FUZZ_ITERATIONS", 100))
    fuzz_seed: Optional[int] = field(default_factory=lambda: _env_int("SECAUDIT_FUZZ_SEED", None))

    # === Report Settings ===
    report_output_dir: Path = field(
        default_factory=lambda: Path(os.getenv("SECAUDIT_REPORT_DIR", "audit_reports"))
    )
    report_format: str = field(default_factory=lambda: os.getenv("SECAUDIT_REPORT_FORMAT", "markdown"))

    def __post_init__(self):
        """Validate configuration."""
        self.report_output_dir = Path(self.report_output_dir)
        self.source_extensions = [
            ext if ext.startswith(".") else f".{ext}" for ext in self.source_extensions
        ]

        if self.max_parallel_workers < 1:
            raise ValueError("max_parallel_workers must be >= 1")
        if self.fuzz_iterations < 0:
            raise ValueError("fuzz_iterations must be >= 0")
        if self.report_format not in REPORT_FORMATS:
            raise ValueError(f"report_format must be one of {', '.join(REPORT_FORMATS)}, got {self.report_format!r}")

    @property
    def scan_workers(self) -> int:
        """Worker count for the static scanner (1 means sequential)."""
        return self.max_parallel_workers if self.parallel_execution else 1


def get_default_config() -> AuditConfig:
    """Default configuration (environment applied)."""
    return AuditConfig()
