"""
Pytest configuration and fixtures.

Usage:
    pytest tests/ -v
"""

import os
import sys
from pathlib import Path
from typing import Dict, List

import pytest

from secaudit.checkers.static_scanner import StaticScanner
from secaudit.config import AuditConfig
from secaudit.core.models import Finding
from secaudit.testers.fuzz_engine import FuzzEngine
from secaudit.testers.memory_tracker import MemorySafetyTracker


def pytest_sessionstart(session):  # type: ignore[override]
    """Add the project root to sys.path so tests run without installing."""
    tests_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(tests_dir)

    if project_root not in sys.path:
        sys.path.insert(0, project_root)


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create `files` (relative path -> content) under root."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


# ═══════════════════════════════════════════════════════
# SOURCE TREES
# ═══════════════════════════════════════════════════════

@pytest.fixture
def make_tree(tmp_path):
    """Factory: make_tree({"a.py": "..."}) -> root directory."""
    def _make(files: Dict[str, str]) -> Path:
        return write_tree(tmp_path / "src", files)
    return _make


# ═══════════════════════════════════════════════════════
# ENGINES
# ═══════════════════════════════════════════════════════

@pytest.fixture
def scanner():
    return StaticScanner()


@pytest.fixture
def tracker():
    return MemorySafetyTracker()


@pytest.fixture
def engine():
    return FuzzEngine()


@pytest.fixture
def config(tmp_path):
    """Config with explicit values so the environment does not leak in."""
    return AuditConfig(
        parallel_execution=False,
        max_parallel_workers=4,
        fuzz_iterations=10,
        fuzz_seed=1234,
        report_output_dir=tmp_path / "reports",
    )


@pytest.fixture
def collected():
    """A list plus a sink that appends to it."""
    class Collector:
        def __init__(self):
            self.findings: List[Finding] = []

        def __call__(self, finding: Finding) -> None:
            self.findings.append(finding)

    return Collector()
