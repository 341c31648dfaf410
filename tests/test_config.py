"""
Tests for AuditConfig.
"""

from pathlib import Path

import pytest

from secaudit.config import DEFAULT_SOURCE_EXTENSIONS, AuditConfig, get_default_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SECAUDIT_EXTENSIONS",
        "SECAUDIT_EXCLUDE_DIRS",
        "SECAUDIT_PARALLEL",
        "SECAUDIT_MAX_WORKERS",
        "SECAUDIT_FUZZ_ITERATIONS",
        "SECAUDIT_FUZZ_SEED",
        "SECAUDIT_REPORT_DIR",
        "SECAUDIT_REPORT_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestAuditConfig:

    def test_defaults(self):
        config = get_default_config()

        assert config.source_extensions == DEFAULT_SOURCE_EXTENSIONS
        assert config.parallel_execution is False
        assert config.scan_workers == 1
        assert config.fuzz_iterations == 100
        assert config.fuzz_seed is None
        assert config.report_output_dir == Path("audit_reports")
        assert config.report_format == "markdown"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SECAUDIT_EXTENSIONS", "py, txt")
        monkeypatch.setenv("SECAUDIT_PARALLEL", "yes")
        monkeypatch.setenv("SECAUDIT_MAX_WORKERS", "8")
        monkeypatch.setenv("SECAUDIT_FUZZ_SEED", "42")
        monkeypatch.setenv("SECAUDIT_REPORT_FORMAT", "json")

        config = get_default_config()

        assert config.source_extensions == [".py", ".txt"]
        assert config.scan_workers == 8
        assert config.fuzz_seed == 42
        assert config.report_format == "json"

    @pytest.mark.parametrize("name", ["SECAUDIT_MAX_WORKERS", "SECAUDIT_FUZZ_ITERATIONS", "SECAUDIT_FUZZ_SEED"])
    def test_non_numeric_value_names_the_variable(self, monkeypatch, name):
        monkeypatch.setenv(name, "lots")
        with pytest.raises(ValueError, match=name):
            AuditConfig()

    @pytest.mark.parametrize("kwargs", [
        {"max_parallel_workers": 0},
        {"fuzz_iterations": -1},
        {"report_format": "xml"},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            AuditConfig(**kwargs)
