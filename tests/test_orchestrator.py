"""
Tests for AuditOrchestrator.
"""

import pytest

from secaudit.core.base_checker import StaticChecker
from secaudit.core.errors import InvalidInputError
from secaudit.orchestrator import AuditOrchestrator
from secaudit.testers.fuzz_engine import EDGE_CASE_CORPUS


class BrokenChecker(StaticChecker):
    def __init__(self):
        super().__init__(name="BrokenChecker")

    def _check(self, target, sink):
        raise RuntimeError("checker crashed")


def fragile(value):
    if not value:
        raise ValueError("empty input")
    return value.upper()


class TestAuditOrchestrator:

    def test_no_inputs_gives_empty_report(self, config):
        report = AuditOrchestrator(config).run()

        assert report.total_findings == 0
        assert report.test_results == []
        assert report.all_findings == []

    def test_jobs_in_fixed_order(self, config, make_tree):
        jobs = AuditOrchestrator(config).build_jobs(
            source_root=make_tree({}),
            source_text="int x;",
            memory_log=["ALLOC a"],
            fuzz_target=fragile,
        )
        assert [checker.name for checker, _ in jobs] == [
            "StaticScanner", "MemorySafetyTracker", "MemorySafetyTracker", "FuzzEngine",
        ]

    def test_fuzz_job_uses_config(self, config):
        [(engine, target)] = AuditOrchestrator(config).build_jobs(fuzz_target=fragile)
        assert engine.config.iterations == 10
        assert engine.config.seed == 1234
        assert target is fragile

    def test_merges_all_engines(self, config, make_tree, collected):
        root = make_tree({"a.py": 'password = "p"\ncursor.execute("DROP TABLE t")\n'})
        report = AuditOrchestrator(config).run(
            source_root=root,
            source_text="char *p = malloc(4);",
            memory_log=["FREE 0x1"],
            fuzz_target=fragile,
            sink=collected,
        )

        rule_ids = [f.rule_id for f in report.all_findings]
        assert rule_ids == [
            "hardcoded-secret",
            "sql-injection",
            "memory-leak",
            "invalid-free",
            "edge-case",
        ]
        assert report.total_findings == 5
        assert report.findings_by_severity == {"high": 3, "critical": 1, "medium": 1}
        assert report.findings_by_category["memory"] == 2
        assert collected.findings == report.all_findings
        assert len(report.test_results) == 4
        assert len(report.get_critical_findings()) == 1
        assert len(report.get_high_findings()) == 3

    def test_invalid_root_aborts(self, config, tmp_path):
        with pytest.raises(InvalidInputError):
            AuditOrchestrator(config).run(source_root=tmp_path / "missing", fuzz_target=fragile)

    def test_engine_crash_degrades_to_finding(self, config):
        orchestrator = AuditOrchestrator(config)
        jobs = [(BrokenChecker(), None)] + orchestrator.build_jobs(fuzz_target=fragile)
        results = orchestrator.run_jobs(jobs)

        assert [r.passed for r in results] == [False, False]
        assert results[0].findings[0].rule_id == "audit-failure"
        assert results[0].details["exception_type"] == "RuntimeError"
        assert results[1].findings[0].rule_id == "edge-case"

    def test_non_string_log_entry_does_not_stop_replay(self, config):
        report = AuditOrchestrator(config).run(memory_log=["ALLOC a", None, "FREE a", "FREE a"])

        assert [f.rule_id for f in report.all_findings] == ["malformed-operation", "invalid-free"]
        assert not report.test_results[0].passed

    def test_parallel_config_same_result(self, config, make_tree):
        root = make_tree({f"m{i}.py": f'secret_{i} = "x"\n' for i in range(6)})
        sequential = AuditOrchestrator(config).run(source_root=root)
        config.parallel_execution = True
        parallel = AuditOrchestrator(config).run(source_root=root)

        assert parallel.all_findings == sequential.all_findings
        assert parallel.total_findings == 6

    def test_corpus_inputs_reach_target(self, config):
        seen = []
        AuditOrchestrator(config).run(fuzz_target=seen.append)
        assert tuple(seen[:len(EDGE_CASE_CORPUS)]) == EDGE_CASE_CORPUS
        assert len(seen) == len(EDGE_CASE_CORPUS) + 10
