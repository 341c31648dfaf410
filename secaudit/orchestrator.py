"""
Audit orchestrator.

Runs the engines the caller selected, one after another, and merges their
results into a single AuditReport. Engines never see each other's state.
"""

import logging
import time
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from .config import AuditConfig, get_default_config
from .core.base_checker import BaseChecker, FindingSink
from .core.models import AuditReport, TestResult
from .checkers.static_scanner import StaticScanner
from .testers.fuzz_engine import FuzzConfig, FuzzEngine
from .testers.memory_tracker import MemoryOperation, MemorySafetyTracker


logger = logging.getLogger(__name__)

AuditJob = Tuple[BaseChecker, Any]


class AuditOrchestrator:
    """Selects engines, runs them and aggregates their findings."""

    def __init__(self, config: Optional[AuditConfig] = None):
        """
        Args:
            config: Audit configuration (default: environment-derived)
        """
        self.config = config or get_default_config()

    def build_jobs(
        self,
        source_root=None,
        source_text: Optional[str] = None,
        memory_log: Optional[Iterable[Union[str, MemoryOperation]]] = None,
        fuzz_target: Optional[Callable[[str], Any]] = None,
    ) -> List[AuditJob]:
        """Pair each requested engine with its input, in a fixed order."""
        jobs: List[AuditJob] = []

        if source_root is not None:
            jobs.append((StaticScanner.from_config(self.config), source_root))

        if source_text is not None:
            jobs.append((MemorySafetyTracker(), source_text))

        if memory_log is not None:
            jobs.append((MemorySafetyTracker(), list(memory_log)))

        if fuzz_target is not None:
            fuzz_config = FuzzConfig(
                iterations=self.config.fuzz_iterations,
                seed=self.config.fuzz_seed,
            )
            jobs.append((FuzzEngine(config=fuzz_config), fuzz_target))

        return jobs

    def run_jobs(self, jobs: List[AuditJob], sink: Optional[FindingSink] = None) -> List[TestResult]:
        """
        Run jobs sequentially.

        InvalidInputError from any engine aborts the whole audit.
        """
        if not jobs:
            return []

        logger.info(f"Running {len(jobs)} checkers sequentially...")
        results = []

        for i, (checker, target) in enumerate(jobs, 1):
            logger.info(f"[{i}/{len(jobs)}] Running {checker.name}...")
            result = checker.audit(target, sink=sink)
            results.append(result)

            status = "✅ PASSED" if result.passed else "❌ FAILED"
            logger.info(f"  {status} - Found {len(result.findings)} findings")

        return results

    def run(
        self,
        source_root=None,
        source_text: Optional[str] = None,
        memory_log: Optional[Iterable[Union[str, MemoryOperation]]] = None,
        fuzz_target: Optional[Callable[[str], Any]] = None,
        sink: Optional[FindingSink] = None,
    ) -> AuditReport:
        """
        Run every engine whose input is given and merge the results.

        Args:
            source_root: Directory for the static scanner
            source_text: Source text for the static memory heuristics
            memory_log: Operation log for the runtime memory replay
            fuzz_target: Callable for the fuzz engine
            sink: Optional observer called once per finding

        Returns:
            AuditReport over all findings
        """
        start_time = time.perf_counter()
        jobs = self.build_jobs(
            source_root=source_root,
            source_text=source_text,
            memory_log=memory_log,
            fuzz_target=fuzz_target,
        )
        if not jobs:
            logger.warning("No engine selected: nothing to audit")

        results = self.run_jobs(jobs, sink=sink)
        return AuditReport.from_results(results, time.perf_counter() - start_time)
