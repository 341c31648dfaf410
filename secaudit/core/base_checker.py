"""
Base classes for audit checkers and testers.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from .errors import InvalidInputError
from .models import Finding, TestResult, Severity, Category

logger = logging.getLogger(__name__)

# Observer invoked once per finding, in the order findings are recorded.
FindingSink = Callable[[Finding], None]


class BaseChecker(ABC):
    """
    Base class for every engine.

    Provides:
    - audit() template that wraps _check() into a TestResult
    - Error handling (unexpected errors degrade into an audit-failure finding)
    - Logging
    - Finding construction and delivery to an optional sink
    """

    def __init__(self, name: str):
        """
        Args:
            name: Checker name used in logs and reports
        """
        self.name = name
        self.logger = logging.getLogger(f"secaudit.{name}")

    def audit(self, target: Any, sink: Optional[FindingSink] = None) -> TestResult:
        """
        Run the check against `target`, timing it and capturing failures.

        InvalidInputError is not captured: a structurally invalid target
        aborts the whole call.

        Returns:
            TestResult with the findings of this run
        """
        self.logger.info(f"Starting {self.name}...")
        start_time = time.perf_counter()

        try:
            findings = self._check(target, sink)

        except InvalidInputError:
            raise

        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.logger.error(f"{self.name} failed with exception: {e}", exc_info=True)

            finding = self.create_finding(
                rule_id="audit-failure",
                category=Category.AUDIT_FAILURE,
                severity=Severity.HIGH,
                message=f"Exception: {type(e).__name__}: {e}",
                location=self.name,
                recommendation=f"Fix the error in {self.name} or the input being audited",
                exception_type=type(e).__name__,
                exception_message=str(e),
            )
            self.emit([], finding, sink)

            return TestResult(
                test_name=self.name,
                passed=False,
                findings=[finding],
                duration_ms=duration_ms,
                details={"exception": str(e), "exception_type": type(e).__name__},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        passed = not any(f.severity in (Severity.CRITICAL, Severity.HIGH) for f in findings)

        self.logger.info(
            f"Completed {self.name}: "
            f"found {len(findings)} findings, "
            f"passed={passed}, "
            f"duration={duration_ms:.2f}ms"
        )

        return TestResult(
            test_name=self.name,
            passed=passed,
            findings=findings,
            duration_ms=duration_ms,
        )

    @abstractmethod
    def _check(self, target: Any, sink: Optional[FindingSink]) -> List[Finding]:
        """
        Perform the check (implemented by subclasses).

        Returns:
            Findings in the order they were recorded
        """
        pass

    def create_finding(
        self,
        rule_id: str,
        category: Category,
        severity: Severity,
        message: str,
        location: str,
        file: str = None,
        line: int = None,
        phase: str = None,
        input: str = None,
        code_snippet: str = None,
        recommendation: str = "",
        **metadata
    ) -> Finding:
        """
        Convenience constructor for Finding.

        Args:
            rule_id: Rule or check that produced the finding
            category: Finding category
            severity: Severity
            message: Human-readable description
            location: file:line, log:N or the offending input
            file: Source file, for scanner findings
            line: 1-based line (or log position)
            phase: Fuzz phase
            input: Fuzz input that triggered the failure
            code_snippet: Offending source line
            recommendation: Suggested fix
            **metadata: Extra data

        Returns:
            Finding instance
        """
        return Finding(
            rule_id=rule_id,
            category=category,
            severity=severity,
            message=message,
            location=location,
            file=file,
            line=line,
            phase=phase,
            input=input,
            code_snippet=code_snippet,
            recommendation=recommendation,
            metadata=metadata,
        )

    def emit(self, findings: List[Finding], finding: Finding, sink: Optional[FindingSink]) -> None:
        """Append `finding` and hand it to the sink, if any."""
        findings.append(finding)
        self.logger.debug(f"{finding.rule_id} at {finding.location}: {finding.message}")
        if sink is not None:
            sink(finding)


class StaticChecker(BaseChecker):
    """Base class for static checks (source is read, never executed)."""
    pass


class RuntimeTester(BaseChecker):
    """Base class for runtime checks (replays events or calls code)."""
    pass
