"""
Core data models for secaudit.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


# Longest input preview rendered in reports; fuzz inputs can be 1 MiB.
INPUT_PREVIEW_LIMIT = 120


class Severity(Enum):
    """How serious a finding is."""
    CRITICAL = "critical"  # Exploitable as-is
    HIGH = "high"          # Likely vulnerability
    MEDIUM = "medium"      # Risky pattern, needs review
    LOW = "low"            # Hygiene issue


class Category(Enum):
    """Finding category, one per class of problem."""
    SECRETS = "secrets"                # Hardcoded credentials
    INJECTION = "injection"            # SQL injection
    INSECURE_API = "insecure_api"      # Deprecated or dangerous calls
    FILE_ACCESS = "file_access"        # Unsafe file construction
    IO = "io"                          # Unreadable source files
    MEMORY = "memory"                  # Memory-safety violations
    FUZZ = "fuzz"                      # Fuzz target failures
    AUDIT_FAILURE = "audit_failure"    # Failure of the audit itself


def preview(value: str, limit: int = INPUT_PREVIEW_LIMIT) -> str:
    """repr() of a string, shortened to `limit` characters."""
    text = repr(value)
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(value)} chars)"


@dataclass(frozen=True)
class Finding:
    """A single problem reported by one engine invocation."""

    rule_id: str
    category: Category
    severity: Severity
    message: str
    location: str  # file:line, log:N or the offending input
    file: Optional[str] = None
    line: Optional[int] = None
    phase: Optional[str] = None
    input: Optional[str] = None
    code_snippet: Optional[str] = None
    recommendation: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def sort_key(self):
        return (self.file or "", self.line or 0, self.rule_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        data = {
            "rule_id": self.rule_id,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "location": self.location,
            "file": self.file,
            "line": self.line,
            "phase": self.phase,
            "input": None,
            "code_snippet": self.code_snippet,
            "recommendation": self.recommendation,
            "metadata": self.metadata,
        }
        if self.input is not None:
            data["input"] = self.input if len(self.input) <= INPUT_PREVIEW_LIMIT else preview(self.input)
            data["input_length"] = len(self.input)
        return data

    def to_markdown(self) -> str:
        """Render as a markdown section."""
        severity_emoji = {
            Severity.CRITICAL: "🔴",
            Severity.HIGH: "🟠",
            Severity.MEDIUM: "🟡",
            Severity.LOW: "🟢",
        }

        md = f"### {severity_emoji[self.severity]} [{self.severity.value.upper()}] {self.rule_id}\n\n"
        md += f"**Category:** {self.category.value}\n\n"
        md += f"**Location:** `{self.location}`\n\n"
        md += f"**Message:** {self.message}\n\n"
        if self.phase:
            md += f"**Phase:** {self.phase}\n\n"
        if self.recommendation:
            md += f"**Recommendation:** {self.recommendation}\n\n"

        if self.code_snippet:
            md += f"**Code:**\n```\n{self.code_snippet}\n```\n\n"

        return md


@dataclass
class TestResult:
    """Outcome of one engine run."""

    __test__ = False  # not a pytest class

    test_name: str
    passed: bool
    findings: List[Finding]
    duration_ms: float
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_name": self.test_name,
            "passed": self.passed,
            "findings": [f.to_dict() for f in self.findings],
            "duration_ms": self.duration_ms,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class AuditReport:
    """Findings of every engine that ran, merged into one list."""

    timestamp: datetime
    total_findings: int
    findings_by_severity: Dict[str, int]
    findings_by_category: Dict[str, int]
    test_results: List[TestResult]
    all_findings: List[Finding]
    duration_seconds: float

    @classmethod
    def from_results(cls, test_results: List[TestResult], duration_seconds: float) -> "AuditReport":
        """Build a report from engine results, keeping each engine's order."""
        all_findings: List[Finding] = []
        for result in test_results:
            all_findings.extend(result.findings)

        by_severity = defaultdict(int)
        by_category = defaultdict(int)
        for finding in all_findings:
            by_severity[finding.severity.value] += 1
            by_category[finding.category.value] += 1

        return cls(
            timestamp=datetime.now(),
            total_findings=len(all_findings),
            findings_by_severity=dict(by_severity),
            findings_by_category=dict(by_category),
            test_results=list(test_results),
            all_findings=all_findings,
            duration_seconds=duration_seconds,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "total_findings": self.total_findings,
            "findings_by_severity": self.findings_by_severity,
            "findings_by_category": self.findings_by_category,
            "test_results": [tr.to_dict() for tr in self.test_results],
            "all_findings": [f.to_dict() for f in self.all_findings],
            "duration_seconds": self.duration_seconds,
        }

    def get_by_severity(self, severity: Severity) -> List[Finding]:
        return [f for f in self.all_findings if f.severity == severity]

    def get_critical_findings(self) -> List[Finding]:
        """Only CRITICAL findings."""
        return self.get_by_severity(Severity.CRITICAL)

    def get_high_findings(self) -> List[Finding]:
        """Only HIGH findings."""
        return self.get_by_severity(Severity.HIGH)

    def sorted_findings(self) -> List[Finding]:
        """Findings ordered by file, line and rule for stable comparison."""
        return sorted(self.all_findings, key=Finding.sort_key)
