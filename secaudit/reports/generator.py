"""
Report generator for audit results.

Generates:
- Markdown reports for human reading
- JSON reports for machine processing
- Recommendations based on finding patterns
- A console summary
"""

import json
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from ..core.models import AuditReport, Category, Finding, Severity, TestResult


SEVERITY_ORDER = ["critical", "high", "medium", "low"]

SEVERITY_EMOJI = {
    "critical": "🔴",
    "high": "🟠",
    "medium": "🟡",
    "low": "🟢",
}

# Findings listed per severity section before the rest is summarized
SECTION_LIMIT = 10


class ReportGenerator:
    """Writes audit reports to disk and prints summaries."""

    def __init__(self, output_dir: Optional[Path] = None, console: Optional[Console] = None):
        """
        Args:
            output_dir: Where reports are written (default: audit_reports/)
            console: rich console for summaries
        """
        self.output_dir = Path(output_dir) if output_dir else Path("audit_reports")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.console = console or Console()

    def generate_report(self, audit_report: AuditReport, format: str = "markdown") -> str:
        """
        Write the report in the requested format.

        Args:
            audit_report: Aggregated audit data
            format: "markdown" or "json"

        Returns:
            Path of the written file
        """
        if format == "json":
            return self.generate_json_report(audit_report)
        return self.generate_markdown_report(audit_report)

    def generate_from_results(
        self,
        test_results: List[TestResult],
        duration_seconds: float,
        format: str = "markdown",
    ) -> str:
        return self.generate_report(AuditReport.from_results(test_results, duration_seconds), format=format)

    def render_markdown(self, audit_report: AuditReport) -> str:
        """Markdown text of the report."""
        lines = []

        # Header
        lines.append("# Security Audit Report")
        lines.append("")
        lines.append(f"**Date:** {audit_report.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append("")

        # Executive Summary
        lines.append("## Executive Summary")
        lines.append("")
        lines.append(f"- **Total Findings:** {audit_report.total_findings}")
        for severity in SEVERITY_ORDER:
            count = audit_report.findings_by_severity.get(severity, 0)
            lines.append(f"- {SEVERITY_EMOJI[severity]} **{severity.capitalize()}:** {count}")
        lines.append("")

        # Findings by Category
        lines.append("## Findings by Category")
        for category, count in sorted(audit_report.findings_by_category.items(), key=lambda x: -x[1]):
            lines.append(f"- **{category}:** {count}")
        lines.append("")

        # Engine Results
        lines.append("## Engine Results")
        lines.append("")
        for result in audit_report.test_results:
            status = "✅ PASSED" if result.passed else "❌ FAILED"
            lines.append(f"### {result.test_name} - {status}")
            lines.append(f"Duration: {result.duration_ms:.2f}ms")
            lines.append(f"Findings: {len(result.findings)}")
            lines.append("")

        for severity, title in (
            (Severity.CRITICAL, "🔴 Critical Findings"),
            (Severity.HIGH, "🟠 High Priority Findings"),
            (Severity.MEDIUM, "🟡 Medium Priority Findings"),
        ):
            section = sorted(audit_report.get_by_severity(severity), key=Finding.sort_key)
            if not section:
                continue
            lines.append(f"## {title}")
            lines.append("")
            for finding in section[:SECTION_LIMIT]:
                lines.append(finding.to_markdown())
            if len(section) > SECTION_LIMIT:
                lines.append(f"*... and {len(section) - SECTION_LIMIT} more {severity.value} findings*")
                lines.append("")

        # Recommendations
        recommendations = self.generate_recommendations(audit_report.all_findings)
        if recommendations:
            lines.append("## Recommendations")
            lines.append("")
            for i, rec in enumerate(recommendations, 1):
                lines.append(f"{i}. **{rec['title']}**")
                lines.append(f"   - {rec['description']}")
                lines.append(f"   - Priority: {rec['priority']}")
                lines.append("")

        # Footer
        lines.append("---")
        lines.append(f"*Report generated in {audit_report.duration_seconds:.2f} seconds*")

        return "\n".join(lines)

    def generate_markdown_report(self, audit_report: AuditReport) -> str:
        """Write audit_report_<timestamp>.md and return its path."""
        timestamp_str = audit_report.timestamp.strftime("%Y%m%d_%H%M%S")
        filepath = self.output_dir / f"audit_report_{timestamp_str}.md"

        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.render_markdown(audit_report))

        return str(filepath)

    def generate_json_report(self, audit_report: AuditReport) -> str:
        """Write audit_report_<timestamp>.json and return its path."""
        timestamp_str = audit_report.timestamp.strftime("%Y%m%d_%H%M%S")
        filepath = self.output_dir / f"audit_report_{timestamp_str}.json"

        report_dict = audit_report.to_dict()
        report_dict["recommendations"] = self.generate_recommendations(audit_report.all_findings)

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(report_dict, f, indent=2, ensure_ascii=False)

        return str(filepath)

    def generate_recommendations(self, findings: List[Finding]) -> List[Dict[str, Any]]:
        """
        Recommendations derived from finding categories.

        Returns:
            Recommendations sorted by priority
        """
        recommendations = []

        by_category = defaultdict(list)
        for finding in findings:
            by_category[finding.category].append(finding)

        if Category.SECRETS in by_category:
            secrets = by_category[Category.SECRETS]
            recommendations.append({
                "title": "Remove hardcoded secrets",
                "description": f"Found {len(secrets)} hardcoded credentials in source",
                "priority": "critical",
                "affected_findings": len(secrets),
                "action": "Rotate the exposed values and load them from the environment",
            })

        if Category.INJECTION in by_category:
            injections = by_category[Category.INJECTION]
            recommendations.append({
                "title": "Parameterize SQL statements",
                "description": f"Found {len(injections)} statements executed from string literals",
                "priority": "critical",
                "affected_findings": len(injections),
                "action": "Pass values as query parameters instead of building SQL text",
            })

        if Category.INSECURE_API in by_category:
            calls = by_category[Category.INSECURE_API]
            recommendations.append({
                "title": "Replace deprecated/insecure calls",
                "description": f"Found {len(calls)} uses of deny-listed APIs",
                "priority": "medium",
                "affected_findings": len(calls),
                "action": "Move to safe alternatives (subprocess without shell, safe loaders, bounded copies)",
            })

        if Category.FILE_ACCESS in by_category:
            files = by_category[Category.FILE_ACCESS]
            recommendations.append({
                "title": "Route file paths through a safe resolver",
                "description": f"Found {len(files)} file constructors fed with raw paths",
                "priority": "medium",
                "affected_findings": len(files),
                "action": "Resolve and confine paths before opening files",
            })

        if Category.MEMORY in by_category:
            memory = by_category[Category.MEMORY]
            violations = [f for f in memory if f.rule_id in ("invalid-free", "invalid-access")]
            recommendations.append({
                "title": "Fix memory-safety violations",
                "description": (
                    f"Found {len(memory)} memory findings, "
                    f"{len(violations)} of them invalid frees or accesses"
                ),
                "priority": "critical" if violations else "high",
                "affected_findings": len(memory),
                "action": "Review allocation lifetimes; run the code under a sanitizer",
            })

        if Category.FUZZ in by_category:
            fuzz = by_category[Category.FUZZ]
            recommendations.append({
                "title": "Harden input handling",
                "description": f"Found {len(fuzz)} inputs that made the target fail",
                "priority": "high",
                "affected_findings": len(fuzz),
                "action": "Validate input up front and fail with controlled errors",
            })

        if Category.AUDIT_FAILURE in by_category or Category.IO in by_category:
            failures = by_category[Category.AUDIT_FAILURE] + by_category[Category.IO]
            recommendations.append({
                "title": "Re-run incomplete checks",
                "description": f"{len(failures)} checks or files could not be analyzed",
                "priority": "low",
                "affected_findings": len(failures),
                "action": "Fix the reported errors and audit again",
            })

        priority_order = {"critical": 0, "high": 1, "medium": 2, "low": 3}
        recommendations.sort(key=lambda x: priority_order.get(x["priority"], 99))

        return recommendations

    def print_summary(self, audit_report: AuditReport) -> None:
        """Print a short summary to the console."""
        table = Table(title="AUDIT SUMMARY")
        table.add_column("Severity", style="cyan")
        table.add_column("Findings", style="green", justify="right")
        for severity in SEVERITY_ORDER:
            count = audit_report.findings_by_severity.get(severity, 0)
            table.add_row(f"{SEVERITY_EMOJI[severity]} {severity.capitalize()}", str(count))
        self.console.print(table)

        self.console.print(f"Total findings: {audit_report.total_findings}")
        self.console.print(f"Duration: {audit_report.duration_seconds:.2f}s")

        if audit_report.findings_by_category:
            self.console.print("By category:")
            for category, count in sorted(audit_report.findings_by_category.items(), key=lambda x: -x[1])[:5]:
                self.console.print(f"  - {category}: {count}")

        passed = sum(1 for r in audit_report.test_results if r.passed)
        failed = len(audit_report.test_results) - passed
        self.console.print(f"✅ Passed: {passed}  ❌ Failed: {failed}")
