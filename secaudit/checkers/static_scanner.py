"""
Static pattern scanner over source trees.

Checks every line of every source file against an ordered rule list:
- Hardcoded secrets
- SQL statements executed from string literals
- Deprecated/insecure API calls
- File constructors fed with raw literal paths
"""

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from ..config import DEFAULT_EXCLUDE_DIRS, DEFAULT_SOURCE_EXTENSIONS
from ..core.base_checker import FindingSink, StaticChecker
from ..core.errors import InvalidInputError, TargetFailure
from ..core.models import Category, Finding, Severity
from .rules import Rule, default_rules


class StaticScanner(StaticChecker):
    """Rule-based line scanner for a directory tree."""

    def __init__(
        self,
        rules: Optional[Sequence[Rule]] = None,
        extensions: Optional[Iterable[str]] = None,
        exclude_dirs: Optional[Iterable[str]] = None,
        max_workers: int = 1,
    ):
        """
        Args:
            rules: Ordered rule list (default: DEFAULT_RULES)
            extensions: File suffixes treated as source code
            exclude_dirs: Directory names that are never entered
            max_workers: >1 scans files in a thread pool
        """
        super().__init__(name="StaticScanner")
        self.rules: tuple = tuple(rules) if rules is not None else tuple(default_rules())
        self.extensions = frozenset(
            ext.lower() for ext in (extensions if extensions is not None else DEFAULT_SOURCE_EXTENSIONS)
        )
        self.exclude_dirs = frozenset(exclude_dirs if exclude_dirs is not None else DEFAULT_EXCLUDE_DIRS)
        self.max_workers = max(1, max_workers)

    @classmethod
    def from_config(cls, config, rules: Optional[Sequence[Rule]] = None) -> "StaticScanner":
        return cls(
            rules=rules,
            extensions=config.source_extensions,
            exclude_dirs=config.exclude_dirs,
            max_workers=config.scan_workers,
        )

    def _check(self, target, sink: Optional[FindingSink]) -> List[Finding]:
        return self.scan(target, sink=sink)

    def scan(self, root_path: Union[str, Path], sink: Optional[FindingSink] = None) -> List[Finding]:
        """
        Scan every source file under `root_path`.

        Args:
            root_path: Directory to walk recursively
            sink: Optional observer called once per finding

        Returns:
            Findings grouped per file, files in sorted order

        Raises:
            InvalidInputError: root_path is missing or not a directory
        """
        root = Path(root_path)
        if not root.exists() or not root.is_dir():
            self.logger.error(f"Invalid source directory: {root_path}")
            raise InvalidInputError(f"Invalid directory: {root_path}")

        files = list(self.iter_source_files(root))
        self.logger.info(f"Scanning {len(files)} source files under {root} with {len(self.rules)} rules")

        if self.max_workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                per_file = list(pool.map(self.scan_file, files))
        else:
            per_file = [self.scan_file(path) for path in files]

        # Merged here so the sink only ever runs on the calling thread
        findings: List[Finding] = []
        for file_findings in per_file:
            for finding in file_findings:
                self.emit(findings, finding, sink)

        if findings:
            self.logger.warning(f"Issues detected: {len(findings)}")
        else:
            self.logger.info("No issues detected.")
        return findings

    def iter_source_files(self, root: Path) -> Iterable[Path]:
        """Yield source files under root, skipping excluded directories."""
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.exclude_dirs)
            for filename in sorted(filenames):
                if Path(filename).suffix.lower() in self.extensions:
                    yield Path(dirpath) / filename

    def scan_file(self, path: Path) -> List[Finding]:
        """
        Apply every rule to every line of one file.

        An unreadable file yields a single io-failure finding instead of
        partial results.
        """
        self.logger.debug(f"Analyzing file: {path}")
        findings: List[Finding] = []
        display = str(path)

        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                for line_no, line in enumerate(f, start=1):
                    findings.extend(self.scan_line(line.rstrip("\r\n"), display, line_no))

        except OSError as e:
            failure = TargetFailure(display, e)
            self.logger.warning(f"Error reading file {display}: {failure.description}")
            return [
                self.create_finding(
                    rule_id="io-failure",
                    category=Category.IO,
                    severity=Severity.LOW,
                    message=f"Could not read {display}: {failure.description}",
                    location=display,
                    file=display,
                    recommendation="Check file permissions and encoding",
                    exception_type=failure.cause_type,
                )
            ]

        return findings

    def scan_line(self, line: str, file: str, line_no: int) -> List[Finding]:
        """Apply every rule to one line; rules never short-circuit each other."""
        findings = []
        for rule in self.rules:
            matched = rule.match(line)
            if matched is None:
                continue
            findings.append(self.create_finding(
                rule_id=rule.id,
                category=rule.category,
                severity=rule.severity,
                message=rule.format_message(file, line_no, matched),
                location=f"{file}:{line_no}",
                file=file,
                line=line_no,
                code_snippet=line.strip(),
                recommendation=rule.recommendation,
                match=matched,
            ))
        return findings
