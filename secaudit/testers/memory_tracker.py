"""
Memory-safety tracker.

Two independent passes:
- analyze_static(): coarse substring/regex heuristics over a source text
- analyze_runtime(): replay of an ALLOC/FREE/ACCESS log against the set of
  live addresses

Per-address state is Live or Absent; Absent is both the initial state and
the state after FREE.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Set, Union

from ..core.base_checker import FindingSink, RuntimeTester
from ..core.errors import MalformedRecordError
from ..core.models import Category, Finding, Severity


class OperationKind(Enum):
    ALLOC = "ALLOC"
    FREE = "FREE"
    ACCESS = "ACCESS"


@dataclass(frozen=True)
class MemoryOperation:
    """One record of the memory log."""

    kind: OperationKind
    address: str

    @classmethod
    def parse(cls, record: str) -> "MemoryOperation":
        """
        Parse "<OP> <ADDRESS>".

        Raises:
            MalformedRecordError: not a string, wrong token count or unknown operation
        """
        if not isinstance(record, str):
            raise MalformedRecordError(f"expected a string record, got {type(record).__name__}", record)
        tokens = record.split()
        if len(tokens) != 2:
            raise MalformedRecordError(
                f"expected '<OP> <ADDRESS>', got {len(tokens)} token(s)", record
            )
        op, address = tokens
        try:
            kind = OperationKind(op)
        except ValueError:
            raise MalformedRecordError(f"unknown operation {op!r}", record) from None
        return cls(kind=kind, address=address)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.address}"


# Static heuristics. Each fires at most once per analyze_static() call.
FIXED_BUFFER_PATTERN = re.compile(r"\bchar\s+(\w+)\s*\[\s*\w+\s*\]")
UNCHECKED_COPY_PATTERN = r"\b(?:strcpy|strcat|sprintf|gets|memcpy)\s*\(\s*{name}\b"
NULL_CHECK_PATTERN = re.compile(r"\bif\s*\(\s*\w+\s*==\s*(?:NULL|nullptr)\s*\)")
ALLOCATION_PATTERN = re.compile(r"\b(?:malloc|calloc|realloc|strdup)\s*\(")
RELEASE_PATTERN = re.compile(r"\bfree\s*\(")


class MemorySafetyTracker(RuntimeTester):
    """Detects buffer overflows, null dereferences, leaks, invalid frees and accesses."""

    def __init__(self):
        super().__init__(name="MemorySafetyTracker")

    def _check(self, target, sink: Optional[FindingSink]) -> List[Finding]:
        # A single string is a source text; anything else is an operation log.
        if isinstance(target, str):
            return self.analyze_static(target, sink=sink)
        return self.analyze_runtime(target, sink=sink)

    # ------------------------------------------------------------------
    # Static heuristics
    # ------------------------------------------------------------------

    def analyze_static(self, source_text: Optional[str], sink: Optional[FindingSink] = None) -> List[Finding]:
        """
        Run the coarse heuristics over one source text.

        Returns:
            At most one finding per heuristic
        """
        findings: List[Finding] = []

        if not source_text:
            self.logger.warning("Empty or null source code provided for analysis.")
            return findings

        self.logger.info("Starting static memory safety analysis...")

        overflow = self._find_unchecked_copy(source_text)
        if overflow is not None:
            self.emit(findings, self.create_finding(
                rule_id="buffer-overflow",
                category=Category.MEMORY,
                severity=Severity.HIGH,
                message=f"Potential buffer overflow: unchecked copy into fixed-size buffer '{overflow}'",
                location="source",
                recommendation="Use bounded copies (strncpy, snprintf) and check lengths",
                buffer=overflow,
            ), sink)

        if NULL_CHECK_PATTERN.search(source_text):
            self.emit(findings, self.create_finding(
                rule_id="null-dereference",
                category=Category.MEMORY,
                severity=Severity.MEDIUM,
                message="Potential null pointer dereference after explicit NULL check",
                location="source",
                recommendation="Return or bail out inside the NULL branch",
            ), sink)

        if ALLOCATION_PATTERN.search(source_text) and not RELEASE_PATTERN.search(source_text):
            self.emit(findings, self.create_finding(
                rule_id="memory-leak",
                category=Category.MEMORY,
                severity=Severity.MEDIUM,
                message="Potential memory leak: allocation without a corresponding free",
                location="source",
                recommendation="Release every allocation on all paths",
            ), sink)

        self.logger.info("Static memory safety analysis completed.")
        return findings

    def _find_unchecked_copy(self, source_text: str) -> Optional[str]:
        """Name of the first fixed-size buffer that is copied into unchecked."""
        for match in FIXED_BUFFER_PATTERN.finditer(source_text):
            name = match.group(1)
            if re.search(UNCHECKED_COPY_PATTERN.format(name=re.escape(name)), source_text):
                return name
        return None

    # ------------------------------------------------------------------
    # Runtime replay
    # ------------------------------------------------------------------

    def analyze_runtime(
        self,
        operation_log: Optional[Iterable[Union[str, MemoryOperation]]],
        sink: Optional[FindingSink] = None,
    ) -> List[Finding]:
        """
        Replay a memory log in order.

        Args:
            operation_log: Lines "<OP> <ADDRESS>" or MemoryOperation records
            sink: Optional observer called once per finding

        Returns:
            One finding per malformed line, invalid free and invalid access
        """
        findings: List[Finding] = []

        if operation_log is None:
            self.logger.warning("Empty or null memory access log provided for analysis.")
            return findings

        self.logger.info("Starting runtime memory safety analysis...")
        live: Set[str] = set()
        replayed = 0

        for index, record in enumerate(operation_log, start=1):
            replayed += 1
            location = f"log:{index}"

            if isinstance(record, MemoryOperation):
                operation = record
            else:
                try:
                    operation = MemoryOperation.parse(record)
                except MalformedRecordError as e:
                    self.emit(findings, self.create_finding(
                        rule_id="malformed-operation",
                        category=Category.MEMORY,
                        severity=Severity.LOW,
                        message=f"Malformed operation {record!r}: {e}",
                        location=location,
                        line=index,
                        recommendation="Fix the log producer",
                    ), sink)
                    continue

            if operation.kind is OperationKind.ALLOC:
                live.add(operation.address)

            elif operation.kind is OperationKind.FREE:
                if operation.address in live:
                    live.remove(operation.address)
                else:
                    self.emit(findings, self.create_finding(
                        rule_id="invalid-free",
                        category=Category.MEMORY,
                        severity=Severity.HIGH,
                        message=f"Invalid free operation detected for address: {operation.address}",
                        location=location,
                        line=index,
                        recommendation="Free each allocation exactly once",
                        address=operation.address,
                    ), sink)

            elif operation.address not in live:
                self.emit(findings, self.create_finding(
                    rule_id="invalid-access",
                    category=Category.MEMORY,
                    severity=Severity.CRITICAL,
                    message=f"Invalid memory access detected for address: {operation.address}",
                    location=location,
                    line=index,
                    recommendation="Do not use memory after it is freed or before it is allocated",
                    address=operation.address,
                ), sink)

        if replayed == 0:
            self.logger.warning("Empty or null memory access log provided for analysis.")
        self.logger.info(f"Runtime memory safety analysis completed: {replayed} operations, {len(findings)} findings")
        return findings
