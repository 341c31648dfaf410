"""
Line-level detection rules for the static scanner.

A rule is a single-line pattern test. Rules are immutable and applied
independently of each other; the scanner receives them as an ordered list.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..core.models import Category, Severity


@dataclass(frozen=True)
class Rule:
    """One detection rule."""

    id: str
    pattern: re.Pattern
    severity: Severity
    message: str  # format template: {file}, {line}, {match}
    category: Category
    recommendation: str = ""
    exclude: Optional[re.Pattern] = None  # line is safe if this matches

    def match(self, line: str) -> Optional[str]:
        """Return the matched text, or None if the rule does not fire."""
        m = self.pattern.search(line)
        if m is None:
            return None
        if self.exclude is not None and self.exclude.search(line):
            return None
        return m.group(0)

    def format_message(self, file: str, line: int, match: str) -> str:
        return self.message.format(file=file, line=line, match=match)


INSECURE_CALLS = (
    "System.out.print",
    "Thread.stop",
    "Runtime.getRuntime().exec",
    "os.system(",
    "pickle.loads(",
    "marshal.loads(",
    "yaml.load(",
    "tempfile.mktemp(",
    "strcpy(",
    "strcat(",
    "sprintf(",
)

SAFE_PATH_HELPERS = (
    "Paths.get",
    "safe_join",
    "resolve_safe_path",
    "secure_filename",
)


def deny_list_pattern(calls: Sequence[str]) -> re.Pattern:
    """Compile a substring deny-list into one alternation, longest first."""
    ordered = sorted(calls, key=len, reverse=True)
    return re.compile("|".join(re.escape(c) for c in ordered))


HARDCODED_SECRET = Rule(
    id="hardcoded-secret",
    pattern=re.compile(
        r"\b\w*(?:password|secret|key)\w*\s*(?::\s*[\w\[\]., ]+?\s*)?=\s*[a-z]{0,2}([\"']).*?\1",
        re.IGNORECASE,
    ),
    severity=Severity.HIGH,
    message="Hardcoded secret found in {file} at line {line}",
    category=Category.SECRETS,
    recommendation="Load credentials from the environment or a secret store",
)

SQL_INJECTION = Rule(
    id="sql-injection",
    pattern=re.compile(
        # sole literal argument, or a literal joined with "+" or formatted with "%"
        r"\.\s*execute\w*\s*\(\s*[a-z]{0,2}([\"'])(?:(?!\1).)*\1\s*[)+%]",
        re.IGNORECASE,
    ),
    severity=Severity.CRITICAL,
    message="Potential SQL injection in {file} at line {line}",
    category=Category.INJECTION,
    recommendation="Use parameterized queries instead of literal SQL strings",
)

INSECURE_CALL = Rule(
    id="insecure-call",
    pattern=deny_list_pattern(INSECURE_CALLS),
    severity=Severity.MEDIUM,
    message="Usage of deprecated/insecure function '{match}' in {file} at line {line}",
    category=Category.INSECURE_API,
    recommendation="Replace with a safe, supported alternative",
)

UNSAFE_FILE = Rule(
    id="unsafe-file",
    pattern=re.compile(
        r"\b(?:File|Path|FileReader|FileWriter|FileInputStream|FileOutputStream)\s*\(\s*[a-z]{0,2}([\"']).*?\1\s*\)",
        re.IGNORECASE,
    ),
    severity=Severity.MEDIUM,
    message="Unsafe file operation in {file} at line {line}",
    category=Category.FILE_ACCESS,
    recommendation="Resolve paths through a safe path helper before opening them",
    exclude=deny_list_pattern(SAFE_PATH_HELPERS),
)


DEFAULT_RULES: List[Rule] = [
    HARDCODED_SECRET,
    SQL_INJECTION,
    INSECURE_CALL,
    UNSAFE_FILE,
]


def default_rules() -> List[Rule]:
    """Fresh copy of the default rule list."""
    return list(DEFAULT_RULES)
