"""
Fuzz harness for single-argument string callables.

Phase 1 replays EDGE_CASE_CORPUS in order, phase 2 feeds `iterations`
random printable-ASCII strings. A failing call never stops the run.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from ..core.base_checker import FindingSink, RuntimeTester
from ..core.errors import TargetFailure
from ..core.models import Category, Finding, Severity, preview


EDGE_CASE_CORPUS = (
    "",                                     # Empty string
    " ",                                    # Single space
    "\t",
    "null",                                 # Literal null
    "\n",
    "\r\n",
    "\0",                                   # NUL character
    "\x1b[2J\x07\x7f",                      # Escape sequence, bell, DEL
    "💥🔥💡",                               # Emoji
    "\U0001d573\U0001d58a\U0001d591\U0001d591\U0001d594 \u202eevil",  # Mathematical letters, RTL override
    "A" * (1024 * 1024),                    # 1 MiB string
    "<script>alert('xss')</script>",        # XSS payload
    "' OR '1'='1",                          # SQL injection payload
    "'; DROP TABLE users; --",
    "%s%s%s%s%n",                           # Format string
    "$(rm -rf /)",                          # Command injection
    "../../../etc/passwd",                  # Path traversal
    "..\\..\\..\\windows\\win.ini",
)

DEFAULT_ITERATIONS = 100
MIN_RANDOM_LENGTH = 1
MAX_RANDOM_LENGTH = 100
PRINTABLE_MIN = 32
PRINTABLE_MAX = 126


class FuzzPhase(Enum):
    EDGE_CASE = "edge case"
    RANDOM_INPUT = "random input"


@dataclass
class FuzzConfig:
    """Per-run fuzz settings."""

    iterations: int = DEFAULT_ITERATIONS
    seed: Optional[int] = None

    def __post_init__(self):
        if self.iterations < 0:
            raise ValueError("iterations must be >= 0")


def generate_random_input(rng: random.Random) -> str:
    """Random string: length uniform in [1, 100], chars uniform in ASCII 32..126."""
    length = rng.randint(MIN_RANDOM_LENGTH, MAX_RANDOM_LENGTH)
    return "".join(chr(rng.randint(PRINTABLE_MIN, PRINTABLE_MAX)) for _ in range(length))


class FuzzEngine(RuntimeTester):
    """Feeds edge-case and random strings to a target and records failures."""

    def __init__(self, corpus: Sequence[str] = EDGE_CASE_CORPUS, config: Optional[FuzzConfig] = None):
        super().__init__(name="FuzzEngine")
        self.corpus = tuple(corpus)
        self.config = config or FuzzConfig()

    def _check(self, target, sink: Optional[FindingSink]) -> List[Finding]:
        return self.run(target, self.config, sink=sink)

    def run(
        self,
        target: Callable[[str], Any],
        config: Optional[FuzzConfig] = None,
        sink: Optional[FindingSink] = None,
        rng: Optional[random.Random] = None,
    ) -> List[Finding]:
        """
        Fuzz `target` with the corpus, then with random inputs.

        Args:
            target: Callable taking one string; fails by raising or by
                returning an Exception instance
            config: Iterations and seed (default: engine config)
            sink: Optional observer called once per finding
            rng: Injected generator; overrides config.seed

        Returns:
            Findings in execution order (corpus first, then random inputs)
        """
        config = config or self.config
        if rng is None:
            # seed=None seeds from system entropy
            rng = random.Random(config.seed)

        findings: List[Finding] = []
        target_name = getattr(target, "__qualname__", None) or repr(target)
        self.logger.info(
            f"Starting fuzz tests against {target_name}: "
            f"{len(self.corpus)} edge cases, {config.iterations} random inputs"
        )

        for test_input in self.corpus:
            self._execute(target, test_input, FuzzPhase.EDGE_CASE, findings, sink)

        for _ in range(config.iterations):
            self._execute(target, generate_random_input(rng), FuzzPhase.RANDOM_INPUT, findings, sink)

        self.logger.info(f"Fuzz testing completed: {len(findings)} failures")
        return findings

    def _execute(
        self,
        target: Callable[[str], Any],
        test_input: str,
        phase: FuzzPhase,
        findings: List[Finding],
        sink: Optional[FindingSink],
    ) -> None:
        self.logger.debug(f"Testing {phase.value}: {preview(test_input)}")
        try:
            outcome = target(test_input)
        except Exception as e:
            failure = TargetFailure(phase.value, e)
        else:
            if not isinstance(outcome, Exception):
                return
            failure = TargetFailure(phase.value, outcome)

        self.logger.error(
            f"Issue detected during {phase.value} test: "
            f"input={preview(test_input)} exception={failure.description}"
        )
        self.emit(findings, self.create_finding(
            rule_id=phase.name.lower().replace("_", "-"),
            category=Category.FUZZ,
            severity=Severity.HIGH,
            message=failure.description,
            location=preview(test_input),
            phase=phase.value,
            input=test_input,
            recommendation="Validate and reject malformed input instead of failing",
            exception_type=failure.cause_type,
        ), sink)
