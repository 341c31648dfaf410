"""
CLI interface for secaudit.

Usage:
    python -m secaudit.main scan ./src                         # Static scan
    python -m secaudit.main memcheck memory.log --source a.c   # Memory checks
    python -m secaudit.main fuzz secaudit.sanitizer:sanitize_for_sql --seed 7
    python -m secaudit.main audit --source-root ./src --memory-log memory.log
"""

import importlib
import logging
from pathlib import Path
from typing import Any, Callable, List, Optional

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console

from .config import AuditConfig, get_default_config
from .core.errors import InvalidInputError
from .core.models import AuditReport
from .orchestrator import AuditOrchestrator
from .reports.generator import ReportGenerator


app = typer.Typer(
    name="secaudit",
    help="Security audit toolkit: static scanning, memory-safety checks and fuzzing",
)
console = Console()


def setup_logging(verbose: bool = False):
    """Configure logging once for the whole process."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_config(verbose: bool) -> AuditConfig:
    """Load .env (if any), set up logging and build the config."""
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path)
    setup_logging(verbose)
    try:
        return get_default_config()
    except ValueError as e:
        console.print(f"[red]❌ Invalid configuration: {e}[/]")
        raise typer.Exit(2)


def load_target(target: str) -> Callable[[str], Any]:
    """
    Resolve "package.module:callable" to the callable.

    Raises:
        InvalidInputError: malformed target, missing module or attribute
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise InvalidInputError(f"Fuzz target must look like 'module:callable', got {target!r}")

    try:
        obj = importlib.import_module(module_name)
    except ImportError as e:
        raise InvalidInputError(f"Cannot import {module_name}: {e}") from e

    for attr in attr_path.split("."):
        if not hasattr(obj, attr):
            raise InvalidInputError(f"{module_name} has no attribute {attr_path!r}")
        obj = getattr(obj, attr)

    if not callable(obj):
        raise InvalidInputError(f"{target} is not callable")
    return obj


def read_memory_log(path: Path) -> List[str]:
    """Read a memory log, ignoring blank lines."""
    if not path.is_file():
        raise InvalidInputError(f"Memory log not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def read_source(path: Path) -> str:
    if not path.is_file():
        raise InvalidInputError(f"Source file not found: {path}")
    return path.read_text(encoding="utf-8", errors="replace")


def finish(
    report: AuditReport,
    config: AuditConfig,
    output_format: Optional[str],
    output_dir: Optional[Path],
    no_summary: bool,
) -> None:
    """Write the report, print the summary and exit 1 on critical findings."""
    generator = ReportGenerator(output_dir=output_dir or config.report_output_dir, console=console)
    report_path = generator.generate_report(report, format=output_format or config.report_format)

    if not no_summary:
        generator.print_summary(report)
    console.print(f"Report: {report_path}")

    critical_count = len(report.get_critical_findings())
    if critical_count > 0:
        console.print(f"[red]❌ {critical_count} CRITICAL findings![/]")
        raise typer.Exit(1)


def execute(config: AuditConfig, **inputs) -> AuditReport:
    try:
        return AuditOrchestrator(config).run(**inputs)
    except InvalidInputError as e:
        console.print(f"[red]❌ {e}[/]")
        raise typer.Exit(2)


FORMAT_OPTION = typer.Option(None, "--format", "-f", help="Report format: markdown or json (default: SECAUDIT_REPORT_FORMAT)")
OUTPUT_DIR_OPTION = typer.Option(None, "--output-dir", "-o", help="Report directory")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose output")
NO_SUMMARY_OPTION = typer.Option(False, "--no-summary", help="Skip the console summary")


@app.command()
def scan(
    path: Path = typer.Argument(..., help="Source tree to scan"),
    parallel: bool = typer.Option(False, "--parallel", help="Scan files in a thread pool"),
    output_format: Optional[str] = FORMAT_OPTION,
    output_dir: Optional[Path] = OUTPUT_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
    no_summary: bool = NO_SUMMARY_OPTION,
):
    """🔍 Scan a source tree for insecure patterns."""
    config = load_config(verbose)
    if parallel:
        config.parallel_execution = True

    report = execute(config, source_root=path)
    finish(report, config, output_format, output_dir, no_summary)


@app.command()
def memcheck(
    log: Optional[Path] = typer.Argument(None, help="Memory log: one '<ALLOC|FREE|ACCESS> <address>' per line"),
    source: Optional[Path] = typer.Option(None, "--source", "-s", help="Source file for static heuristics"),
    output_format: Optional[str] = FORMAT_OPTION,
    output_dir: Optional[Path] = OUTPUT_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
    no_summary: bool = NO_SUMMARY_OPTION,
):
    """🧠 Replay a memory log and/or check a source file for memory-safety issues."""
    config = load_config(verbose)
    if log is None and source is None:
        console.print("[red]❌ Give a memory log, --source, or both[/]")
        raise typer.Exit(2)

    try:
        memory_log = read_memory_log(log) if log is not None else None
        source_text = read_source(source) if source is not None else None
    except InvalidInputError as e:
        console.print(f"[red]❌ {e}[/]")
        raise typer.Exit(2)

    report = execute(config, source_text=source_text, memory_log=memory_log)
    finish(report, config, output_format, output_dir, no_summary)


@app.command()
def fuzz(
    target: str = typer.Argument(..., help="Callable to fuzz, as module:callable"),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-n", min=0, help="Random inputs (default 100)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible runs"),
    output_format: Optional[str] = FORMAT_OPTION,
    output_dir: Optional[Path] = OUTPUT_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
    no_summary: bool = NO_SUMMARY_OPTION,
):
    """💥 Fuzz a callable with edge cases and random strings."""
    config = load_config(verbose)
    if iterations is not None:
        config.fuzz_iterations = iterations
    if seed is not None:
        config.fuzz_seed = seed

    try:
        fuzz_target = load_target(target)
    except InvalidInputError as e:
        console.print(f"[red]❌ {e}[/]")
        raise typer.Exit(2)

    report = execute(config, fuzz_target=fuzz_target)
    finish(report, config, output_format, output_dir, no_summary)


@app.command()
def audit(
    source_root: Optional[Path] = typer.Option(None, "--source-root", help="Source tree to scan"),
    memory_log: Optional[Path] = typer.Option(None, "--memory-log", help="Memory log to replay"),
    memory_source: Optional[Path] = typer.Option(None, "--memory-source", help="Source file for memory heuristics"),
    fuzz_target: Optional[str] = typer.Option(None, "--fuzz-target", help="Callable to fuzz, as module:callable"),
    output_format: Optional[str] = FORMAT_OPTION,
    output_dir: Optional[Path] = OUTPUT_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
    no_summary: bool = NO_SUMMARY_OPTION,
):
    """🛡️ Run several engines and merge them into one report."""
    config = load_config(verbose)

    try:
        inputs = {
            "source_root": source_root,
            "memory_log": read_memory_log(memory_log) if memory_log is not None else None,
            "source_text": read_source(memory_source) if memory_source is not None else None,
            "fuzz_target": load_target(fuzz_target) if fuzz_target is not None else None,
        }
    except InvalidInputError as e:
        console.print(f"[red]❌ {e}[/]")
        raise typer.Exit(2)

    if all(value is None for value in inputs.values()):
        console.print("[red]❌ No engine selected[/]")
        raise typer.Exit(2)

    report = execute(config, **inputs)
    finish(report, config, output_format, output_dir, no_summary)


if __name__ == "__main__":
    app()
