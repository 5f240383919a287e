"""Console entry point for dp-report."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console

from dp_report.assignment import Assignment, Submission
from dp_report.config import configure_logging
from dp_report.constants import INDICATOR_OK
from dp_report.display import get_diagnostics_panels, get_results_panel, get_validation_panel
from dp_report.store import InMemoryReportStore
from dp_report.validator import AssignmentValidator
from dp_report.worker import BuildResult, BuildRunner, BuildWorker

console = Console()

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


class ReplayRunner(BuildRunner):
    """Build runner that hands back the console output of a build that already ran."""

    def __init__(self, output_lines: List[str]):
        self.output_lines = output_lines

    def run(self, project_folder: Path, principal_name: Optional[str], assignment: Assignment) -> BuildResult:
        return BuildResult(output_lines=list(self.output_lines))


def load_assignment(path: Path) -> Assignment:
    return Assignment.model_validate_json(Path(path).read_text(encoding="utf-8"))


async def run_evaluate(parsed: argparse.Namespace) -> int:
    """Evaluate a project that was already built, from its console log and reports."""
    project_folder = Path(parsed.project)
    if not project_folder.is_dir():
        raise FileNotFoundError(f"Project folder not found: {project_folder}")

    # reports already on disk are evaluated as they are; no second build for coverage
    assignment = load_assignment(parsed.assignment).model_copy(update={"calculate_student_tests_coverage": False})
    output_lines = Path(parsed.output).read_text(encoding="utf-8").splitlines()

    store = InMemoryReportStore()
    if parsed.inventory:
        validator = AssignmentValidator()
        validator.validate(project_folder, assignment)
        for test_method in validator.assignment_test_methods():
            store.save_assignment_test_method(assignment.id, test_method)

    submission = Submission(id=parsed.submission_id, assignment_id=assignment.id)
    worker = BuildWorker(ReplayRunner(output_lines), store)

    console.print(f"\n[yellow]Evaluating {project_folder} against assignment {assignment.id}[/yellow]\n")
    build_report = await worker.check_submission_async(project_folder, submission, assignment)
    indicators = store.indicators(submission.id)

    console.print(get_results_panel(submission, indicators, build_report))
    if build_report is None:
        return EXIT_FAILED

    if not parsed.quiet:
        for panel in get_diagnostics_panels(build_report):
            console.print(panel)

    if build_report.execution_failed() or any(r.report_value != INDICATOR_OK for r in indicators):
        return EXIT_FAILED
    return EXIT_OK


def run_validate(parsed: argparse.Namespace) -> int:
    """Validate an assignment project."""
    assignment_folder = Path(parsed.folder)
    if not assignment_folder.is_dir():
        raise FileNotFoundError(f"Assignment folder not found: {assignment_folder}")

    assignment = load_assignment(parsed.assignment)
    validator = AssignmentValidator()
    report = validator.validate(assignment_folder, assignment)

    console.print(get_validation_panel(report, validator.test_methods))
    if not parsed.quiet:
        for test_method in validator.test_methods:
            console.print(f"  [dim]{test_method}[/dim]")

    return EXIT_FAILED if validator.has_errors else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="dp-report",
        description="dp-report - Build report evaluation for programming assignments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  evaluate            Evaluate a built project from its console log and reports
  validate            Validate an assignment project

Examples:
  dp-report evaluate ./submission -a assignment.json -o build.log
  dp-report evaluate ./submission -a assignment.json -o build.log --inventory
  dp-report validate ./assignment -a assignment.json
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    evaluate_parser = subparsers.add_parser(
        "evaluate",
        help="Evaluate a built project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    evaluate_parser.add_argument("project", help="Folder of the built project")
    evaluate_parser.add_argument(
        "-a",
        "--assignment",
        required=True,
        help="Assignment configuration (JSON)",
    )
    evaluate_parser.add_argument(
        "-o",
        "--output",
        required=True,
        help="Console output of the build",
    )
    evaluate_parser.add_argument(
        "--submission-id",
        type=int,
        default=1,
        help="Submission id used for the stored indicators (default: 1)",
    )
    evaluate_parser.add_argument(
        "--inventory",
        action="store_true",
        help="Collect the assignment test methods from the project's teacher tests",
    )

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate an assignment project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    validate_parser.add_argument("folder", help="Folder of the assignment project")
    validate_parser.add_argument(
        "-a",
        "--assignment",
        required=True,
        help="Assignment configuration (JSON)",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Minimal output",
    )
    parser.add_argument(
        "--log-file",
        help="Write debug logs to this file (default: <log directory>/dp-report.log)",
    )
    return parser


async def async_main(args: Optional[list[str]] = None) -> int:
    """Entry point that supports asyncio execution."""
    parser = build_parser()
    parsed = parser.parse_args(args=args)

    if parsed.command is None:
        parser.print_help()
        return EXIT_USAGE

    configure_logging(Path(parsed.log_file) if parsed.log_file else None, level=logging.DEBUG)

    try:
        if parsed.command == "evaluate":
            return await run_evaluate(parsed)
        return run_validate(parsed)
    except (FileNotFoundError, ValidationError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}", style="bold red")
        return EXIT_USAGE


def main() -> int:
    """Synchronous entry point for console_scripts."""
    return asyncio.run(async_main())
