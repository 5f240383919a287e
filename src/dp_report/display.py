"""Rich rendering of evaluations and validation findings."""

from typing import List, Optional, Sequence

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from dp_report.assignment import Submission, SubmissionStatus
from dp_report.constants import INDICATOR_ICONS, INDICATOR_NOK, INDICATOR_NOT_ENOUGH_TESTS, INDICATOR_OK
from dp_report.junit.results import JUnitMethodResultType, TestType
from dp_report.report.base import BuildReport
from dp_report.store import SubmissionReport
from dp_report.validator import Info, InfoType

INDICATOR_STYLES = {
    INDICATOR_OK: "green",
    INDICATOR_NOK: "red",
    INDICATOR_NOT_ENOUGH_TESTS: "yellow",
}

INFO_STYLES = {
    InfoType.INFO: "blue",
    InfoType.WARNING: "yellow",
    InfoType.ERROR: "red",
}

OUTCOME_STYLES = {
    JUnitMethodResultType.SUCCESS: "green",
    JUnitMethodResultType.FAILURE: "red",
    JUnitMethodResultType.ERROR: "red",
    JUnitMethodResultType.IGNORED: "dim",
    JUnitMethodResultType.EMPTY: "yellow",
}


def get_indicators_table(indicators: Sequence[SubmissionReport]) -> Table:
    """Generate Rich table of indicator verdicts"""
    table = Table(expand=True, show_header=True, header_style="bold cyan")
    table.add_column("Indicator", style="cyan", no_wrap=True)
    table.add_column("Result", no_wrap=True)
    table.add_column("Progress", justify="right", no_wrap=True)

    for report in indicators:
        style = INDICATOR_STYLES.get(report.report_value, "white")
        icon = INDICATOR_ICONS.get(report.report_value, "")
        progress = ""
        if report.report_goal is not None:
            progress = f"{report.report_progress}/{report.report_goal}"

        table.add_row(
            report.report_key.description,
            f"[{style}]{icon} {report.report_value}[/{style}]",
            progress,
        )

    return table


def get_results_panel(
    submission: Submission, indicators: Sequence[SubmissionReport], build_report: Optional[BuildReport]
) -> Panel:
    """Generate final results panel for one evaluated submission.

    Args:
        submission: Evaluated submission (its status tells timeouts and output overflows apart)
        indicators: Indicators recorded for the submission
        build_report: Report of the build, None if the build was short-circuited

    Returns:
        Rich Panel with the indicators and, when available, test timing and coverage
    """
    if build_report is None:
        reason = {
            SubmissionStatus.ABORTED_BY_TIMEOUT: "Build aborted by timeout",
            SubmissionStatus.TOO_MUCH_OUTPUT: "Build produced too much output",
        }.get(submission.status, submission.status.name)
        return Panel(Text(reason, style="bold red"), title="📊 Evaluation", border_style="red")

    parts = []
    if build_report.execution_failed():
        parts.append(Text("Fatal error executing the build, no results are trustworthy", style="bold red"))
    parts.append(get_indicators_table(indicators))

    footer = []
    elapsed = build_report.elapsed_time_junit()
    if elapsed is not None:
        footer.append(f"Teacher tests time: {elapsed} sec")
    coverage = build_report.coverage()
    if coverage is not None:
        footer.append(f"Coverage: {coverage.line_coverage_percent}%/{coverage.branch_coverage_percent}%")
    if footer:
        parts.append(Text(" | ".join(footer), style="dim"))

    failed = any(r.report_value != INDICATOR_OK for r in indicators) or build_report.execution_failed()
    return Panel(Group(*parts), title="📊 Evaluation", border_style="red" if failed else "cyan")


def get_diagnostics_panels(build_report: BuildReport) -> List[Panel]:
    """Panels with compiler, style and test diagnostics; empty if there is nothing to show."""
    panels = []

    compilation_errors = build_report.compilation_errors()
    if compilation_errors:
        panels.append(
            Panel(Text("\n".join(compilation_errors)), title="Compilation errors", border_style="red")
        )

    if build_report.checkstyle_validation_active():
        style_errors = build_report.checkstyle_errors()
        if style_errors:
            panels.append(Panel(Text("\n".join(style_errors)), title="Code quality", border_style="yellow"))

    for test_type in TestType:
        errors = build_report.junit_errors(test_type)
        if errors:
            panels.append(
                Panel(
                    Text(errors),
                    title=f"{test_type.value.capitalize()} test failures",
                    border_style="red",
                )
            )

    test_results = build_report.test_results()
    if test_results:
        table = Table(expand=True, show_header=True, header_style="bold cyan")
        table.add_column("Class", style="cyan", no_wrap=True)
        table.add_column("Method", no_wrap=True)
        table.add_column("Result", no_wrap=True)
        for expected, result in zip(build_report.assignment_test_methods, test_results):
            style = OUTCOME_STYLES[result.outcome]
            outcome = "Not run" if result.outcome == JUnitMethodResultType.EMPTY else result.outcome.value
            table.add_row(expected.test_class, expected.test_method, f"[{style}]{outcome}[/{style}]")
        panels.append(Panel(table, title="Assignment tests", border_style="cyan"))

    return panels


def get_validation_panel(report: Sequence[Info], test_methods: Sequence[str]) -> Panel:
    """Generate panel with the findings of an assignment validation"""
    table = Table(expand=True, show_header=True, header_style="bold cyan")
    table.add_column("Type", no_wrap=True)
    table.add_column("Message", style="white", ratio=2)
    table.add_column("Details", style="dim", ratio=2)

    for info in report:
        style = INFO_STYLES[info.type]
        table.add_row(f"[{style}]{info.type.value}[/{style}]", info.message, info.description)

    summary = Text(f"{len(test_methods)} test methods found", style="dim")
    has_errors = any(info.type == InfoType.ERROR for info in report)
    return Panel(
        Group(table, summary) if report else summary,
        title="🔍 Assignment validation",
        border_style="red" if has_errors else "cyan",
    )
