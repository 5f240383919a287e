"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from dp_report.assignment import Assignment, Engine, Language, Submission
from dp_report.junit.results import JUnitMethodResult, JUnitMethodResultType, JUnitResults

PACKAGE = "org.dropproject.samples"

JACOCO_HEADER = (
    "GROUP,PACKAGE,CLASS,INSTRUCTION_MISSED,INSTRUCTION_COVERED,BRANCH_MISSED,BRANCH_COVERED,"
    "LINE_MISSED,LINE_COVERED,COMPLEXITY_MISSED,COMPLEXITY_COVERED,METHOD_MISSED,METHOD_COVERED"
)

# (method name, outcome) where outcome is one of success/failure/error/skipped
Case = Tuple[str, str]


def junit_xml(full_class_name: str, cases: Sequence[Case], time: str = "0.5") -> str:
    """Build a surefire-like JUnit XML report for one test class."""
    failures = sum(1 for _, outcome in cases if outcome == "failure")
    errors = sum(1 for _, outcome in cases if outcome == "error")
    skipped = sum(1 for _, outcome in cases if outcome == "skipped")

    body = []
    for method, outcome in cases:
        body.append(f'  <testcase name="{method}" classname="{full_class_name}" time="0.1">')
        if outcome == "failure":
            body.append(
                '    <failure message="expected:&lt;1&gt; but was:&lt;2&gt;" type="java.lang.AssertionError">'
                "java.lang.AssertionError: expected:&lt;1&gt; but was:&lt;2&gt;\n"
                "\tat org.junit.Assert.fail(Assert.java:88)\n"
                f"\tat {full_class_name}.{method}({full_class_name.split('.')[-1]}.java:12)\n"
                "</failure>"
            )
        elif outcome == "error":
            body.append(
                '    <error message="boom" type="java.lang.NullPointerException">'
                "java.lang.NullPointerException: boom\n"
                f"\tat {PACKAGE}.Main.run(Main.java:7)\n"
                f"\tat {full_class_name}.{method}({full_class_name.split('.')[-1]}.java:20)\n"
                "\tat java.base/jdk.internal.reflect.NativeMethodAccessorImpl.invoke0(Native Method)\n"
                "</error>"
            )
        elif outcome == "skipped":
            body.append("    <skipped/>")
        body.append("  </testcase>")

    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<testsuite name="{full_class_name}" time="{time}" tests="{len(cases)}" '
        f'errors="{errors}" skipped="{skipped}" failures="{failures}">\n'
        + "\n".join(body)
        + "\n</testsuite>\n"
    )


def make_results(
    simple_name: str,
    outcomes: Sequence[Case] = (("test1", "success"),),
    package: str = PACKAGE,
    time_elapsed: float = 0.5,
) -> JUnitResults:
    """Build JUnitResults directly, without going through the parser."""
    full_class_name = f"{package}.{simple_name}"
    outcome_types = {
        "success": JUnitMethodResultType.SUCCESS,
        "failure": JUnitMethodResultType.FAILURE,
        "error": JUnitMethodResultType.ERROR,
        "skipped": JUnitMethodResultType.IGNORED,
    }
    methods = tuple(
        JUnitMethodResult(
            method_name=method,
            full_method_name=f"{full_class_name}.{method}",
            outcome=outcome_types[outcome],
            failure_detail=None if outcome in ("success", "skipped") else f"{outcome} in {method}",
        )
        for method, outcome in outcomes
    )
    skipped = sum(1 for _, outcome in outcomes if outcome == "skipped")
    return JUnitResults(
        test_class_name=simple_name,
        full_class_name=full_class_name,
        num_tests=len(outcomes) - skipped,
        num_errors=sum(1 for _, outcome in outcomes if outcome == "error"),
        num_failures=sum(1 for _, outcome in outcomes if outcome == "failure"),
        num_skipped=skipped,
        time_elapsed=time_elapsed,
        junit_method_results=methods,
    )


@pytest.fixture
def assignment() -> Assignment:
    """Provide a Maven/Java assignment accepting student tests."""
    return Assignment(
        id="sample-assignment",
        engine=Engine.MAVEN,
        language=Language.JAVA,
        package_name=PACKAGE,
        accepts_student_tests=True,
        min_student_tests=2,
        mandatory_tests_suffix="_mandatory",
    )


@pytest.fixture
def kotlin_assignment(assignment: Assignment) -> Assignment:
    return assignment.model_copy(update={"language": Language.KOTLIN})


@pytest.fixture
def gradle_assignment(assignment: Assignment) -> Assignment:
    return assignment.model_copy(update={"engine": Engine.GRADLE})


@pytest.fixture
def submission() -> Submission:
    return Submission(id=7, assignment_id="sample-assignment", submitter_user_id="student1")


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a project folder with empty report directories."""
    project = tmp_path / "project"
    (project / "target" / "surefire-reports").mkdir(parents=True)
    (project / "src" / "main" / "java").mkdir(parents=True)
    (project / "src" / "test" / "java").mkdir(parents=True)
    return project


@pytest.fixture
def write_surefire_report(project_dir: Path) -> Callable[[str, Sequence[Case]], Path]:
    """Return a helper that writes a TEST-<class>.xml surefire report into the project."""

    def _write(simple_name: str, cases: Sequence[Case], report_dir: Optional[str] = None) -> Path:
        full_class_name = f"{PACKAGE}.{simple_name}"
        target = project_dir / (report_dir or "target/surefire-reports")
        target.mkdir(parents=True, exist_ok=True)
        report = target / f"TEST-{full_class_name}.xml"
        report.write_text(junit_xml(full_class_name, cases))
        return report

    return _write


@pytest.fixture
def write_jacoco_report(project_dir: Path) -> Callable[[List[str]], Path]:
    """Return a helper that writes a jacoco.csv with the given data rows."""

    def _write(rows: List[str], name: str = "jacoco.csv") -> Path:
        jacoco_dir = project_dir / "target" / "site" / "jacoco"
        jacoco_dir.mkdir(parents=True, exist_ok=True)
        report = jacoco_dir / name
        report.write_text("\n".join([JACOCO_HEADER] + rows) + "\n")
        return report

    return _write
