"""Build worker: runs a build for a submission and records its evaluation."""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from dp_report.assignment import Assignment, Engine, Submission, SubmissionStatus
from dp_report.config import ReportSettings, settings as default_settings
from dp_report.constants import (
    INDICATOR_NOK,
    INDICATOR_NOT_ENOUGH_TESTS,
    INDICATOR_OK,
    JACOCO_PLUGIN_MARKER,
    TEACHER_TEST_NAME_PREFIX,
)
from dp_report.junit.results import JUnitSummary, TestType
from dp_report.report.base import BuildReport
from dp_report.report.builder import BuildReportBuilder, list_report_files
from dp_report.store import Indicator, JacocoReport, JUnitReport, ReportStore, SubmissionReport

IGNORED_SUFFIX = ".ignore"


class BuildResult(BaseModel):
    """What the build runner hands back after invoking the build tool."""

    result_code: int = 0
    output_lines: List[str] = Field(default_factory=list)
    expired_by_timeout: bool = False

    def too_much_output(self, threshold: int) -> bool:
        return len(self.output_lines) > threshold


class BuildRunner(ABC):
    """Invokes the build tool (clean, compile, test) on a project folder."""

    @abstractmethod
    def run(self, project_folder: Path, principal_name: Optional[str], assignment: Assignment) -> BuildResult:
        """Run the build.

        Args:
            project_folder: Folder holding the project to build
            principal_name: User on whose behalf the build runs
            assignment: Assignment providing engine and memory limits

        Returns:
            BuildResult with the console output and timeout flag
        """
        pass


def has_coverage_report(project_folder: Path) -> bool:
    """Whether the project's pom declares the JaCoCo plugin."""
    pom_file = project_folder / "pom.xml"
    if not pom_file.is_file():
        return False
    return JACOCO_PLUGIN_MARKER in pom_file.read_text(encoding="utf-8")


class BuildWorker:
    """Checks submissions and assignments, one build at a time per unit of work."""

    def __init__(
        self,
        runner: BuildRunner,
        store: ReportStore,
        builder: Optional[BuildReportBuilder] = None,
        settings: Optional[ReportSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.runner = runner
        self.store = store
        self.settings = settings or default_settings
        self.logger = logger or logging.getLogger(__name__)
        self.builder = builder or BuildReportBuilder(store, settings=self.settings, logger=self.logger)

    def check_submission(
        self,
        project_folder: Path,
        submission: Submission,
        assignment: Assignment,
        principal_name: Optional[str] = None,
        dont_change_status_date: bool = False,
        rebuild_by_teacher: bool = False,
    ) -> Optional[BuildReport]:
        """
        Build a submission and store its indicators, build log and reports.

        Args:
            project_folder: Folder holding the submission merged with the assignment
            submission: Submission being checked, its status is updated in place
            assignment: Assignment the submission targets
            principal_name: User that triggered the build
            dont_change_status_date: Keep the submission's status date
            rebuild_by_teacher: A teacher triggered the rebuild, the build runs as the submitter

        Returns:
            The BuildReport, or None if the build timed out or produced too much output
        """
        project_folder = Path(project_folder)
        real_principal_name = submission.submitter_user_id if rebuild_by_teacher else principal_name
        tag = f"submission {submission.id}"

        if assignment.max_memory_mb is not None:
            self.logger.info(
                f"[{tag}] Started {assignment.engine.value.lower()} invocation (max: {assignment.max_memory_mb}Mb)"
            )
        else:
            self.logger.info(f"[{tag}] Started {assignment.engine.value.lower()} invocation")

        result = self.runner.run(project_folder, real_principal_name, assignment)

        if result.expired_by_timeout:
            self.logger.warning(f"[{tag}] Build aborted by timeout")
            submission.set_status(SubmissionStatus.ABORTED_BY_TIMEOUT, dont_update_status_date=dont_change_status_date)
            return None

        if result.too_much_output(self.settings.too_much_output_threshold):
            self.logger.warning(f"[{tag}] Build produced {len(result.output_lines)} lines of output")
            submission.set_status(SubmissionStatus.TOO_MUCH_OUTPUT, dont_update_status_date=dont_change_status_date)
            return None

        # reports of a previous build must not be graded in place of this build's files
        self.store.delete_junit_reports(submission.id)
        self.store.delete_jacoco_reports(submission.id)
        build_report = self.builder.build(result.output_lines, str(project_folder.absolute()), assignment, submission)

        self.store.delete_indicators_except_project_structure(submission.id)
        self._record_indicators(build_report, assignment, submission)

        submission.build_report_id = self.store.save_build_log(build_report.get_output())
        self._store_junit_reports(project_folder, assignment, submission)

        if (
            assignment.engine == Engine.MAVEN
            and assignment.calculate_student_tests_coverage
            and has_coverage_report(project_folder)
        ):
            self._check_coverage(project_folder, assignment, submission, real_principal_name)

        status = SubmissionStatus.VALIDATED_REBUILT if rebuild_by_teacher else SubmissionStatus.VALIDATED
        submission.set_status(status, dont_update_status_date=dont_change_status_date)
        self.logger.info(f"[{tag}] Finished with status {status.name}")
        return build_report

    async def check_submission_async(
        self,
        project_folder: Path,
        submission: Submission,
        assignment: Assignment,
        principal_name: Optional[str] = None,
        dont_change_status_date: bool = False,
        rebuild_by_teacher: bool = False,
    ) -> Optional[BuildReport]:
        """Run check_submission in a worker thread."""
        return await asyncio.to_thread(
            self.check_submission,
            project_folder,
            submission,
            assignment,
            principal_name,
            dont_change_status_date,
            rebuild_by_teacher,
        )

    def check_assignment(
        self, assignment_folder: Path, assignment: Assignment, principal_name: Optional[str] = None
    ) -> Optional[BuildReport]:
        """Build the assignment's own project (reference solution plus teacher tests).

        Returns:
            The BuildReport, or None if the build timed out
        """
        assignment_folder = Path(assignment_folder)
        self.logger.info(
            f"[{assignment.id}] Engine: {assignment.engine.value}, language: {assignment.language.value}"
        )

        result = self.runner.run(assignment_folder, principal_name, assignment)
        if result.expired_by_timeout:
            self.logger.info(f"[{assignment.id}] Build aborted by timeout")
            return None

        self.logger.info(f"[{assignment.id}] Build finished with code {result.result_code}")
        return self.builder.build(result.output_lines, str(assignment_folder.absolute()), assignment)

    def _save_indicator(
        self, submission: Submission, indicator: Indicator, value: str, summary: Optional[JUnitSummary] = None
    ) -> None:
        self.store.save_indicator(
            SubmissionReport(
                submission_id=submission.id,
                report_key=indicator,
                report_value=value,
                report_progress=summary.progress if summary else None,
                report_goal=summary.num_tests if summary else None,
            )
        )

    def _record_indicators(self, build_report: BuildReport, assignment: Assignment, submission: Submission) -> None:
        if build_report.execution_failed():
            self.logger.warning(f"[submission {submission.id}] Build execution failed, no indicators recorded")
            return

        compilation_errors = build_report.compilation_errors()
        self._save_indicator(submission, Indicator.COMPILATION, INDICATOR_NOK if compilation_errors else INDICATOR_OK)
        if compilation_errors:
            return

        if build_report.checkstyle_validation_active():
            value = INDICATOR_NOK if build_report.checkstyle_errors() else INDICATOR_OK
            self._save_indicator(submission, Indicator.CHECKSTYLE, value)

        if assignment.accepts_student_tests:
            self._save_indicator(
                submission,
                Indicator.STUDENT_UNIT_TESTS,
                student_tests_indicator(build_report, assignment),
                build_report.junit_summary_as_object(TestType.STUDENT),
            )

        for test_type, indicator in (
            (TestType.TEACHER, Indicator.TEACHER_UNIT_TESTS),
            (TestType.HIDDEN, Indicator.HIDDEN_UNIT_TESTS),
        ):
            has_errors = build_report.has_junit_errors(test_type)
            if has_errors is not None:
                self._save_indicator(
                    submission,
                    indicator,
                    INDICATOR_NOK if has_errors else INDICATOR_OK,
                    build_report.junit_summary_as_object(test_type),
                )

    def _store_junit_reports(self, project_folder: Path, assignment: Assignment, submission: Submission) -> None:
        report_dir = self.settings.junit_report_dir(assignment.engine.value)
        if report_dir is None:
            return
        for xml_file in list_report_files(project_folder / report_dir, "*.xml", recursive=True):
            self.store.save_junit_report(
                JUnitReport(
                    submission_id=submission.id,
                    file_name=xml_file.name,
                    xml_report=xml_file.read_text(encoding="utf-8"),
                )
            )

    def _check_coverage(
        self, project_folder: Path, assignment: Assignment, submission: Submission, principal_name: Optional[str]
    ) -> None:
        """Measure the coverage of the student tests alone.

        Teacher test files are renamed so the test runner ignores them, the build runs a
        second time and the files are always renamed back.
        """
        tag = f"submission {submission.id}"
        hidden_files = set_aside_teacher_tests(project_folder)
        try:
            self.logger.info(f"[{tag}] Started {assignment.engine.value.lower()} invocation again (for coverage)")
            coverage_result = self.runner.run(project_folder, principal_name, assignment)
            if coverage_result.expired_by_timeout:
                self.logger.warning(f"[{tag}] Coverage build aborted by timeout")
                return

            self.logger.info(f"[{tag}] Finished invocation (for coverage)")
            coverage_report = self.builder.build(
                coverage_result.output_lines, str(project_folder.absolute()), assignment
            )
            if coverage_report.has_junit_errors(TestType.STUDENT):
                self.logger.warning(f"[{tag}] Student tests fail when isolated from teacher tests")
                return

            jacoco_dir = project_folder / self.settings.jacoco_report_dir
            if not jacoco_dir.is_dir():
                self.logger.warning(f"[{tag}] Can't measure coverage, folder [{jacoco_dir}] doesn't exist")
                return

            for csv_file in list_report_files(jacoco_dir, "*.csv"):
                self.store.save_jacoco_report(
                    JacocoReport(
                        submission_id=submission.id,
                        file_name=csv_file.name,
                        csv_report=csv_file.read_text(encoding="utf-8"),
                    )
                )
        finally:
            restore_teacher_tests(hidden_files)


def student_tests_indicator(build_report: BuildReport, assignment: Assignment) -> str:
    """NOK when student tests fail, Not Enough Tests below the minimum, otherwise OK."""
    if build_report.has_junit_errors(TestType.STUDENT):
        return INDICATOR_NOK

    summary = build_report.junit_summary_as_object(TestType.STUDENT)
    if summary is None or summary.num_tests < (assignment.min_student_tests or 0):
        return INDICATOR_NOT_ENOUGH_TESTS

    return INDICATOR_OK


def set_aside_teacher_tests(project_folder: Path) -> List[Path]:
    """Rename teacher test files under src/test to ``*.ignore``; returns the renamed paths."""
    test_dir = project_folder / "src" / "test"
    if not test_dir.is_dir():
        return []

    renamed = []
    try:
        for test_file in sorted(test_dir.rglob(f"{TEACHER_TEST_NAME_PREFIX}*")):
            if test_file.is_file() and not test_file.name.endswith(IGNORED_SUFFIX):
                target = test_file.with_name(test_file.name + IGNORED_SUFFIX)
                test_file.rename(target)
                renamed.append(target)
    except OSError:
        # a partial rename leaves no file set aside
        restore_teacher_tests(renamed)
        raise
    return renamed


def restore_teacher_tests(renamed: List[Path]) -> None:
    for ignored_file in renamed:
        ignored_file.rename(ignored_file.with_name(ignored_file.name[: -len(IGNORED_SUFFIX)]))
