"""Assembles BuildReports from console output plus the reports a build leaves behind."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Type

from dp_report.assignment import Assignment, Engine, Submission
from dp_report.config import ReportSettings, settings as default_settings
from dp_report.jacoco import JacocoResults, JacocoResultsParser
from dp_report.junit.parser import GradleJunitResultsParser, JunitResultsParser, MavenJunitResultsParser
from dp_report.junit.results import JUnitResults
from dp_report.store import ReportStore

from .android import AndroidBuildReport
from .base import BuildReport
from .gradle import GradleBuildReport
from .maven import MavenBuildReport


class UnsupportedEngineError(ValueError):
    """Raised when no build report variant is registered for an engine."""


# engine -> (build report variant, junit parser)
REPORT_VARIANTS: Dict[Engine, Tuple[Type[BuildReport], Type[JunitResultsParser]]] = {
    Engine.MAVEN: (MavenBuildReport, MavenJunitResultsParser),
    Engine.GRADLE: (GradleBuildReport, GradleJunitResultsParser),
    Engine.ANDROID: (AndroidBuildReport, GradleJunitResultsParser),
}


class BuildReportBuilder:
    """Creates the BuildReport of an assignment check or of a submission."""

    def __init__(
        self,
        store: ReportStore,
        settings: Optional[ReportSettings] = None,
        variants: Optional[Dict[Engine, Tuple[Type[BuildReport], Type[JunitResultsParser]]]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.settings = settings or default_settings
        self.variants = dict(REPORT_VARIANTS if variants is None else variants)
        self.logger = logger or logging.getLogger(__name__)
        self.jacoco_parser = JacocoResultsParser(logger=self.logger)

    def build(
        self,
        output_lines: Sequence[str],
        project_folder: str,
        assignment: Assignment,
        submission: Optional[Submission] = None,
    ) -> BuildReport:
        """
        Build the report of one build invocation.

        When the store already holds the reports of ``submission`` (a rebuild), those are
        parsed instead of the files in ``project_folder``.

        Args:
            output_lines: Console output of the build tool
            project_folder: Absolute path of the built project
            assignment: Assignment being checked
            submission: Submission being checked, None when checking the assignment itself

        Returns:
            The engine's BuildReport variant

        Raises:
            UnsupportedEngineError: If the assignment's engine has no registered variant
            ReportParseError: If a JUnit report is malformed
        """
        if assignment.engine not in self.variants:
            raise UnsupportedEngineError(f"No build report registered for engine {assignment.engine.value}")

        report_class, parser_class = self.variants[assignment.engine]
        parser = parser_class(logger=self.logger)

        junit_results = self._junit_results(parser, Path(project_folder), assignment, submission)
        jacoco_results = self._jacoco_results(Path(project_folder), submission)
        test_methods = self.store.assignment_test_methods(assignment.id)

        self.logger.info(
            f"[{assignment.id}] {report_class.__name__}: {len(junit_results)} test classes, "
            f"{len(jacoco_results)} coverage reports, {len(test_methods)} expected test methods"
        )

        return report_class(
            output_lines=output_lines,
            project_folder=project_folder,
            assignment=assignment,
            junit_results=junit_results,
            jacoco_results=jacoco_results,
            assignment_test_methods=test_methods,
            logger=self.logger,
        )

    def _junit_results(
        self,
        parser: JunitResultsParser,
        project_folder: Path,
        assignment: Assignment,
        submission: Optional[Submission],
    ) -> List[JUnitResults]:
        if submission is not None:
            stored = self.store.junit_reports(submission.id)
            if stored:
                self.logger.debug(f"[submission {submission.id}] Rebuilding from {len(stored)} stored JUnit reports")
                return [parser.parse_xml(report.xml_report) for report in stored]

        report_dir = self.settings.junit_report_dir(assignment.engine.value)
        if report_dir is None:
            return []
        return [
            parser.parse_xml(xml_file.read_text(encoding="utf-8"))
            for xml_file in list_report_files(project_folder / report_dir, "*.xml", recursive=True)
        ]

    def _jacoco_results(self, project_folder: Path, submission: Optional[Submission]) -> List[JacocoResults]:
        if submission is not None:
            stored = self.store.jacoco_reports(submission.id)
            if stored:
                return [self.jacoco_parser.parse_csv(report.csv_report, source=report.file_name) for report in stored]

        return [
            self.jacoco_parser.parse_csv(csv_file.read_text(encoding="utf-8"), source=csv_file.name)
            for csv_file in list_report_files(project_folder / self.settings.jacoco_report_dir, "*.csv")
        ]


def list_report_files(directory: Path, pattern: str, recursive: bool = False) -> List[Path]:
    """Report files in a directory, sorted by name; empty if the directory doesn't exist."""
    if not directory.is_dir():
        return []
    files = directory.rglob(pattern) if recursive else directory.glob(pattern)
    return sorted(f for f in files if f.is_file())
