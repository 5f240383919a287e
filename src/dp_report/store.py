"""Report store: where indicators, build logs and raw reports are persisted."""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from dp_report.assignment import AssignmentTestMethod

logger = logging.getLogger(__name__)


class Indicator(str, Enum):
    """Evaluation categories shown per submission, stored by their short code."""

    PROJECT_STRUCTURE = "PS"
    COMPILATION = "C"
    CHECKSTYLE = "CS"
    STUDENT_UNIT_TESTS = "SU"
    TEACHER_UNIT_TESTS = "TT"
    HIDDEN_UNIT_TESTS = "HT"

    @property
    def description(self) -> str:
        return INDICATOR_DESCRIPTIONS[self]


INDICATOR_DESCRIPTIONS = {
    Indicator.PROJECT_STRUCTURE: "Project Structure",
    Indicator.COMPILATION: "Compilation",
    Indicator.CHECKSTYLE: "Code Quality",
    Indicator.STUDENT_UNIT_TESTS: "Student Unit Tests",
    Indicator.TEACHER_UNIT_TESTS: "Teacher Unit Tests",
    Indicator.HIDDEN_UNIT_TESTS: "Hidden Unit Tests",
}


class SubmissionReport(BaseModel):
    """One indicator verdict of a submission."""

    model_config = ConfigDict(frozen=True)

    submission_id: int
    report_key: Indicator
    report_value: str
    report_progress: Optional[int] = None
    report_goal: Optional[int] = None


class JUnitReport(BaseModel):
    """Raw JUnit XML file kept so the report can be rebuilt without rerunning the build."""

    model_config = ConfigDict(frozen=True)

    submission_id: int
    file_name: str
    xml_report: str


class JacocoReport(BaseModel):
    """Raw JaCoCo CSV file."""

    model_config = ConfigDict(frozen=True)

    submission_id: int
    file_name: str
    csv_report: str


class ReportStore(ABC):
    """Persistence collaborator of the build worker and report builder."""

    @abstractmethod
    def save_indicator(self, report: SubmissionReport) -> None:
        pass

    @abstractmethod
    def delete_indicators_except_project_structure(self, submission_id: int) -> None:
        pass

    @abstractmethod
    def indicators(self, submission_id: int) -> List[SubmissionReport]:
        pass

    @abstractmethod
    def save_build_log(self, output: str) -> int:
        """Store the console output of a build.

        Returns:
            Identifier of the stored build log
        """
        pass

    @abstractmethod
    def build_log(self, build_report_id: int) -> Optional[str]:
        pass

    @abstractmethod
    def save_junit_report(self, report: JUnitReport) -> None:
        pass

    @abstractmethod
    def junit_reports(self, submission_id: int) -> List[JUnitReport]:
        pass

    @abstractmethod
    def delete_junit_reports(self, submission_id: int) -> None:
        pass

    @abstractmethod
    def save_jacoco_report(self, report: JacocoReport) -> None:
        pass

    @abstractmethod
    def jacoco_reports(self, submission_id: int) -> List[JacocoReport]:
        pass

    @abstractmethod
    def delete_jacoco_reports(self, submission_id: int) -> None:
        pass

    @abstractmethod
    def save_assignment_test_method(self, assignment_id: str, test_method: AssignmentTestMethod) -> None:
        pass

    @abstractmethod
    def assignment_test_methods(self, assignment_id: str) -> List[AssignmentTestMethod]:
        pass


class InMemoryReportStore(ReportStore):
    """Dictionary-backed store, used by the CLI and by tests."""

    def __init__(self):
        self._indicators: Dict[int, List[SubmissionReport]] = defaultdict(list)
        self._build_logs: Dict[int, str] = {}
        self._junit_reports: Dict[int, Dict[str, JUnitReport]] = defaultdict(dict)
        self._jacoco_reports: Dict[int, Dict[str, JacocoReport]] = defaultdict(dict)
        self._test_methods: Dict[str, List[AssignmentTestMethod]] = defaultdict(list)

    def save_indicator(self, report: SubmissionReport) -> None:
        # one verdict per (submission, indicator)
        kept = [r for r in self._indicators[report.submission_id] if r.report_key != report.report_key]
        self._indicators[report.submission_id] = kept + [report]
        logger.debug(
            f"[submission {report.submission_id}] {report.report_key.name} = {report.report_value}"
        )

    def delete_indicators_except_project_structure(self, submission_id: int) -> None:
        self._indicators[submission_id] = [
            r for r in self._indicators[submission_id] if r.report_key == Indicator.PROJECT_STRUCTURE
        ]

    def indicators(self, submission_id: int) -> List[SubmissionReport]:
        return list(self._indicators.get(submission_id, []))

    def save_build_log(self, output: str) -> int:
        build_report_id = len(self._build_logs) + 1
        self._build_logs[build_report_id] = output
        return build_report_id

    def build_log(self, build_report_id: int) -> Optional[str]:
        return self._build_logs.get(build_report_id)

    def save_junit_report(self, report: JUnitReport) -> None:
        # a rebuild replaces files with the same name
        self._junit_reports[report.submission_id][report.file_name] = report

    def junit_reports(self, submission_id: int) -> List[JUnitReport]:
        return list(self._junit_reports.get(submission_id, {}).values())

    def delete_junit_reports(self, submission_id: int) -> None:
        self._junit_reports.pop(submission_id, None)

    def save_jacoco_report(self, report: JacocoReport) -> None:
        self._jacoco_reports[report.submission_id][report.file_name] = report

    def jacoco_reports(self, submission_id: int) -> List[JacocoReport]:
        return list(self._jacoco_reports.get(submission_id, {}).values())

    def delete_jacoco_reports(self, submission_id: int) -> None:
        self._jacoco_reports.pop(submission_id, None)

    def save_assignment_test_method(self, assignment_id: str, test_method: AssignmentTestMethod) -> None:
        self._test_methods[assignment_id].append(test_method)

    def assignment_test_methods(self, assignment_id: str) -> List[AssignmentTestMethod]:
        return list(self._test_methods.get(assignment_id, []))
