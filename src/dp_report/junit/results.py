"""Typed JUnit result objects produced by the report parsers."""

from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from dp_report.assignment import Assignment
from dp_report.constants import (
    STUDENT_TEST_NAME_PREFIX,
    TEACHER_HIDDEN_TEST_NAME_PREFIX,
    TEACHER_TEST_NAME_PREFIX,
)


class TestType(str, Enum):
    """
    Kinds of tests the pipeline evaluates:
    - STUDENT: unit tests written by the students to test their own work;
    - TEACHER: unit tests written by the teachers, always shown in full to the students;
    - HIDDEN: teacher unit tests whose results may be partially or fully hidden from the
      students (configurable per assignment).
    """

    __test__ = False

    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    HIDDEN = "HIDDEN"


class JUnitMethodResultType(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ERROR = "ERROR"
    IGNORED = "IGNORED"
    EMPTY = "EMPTY"


class JUnitMethodResult(BaseModel):
    """Outcome of a single test method."""

    model_config = ConfigDict(frozen=True)

    method_name: str
    full_method_name: str
    outcome: JUnitMethodResultType
    failure_type: Optional[str] = None
    failure_error_line: Optional[str] = None
    failure_detail: Optional[str] = None

    @classmethod
    def empty(cls) -> "JUnitMethodResult":
        """Placeholder for an expected test that did not run at all."""
        return cls(method_name="", full_method_name="", outcome=JUnitMethodResultType.EMPTY)

    @property
    def class_name(self) -> str:
        """Simple name of the class that declares the method."""
        parts = self.full_method_name.split(".")
        if len(parts) < 2:
            return ""
        return parts[-2]

    def filter_stacktrace(self, package_name: str) -> "JUnitMethodResult":
        """Return a copy whose stack trace only keeps frames from ``package_name``.

        Lines that are not stack frames (exception type, assertion message) are kept,
        so are frames of the submitter's own code; framework and JDK frames are dropped.
        """
        if self.failure_detail is None:
            return self

        frame_prefix = f"\tat {package_name}." if package_name else "\tat "
        kept = [
            line
            for line in self.failure_detail.splitlines()
            if not line.startswith("\tat ") or line.startswith(frame_prefix)
        ]
        return self.model_copy(update={"failure_detail": "\n".join(kept)})

    def __str__(self) -> str:
        return f"{self.outcome.value}: {self.full_method_name}\n{self.failure_detail or ''}"


class JUnitResults(BaseModel):
    """Results of running one test class."""

    model_config = ConfigDict(frozen=True)

    test_class_name: str
    full_class_name: str
    num_tests: int
    num_errors: int
    num_failures: int
    num_skipped: int
    time_elapsed: float
    junit_method_results: Tuple[JUnitMethodResult, ...] = ()

    def _in_assignment_package(self, assignment: Assignment) -> bool:
        if not assignment.package_name:
            return True
        return self.full_class_name.startswith(f"{assignment.package_name}.")

    def is_teacher_hidden(self) -> bool:
        return self.test_class_name.startswith(TEACHER_HIDDEN_TEST_NAME_PREFIX)

    def is_teacher_public(self, assignment: Assignment) -> bool:
        return (
            self.test_class_name.startswith(TEACHER_TEST_NAME_PREFIX)
            and not self.is_teacher_hidden()
            and self._in_assignment_package(assignment)
        )

    def is_student(self, assignment: Assignment) -> bool:
        return (
            self.test_class_name.startswith(STUDENT_TEST_NAME_PREFIX)
            and not self.test_class_name.startswith(TEACHER_TEST_NAME_PREFIX)
            and self._in_assignment_package(assignment)
        )

    def is_of_type(self, test_type: TestType, assignment: Assignment) -> bool:
        """Check whether this class belongs to the given test category."""
        if test_type == TestType.TEACHER:
            return self.is_teacher_public(assignment)
        if test_type == TestType.STUDENT:
            return self.is_student(assignment)
        return self.is_teacher_hidden()


class JUnitSummary(BaseModel):
    """Totals of all test classes of one category."""

    model_config = ConfigDict(frozen=True)

    num_tests: int
    num_failures: int
    num_errors: int
    num_skipped: int
    elapsed: Decimal
    num_mandatory_ok: int

    @property
    def progress(self) -> int:
        """Number of tests that passed."""
        return self.num_tests - self.num_failures - self.num_errors
