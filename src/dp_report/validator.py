"""Sanity checks of an assignment project before students submit against it."""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from dp_report.assignment import Assignment, AssignmentTestMethod, Engine, Language
from dp_report.constants import (
    BUILD_FILES,
    JACOCO_PLUGIN_MARKER,
    TEACHER_HIDDEN_TEST_NAME_PREFIX,
    TEACHER_TEST_NAME_PREFIX,
)

SOURCE_SUFFIXES = (".java", ".kt")

# marker of the style tool in the build file, per (engine, language)
STYLE_TOOL_MARKERS = {
    (Engine.MAVEN, Language.JAVA): "maven-checkstyle-plugin",
    (Engine.MAVEN, Language.KOTLIN): "detekt-maven-plugin",
    (Engine.GRADLE, Language.JAVA): "checkstyle",
    (Engine.GRADLE, Language.KOTLIN): "detekt",
    (Engine.ANDROID, Language.JAVA): "checkstyle",
    (Engine.ANDROID, Language.KOTLIN): "detekt",
}

TEST_ANNOTATION = re.compile(r"^\s*@(?:org\.junit\.(?:jupiter\.api\.)?)?Test\b")
TEST_FUNCTION = re.compile(r"\b(?:void|fun)\s+(?:`([^`]+)`|(\w+))\s*\(")


class InfoType(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class Info(BaseModel):
    """One finding of the assignment validation."""

    type: InfoType
    message: str
    description: str = ""


class AssignmentValidator:
    """
    Validates the project of an assignment created by a teacher.

    Attributes:
        report: Findings of the last validation
        test_methods: Teacher test methods found, as ``Class:method``
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.report: List[Info] = []
        self.test_methods: List[str] = []
        self._inventory: List[AssignmentTestMethod] = []

    @property
    def has_errors(self) -> bool:
        return any(info.type == InfoType.ERROR for info in self.report)

    def validate(self, assignment_folder: Path, assignment: Assignment) -> List[Info]:
        """
        Validate an assignment project and collect its test method inventory.

        Args:
            assignment_folder: Folder holding the assignment's project
            assignment: Assignment configuration

        Returns:
            The findings, also kept in ``report``
        """
        assignment_folder = Path(assignment_folder)
        self.report = []
        self.test_methods = []
        self._inventory = []

        build_files = self._build_files(assignment_folder, assignment)
        if not build_files:
            expected = " or ".join(BUILD_FILES[assignment.engine.value])
            self.report.append(
                Info(
                    type=InfoType.ERROR,
                    message=f"Assignment must have a {expected}",
                    description=f"The {assignment.engine.value.lower()} build of the assignment needs a build file",
                )
            )
        build_text = "\n".join(f.read_text(encoding="utf-8") for f in build_files)

        self._validate_test_classes(assignment_folder, assignment)
        self._validate_student_tests(assignment)
        if build_files:
            self._validate_coverage(build_text, assignment)
            self._validate_style_tool(build_text, assignment)

        self.logger.info(
            f"[{assignment.id}] Validation finished: {len(self.report)} findings, "
            f"{len(self.test_methods)} test methods"
        )
        return self.report

    def assignment_test_methods(self) -> List[AssignmentTestMethod]:
        """Test method inventory found by the last validation."""
        return list(self._inventory)

    def _build_files(self, assignment_folder: Path, assignment: Assignment) -> List[Path]:
        candidates = (assignment_folder / name for name in BUILD_FILES[assignment.engine.value])
        return [f for f in candidates if f.is_file()]

    def _test_source_files(self, assignment_folder: Path, assignment: Assignment) -> List[Path]:
        module = assignment_folder / "app" if assignment.engine == Engine.ANDROID else assignment_folder
        test_dir = module / "src" / "test"
        if not test_dir.is_dir():
            return []
        return sorted(f for f in test_dir.rglob("*") if f.is_file() and f.suffix in SOURCE_SUFFIXES)

    def _validate_test_classes(self, assignment_folder: Path, assignment: Assignment) -> None:
        teacher_classes = []
        for test_file in self._test_source_files(assignment_folder, assignment):
            if not test_file.stem.startswith(TEACHER_TEST_NAME_PREFIX):
                self.report.append(
                    Info(
                        type=InfoType.WARNING,
                        message=f"{test_file.stem} is not a valid name for a test class",
                        description=(
                            f"Test classes must start with '{TEACHER_TEST_NAME_PREFIX}' "
                            f"(e.g. {TEACHER_TEST_NAME_PREFIX}Project), otherwise they won't be run "
                            "against the submissions"
                        ),
                    )
                )
                continue

            teacher_classes.append(test_file.stem)
            self._collect_test_methods(test_file)

        if not teacher_classes:
            self.report.append(
                Info(
                    type=InfoType.WARNING,
                    message="You haven't defined any teacher tests",
                    description="Submissions will only be checked for compilation and code quality",
                )
            )

        has_hidden = any(name.startswith(TEACHER_HIDDEN_TEST_NAME_PREFIX) for name in teacher_classes)
        if has_hidden and assignment.hidden_tests_visibility is None:
            self.report.append(
                Info(
                    type=InfoType.WARNING,
                    message="You have hidden tests but you didn't set their visibility to students",
                    description="Hidden test results won't be shown until a visibility is chosen",
                )
            )

    def _collect_test_methods(self, test_file: Path) -> None:
        pending_test = False
        for line in test_file.read_text(encoding="utf-8").splitlines():
            if TEST_ANNOTATION.match(line):
                pending_test = True
            if not pending_test:
                continue
            match = TEST_FUNCTION.search(line)
            if match:
                method_name = match.group(1) or match.group(2)
                self.test_methods.append(f"{test_file.stem}:{method_name}")
                self._inventory.append(AssignmentTestMethod(test_class=test_file.stem, test_method=method_name))
                pending_test = False

    def _validate_student_tests(self, assignment: Assignment) -> None:
        if assignment.accepts_student_tests and assignment.min_student_tests is None:
            self.report.append(
                Info(
                    type=InfoType.WARNING,
                    message="The assignment accepts student tests but doesn't set a minimum number of tests",
                    description="Any number of student tests, including none, will be considered enough",
                )
            )

    def _validate_coverage(self, build_text: str, assignment: Assignment) -> None:
        if not assignment.calculate_student_tests_coverage:
            return

        if assignment.engine != Engine.MAVEN:
            self.report.append(
                Info(
                    type=InfoType.WARNING,
                    message="Student tests coverage is only measured for maven assignments",
                )
            )
        elif JACOCO_PLUGIN_MARKER not in build_text:
            self.report.append(
                Info(
                    type=InfoType.WARNING,
                    message=f"The pom.xml doesn't include the {JACOCO_PLUGIN_MARKER}",
                    description="Student tests coverage can't be measured without it",
                )
            )

    def _validate_style_tool(self, build_text: str, assignment: Assignment) -> None:
        marker = STYLE_TOOL_MARKERS[(assignment.engine, assignment.language)]
        if marker not in build_text:
            self.report.append(
                Info(
                    type=InfoType.INFO,
                    message=f"The build doesn't run {marker}",
                    description="Submissions won't get a code quality indicator",
                )
            )
