"""Assignment and submission configuration consumed by the pipeline."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Engine(str, Enum):
    """Build engine used to compile and test a submission."""

    MAVEN = "MAVEN"
    GRADLE = "GRADLE"
    ANDROID = "ANDROID"


class Language(str, Enum):
    """Source language of the assignment."""

    JAVA = "JAVA"
    KOTLIN = "KOTLIN"

    @property
    def source_folder(self) -> str:
        """Folder name under src/main and src/test."""
        return "java" if self == Language.JAVA else "kotlin"


class TestVisibility(str, Enum):
    """How much of the hidden teacher tests' results a student may see."""

    __test__ = False

    HIDE_EVERYTHING = "HIDE_EVERYTHING"
    SHOW_OK_NOK = "SHOW_OK_NOK"
    SHOW_PROGRESS = "SHOW_PROGRESS"


class SubmissionStatus(str, Enum):
    """Terminal and intermediate statuses of a submission."""

    SUBMITTED = "S"
    VALIDATED = "V"
    VALIDATED_REBUILT = "R"
    ABORTED_BY_TIMEOUT = "T"
    TOO_MUCH_OUTPUT = "O"


class Assignment(BaseModel):
    """Assignment configuration (fields only, owned by the host application)."""

    model_config = ConfigDict(frozen=True)

    id: str
    engine: Engine = Engine.MAVEN
    language: Language = Language.JAVA
    package_name: Optional[str] = None
    accepts_student_tests: bool = False
    min_student_tests: Optional[int] = None
    mandatory_tests_suffix: Optional[str] = None
    hidden_tests_visibility: Optional[TestVisibility] = None
    calculate_student_tests_coverage: bool = False
    max_memory_mb: Optional[int] = None


class AssignmentTestMethod(BaseModel):
    """One test method the assignment expects to run."""

    model_config = ConfigDict(frozen=True)

    test_class: str
    test_method: str


class Submission(BaseModel):
    """Submission state updated by the build worker."""

    id: int
    assignment_id: str
    submitter_user_id: Optional[str] = None
    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    status_date: Optional[datetime] = None
    build_report_id: Optional[int] = None

    def set_status(self, status: SubmissionStatus, dont_update_status_date: bool = False) -> None:
        """Change the status, optionally leaving the status date untouched."""
        self.status = status
        if not dont_update_status_date:
            self.status_date = datetime.now()
