"""JUnit report model and parsers."""

from .parser import (
    GradleJunitResultsParser,
    JunitResultsParser,
    MavenJunitResultsParser,
    ReportParseError,
)
from .results import (
    JUnitMethodResult,
    JUnitMethodResultType,
    JUnitResults,
    JUnitSummary,
    TestType,
)

__all__ = [
    "GradleJunitResultsParser",
    "JUnitMethodResult",
    "JUnitMethodResultType",
    "JUnitResults",
    "JUnitSummary",
    "JunitResultsParser",
    "MavenJunitResultsParser",
    "ReportParseError",
    "TestType",
]
