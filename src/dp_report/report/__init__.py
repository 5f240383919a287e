"""Build report aggregation per build engine."""

from .android import AndroidBuildReport
from .base import BuildReport
from .builder import BuildReportBuilder, UnsupportedEngineError
from .gradle import GradleBuildReport
from .maven import MavenBuildReport

__all__ = [
    "AndroidBuildReport",
    "BuildReport",
    "BuildReportBuilder",
    "GradleBuildReport",
    "MavenBuildReport",
    "UnsupportedEngineError",
]
