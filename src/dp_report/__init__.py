"""dp-report - Build report evaluation for programming assignment submissions."""

from dp_report.assignment import Assignment, Submission
from dp_report.report import BuildReport, BuildReportBuilder
from dp_report.worker import BuildWorker

__version__ = "0.1.0"
__all__ = ["Assignment", "BuildReport", "BuildReportBuilder", "BuildWorker", "Submission"]
