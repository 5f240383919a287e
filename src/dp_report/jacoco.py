"""Coverage model and parser for JaCoCo CSV reports."""

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# CSV columns: GROUP,PACKAGE,CLASS,INSTRUCTION_MISSED,INSTRUCTION_COVERED,
#              BRANCH_MISSED,BRANCH_COVERED,LINE_MISSED,LINE_COVERED,...
JACOCO_MIN_COLUMNS = 9


class JacocoResults(BaseModel):
    """Line and branch counters of one (or several merged) JaCoCo reports."""

    model_config = ConfigDict(frozen=True)

    line_missed: int = 0
    line_covered: int = 0
    branch_missed: int = 0
    branch_covered: int = 0

    @property
    def line_coverage_percent(self) -> int:
        total = self.line_covered + self.line_missed
        if total == 0:
            return 0
        return int(self.line_covered * 100 / total)

    @property
    def branch_coverage_percent(self) -> int:
        total = self.branch_covered + self.branch_missed
        if total == 0:
            return 0
        return int(self.branch_covered * 100 / total)

    @classmethod
    def merge(cls, results: Iterable["JacocoResults"]) -> "JacocoResults":
        """Sum the counters of several reports."""
        merged = cls()
        for result in results:
            merged = cls(
                line_missed=merged.line_missed + result.line_missed,
                line_covered=merged.line_covered + result.line_covered,
                branch_missed=merged.branch_missed + result.branch_missed,
                branch_covered=merged.branch_covered + result.branch_covered,
            )
        return merged


class JacocoResultsParser:
    """Parses JaCoCo CSV reports (target/site/jacoco/jacoco.csv)."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def parse_csv(self, content: str, source: str = "jacoco.csv") -> JacocoResults:
        """
        Parse the contents of a JaCoCo CSV report.

        Malformed rows are skipped, an empty report yields zero counters.

        Args:
            content: CSV text including the header row
            source: Name used in log messages

        Returns:
            JacocoResults with the summed counters of every class row
        """
        lines = content.strip().split("\n")
        if len(lines) < 2:
            self.logger.warning(f"[{source}] CSV file is empty or has no data rows")
            return JacocoResults()

        line_missed = line_covered = branch_missed = branch_covered = 0
        rows_matched = 0
        rows_skipped = 0

        # Skip header row, parse data rows
        for i, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue

            parts = line.split(",")
            if len(parts) < JACOCO_MIN_COLUMNS:
                self.logger.debug(f"[{source}] Skipping malformed CSV row {i}: insufficient columns")
                rows_skipped += 1
                continue

            try:
                row_branch_missed = int(parts[5])
                row_branch_covered = int(parts[6])
                row_line_missed = int(parts[7])
                row_line_covered = int(parts[8])
            except ValueError as e:
                self.logger.debug(f"[{source}] Skipping malformed CSV row {i}: {e}")
                rows_skipped += 1
                continue

            branch_missed += row_branch_missed
            branch_covered += row_branch_covered
            line_missed += row_line_missed
            line_covered += row_line_covered
            rows_matched += 1

        self.logger.info(f"[{source}] Parsed CSV: {rows_matched} rows matched, {rows_skipped} rows skipped")

        return JacocoResults(
            line_missed=line_missed,
            line_covered=line_covered,
            branch_missed=branch_missed,
            branch_covered=branch_covered,
        )
