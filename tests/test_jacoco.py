"""Unit tests for JaCoCo CSV parsing."""

import logging
from unittest.mock import Mock

import pytest

from conftest import JACOCO_HEADER
from dp_report.jacoco import JacocoResults, JacocoResultsParser


@pytest.fixture
def parser():
    """Create a parser with a mock logger to avoid actual logging during tests."""
    return JacocoResultsParser(logger=Mock(spec=logging.Logger))


class TestCSVParsing:
    """Tests for CSV-based coverage extraction."""

    def test_parse_valid(self, parser):
        """Test parsing a valid JaCoCo CSV file."""
        content = f"""{JACOCO_HEADER}
com.example,com.example.service,ServiceImpl,100,500,10,40,20,80,5,15,2,8
com.example,com.example.util,HelperClass,50,250,5,20,10,40,3,7,1,4
"""

        results = parser.parse_csv(content)

        # Line coverage = (80+40)/(20+80+10+40) = 80%, branch = (40+20)/(10+40+5+20) = 80%
        assert results == JacocoResults(line_missed=30, line_covered=120, branch_missed=15, branch_covered=60)
        assert results.line_coverage_percent == 80
        assert results.branch_coverage_percent == 80

    def test_parse_header_only(self, parser):
        """Test handling of a CSV without data rows."""
        results = parser.parse_csv(JACOCO_HEADER + "\n")

        assert results == JacocoResults()
        assert results.line_coverage_percent == 0
        parser.logger.warning.assert_called_once()

    def test_parse_malformed_rows(self, parser):
        """Test that rows with missing columns or bad numbers are skipped."""
        content = f"""{JACOCO_HEADER}
com.example,com.example.service,ServiceImpl,100,500,10,40,20,80,5,15,2,8
invalid,row,with,not,enough,columns
com.example,com.example.util,Broken,1,1,x,1,1,1,1,1,1,1
"""

        results = parser.parse_csv(content)

        assert results.line_covered == 80
        assert results.line_missed == 20
        parser.logger.info.assert_called_once()
        assert "1 rows matched, 2 rows skipped" in parser.logger.info.call_args[0][0]

    def test_percentages_truncate(self):
        results = JacocoResults(line_missed=2, line_covered=1, branch_missed=0, branch_covered=0)

        assert results.line_coverage_percent == 33
        assert results.branch_coverage_percent == 0


class TestMerge:
    def test_merge_sums_counters(self):
        merged = JacocoResults.merge(
            [
                JacocoResults(line_missed=1, line_covered=2, branch_missed=3, branch_covered=4),
                JacocoResults(line_missed=10, line_covered=20, branch_missed=30, branch_covered=40),
            ]
        )

        assert merged == JacocoResults(line_missed=11, line_covered=22, branch_missed=33, branch_covered=44)

    def test_merge_nothing(self):
        assert JacocoResults.merge([]) == JacocoResults()
