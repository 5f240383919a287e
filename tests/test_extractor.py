"""Unit tests for the console output region extractor and marker table."""

import re

import pytest

from dp_report.assignment import Engine, Language
from dp_report.report.extractor import RegionRule, extract_region, find_region, strip_prefixes
from dp_report.report.markers import MARKERS, markers_for, translate_detekt_error

RULE = RegionRule(re.compile(r"START"), re.compile(r"END"))


class TestExtractRegion:
    """Tests for marker-delimited extraction."""

    def test_lines_between_markers(self):
        lines = ["noise", "START", "a", "b", "END", "c"]

        assert extract_region(lines, RULE) == ["a", "b"]
        assert find_region(lines, RULE) == (2, 4)

    def test_missing_start(self):
        assert extract_region(["a", "END"], RULE) == []

    def test_missing_end(self):
        """Test that a region that never closes yields nothing."""
        assert extract_region(["START", "a", "b"], RULE) == []

    def test_end_before_start_is_ignored(self):
        assert extract_region(["END", "START", "a", "END"], RULE) == ["a"]

    def test_later_start_restarts_region(self):
        assert extract_region(["START", "a", "START", "b", "END"], RULE) == ["b"]

    def test_empty_region(self):
        assert extract_region(["START", "END"], RULE) == []

    def test_start_matches_at_line_start_only(self):
        assert extract_region(["xx START", "a", "END"], RULE) == []

    def test_end_min_offset(self):
        """Test that the end marker is ignored until enough region lines were seen."""
        rule = RegionRule(re.compile(r"START"), re.compile(r"END"), end_min_offset=2)

        assert extract_region(["START", "END", "a", "END"], rule) == ["END", "a"]


class TestStripPrefixes:
    def test_first_applicable_replacement_wins(self):
        replacements = [("e: file:///p/src/", ""), ("e: ", "x")]

        assert strip_prefixes("e: file:///p/src/A.kt:1:2 boom", replacements) == "A.kt:1:2 boom"

    def test_no_replacement(self):
        assert strip_prefixes("line", [("other", "")]) == "line"


class TestMarkerTable:
    @pytest.mark.parametrize("engine", list(Engine))
    @pytest.mark.parametrize("language", list(Language))
    def test_every_combination_has_markers(self, engine, language):
        assert markers_for(engine, language) is MARKERS[(engine, language)]

    def test_unknown_combination(self):
        with pytest.raises(ValueError):
            markers_for("ANT", Language.JAVA)


class TestDetektTranslation:
    def test_maven_format(self):
        line = "VariableNaming - [x] at Main.kt:3:9"

        assert translate_detekt_error(line).startswith("Variable names should start with a lowercase letter")

    def test_gradle_format(self):
        line = "Main.kt:3:9: Immutable variable. [VarCouldBeVal]"

        assert translate_detekt_error(line) == (
            "Main.kt:3:9: Immutable variable. [Immutable variable declared with var]"
        )

    def test_unknown_rule_untouched(self):
        assert translate_detekt_error("SomethingElse - x") == "SomethingElse - x"
