"""Naming conventions and indicator definitions shared across the pipeline."""

# Test class naming conventions (simple class name prefixes)
TEACHER_HIDDEN_TEST_NAME_PREFIX = "TestTeacherHidden"
TEACHER_TEST_NAME_PREFIX = "TestTeacher"
STUDENT_TEST_NAME_PREFIX = "Test"

# Indicator values written to the report store
INDICATOR_OK = "OK"
INDICATOR_NOK = "NOK"
INDICATOR_NOT_ENOUGH_TESTS = "Not Enough Tests"

# Centralized icon definitions for indicator display
INDICATOR_ICONS = {
    INDICATOR_OK: "✓",
    INDICATOR_NOK: "✗",
    INDICATOR_NOT_ENOUGH_TESTS: "⚠",
}

# Build-file names per engine, used by the validator and coverage detection
BUILD_FILES = {
    "MAVEN": ("pom.xml",),
    "GRADLE": ("build.gradle", "build.gradle.kts"),
    "ANDROID": ("build.gradle", "build.gradle.kts", "app/build.gradle", "app/build.gradle.kts"),
}

JACOCO_PLUGIN_MARKER = "jacoco-maven-plugin"
