"""Console-output markers per (build engine, language).

Every engine variant of the build report extracts diagnostics through the same
region extractor; only the entries of this table differ.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Pattern, Sequence, Tuple

from dp_report.assignment import Engine, Language

from .extractor import RegionRule, any_line_matches, extract_region, strip_prefixes

LineFilter = Callable[[str], bool]

SYSTEM_EXIT_MESSAGES = {
    Language.JAVA: "Invalid call to System.exit(). Please remove this instruction",
    Language.KOTLIN: "Invalid call to System.exit() or exitProcess(). Please remove this instruction",
}

# detekt rule id -> message shown to students
DETEKT_MESSAGES = {
    "VariableNaming": (
        "Variable names should start with a lowercase letter. "
        "Following words should be capitalized (camelCase)"
    ),
    "FunctionNaming": (
        "Function names should start with a lowercase letter. "
        "Following words should be capitalized (camelCase)"
    ),
    "FunctionParameterNaming": (
        "Function parameter names should start with a lowercase letter. "
        "Following words should be capitalized (camelCase)"
    ),
    "VariableMinLength": "Variable name is too short",
    "VarCouldBeVal": "Immutable variable declared with var",
    "MandatoryBracesIfStatements": "'if' statement without braces",
    "ComplexCondition": "Condition is too complex",
    "StringLiteralDuplication": "Duplicated string. Use a constant instead",
    "NestedBlockDepth": "Too many levels of nested blocks",
    "UnsafeCallOnNullableType": "Using !! is not allowed since it may cause crashes",
    "MaxLineLength": "Line is too long",
    "LongMethod": "Function has too many lines of code",
    "ForbiddenKeywords": "Use of forbidden instructions",
}


def translate_detekt_error(line: str) -> str:
    """Replace detekt rule ids with readable messages.

    Handles both the maven plugin format (``Rule - ...``) and the Gradle
    plugin format (``... [Rule]``).
    """
    for rule, message in DETEKT_MESSAGES.items():
        line = line.replace(f"{rule} -", f"{message} -").replace(f"[{rule}]", f"[{message}]")
    return line


@dataclass(frozen=True)
class ToolchainMarkers:
    """Markers of one (engine, language) combination.

    Prefix replacements are templates with ``{project}`` and ``{folder}`` fields.
    """

    compile_regions: Tuple[RegionRule, ...]
    compile_line_filter: LineFilter
    compile_prefixes: Tuple[Tuple[str, str], ...]
    crash_markers: Tuple[Pattern[str], ...]
    style_active: Pattern[str]
    style_region: RegionRule
    style_line_filter: LineFilter
    style_prefixes: Tuple[Tuple[str, str], ...]
    detekt: bool = False


def _resolve(prefixes: Sequence[Tuple[str, str]], project_folder: str, folder: str) -> List[Tuple[str, str]]:
    return [(old.format(project=project_folder, folder=folder), new) for old, new in prefixes]


def compilation_errors(
    lines: Sequence[str], markers: ToolchainMarkers, project_folder: str, language: Language
) -> List[str]:
    """Compiler diagnostics found in the console output, with project paths stripped."""
    replacements = _resolve(markers.compile_prefixes, project_folder, language.source_folder)
    errors: List[str] = []
    for rule in markers.compile_regions:
        errors.extend(
            strip_prefixes(line, replacements)
            for line in extract_region(lines, rule)
            if markers.compile_line_filter(line)
        )

    # tests that didn't run because of a crash or System.exit() count as a compilation error
    if any(any_line_matches(lines, marker) for marker in markers.crash_markers):
        errors.append(SYSTEM_EXIT_MESSAGES[language])

    return errors


def checkstyle_validation_active(lines: Sequence[str], markers: ToolchainMarkers) -> bool:
    return any_line_matches(lines, markers.style_active)


def checkstyle_errors(
    lines: Sequence[str], markers: ToolchainMarkers, project_folder: str, language: Language
) -> List[str]:
    """Style-tool diagnostics found in the console output."""
    replacements = _resolve(markers.style_prefixes, project_folder, language.source_folder)
    errors = [
        strip_prefixes(line.replace("\t", "") if markers.detekt else line, replacements)
        for line in extract_region(lines, markers.style_region)
        if markers.style_line_filter(line)
    ]
    if markers.detekt:
        errors = list(dict.fromkeys(translate_detekt_error(error) for error in errors))
    return errors


# --- Maven -----------------------------------------------------------------

_MAVEN_BUILD_FAILURE_OR_NEXT_PLUGIN = re.compile(r"\[INFO\] BUILD FAILURE|\[INFO\] --- ")
_MAVEN_COMPILE_PREFIXES = (
    ("[ERROR] {project}/src/main/{folder}/", ""),
    ("[ERROR] {project}/src/test/{folder}/", "[TEST] "),
)
_MAVEN_CRASH = (re.compile(r".*The forked VM terminated without properly saying goodbye\."),)
_DETEKT_MAVEN_START = re.compile(r"\[INFO\] --- detekt-maven-plugin")


def _maven_compile_line(line: str) -> bool:
    return line.startswith("[ERROR] ") or line.startswith("  ")


def _maven_java() -> ToolchainMarkers:
    audit_start = re.compile(r"\[INFO\] Starting audit\.\.\.")
    return ToolchainMarkers(
        compile_regions=(
            RegionRule(re.compile(r"\[ERROR\] COMPILATION ERROR :.*$"), _MAVEN_BUILD_FAILURE_OR_NEXT_PLUGIN),
        ),
        compile_line_filter=_maven_compile_line,
        compile_prefixes=_MAVEN_COMPILE_PREFIXES,
        crash_markers=_MAVEN_CRASH,
        style_active=audit_start,
        style_region=RegionRule(audit_start, re.compile(r"Audit done\.")),
        style_line_filter=lambda line: line.startswith("[WARN] "),
        style_prefixes=(("[WARN] {project}/src/main/{folder}/", ""),),
    )


def _maven_kotlin() -> ToolchainMarkers:
    return ToolchainMarkers(
        compile_regions=(
            RegionRule(
                re.compile(r"\[INFO\] --- kotlin-maven-plugin:\d+\.\d+\.\d+:compile.*$"),
                _MAVEN_BUILD_FAILURE_OR_NEXT_PLUGIN,
            ),
            RegionRule(
                re.compile(r"\[ERROR\] Failed to execute goal org\.jetbrains\.kotlin:kotlin-maven-plugin.*test-compile.*$"),
                re.compile(r"\[ERROR\] -> \[Help 1\]"),
            ),
        ),
        compile_line_filter=_maven_compile_line,
        compile_prefixes=_MAVEN_COMPILE_PREFIXES,
        crash_markers=_MAVEN_CRASH,
        style_active=_DETEKT_MAVEN_START,
        # depending on the detekt-maven-plugin version, the output is different
        style_region=RegionRule(_DETEKT_MAVEN_START, re.compile(r"detekt finished|\[INFO\]"), end_min_offset=2),
        style_line_filter=lambda line: line.startswith("\t") and not line.startswith("\t-"),
        style_prefixes=(("{project}/src/main/{folder}/", ""),),
        detekt=True,
    )


# --- Gradle / Android ------------------------------------------------------

_GRADLE_TASK_BOUNDARY = re.compile(r"> Task |FAILURE: |BUILD FAILED|BUILD SUCCESSFUL")
_GRADLE_CRASH = (re.compile(r".*Process 'Gradle Test Executor \d+' finished with non-zero exit value"),)
_JAVAC_TALLY = re.compile(r"^\d+ (errors?|warnings?)$")


def _gradle_java_compile_line(line: str) -> bool:
    return bool(line.strip()) and not _JAVAC_TALLY.match(line.strip()) and not line.startswith("Note: ")


def _gradle_java(module: str) -> ToolchainMarkers:
    style_start = re.compile(r"> Task :(?:[\w-]+:)*checkstyle\w*")
    return ToolchainMarkers(
        compile_regions=(
            RegionRule(re.compile(r"> Task :(?:[\w-]+:)*compile\w*Java\w* FAILED"), _GRADLE_TASK_BOUNDARY),
        ),
        compile_line_filter=_gradle_java_compile_line,
        compile_prefixes=(
            ("{project}/" + module + "src/main/{folder}/", ""),
            ("{project}/" + module + "src/test/{folder}/", "[TEST] "),
        ),
        crash_markers=_GRADLE_CRASH,
        style_active=style_start,
        style_region=RegionRule(style_start, _GRADLE_TASK_BOUNDARY),
        style_line_filter=lambda line: line.startswith("[ant:checkstyle] [WARN] "),
        style_prefixes=(
            ("[ant:checkstyle] [WARN] {project}/" + module + "src/main/{folder}/", ""),
            ("[ant:checkstyle] [WARN] ", ""),
        ),
    )


def _gradle_kotlin(module: str) -> ToolchainMarkers:
    style_start = re.compile(r"> Task :(?:[\w-]+:)*detekt\w*")
    return ToolchainMarkers(
        compile_regions=(
            RegionRule(re.compile(r"> Task :(?:[\w-]+:)*compile\w*Kotlin\w* FAILED"), _GRADLE_TASK_BOUNDARY),
        ),
        compile_line_filter=lambda line: line.startswith("e: "),
        compile_prefixes=(
            ("e: file://{project}/" + module + "src/main/{folder}/", ""),
            ("e: file://{project}/" + module + "src/test/{folder}/", "[TEST] "),
            ("e: {project}/" + module + "src/main/{folder}/", ""),
            ("e: {project}/" + module + "src/test/{folder}/", "[TEST] "),
        ),
        crash_markers=_GRADLE_CRASH,
        style_active=style_start,
        style_region=RegionRule(style_start, _GRADLE_TASK_BOUNDARY),
        style_line_filter=lambda line: ".kt:" in line,
        style_prefixes=(("{project}/" + module + "src/main/{folder}/", ""),),
        detekt=True,
    )


MARKERS: Dict[Tuple[Engine, Language], ToolchainMarkers] = {
    (Engine.MAVEN, Language.JAVA): _maven_java(),
    (Engine.MAVEN, Language.KOTLIN): _maven_kotlin(),
    (Engine.GRADLE, Language.JAVA): _gradle_java(""),
    (Engine.GRADLE, Language.KOTLIN): _gradle_kotlin(""),
    (Engine.ANDROID, Language.JAVA): _gradle_java("app/"),
    (Engine.ANDROID, Language.KOTLIN): _gradle_kotlin("app/"),
}


def markers_for(engine: Engine, language: Language) -> ToolchainMarkers:
    try:
        return MARKERS[(engine, language)]
    except KeyError:
        raise ValueError(f"No console markers for {engine} / {language}") from None
