"""Build report for projects built with Gradle."""

import re

from .base import MarkerBuildReport

BUILD_FAILED = re.compile(r"FAILURE: Build (failed|completed)")
FAILED_TASK = re.compile(r"\s*Execution failed for task '([^']*)'")

# failing tasks that only mean the submission didn't compile or pass its tests
RECOVERABLE_TASK = re.compile(r"(?:[\w-]*:)*(compile\w*|test\w*|checkstyle\w*|detekt\w*)$")


class GradleBuildReport(MarkerBuildReport):
    """Reads Gradle console output (``gradle test --console=plain`` style) and test reports."""

    def execution_failed(self) -> bool:
        if not any(BUILD_FAILED.match(line) for line in self.output_lines):
            return False

        failed_tasks = [m.group(1) for m in (FAILED_TASK.match(line) for line in self.output_lines) if m]
        for task in failed_tasks:
            if RECOVERABLE_TASK.match(task):
                return False

        self.logger.warning(f"[{self.assignment.id}] Fatal gradle failure, failed tasks: {failed_tasks}")
        return True
