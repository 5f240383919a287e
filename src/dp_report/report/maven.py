"""Build report for projects built with Maven."""

from typing import List

from .base import MarkerBuildReport

FAILED_GOAL_PREFIX = "[ERROR] Failed to execute goal"

# failed goals of these plugins are ordinary compile/test failures, not toolchain failures
RECOVERABLE_GOAL_PREFIXES = (
    f"{FAILED_GOAL_PREFIX} org.apache.maven.plugins:maven-surefire-plugin",
    f"{FAILED_GOAL_PREFIX} org.apache.maven.plugins:maven-compiler-plugin",
    f"{FAILED_GOAL_PREFIX} org.jetbrains.kotlin:kotlin-maven-plugin",
)


class MavenBuildReport(MarkerBuildReport):
    """Reads Maven console output (``mvn -B test`` style) and surefire/JaCoCo reports."""

    def execution_failed(self) -> bool:
        failed_goals: List[str] = [line for line in self.output_lines if line.startswith(FAILED_GOAL_PREFIX)]
        if not failed_goals:
            return False

        failed = not any(line.startswith(RECOVERABLE_GOAL_PREFIXES) for line in failed_goals)
        if failed:
            self.logger.warning(f"[{self.assignment.id}] Fatal maven failure: {failed_goals[0]}")
        return failed
