"""Build report for Android projects (Gradle with an ``app`` module)."""

from .gradle import GradleBuildReport


class AndroidBuildReport(GradleBuildReport):
    """Same console rules as Gradle; sources and reports live under the ``app/`` module.

    The module prefix is part of the (ANDROID, language) marker table entry.
    """
