"""Configuration management for dp-report."""

import logging
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

LOG_FORMAT = "[%(asctime)s - %(filename)s:%(lineno)d - %(levelname)s] %(message)s"


class ReportSettings(BaseSettings):
    """
    Settings for the build-report pipeline.

    Attributes:
        log_directory: Directory where evaluation logs are written
        too_much_output_threshold: Console lines above which a build is rejected
        junit_report_dirs: Per-engine JUnit XML report directory, relative to the project
        jacoco_report_dir: JaCoCo CSV report directory, relative to the project
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DP_REPORT_",
        extra="ignore",
    )

    log_directory: str = "logs"
    too_much_output_threshold: int = 10000

    junit_report_dirs: Dict[str, str] = Field(
        default_factory=lambda: {
            "MAVEN": "target/surefire-reports",
            "GRADLE": "build/test-results/test",
            "ANDROID": "app/build/test-results/testDebugUnitTest",
        }
    )
    jacoco_report_dir: str = "target/site/jacoco"

    def junit_report_dir(self, engine_name: str) -> Optional[str]:
        """Return the JUnit report directory for an engine, or None if unknown."""
        return self.junit_report_dirs.get(engine_name)


# Initialize configuration
settings = ReportSettings()


def configure_logging(log_file: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """Attach a file handler to the package logger.

    Args:
        log_file: Target file (defaults to <log_directory>/dp-report.log)
        level: Logging level for the package logger

    Returns:
        The configured ``dp_report`` logger
    """
    if log_file is None:
        log_dir = Path(settings.log_directory)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "dp-report.log"

    logger = logging.getLogger("dp_report")
    logger.setLevel(level)

    # one log file per process; reconfiguring replaces the previous one
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    return logger
