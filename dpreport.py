#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "python-dotenv>=1.0.0",
#   "pydantic>=2.0.0",
#   "pydantic-settings>=2.7.1",
#   "rich>=13.0.0",
# ]
# ///
"""dp-report executable shim for running from a checked-out repository."""

import sys

from dp_report.cli import main


if __name__ == "__main__":
    sys.exit(main())
