# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""loguru sink setup for the command line entry point."""

import sys
from typing import Optional

from loguru import logger


def configure_logging(level: str = "INFO", log_file: Optional[str] = None, rotation: str = "10 MB") -> None:
    """Replaces loguru's default sink with a stderr sink at `level`, plus an optional rotating file."""
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        logger.add(log_file, level=level, rotation=rotation)
