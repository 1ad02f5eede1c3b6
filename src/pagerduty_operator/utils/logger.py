# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

"""
Process-wide loguru configuration.

Importing this module replaces loguru's default handler with a stderr sink and
a JSON file sink under ``logs/``. Components never log through a global; they
receive a bound logger at construction (see ``get_logger``).
"""

import sys
from typing import TYPE_CHECKING

from loguru import logger

from pagerduty_operator.config import OperatorSettings

if TYPE_CHECKING:
    from loguru import Logger


def setup_logging(settings: OperatorSettings | None = None) -> None:
    settings = settings or OperatorSettings()

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        settings.log_dir / "app.log",
        level=settings.log_level,
        rotation="500 MB",
        retention="10 days",
        serialize=True,
        enqueue=True,
    )


def get_logger(component: str) -> "Logger":
    """Return a logger bound to ``component`` for injection into a helper."""
    return logger.bind(component=component)


setup_logging()

__all__ = ["logger", "get_logger", "setup_logging"]
