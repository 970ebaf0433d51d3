# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import logging
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    """
    Enum class mapping the logging levels to numeric values.
    """

    ERROR = 40
    WARNING = 30
    INFO = 20
    DEBUG = 10
    DEBUG_PASSES = 8
    DEBUG_RULES = 6


def get_genreduce_logger(
    console_level: LogLevel = LogLevel.WARNING,
    file_level: LogLevel = LogLevel.INFO,
    filename: Optional[str] = None,
) -> logging.Logger:
    """Configures the genreduce logger. Nothing is written to disk unless a
    filename is given."""
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level.value)

    logger = logging.getLogger("genreduce")
    logger.handlers.clear()
    logger.addHandler(console_handler)
    level = console_level.value
    if filename is not None:
        file_handler = logging.FileHandler(filename)
        file_handler.setLevel(file_level.value)
        logger.addHandler(file_handler)
        level = min(level, file_level.value)
    logger.setLevel(level)
    return logger
