# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import logging
import os
import tempfile
import unittest

from genreduce.reduce import reduce
from genreduce.testlib.expressions import Add, evaluate, Val
from genreduce.utils import get_genreduce_logger, LogLevel


class LoggerTest(unittest.TestCase):
    def tearDown(self) -> None:
        get_genreduce_logger()

    def test_default_logger(self) -> None:
        logger = get_genreduce_logger()
        self.assertEqual("genreduce", logger.name)
        self.assertEqual(LogLevel.WARNING.value, logger.level)
        self.assertEqual(1, len(logger.handlers))

    def test_file_logging(self) -> None:
        with tempfile.TemporaryDirectory() as directory:
            filename = os.path.join(directory, "genreduce.log")
            logger = get_genreduce_logger(
                console_level=LogLevel.ERROR,
                file_level=LogLevel.DEBUG_RULES,
                filename=filename,
            )
            self.assertEqual(LogLevel.DEBUG_RULES.value, logger.level)
            reduce([evaluate], Add(Val(1), Val(2)))
            for handler in logger.handlers:
                handler.flush()
                if isinstance(handler, logging.FileHandler):
                    handler.close()
            with open(filename) as f:
                logged = f.read()
        self.assertIn("Rule evaluate rewrote (1 + 2) to 3", logged)
        self.assertIn("Pass 1 rewrote the tree", logged)
        self.assertIn("Reached a fixpoint after 2 passes", logged)
