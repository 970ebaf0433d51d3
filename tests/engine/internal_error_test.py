# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Tests for internal_error.py"""
import os
import unittest
from typing import Any
from unittest.mock import patch

from genreduce.commands import Commands
from genreduce.internal_error import InternalError, RuleApplicationError
from genreduce.reduce import reduce, reduce_single_pass
from genreduce.rules import Rule, RuleResult, rule_from_function, Success
from genreduce.testlib.expressions import Add, Neg, Val, Var, Wrap


@rule_from_function
def broken(commands: Commands, expr: Any, meta: Any) -> Any:
    if isinstance(expr, Neg):
        commands.enqueue_state_mutation(lambda m: m + 1)
        return meta["missing"]
    return None


class ReturnsNode(Rule):
    def __init__(self) -> None:
        Rule.__init__(self, "returns_node")

    def apply(self, commands: Commands, subtree: Any, meta: Any) -> RuleResult:
        return subtree


class InternalErrorTest(unittest.TestCase):
    def test_rule_raises(self) -> None:
        tree = Add(Var("x"), Neg(Val(1)))
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("GENREDUCE_VERBOSE_EXCEPTIONS", None)
            os.environ.pop("GENREDUCE_LOG_ERRORS_TO_DISK", None)
            with self.assertRaises(RuleApplicationError) as context:
                reduce([broken], tree, {})
        error = context.exception
        self.assertIsInstance(error, InternalError)
        self.assertIsInstance(error.original_exception, KeyError)
        self.assertEqual("broken", error.rule_name)
        self.assertEqual(Neg(Val(1)), error.subtree)
        message = str(error)
        self.assertIn("Rule 'broken' failed while being applied.", message)
        self.assertIn("KeyError", message)
        self.assertIn("GENREDUCE_VERBOSE_EXCEPTIONS", message)
        self.assertNotIn("### Subtree ###", message)

    def test_rule_returns_non_result(self) -> None:
        with self.assertRaises(RuleApplicationError) as context:
            reduce([ReturnsNode()], Val(1))
        error = context.exception
        self.assertIsNone(error.original_exception)
        self.assertIn("did not return a rule result", str(error))

    def test_success_without_replacement(self) -> None:
        @rule_from_function
        def empty_success(commands: Commands, expr: Any, meta: Any) -> Any:
            commands.enqueue_state_mutation(lambda m: m + 100)
            if isinstance(expr, Wrap):
                return Success(expr, None)
            if isinstance(expr, Neg):
                return Val(-expr.operand.value)
            return None

        tree = Add(Wrap(Var("x")), Neg(Val(1)))
        with self.assertRaises(RuleApplicationError) as context:
            reduce([empty_success], tree, 0)
        error = context.exception
        self.assertEqual("empty_success", error.rule_name)
        self.assertEqual(Wrap(Var("x")), error.subtree)
        self.assertIsNone(error.original_exception)
        self.assertIn("succeeded without a replacement node", str(error))

        # The queued mutation is not left behind for a later success.
        commands = Commands()
        with self.assertRaises(RuleApplicationError):
            reduce_single_pass(commands, [empty_success], tree, 0)
        self.assertEqual(0, len(commands))

    def test_verbose(self) -> None:
        tree = Add(Var("x"), Neg(Val(1)))
        with patch.dict(os.environ, {"GENREDUCE_VERBOSE_EXCEPTIONS": "1"}):
            with self.assertRaises(RuleApplicationError) as context:
                reduce([broken], tree, {})
        message = str(context.exception)
        self.assertIn("### Subtree ###", message)
        self.assertIn("Neg(operand=Val(value=1))", message)
        self.assertIn("└─Val(value=1)", message)

    def test_log_to_disk(self) -> None:
        with patch.dict(os.environ, {"GENREDUCE_LOG_ERRORS_TO_DISK": "1"}):
            with self.assertRaises(RuleApplicationError) as context:
                reduce([broken], Neg(Val(1)), {})
        message = str(context.exception)
        marker = "Extended error information logged to "
        self.assertIn(marker, message)
        logname = message.split(marker)[1].strip()
        try:
            with open(logname) as f:
                logged = f.read()
            self.assertIn("### Rule application error ###", logged)
            self.assertIn("### Subtree ###", logged)
        finally:
            os.remove(logname)
