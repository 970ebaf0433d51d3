# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Tests for commands.py"""
import unittest

from genreduce.commands import Commands


class CommandsTest(unittest.TestCase):
    def test_commit_in_order(self) -> None:
        trail = []
        commands = Commands()
        commands.enqueue_transform(lambda t: t + "b")
        commands.enqueue_state_mutation(lambda m: m + ["first"])
        commands.enqueue_transform(lambda t: t + "c")
        commands.enqueue_state_mutation(lambda m: trail.append(len(m)))
        self.assertEqual(4, len(commands))

        tree, meta = commands.commit("a", [])
        self.assertEqual("abc", tree)
        self.assertEqual(["first"], meta)
        # The second mutation saw the result of the first.
        self.assertEqual([1], trail)
        self.assertEqual(0, len(commands))
        self.assertFalse(commands)

    def test_in_place_mutation(self) -> None:
        meta = {"count": 0}
        commands = Commands()
        commands.enqueue_state_mutation(lambda m: m.update(count=m["count"] + 1))
        commands.enqueue_state_mutation(lambda m: m.update(count=m["count"] * 10))
        tree, new_meta = commands.commit("tree", meta)
        self.assertEqual("tree", tree)
        self.assertIs(meta, new_meta)
        self.assertEqual({"count": 10}, new_meta)

    def test_discard(self) -> None:
        commands = Commands()
        commands.enqueue_transform(lambda t: None)
        commands.enqueue_state_mutation(lambda m: m + 1)
        self.assertTrue(commands)
        commands.discard()
        self.assertEqual(0, len(commands))
        self.assertEqual(("tree", 1), commands.commit("tree", 1))

    def test_commit_empties_queue(self) -> None:
        commands = Commands()
        commands.enqueue_state_mutation(lambda m: m + 1)
        self.assertEqual((None, 2), commands.commit(None, 1))
        self.assertEqual((None, 2), commands.commit(None, 2))

    def test_str(self) -> None:
        def double(t):
            return t * 2

        commands = Commands()
        commands.enqueue_transform(double)
        commands.enqueue_state_mutation(double)
        self.assertEqual("[TransformTree:double, MutateState:double]", str(commands))
