# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Deferred side effects of a rule application"""
from typing import Any, Callable, List, Tuple


# A rule sees one node of the tree and a read-only view of the auxiliary
# state. Sometimes a rule needs to do more than replace the node: it may
# need to update a symbol table, bump a statistics counter, or rewrite
# some other part of the tree as a consequence of this rewrite.
#
# Such effects are not performed directly. The rule puts them in a command
# queue, and the reduction engine decides what to do with them: if the rule
# succeeds, the queue is committed against the whole rewritten tree and
# the current state; if the rule declines, the queue is discarded. That way
# a rule that gives up halfway never leaves partial changes behind.


class Command:
    """A queued effect; either a whole-tree transform or a state mutation."""

    function: Callable[[Any], Any]

    def __init__(self, function: Callable[[Any], Any]) -> None:
        self.function = function

    def __str__(self) -> str:
        name = getattr(self.function, "__name__", type(self.function).__name__)
        return f"{type(self).__name__}:{name}"


class TransformTree(Command):
    pass


class MutateState(Command):
    pass


class Commands:
    """A FIFO queue of deferred effects produced by a single rule attempt."""

    _queue: List[Command]

    def __init__(self) -> None:
        self._queue = []

    def enqueue_transform(self, transform: Callable[[Any], Any]) -> None:
        """Schedules a function from tree to tree. It is given the entire tree
        after the rewrite has been spliced in, not just the rewritten node."""
        self._queue.append(TransformTree(transform))

    def enqueue_state_mutation(self, mutation: Callable[[Any], Any]) -> None:
        """Schedules a function on the auxiliary state. If it returns None the
        state is assumed to have been mutated in place; otherwise the returned
        value replaces the state."""
        self._queue.append(MutateState(mutation))

    def commit(self, tree: Any, meta: Any) -> Tuple[Any, Any]:
        queue = self._queue
        self._queue = []
        for command in queue:
            if isinstance(command, TransformTree):
                tree = command.function(tree)
            else:
                result = command.function(meta)
                if result is not None:
                    meta = result
        return tree, meta

    def discard(self) -> None:
        self._queue.clear()

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return len(self._queue) > 0

    def __str__(self) -> str:
        return "[" + ", ".join(str(c) for c in self._queue) + "]"
