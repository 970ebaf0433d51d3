# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Rewrites a tree to a fixpoint of a list of rules"""
import logging
from typing import Any, Optional, Sequence, Tuple

import genreduce.profiler as prof
from genreduce.commands import Commands
from genreduce.internal_error import RuleApplicationError
from genreduce.rules import Ignore, NotApplicable, Prune, Rule, RuleResult, Success
from genreduce.uniplate import TreeDomain, uniplate_domain
from genreduce.utils import LogLevel


LOGGER = logging.getLogger("genreduce.reduce")


# A pass searches the tree top-down and left-to-right for the first node
# where some rule applies, rewrites that one node, and stops. The fixpoint
# loop then commits the side effects of that rewrite against the new tree
# and starts a fresh pass from the root. Commands therefore always run
# against a tree with the rewrite fully spliced in, and no rule is tried
# against a region that changed earlier in the same pass.
#
# The exclusion depth implements Ignore and Prune. It counts how many more
# levels, starting at the current node, are excluded from rule attempts;
# zero means the current node is eligible.


def _attempt(
    rule: Rule, commands: Commands, subtree: Any, meta: Any, domain: TreeDomain
) -> RuleResult:
    try:
        result = rule.apply(commands, subtree, meta)
    except Exception as x:
        commands.discard()
        raise RuleApplicationError(rule.name, subtree, x, domain) from x
    if not isinstance(result, RuleResult):
        commands.discard()
        raise RuleApplicationError(rule.name, subtree, None, domain)
    if isinstance(result, Success) and result.result is None:
        commands.discard()
        raise RuleApplicationError(
            rule.name,
            subtree,
            None,
            domain,
            "The rule succeeded without a replacement node.",
        )
    return result


def reduce_single_pass(
    commands: Commands,
    rules: Sequence[Rule],
    tree: Any,
    meta: Any = None,
    ignore_depth: int = 0,
    domain: TreeDomain = uniplate_domain,
) -> Optional[Any]:
    """Finds the first node, in pre-order, to which some rule applies and
    returns the tree with that node replaced, or None if no rule applies
    anywhere. Commands queued by the successful rule are left in the queue
    for the caller to commit. Since None means no rewrite, None cannot be
    used as a node."""

    if ignore_depth == 0:
        for rule in rules:
            result = _attempt(rule, commands, tree, meta, domain)
            if isinstance(result, Success):
                LOGGER.log(
                    LogLevel.DEBUG_RULES.value,
                    "Rule %s rewrote %s to %s",
                    rule.name,
                    tree,
                    result.result,
                )
                return result.result
            # Side effects of a rule that did not succeed are discarded.
            commands.discard()
            if isinstance(result, NotApplicable):
                continue
            if isinstance(result, Ignore):
                # Ignore(0) excludes only this node.
                ignore_depth = result.depth + 1
                break
            if isinstance(result, Prune):
                return None
            raise RuleApplicationError(rule.name, tree, None, domain)

    children = domain.children(tree)
    child_depth = ignore_depth - 1 if ignore_depth > 0 else 0
    for i, child in enumerate(children):
        new_child = reduce_single_pass(
            commands, rules, child, meta, child_depth, domain
        )
        if new_child is not None:
            children[i] = new_child
            return domain.with_children(tree, children)

    return None


def reduce(
    rules: Sequence[Rule],
    tree: Any,
    meta: Any = None,
    domain: TreeDomain = uniplate_domain,
    profiler: Optional[prof.ProfilerData] = None,
) -> Tuple[Any, Any]:
    """Repeatedly rewrites the tree until no rule applies anywhere.

    Rules are tried at each node in the order given, and nodes are visited
    top-down and left-to-right; the first success wins. After every
    successful rewrite the commands queued by the rule are applied, in the
    order they were queued, to the whole new tree and the current state, and
    the search starts again from the root.

    Returns the final tree and state. Termination depends entirely on the
    rules: a rule set which can rewrite forever will do so.
    """

    def begin(kind: str) -> None:
        if profiler is not None:
            profiler.begin(kind)

    def finish(kind: str) -> None:
        if profiler is not None:
            profiler.finish(kind)

    rules = list(rules)
    commands = Commands()
    passes = 0
    begin(prof.reduce)
    try:
        while True:
            passes += 1
            begin(prof.reduce_pass)
            new_tree = reduce_single_pass(commands, rules, tree, meta, 0, domain)
            finish(prof.reduce_pass)
            if new_tree is None:
                break
            begin(prof.commit)
            tree, meta = commands.commit(new_tree, meta)
            finish(prof.commit)
            LOGGER.log(
                LogLevel.DEBUG_PASSES.value, "Pass %d rewrote the tree", passes
            )
    finally:
        # Also closes a pass or commit interrupted by an exception.
        finish(prof.reduce)
    LOGGER.log(LogLevel.DEBUG.value, "Reached a fixpoint after %d passes", passes)
    return tree, meta
