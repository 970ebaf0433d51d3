#!/usr/bin/env python3
# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Rules and rule results for the reduction engine"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from genreduce.commands import Commands
from genreduce.utils import LogLevel


LOGGER = logging.getLogger("genreduce.rules")


# Logically, a rule is a partial function from a node to a node; it may
# reject the node it is given, in which case the engine moves on.
#
# Unlike a plain partial function, a rule can reject a node in three
# different ways, and the way it rejects controls where the engine looks
# next:
#
# * NotApplicable: this rule does not match; try the next rule here.
# * Ignore(depth): stop trying rules on this node, and on the nodes up to
#   `depth` levels below it, for the rest of the pass.
# * Prune: stop trying rules on this node and everything beneath it for
#   the rest of the pass.
#
# A rule also receives a command queue. Anything the rule wants to change
# besides the node itself (the auxiliary state, or the tree as a whole)
# must be queued there; the queue only takes effect if the rule succeeds.


class RuleResult(ABC):
    test: Any

    def __init__(self, test: Any) -> None:
        self.test = test

    @abstractmethod
    def is_success(self) -> bool:
        pass

    def is_fail(self) -> bool:
        return not self.is_success()

    def __str__(self) -> str:
        return f"{type(self).__name__}:{self.test}"

    def expect_success(self) -> Any:
        raise ValueError(f"Expected success but the rule reported {self}")

    def __bool__(self) -> bool:
        return self.is_success()


class Success(RuleResult):
    result: Any

    def __init__(self, test: Any, result: Any) -> None:
        RuleResult.__init__(self, test)
        self.result = result

    def is_success(self) -> bool:
        return True

    def expect_success(self) -> Any:
        return self.result


class NotApplicable(RuleResult):
    def __init__(self, test: Any = None) -> None:
        RuleResult.__init__(self, test)

    def is_success(self) -> bool:
        return False


class Ignore(RuleResult):
    """With a depth of zero only the current node is ignored; otherwise its
    descendants up to that many levels down are ignored as well."""

    depth: int

    def __init__(self, depth: int = 0, test: Any = None) -> None:
        if depth < 0:
            raise ValueError(f"Ignore depth must be non-negative, got {depth}")
        RuleResult.__init__(self, test)
        self.depth = depth

    def is_success(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"Ignore({self.depth}):{self.test}"


class Prune(RuleResult):
    """The current node and all of its descendants are ignored."""

    def __init__(self, test: Any = None) -> None:
        RuleResult.__init__(self, test)

    def is_success(self) -> bool:
        return False


class Rule(ABC):
    """A rule proposes a replacement for a single node of the tree."""

    name: str

    def __init__(self, name: str = "") -> None:
        self.name = name

    @abstractmethod
    def apply(self, commands: Commands, subtree: Any, meta: Any) -> RuleResult:
        pass

    def __call__(self, commands: Commands, subtree: Any, meta: Any) -> RuleResult:
        return self.apply(commands, subtree, meta)

    def __str__(self) -> str:
        return self.name


RuleFunction = Callable[[Commands, Any, Any], Any]


class FunctionRule(Rule):
    """Adapts a plain function to the rule interface. The function may return
    a rule result; for convenience it may also return None, meaning the rule
    does not apply, or a bare node, meaning the rule succeeded with that
    node as the replacement."""

    function: RuleFunction

    def __init__(self, function: RuleFunction, name: Optional[str] = None) -> None:
        Rule.__init__(self, function.__name__ if name is None else name)
        self.function = function

    def apply(self, commands: Commands, subtree: Any, meta: Any) -> RuleResult:
        result = self.function(commands, subtree, meta)
        if result is None:
            return NotApplicable(subtree)
        if isinstance(result, RuleResult):
            return result
        return Success(subtree, result)


def rule_from_function(function: RuleFunction) -> Rule:
    """Can be used as a decorator to turn a function into a rule."""
    return FunctionRule(function)


class TypeGuardRule(Rule):
    """Apply the given rule only to nodes of the given type; any other node
    is not applicable."""

    node_type: type
    rule: Rule

    def __init__(self, node_type: type, rule: Rule, name: str = "") -> None:
        Rule.__init__(self, name or rule.name)
        self.node_type = node_type
        self.rule = rule

    def apply(self, commands: Commands, subtree: Any, meta: Any) -> RuleResult:
        if not isinstance(subtree, self.node_type):
            return NotApplicable(subtree)
        return self.rule.apply(commands, subtree, meta)

    def __str__(self) -> str:
        return f"type_guard( {self.node_type.__name__}, {str(self.rule)} )"


def type_guard(node_type: type, rule: Rule) -> Rule:
    return TypeGuardRule(node_type, rule)


_exception = [Exception]


class IgnoreException(Rule):
    """Apply the given rule; if it throws an expected exception, the rule is
    not applicable."""

    rule: Rule
    expected: List[type]

    def __init__(
        self, rule: Rule, expected: List[type] = _exception, name: str = ""
    ) -> None:
        Rule.__init__(self, name or rule.name)
        self.rule = rule
        self.expected = expected

    def apply(self, commands: Commands, subtree: Any, meta: Any) -> RuleResult:
        try:
            return self.rule.apply(commands, subtree, meta)
        except Exception as x:
            if any(isinstance(x, t) for t in self.expected):
                LOGGER.log(
                    LogLevel.WARNING.value,
                    "Rule %s raised %s: %s; treating it as not applicable",
                    self.rule.name,
                    type(x).__name__,
                    x,
                )
                return NotApplicable(subtree)
            # We did not expect this exception; do not eat the bug.
            raise

    def __str__(self) -> str:
        return f"ignore_exception( {str(self.rule)} )"


def ignore_exception(rule: Rule, expected: List[type] = _exception) -> Rule:
    return IgnoreException(rule, expected)


class Trace(Rule):
    """This combinator introduces a side effect to be executed every time the
    child rule is attempted, and when it returns. It is useful for
    debugging."""

    rule: Rule
    logger: Callable[[Rule, Optional[RuleResult]], None]

    def __init__(
        self, rule: Rule, logger: Callable[[Rule, Optional[RuleResult]], None]
    ) -> None:
        Rule.__init__(self, rule.name)
        self.rule = rule
        self.logger = logger

    def apply(self, commands: Commands, subtree: Any, meta: Any) -> RuleResult:
        self.logger(self.rule, None)
        result = self.rule.apply(commands, subtree, meta)
        self.logger(self.rule, result)
        return result

    def __str__(self) -> str:
        return str(self.rule)


def make_logger(log: List[str]) -> Callable[[Rule], Rule]:
    def logger(rule: Rule, value: Optional[RuleResult]) -> None:
        if value is None:
            log.append(f"Started {rule.name}")
        else:
            log.append(f"Finished {rule.name}: {type(value).__name__}")

    def trace(rule: Rule) -> Rule:
        return Trace(rule, logger)

    return trace


class _Constant(Rule):
    make_result: Callable[[Any], RuleResult]

    def __init__(self, make_result: Callable[[Any], RuleResult], name: str) -> None:
        Rule.__init__(self, name)
        self.make_result = make_result

    def apply(self, commands: Commands, subtree: Any, meta: Any) -> RuleResult:
        return self.make_result(subtree)


# The never rule does not apply to anything.
never: Rule = _Constant(NotApplicable, "never")
# The prune rule cuts off every subtree it is offered, so a reduction
# with prune first in the rule list never rewrites anything.
prune: Rule = _Constant(Prune, "prune")


def ignore(depth: int = 0) -> Rule:
    """ignore(depth) produces a rule which excludes whatever it is offered,
    and `depth` levels below it, from the rest of the pass."""
    if depth < 0:
        raise ValueError(f"Ignore depth must be non-negative, got {depth}")
    return _Constant(lambda test: Ignore(depth, test), f"ignore_{depth}")
