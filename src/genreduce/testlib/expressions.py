# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""A small calculator language and simplification rules for it, used to
exercise the reduction engine in tests and examples."""

from dataclasses import dataclass
from typing import Any, List, Sequence

from genreduce.commands import Commands
from genreduce.rules import Rule, rule_from_function
from genreduce.uniplate import Uniplate


class Expr(Uniplate):
    pass


class _Leaf(Expr):
    def children(self) -> List[Any]:
        return []

    def with_children(self, children: Sequence[Any]) -> Any:
        if len(children) != 0:
            raise ValueError(f"{type(self).__name__} has no children")
        return self


@dataclass(eq=True, frozen=True)
class Val(_Leaf):
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(eq=True, frozen=True)
class Var(_Leaf):
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(eq=True, frozen=True)
class Neg(Expr):
    operand: Expr

    def children(self) -> List[Any]:
        return [self.operand]

    def with_children(self, children: Sequence[Any]) -> Any:
        (operand,) = children
        return Neg(operand)

    def __str__(self) -> str:
        return f"-{self.operand}"


@dataclass(eq=True, frozen=True)
class Wrap(Expr):
    """A transparent wrapper; it means nothing to the arithmetic rules,
    which makes it handy for marking a region that should not be touched."""

    operand: Expr

    def children(self) -> List[Any]:
        return [self.operand]

    def with_children(self, children: Sequence[Any]) -> Any:
        (operand,) = children
        return Wrap(operand)

    def __str__(self) -> str:
        return f"[{self.operand}]"


@dataclass(eq=True, frozen=True)
class _Binary(Expr):
    left: Expr
    right: Expr

    def children(self) -> List[Any]:
        return [self.left, self.right]

    def with_children(self, children: Sequence[Any]) -> Any:
        left, right = children
        return type(self)(left, right)


class Add(_Binary):
    def __str__(self) -> str:
        return f"({self.left} + {self.right})"


class Mul(_Binary):
    def __str__(self) -> str:
        return f"({self.left} * {self.right})"


# Rules. These are adapted from the calculator example of Mitchell and
# Runciman, "Uniform boilerplate and list processing" (2007).


@rule_from_function
def evaluate(commands: Commands, expr: Any, meta: Any) -> Any:
    """Evaluates operators whose operands are all constants."""
    if isinstance(expr, Add):
        if isinstance(expr.left, Val) and isinstance(expr.right, Val):
            return Val(expr.left.value + expr.right.value)
    elif isinstance(expr, Mul):
        if isinstance(expr.left, Val) and isinstance(expr.right, Val):
            return Val(expr.left.value * expr.right.value)
    elif isinstance(expr, Neg) and isinstance(expr.operand, Val):
        return Val(-expr.operand.value)
    return None


@rule_from_function
def add_zero(commands: Commands, expr: Any, meta: Any) -> Any:
    """a + 0 ~> a"""
    if not isinstance(expr, Add):
        return None
    if expr.left == Val(0):
        return expr.right
    if expr.right == Val(0):
        return expr.left
    return None


@rule_from_function
def add_same(commands: Commands, expr: Any, meta: Any) -> Any:
    """a + a ~> 2 * a"""
    if isinstance(expr, Add) and expr.left == expr.right:
        return Mul(Val(2), expr.left)
    return None


@rule_from_function
def mul_one(commands: Commands, expr: Any, meta: Any) -> Any:
    """a * 1 ~> a"""
    if not isinstance(expr, Mul):
        return None
    if expr.left == Val(1):
        return expr.right
    if expr.right == Val(1):
        return expr.left
    return None


@rule_from_function
def mul_zero(commands: Commands, expr: Any, meta: Any) -> Any:
    """a * 0 ~> 0"""
    if isinstance(expr, Mul) and Val(0) in (expr.left, expr.right):
        return Val(0)
    return None


@rule_from_function
def double_neg(commands: Commands, expr: Any, meta: Any) -> Any:
    """-(-a) ~> a"""
    if isinstance(expr, Neg) and isinstance(expr.operand, Neg):
        return expr.operand.operand
    return None


@rule_from_function
def associativity(commands: Commands, expr: Any, meta: Any) -> Any:
    """a + (b + c) ~> (a + b) + c, and likewise for multiplication. Besides
    fixing a canonical form this brings new pairs of operands together for
    the other rules to look at."""
    if isinstance(expr, (Add, Mul)) and type(expr.right) is type(expr):
        op = type(expr)
        return op(op(expr.left, expr.right.left), expr.right.right)
    return None


# Ordering matters: evaluate first, then simplify, then change form.
arithmetic_rules: List[Rule] = [
    evaluate,
    add_zero,
    add_same,
    mul_one,
    mul_zero,
    double_neg,
    associativity,
]
