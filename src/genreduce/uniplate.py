# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""The structural interface a tree must offer to be rewritten"""
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Sequence

from typing_extensions import TypeGuard


# The reduction engine knows nothing about the shape of the trees it
# rewrites. All it needs is a way to enumerate the immediate children of
# a node, in a fixed order, and a way to rebuild a node of the same shape
# from a replacement list of children of the same length.
#
# There are two ways to provide that. A tree type may derive from Uniplate
# and implement the two methods itself, or, for types we do not control,
# the caller can pass a TreeDomain built from two plain functions.


class Uniplate(ABC):
    """A node which can enumerate and replace its immediate children."""

    @abstractmethod
    def children(self) -> List[Any]:
        pass

    @abstractmethod
    def with_children(self, children: Sequence[Any]) -> Any:
        """Returns a node with the same tag as this one and the given children
        in position. The children are not re-examined."""
        pass


def is_uniplate(value: Any) -> TypeGuard[Uniplate]:
    return isinstance(value, Uniplate)


def _check_arity(node: Any, expected: int, actual: int) -> None:
    if expected != actual:
        raise ValueError(
            f"{type(node).__name__} has {expected} children "
            + f"but {actual} replacements were given"
        )


class TreeDomain:
    """Binds the structural traversal of some tree type so that the engine
    can walk it."""

    get_children: Callable[[Any], Sequence[Any]]
    construct: Callable[[Any, List[Any]], Any]

    def __init__(
        self,
        get_children: Callable[[Any], Sequence[Any]],
        construct: Callable[[Any, List[Any]], Any],
    ) -> None:
        self.get_children = get_children
        self.construct = construct

    def children(self, node: Any) -> List[Any]:
        return list(self.get_children(node))

    def with_children(self, node: Any, new_children: Sequence[Any]) -> Any:
        _check_arity(node, len(self.get_children(node)), len(new_children))
        return self.construct(node, list(new_children))

    def reduce(self, rules: Sequence[Any], tree: Any, meta: Any = None, **kwargs):
        from genreduce.reduce import reduce

        return reduce(rules, tree, meta, domain=self, **kwargs)

    def reduce_single_pass(
        self,
        commands: Any,
        rules: Sequence[Any],
        tree: Any,
        meta: Any = None,
        ignore_depth: int = 0,
    ) -> Optional[Any]:
        from genreduce.reduce import reduce_single_pass

        return reduce_single_pass(commands, rules, tree, meta, ignore_depth, self)


def _uniplate_children(node: Any) -> List[Any]:
    if not is_uniplate(node):
        raise TypeError(
            f"{type(node).__name__} is not Uniplate; "
            + "pass a TreeDomain that knows how to traverse it"
        )
    return node.children()


def _uniplate_construct(node: Uniplate, children: List[Any]) -> Any:
    return node.with_children(children)


uniplate_domain = TreeDomain(_uniplate_children, _uniplate_construct)


def print_tree(
    root: Any,
    domain: TreeDomain = uniplate_domain,
    to_string: Callable[[Any], str] = str,
    unicode: bool = True,
) -> str:
    """
    Renders a tree as text, one node per line. This is handy for debugging
    and for error messages.

    The children of each node are enumerated with the given domain, so
    anything the engine can rewrite can also be printed.  The text of each
    node is determined by the to_string argument.

    The tree produced uses the Unicode box-drawing characters by default; to
    use straight ASCII characters, pass False for the unicode parameter.
    """

    def pt(node, indent):
        builder.append(to_string(node))
        builder.append("\n")
        children = domain.children(node)
        for i, child in enumerate(children):
            last = i == len(children) - 1
            builder.append(indent)
            builder.append(el if last else tee)
            builder.append(dash)
            pt(child, indent + (" " if last else bar) + " ")

    el = "\u2514" if unicode else "+"
    tee = "\u251c" if unicode else "+"
    dash = "\u2500" if unicode else "-"
    bar = "\u2502" if unicode else "|"
    builder = []
    pt(root, "")
    return "".join(builder)
