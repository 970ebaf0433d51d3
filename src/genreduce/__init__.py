# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""A generic reduction engine for recursive data types"""

from .commands import Commands
from .internal_error import InternalError, RuleApplicationError
from .profiler import ProfilerData
from .reduce import reduce, reduce_single_pass
from .rules import (
    FunctionRule,
    Ignore,
    ignore,
    ignore_exception,
    IgnoreException,
    make_logger,
    never,
    NotApplicable,
    prune,
    Prune,
    Rule,
    rule_from_function,
    RuleResult,
    Success,
    Trace,
    type_guard,
    TypeGuardRule,
)
from .uniplate import is_uniplate, print_tree, TreeDomain, Uniplate, uniplate_domain
from .utils import get_genreduce_logger, LogLevel


__version__ = "0.1.0"

LOGGER = get_genreduce_logger()

__all__ = [
    "Commands",
    "FunctionRule",
    "Ignore",
    "IgnoreException",
    "InternalError",
    "LogLevel",
    "NotApplicable",
    "ProfilerData",
    "Prune",
    "Rule",
    "RuleApplicationError",
    "RuleResult",
    "Success",
    "Trace",
    "TreeDomain",
    "TypeGuardRule",
    "Uniplate",
    "get_genreduce_logger",
    "ignore",
    "ignore_exception",
    "is_uniplate",
    "make_logger",
    "never",
    "print_tree",
    "prune",
    "reduce",
    "reduce_single_pass",
    "rule_from_function",
    "type_guard",
    "uniplate_domain",
]
