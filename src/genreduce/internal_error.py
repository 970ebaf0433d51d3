# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Error reporting for bugs in rules discovered during reduction"""

import os
from tempfile import NamedTemporaryFile
from typing import Any, Optional

from genreduce.uniplate import print_tree, TreeDomain, uniplate_domain


_GENREDUCE_LOG_ERRORS_TO_DISK = "GENREDUCE_LOG_ERRORS_TO_DISK"

_GENREDUCE_VERBOSE_EXCEPTIONS = "GENREDUCE_VERBOSE_EXCEPTIONS"


_help_log = f"""Set environment variable {_GENREDUCE_LOG_ERRORS_TO_DISK}
to 1 to dump extended error information to a temporary file.
"""

_help_verbose = f"""Set environment variable {_GENREDUCE_VERBOSE_EXCEPTIONS}
to 1 for extended error information.
"""


def _log_to_disk(message: str) -> str:
    temp = NamedTemporaryFile(prefix="genreduce_error_", delete=False, mode="wt")
    try:
        temp.write(message)
    finally:
        temp.close()
    return temp.name


def _check_environment(variable: str) -> bool:
    return os.environ.get(variable) == "1"


# You can change this to True for debugging purposes.
_always_log_errors_to_disk = False


def _log_errors_to_disk() -> bool:
    return _always_log_errors_to_disk or _check_environment(
        _GENREDUCE_LOG_ERRORS_TO_DISK
    )


# You can change this to True for debugging purposes.
_always_verbose_exceptions = False


def _verbose_exceptions() -> bool:
    return _always_verbose_exceptions or _check_environment(
        _GENREDUCE_VERBOSE_EXCEPTIONS
    )


def _render(subtree: Any, domain: TreeDomain) -> str:
    # The subtree came from a rule that just misbehaved; it may well be
    # malformed too, in which case fall back to its repr.
    try:
        return print_tree(subtree, domain, repr)
    except (TypeError, ValueError):
        return repr(subtree)


class InternalError(Exception):
    """An exception class for bugs surfaced while rewriting a tree"""

    original_exception: Optional[Exception]

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        self.original_exception = original_exception
        Exception.__init__(self, message)


class RuleApplicationError(InternalError):
    """Raised when a rule throws, or returns something that is not a rule
    result, while the reduction engine is applying it."""

    rule_name: str
    subtree: Any

    def __init__(
        self,
        rule_name: str,
        subtree: Any,
        original_exception: Optional[Exception] = None,
        domain: TreeDomain = uniplate_domain,
        reason: str = "The rule did not return a rule result.",
    ):
        self.rule_name = rule_name
        self.subtree = subtree

        if original_exception is None:
            cause = reason
        else:
            cause = f"""### Exception thrown ###
{type(original_exception).__name__}: {original_exception}"""

        brief = f"""Rule '{rule_name}' failed while being applied.
This typically indicates a bug in the rule rather than in the tree.
{cause}
"""

        verbose = f"""### Rule application error ###
{brief}
### Subtree ###
{_render(subtree, domain)}
### End rule application error ###
"""

        log = _log_errors_to_disk()
        use_verbose = _verbose_exceptions()

        help_text = "" if log else _help_log
        help_text += "" if use_verbose else _help_verbose

        message = verbose if use_verbose else brief
        message += help_text

        if log:
            logname = _log_to_disk(verbose)
            message += f"\nExtended error information logged to {logname}\n"

        InternalError.__init__(self, message, original_exception)
