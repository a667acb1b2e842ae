# Copyright Red Hat
#
# treediff/diff/options.py - Tree diff options
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree diff options.
"""
from dataclasses import dataclass, fields
from typing import Optional, Union
from argparse import Namespace
import logging

from treediff import TreeDiffArgumentError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Supported encodings for record mode strings
MODE_FORMATS = ("decimal", "octal")


@dataclass(frozen=True)
class DiffOptions:
    """
    Tree comparison options.
    """

    #: Number of context lines around each hunk in generated patches
    context_lines: int = 4
    #: Take ``b_mode`` of modify and remove records from the old entry
    legacy_b_mode: bool = True
    #: Encoding for ``a_mode``/``b_mode``: "decimal" or "octal"
    mode_format: str = "decimal"
    #: Worker threads used to fetch content and build patches
    max_workers: int = 1

    def __post_init__(self):
        """
        Validate option values.

        :raises: ``TreeDiffArgumentError`` if an option value is invalid.
        """
        if self.context_lines < 0:
            raise TreeDiffArgumentError(
                f"Invalid context line count: {self.context_lines}"
            )
        if self.mode_format not in MODE_FORMATS:
            raise TreeDiffArgumentError(
                f"Invalid mode format: {self.mode_format} "
                f"(expected one of {', '.join(MODE_FORMATS)})"
            )
        if self.max_workers < 1:
            raise TreeDiffArgumentError(
                f"Invalid worker count: {self.max_workers}"
            )

    def __str__(self):
        """
        Return a human readable string representation of this
        ``DiffOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        return "\n".join(f"{key}={val}" for key, val in self.__dict__.items())

    def format_mode(self, mode: Optional[int]) -> Optional[str]:
        """
        Encode ``mode`` as a string according to ``mode_format``.

        :param mode: The numeric mode to encode.
        :type mode: ``Optional[int]``
        :returns: The encoded mode, or ``None`` for an unknown or zero mode.
        :rtype: ``Optional[str]``
        """
        if not mode:
            return None
        if self.mode_format == "octal":
            return f"{mode:o}"
        return str(mode)

    @classmethod
    def from_cmd_args(cls, cmd_args: Namespace) -> "DiffOptions":
        """
        Initialise DiffOptions from command line arguments.

        Construct a new ``DiffOptions`` object from the command line
        arguments in ``cmd_args``. Arguments that are absent or ``None``
        take the default value.

        :param cmd_args: The command line selection arguments.
        :type cmd_args: ``Namespace``
        :returns: A new ``DiffOptions`` instance
        :rtype: ``DiffOptions``
        """

        def get_value(name: str) -> Union[bool, int, str, None]:
            return getattr(cmd_args, name, None)

        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: get_value(name)
            for name in field_names
            if get_value(name) is not None
        }
        options = cls(**kwargs)
        _log_debug("Initialised DiffOptions from arguments: %s", repr(options))
        return options
