# Copyright Red Hat
#
# treediff/diff/changes.py - Tree diff change records
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Change variants and the change record representation.

The classifier produces one of ``Added``, ``Modified`` or ``Removed`` for each
changed path. Every variant projects onto the flat ``ChangeRecord`` that is
returned to callers and serialized.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Union
import json

from .difftypes import ChangeKind


@dataclass(frozen=True)
class ChangeRecord:
    """
    The external representation of a single changed path.
    """

    #: Unified diff body with the file header lines removed
    diff: str
    #: Path in the new tree, or ``None`` for a deleted file
    new_path: Optional[str]
    #: Path in the old tree, or ``None`` for a new file
    old_path: Optional[str]
    #: Encoded mode of the old entry
    a_mode: Optional[str]
    #: Encoded mode of the new entry
    b_mode: Optional[str]
    new_file: bool
    #: Rename detection is not performed: always ``False``
    renamed_file: bool
    deleted_file: bool

    def __str__(self) -> str:
        """
        Return a string representation of this ``ChangeRecord`` object.

        :returns: A human readable representation of this ``ChangeRecord``.
        :rtype: ``str``
        """
        return (
            f"Path: {self.path}\n"
            f"  change: {self.kind.value}\n"
            f"  old_path: {self.old_path if self.old_path else ''}\n"
            f"  new_path: {self.new_path if self.new_path else ''}\n"
            f"  a_mode: {self.a_mode if self.a_mode else ''}\n"
            f"  b_mode: {self.b_mode if self.b_mode else ''}\n"
            f"  new_file: {self.new_file}\n"
            f"  renamed_file: {self.renamed_file}\n"
            f"  deleted_file: {self.deleted_file}"
        )

    @property
    def path(self) -> str:
        """
        The path this record describes, in whichever tree it exists.
        """
        return self.new_path if self.new_path is not None else self.old_path

    @property
    def kind(self) -> ChangeKind:
        """
        The change kind described by this record's flags.
        """
        if self.new_file:
            return ChangeKind.ADD
        if self.deleted_file:
            return ChangeKind.REMOVE
        return ChangeKind.MODIFY

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``ChangeRecord`` object into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return asdict(self)

    def json(self, pretty=False) -> str:
        """
        Return a string representation of this ``ChangeRecord`` in JSON
        notation.

        :param pretty: Indent JSON to be human readable.
        :type pretty: ``bool``
        :returns: A JSON representation of this instance.
        :rtype: ``str``
        """
        return json.dumps(self.to_dict(), indent=4 if pretty else None)


@dataclass(frozen=True)
class Added:
    """A path present only in the new tree."""

    path: str
    diff: str
    a_mode: Optional[str]
    b_mode: Optional[str]

    kind = ChangeKind.ADD

    def to_record(self) -> ChangeRecord:
        return ChangeRecord(
            diff=self.diff,
            new_path=self.path,
            old_path=None,
            a_mode=self.a_mode,
            b_mode=self.b_mode,
            new_file=True,
            renamed_file=False,
            deleted_file=False,
        )


@dataclass(frozen=True)
class Modified:
    """A path present in both trees with different content."""

    path: str
    diff: str
    a_mode: Optional[str]
    b_mode: Optional[str]

    kind = ChangeKind.MODIFY

    def to_record(self) -> ChangeRecord:
        return ChangeRecord(
            diff=self.diff,
            new_path=self.path,
            old_path=self.path,
            a_mode=self.a_mode,
            b_mode=self.b_mode,
            new_file=False,
            renamed_file=False,
            deleted_file=False,
        )


@dataclass(frozen=True)
class Removed:
    """A path present only in the old tree."""

    path: str
    diff: str
    a_mode: Optional[str]
    b_mode: Optional[str]

    kind = ChangeKind.REMOVE

    def to_record(self) -> ChangeRecord:
        return ChangeRecord(
            diff=self.diff,
            new_path=None,
            old_path=self.path,
            a_mode=self.a_mode,
            b_mode=self.b_mode,
            new_file=False,
            renamed_file=False,
            deleted_file=True,
        )


#: Any classified change
Change = Union[Added, Modified, Removed]
