# Copyright Red Hat
#
# treediff/diff/engine.py - Tree diff engine
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree diff engine
"""
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
import logging
import json

from treediff.storage import Tree

from .changes import Change, ChangeRecord
from .classify import ChangeClassifier
from .difftypes import ChangeKind
from .options import DiffOptions
from .treewalk import PathPair, TreeWalker

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def render_unified_diff(record: ChangeRecord) -> str:
    """
    Render a git style patch for a single change record.

    :param record: The change record to render.
    :type record: ``ChangeRecord``
    :returns: The rendered patch, including file headers.
    :rtype: ``str``
    """
    from_path = f"a/{record.path}"
    to_path = f"b/{record.path}"

    lines = [f"diff --git {from_path} {to_path}"]
    if record.new_file:
        lines.append(f"new file mode {record.b_mode or ''}".rstrip())
    if record.deleted_file:
        lines.append(f"deleted file mode {record.a_mode or ''}".rstrip())

    if record.diff:
        lines.append(f"--- {from_path if not record.new_file else '/dev/null'}")
        lines.append(f"+++ {to_path if not record.deleted_file else '/dev/null'}")
        lines.append(record.diff.rstrip("\n"))

    return "\n".join(lines)


class DiffResults:
    """Container for tree diff results with formatting methods."""

    #: Constant for the names of the string diff formats
    DIFF_FORMATS: ClassVar[List[str]] = [
        "json",
        "diff",
        "paths",
        "summary",
    ]

    def __init__(
        self,
        records: List[ChangeRecord],
        options: DiffOptions,
        tree_a: str,
        tree_b: str,
        timestamp: Optional[int] = None,
    ):
        self._records = records
        self.options = options
        self.tree_a = tree_a
        self.tree_b = tree_b
        self.timestamp = (
            timestamp if timestamp is not None else int(datetime.now().timestamp())
        )

    def __repr__(self) -> str:
        """
        Return a machine-readable representation of this instance.

        :returns: ``DiffResults`` constructor style string.
        :rtype: ``str``
        """
        return (
            f"DiffResults([...], {self.options!r}, {self.tree_a!r}, "
            f"{self.tree_b!r}, {self.timestamp})"
        )

    # List-like interface
    def __iter__(self) -> Iterator[ChangeRecord]:
        return iter(self._records)

    def __len__(self):
        return len(self._records)

    def __getitem__(self, index: int) -> ChangeRecord:
        return self._records[index]

    @property
    def records(self) -> List[ChangeRecord]:
        """
        Return a copy of the ordered list of change records.

        :returns: The change records.
        :rtype: ``List[ChangeRecord]``
        """
        return list(self._records)

    @property
    def added(self) -> List[ChangeRecord]:
        """
        Return added paths in this ``DiffResults`` instance.

        :returns: Records with ``new_file`` set.
        :rtype: ``List[ChangeRecord]``
        """
        return [r for r in self._records if r.kind == ChangeKind.ADD]

    @property
    def removed(self) -> List[ChangeRecord]:
        """
        Return removed paths in this ``DiffResults`` instance.

        :returns: Records with ``deleted_file`` set.
        :rtype: ``List[ChangeRecord]``
        """
        return [r for r in self._records if r.kind == ChangeKind.REMOVE]

    @property
    def modified(self) -> List[ChangeRecord]:
        """
        Return modified paths in this ``DiffResults`` instance.

        :returns: Records for paths present in both trees.
        :rtype: ``List[ChangeRecord]``
        """
        return [r for r in self._records if r.kind == ChangeKind.MODIFY]

    def paths(self) -> List[str]:
        """
        Return the list of changed paths in this ``DiffResults`` instance.

        :returns: Changed paths in traversal order.
        :rtype: ``List[str]``
        """
        return [r.path for r in self._records]

    def to_dicts(self) -> List[Dict[str, Any]]:
        """
        Return the change records as a list of dictionaries.

        :returns: One dictionary per record, in traversal order.
        :rtype: ``List[Dict[str, Any]]``
        """
        return [record.to_dict() for record in self._records]

    def json(self, pretty: bool = False) -> str:
        """
        Return JSON representation of the ``ChangeRecord`` content for this
        instance.

        :param pretty: Indent JSON to be human readable.
        :type pretty: ``bool``
        :returns: JSON string description of tree changes.
        :rtype: ``str``
        """
        return json.dumps(self.to_dicts(), indent=4 if pretty else None)

    def diff(self) -> str:
        """
        Return a git style patch of all changes in this instance.

        :returns: The concatenated patches.
        :rtype: ``str``
        """
        return "\n".join(render_unified_diff(record) for record in self._records)

    def summary(self) -> str:
        """
        Return a summary of this ``DiffResults`` instance.

        :returns: A string summarizing this instance.
        :rtype: ``str``
        """
        return (
            f"Total changes:  {len(self)}\n"
            f"  Paths added:    {len(self.added)}\n"
            f"  Paths removed:  {len(self.removed)}\n"
            f"  Paths modified: {len(self.modified)}"
        )


class DiffEngine:
    """
    Core class for generating tree comparisons.
    """

    def __init__(self, options: Optional[DiffOptions] = None):
        """
        Initialise a new ``DiffEngine`` instance.

        :param options: Options to apply to diff generation.
        :type options: ``Optional[DiffOptions]``
        """
        self.options: DiffOptions = options or DiffOptions()
        self.tree_walker = TreeWalker(self.options)
        self.classifier = ChangeClassifier(self.options)

    def _build(self, item: Tuple[PathPair, ChangeKind]) -> Change:
        pair, kind = item
        return self.classifier.build_change(pair.path, kind, pair.entry_a, pair.entry_b)

    def compute_diff(self, tree_a: Tree, tree_b: Tree) -> DiffResults:
        """
        Main diff computation logic.

        Leaf paths are enumerated and classified first without reading any
        content. Content is then fetched and patches built for the changed
        paths only, on a thread pool if ``max_workers`` is greater than one.
        Results are always returned in traversal order.

        :param tree_a: The first (old) tree to compare.
        :type tree_a: ``Tree``
        :param tree_b: The second (new) tree to compare.
        :type tree_b: ``Tree``
        :returns: A ``DiffResults`` instance containing ``ChangeRecord``
                  objects.
        :rtype: ``DiffResults``
        """
        start_time = datetime.now()

        pairs = self.tree_walker.walk(tree_a, tree_b)
        pending = [
            (pair, kind)
            for pair in pairs
            if (kind := self.classifier.classify_kind(*pair)) != ChangeKind.EQUAL
        ]
        _log_debug(
            "Classified %d paths: %d changed", len(pairs), len(pending)
        )

        workers = self.options.max_workers
        if workers > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                changes = list(executor.map(self._build, pending))
        else:
            changes = [self._build(item) for item in pending]

        records = [change.to_record() for change in changes]

        end_time = datetime.now()
        _log_info(
            "Found %d differences between %s and %s in %s",
            len(records),
            tree_a.ref,
            tree_b.ref,
            end_time - start_time,
        )
        return DiffResults(
            records, self.options, tree_a.ref, tree_b.ref, int(start_time.timestamp())
        )
