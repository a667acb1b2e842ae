# Copyright Red Hat
#
# treediff/diff/treewalk.py - Tree diff synchronized tree walk
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Synchronized walking of two tree snapshots.
"""
from typing import List, NamedTuple, Optional
import logging

from treediff import ROOT_PATH, TREEDIFF_SUBSYSTEM_WALK
from treediff.storage import Entry, EntryKind, Tree, join_path

from .options import DiffOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_walk(msg, *args, **kwargs):
    """A wrapper for walk subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREEDIFF_SUBSYSTEM_WALK}, **kwargs)


class PathPair(NamedTuple):
    """
    A leaf path together with its entry in each tree.
    """

    path: str
    entry_a: Optional[Entry]
    entry_b: Optional[Entry]


def _is_tree(entry: Optional[Entry]) -> bool:
    return entry is not None and entry.kind == EntryKind.TREE


def _skip_links(entry: Optional[Entry]) -> Optional[Entry]:
    """Treat submodule links as absent."""
    if entry is not None and entry.kind == EntryKind.COMMIT:
        return None
    return entry


class TreeWalker:
    """
    Walk two trees in step, pairing the entries found at each path.
    """

    def __init__(self, options: Optional[DiffOptions] = None):
        """
        Initialise a new ``TreeWalker`` object.

        :param options: Options to control this ``TreeWalker`` instance.
        :type options: ``DiffOptions``
        """
        self.options: DiffOptions = options or DiffOptions()

    def walk(self, tree_a: Tree, tree_b: Tree) -> List[PathPair]:
        """
        Enumerate the union of the leaf paths in ``tree_a`` and ``tree_b``.

        Paths are visited depth-first in pre-order, sorted by name within each
        directory, and each path is visited exactly once. Directories and the
        root are never returned: the walk descends into them instead, treating
        a side that has no directory at that path as an empty directory.

        :param tree_a: The first (old) tree.
        :type tree_a: ``Tree``
        :param tree_b: The second (new) tree.
        :type tree_b: ``Tree``
        :returns: The leaf paths with the entry from each side (``None``
                  where the path is absent).
        :rtype: ``List[PathPair]``
        """
        _log_info("Walking trees %s and %s", tree_a.ref, tree_b.ref)

        pairs: List[PathPair] = []
        directories = 0
        todo = [ROOT_PATH]
        while todo:
            path = todo.pop()
            is_root = path == ROOT_PATH

            entry_a = tree_a.entry_at(path) if not is_root else None
            entry_b = tree_b.entry_at(path) if not is_root else None

            if is_root or _is_tree(entry_a) or _is_tree(entry_b):
                directories += 1
                names = set()
                if is_root or _is_tree(entry_a):
                    names.update(name for name, _ in tree_a.children(path))
                if is_root or _is_tree(entry_b):
                    names.update(name for name, _ in tree_b.children(path))
                _log_debug_walk(
                    "Descending into '%s' (%d child paths)", path, len(names)
                )
                todo.extend(join_path(path, name) for name in sorted(names, reverse=True))
                continue

            leaf_a = _skip_links(entry_a)
            leaf_b = _skip_links(entry_b)
            linked = entry_a is not None or entry_b is not None
            if leaf_a is None and leaf_b is None and linked:
                _log_debug_walk("Skipping submodule link '%s'", path)
                continue

            _log_debug_walk("Pairing '%s' (A:%r // B:%r)", path, leaf_a, leaf_b)
            pairs.append(PathPair(path, leaf_a, leaf_b))

        _log_debug(
            "Walked %d directories and %d leaf paths", directories, len(pairs)
        )
        return pairs
