# Copyright Red Hat
#
# treediff/diff/differ.py - Tree differ
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level tree diff interface.
"""
from typing import Optional
import logging

from treediff.storage import TreeStore

from .engine import DiffEngine, DiffResults
from .options import DiffOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


class TreeDiffer:
    """
    Top-level interface for generating tree comparisons.
    """

    def __init__(self, store: TreeStore, options: Optional[DiffOptions] = None):
        """
        Initialise a new ``TreeDiffer`` to compute tree differences.

        Each ``TreeDiffer`` holds no state between calls, but callers running
        diffs in parallel should use one instance per thread.

        :param store: The storage holding the trees to compare.
        :type store: ``TreeStore``
        :param options: Options to control this ``TreeDiffer`` instance.
        :type options: ``DiffOptions``
        """
        options = options or DiffOptions()
        self.store: TreeStore = store
        self.options: DiffOptions = options
        self.diff_engine: DiffEngine = DiffEngine(options)

    def diff_trees(self, ref_a: str, ref_b: str) -> DiffResults:
        """
        Compare the trees identified by ``ref_a`` and ``ref_b``.

        :param ref_a: The first (old) tree reference. Use ``EMPTY_TREE_SHA``
                      to diff against nothing.
        :type ref_a: ``str``
        :param ref_b: The second (new) tree reference.
        :type ref_b: ``str``
        :returns: The diff results for the comparison.
        :rtype: ``DiffResults``
        """
        _log_debug("Resolving trees %s and %s", ref_a, ref_b)
        tree_a = self.store.resolve_tree(ref_a)
        tree_b = self.store.resolve_tree(ref_b)
        return self.diff_engine.compute_diff(tree_a, tree_b)


def diff_trees(
    store: TreeStore, ref_a: str, ref_b: str, options: Optional[DiffOptions] = None
) -> DiffResults:
    """
    Compare the trees ``ref_a`` and ``ref_b`` held in ``store``.

    :param store: The storage holding the trees to compare.
    :type store: ``TreeStore``
    :param ref_a: The first (old) tree reference.
    :type ref_a: ``str``
    :param ref_b: The second (new) tree reference.
    :type ref_b: ``str``
    :param options: Options to control the comparison.
    :type options: ``Optional[DiffOptions]``
    :returns: The diff results for the comparison.
    :rtype: ``DiffResults``
    """
    return TreeDiffer(store, options).diff_trees(ref_a, ref_b)
