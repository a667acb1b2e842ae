# Copyright Red Hat
#
# treediff/diff/__init__.py - Tree diff package
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree diff package.

Provides two-tree comparison including the synchronized tree walk, change
classification and unified patch generation. The main entry points are
``TreeDiffer`` and ``DiffOptions``.
"""
from .changes import Added, ChangeRecord, Modified, Removed
from .classify import ChangeClassifier
from .difftypes import ChangeKind
from .differ import TreeDiffer, diff_trees
from .engine import DiffEngine, DiffResults
from .options import DiffOptions
from .patch import UnifiedPatchBuilder
from .treewalk import PathPair, TreeWalker

__all__ = [
    "Added",
    "ChangeClassifier",
    "ChangeKind",
    "ChangeRecord",
    "DiffEngine",
    "DiffOptions",
    "DiffResults",
    "Modified",
    "PathPair",
    "Removed",
    "TreeDiffer",
    "TreeWalker",
    "UnifiedPatchBuilder",
    "diff_trees",
]
