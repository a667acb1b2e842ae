# Copyright Red Hat
#
# treediff/storage/__init__.py - Tree storage package
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree snapshot storage: the read-only interface used by the diff core and
the in-memory and git object store implementations of it.
"""
from ._storage import Entry, EntryKind, Tree, TreeStore, join_path, split_path
from .memory import MemoryTreeStore
from .gitstore import GitTreeStore, commit_tree_refs, open_repository

__all__ = [
    "Entry",
    "EntryKind",
    "GitTreeStore",
    "MemoryTreeStore",
    "Tree",
    "TreeStore",
    "commit_tree_refs",
    "join_path",
    "open_repository",
    "split_path",
]
