# Copyright Red Hat
#
# treediff/storage/_storage.py - Tree storage interface
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Abstract interface to tree snapshot storage.

The diff core only needs read access to two tree snapshots: a way to resolve
a tree reference, to look up the entry at a path, to list the children of a
directory path, and to read the content bytes of a blob on demand.
"""
from typing import List, Optional, Tuple
from abc import ABC, abstractmethod
from enum import Enum
import posixpath

from treediff import ROOT_PATH


class EntryKind(Enum):
    """
    Enum for tree entry kinds.
    """

    BLOB = "blob"
    TREE = "tree"
    #: A link to a commit in another repository (git submodule)
    COMMIT = "commit"


def join_path(parent: str, name: str) -> str:
    """
    Join a child ``name`` onto the tree path ``parent``.

    :param parent: The parent directory path (``ROOT_PATH`` for the root).
    :type parent: ``str``
    :param name: The child entry name.
    :type name: ``str``
    :returns: The child path in POSIX notation, relative to the tree root.
    :rtype: ``str``
    """
    if parent == ROOT_PATH:
        return name
    return posixpath.join(parent, name)


def split_path(path: str) -> Tuple[str, ...]:
    """
    Split a tree path into its components.

    :param path: A tree path relative to the root.
    :type path: ``str``
    :returns: A tuple of path components; empty for ``ROOT_PATH``.
    :rtype: ``Tuple[str, ...]``
    """
    if path in (ROOT_PATH, ""):
        return ()
    return tuple(part for part in path.split("/") if part)


class Entry(ABC):
    """
    Read-only view of a single path's state within one tree snapshot.
    """

    @property
    @abstractmethod
    def kind(self) -> EntryKind:
        """
        The kind of this entry.

        :returns: The ``EntryKind`` of this entry.
        :rtype: ``EntryKind``
        """

    @property
    @abstractmethod
    def mode(self) -> Optional[int]:
        """
        Numeric permission and type bits for this entry, or ``None`` if not
        known.

        :returns: The entry mode.
        :rtype: ``Optional[int]``
        """

    @property
    @abstractmethod
    def content_id(self) -> Optional[str]:
        """
        Content-addressed identity of this entry: two entries with equal
        ``content_id`` are byte-identical.

        :returns: The content identity as a hex string.
        :rtype: ``Optional[str]``
        """

    @abstractmethod
    def content(self) -> bytes:
        """
        Read the raw content of this entry.

        :returns: The content bytes.
        :rtype: ``bytes``
        :raises: ``TreeDiffContentFetchError`` if the content cannot be
                 retrieved from the backing store.
        """

    @property
    def is_tree(self) -> bool:
        """
        True if this entry is a directory.
        """
        return self.kind == EntryKind.TREE

    @property
    def is_blob(self) -> bool:
        """
        True if this entry is a file.
        """
        return self.kind == EntryKind.BLOB

    def __repr__(self) -> str:
        mode = oct(self.mode) if self.mode is not None else None
        return (
            f"{self.__class__.__name__}(kind={self.kind.value}, "
            f"mode={mode}, content_id={self.content_id})"
        )


class Tree(ABC):
    """
    A resolved, immutable tree snapshot.
    """

    def __init__(self, ref: str):
        """
        Initialise a new ``Tree`` for the snapshot identified by ``ref``.

        :param ref: The tree reference this snapshot was resolved from.
        :type ref: ``str``
        """
        self.ref: str = ref

    @abstractmethod
    def entry_at(self, path: str) -> Optional[Entry]:
        """
        Return the entry at ``path`` or ``None`` if the path does not exist
        in this snapshot.

        :param path: The tree path to look up (``ROOT_PATH`` for the root).
        :type path: ``str``
        :returns: The entry at ``path``.
        :rtype: ``Optional[Entry]``
        """

    @abstractmethod
    def children(self, path: str) -> List[Tuple[str, EntryKind]]:
        """
        Return the children of the directory at ``path``, sorted by name.

        :param path: The directory path to list.
        :type path: ``str``
        :returns: A list of ``(name, kind)`` tuples. The list is empty if
                  ``path`` is not a directory in this snapshot.
        :rtype: ``List[Tuple[str, EntryKind]]``
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.ref!r})"


class TreeStore(ABC):
    """
    Read access to a collection of tree snapshots.
    """

    @abstractmethod
    def resolve_tree(self, ref: str) -> Tree:
        """
        Resolve ``ref`` to a ``Tree`` snapshot.

        :param ref: A tree reference.
        :type ref: ``str``
        :returns: The resolved tree.
        :rtype: ``Tree``
        :raises: ``TreeDiffNotFoundError`` if ``ref`` cannot be resolved.
        """
