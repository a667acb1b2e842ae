# Copyright Red Hat
#
# treediff/storage/memory.py - In-memory tree storage
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
In-memory, content-addressed tree storage.

Objects are hashed the way git hashes them, so tree references produced by
``MemoryTreeStore`` are valid git tree ids and the empty mapping resolves to
``EMPTY_TREE_SHA``.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from hashlib import sha1
import logging
import stat

from treediff import (
    EMPTY_TREE_SHA,
    TREEDIFF_SUBSYSTEM_STORAGE,
    TreeDiffArgumentError,
    TreeDiffContentFetchError,
    TreeDiffNotFoundError,
)

from ._storage import Entry, EntryKind, Tree, TreeStore, split_path

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_storage(msg, *args, **kwargs):
    """A wrapper for storage subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREEDIFF_SUBSYSTEM_STORAGE}, **kwargs)


#: Default mode for regular files
BLOB_MODE = stat.S_IFREG | 0o644

#: Mode for executable files
EXEC_MODE = stat.S_IFREG | 0o755

#: Mode for directories
TREE_MODE = stat.S_IFDIR

#: A tree mapping value: file content, ``(content, mode)`` or a sub-tree.
TreeValue = Union[bytes, str, Tuple[Union[bytes, str], int], Mapping[str, Any]]


def hash_object(obj_type: str, data: bytes) -> str:
    """
    Compute the git object id of ``data`` stored as ``obj_type``.

    :param obj_type: The git object type ("blob" or "tree").
    :type obj_type: ``str``
    :param data: The raw object body.
    :type data: ``bytes``
    :returns: The hex object id.
    :rtype: ``str``
    """
    hasher = sha1(usedforsecurity=False)
    hasher.update(f"{obj_type} {len(data)}".encode("ascii") + b"\0")
    hasher.update(data)
    return hasher.hexdigest()


def _tree_sort_key(item: Tuple[str, Tuple[int, str]]) -> bytes:
    """Git orders tree entries as if directory names end with '/'."""
    name, (mode, _) = item
    suffix = "/" if stat.S_ISDIR(mode) else ""
    return (name + suffix).encode("utf8", "surrogateescape")


def _serialize_tree(entries: Dict[str, Tuple[int, str]]) -> bytes:
    """
    Serialize tree ``entries`` in git's tree object format.

    :param entries: A mapping of ``name -> (mode, object_id)``.
    :type entries: ``Dict[str, Tuple[int, str]]``
    :returns: The raw tree object body.
    :rtype: ``bytes``
    """
    return b"".join(
        f"{mode:o} {name}".encode("utf8", "surrogateescape")
        + b"\0"
        + bytes.fromhex(object_id)
        for name, (mode, object_id) in sorted(entries.items(), key=_tree_sort_key)
    )


def _kind_for_mode(mode: int) -> EntryKind:
    """Map a tree entry mode to an ``EntryKind``."""
    if stat.S_ISDIR(mode):
        return EntryKind.TREE
    return EntryKind.BLOB


class MemoryEntry(Entry):
    """
    An entry in a ``MemoryTreeStore`` tree.
    """

    def __init__(
        self, store: "MemoryTreeStore", kind: EntryKind, mode: int, object_id: str
    ):
        self._store = store
        self._kind = kind
        self._mode = mode
        self._object_id = object_id

    @property
    def kind(self) -> EntryKind:
        return self._kind

    @property
    def mode(self) -> Optional[int]:
        return self._mode

    @property
    def content_id(self) -> Optional[str]:
        return self._object_id

    def content(self) -> bytes:
        return self._store.read_blob(self._object_id)


class MemoryTree(Tree):
    """
    A tree snapshot held by a ``MemoryTreeStore``.
    """

    def __init__(self, store: "MemoryTreeStore", ref: str):
        super().__init__(ref)
        self._store = store

    def _lookup(self, path: str) -> Optional[Tuple[int, str]]:
        """
        Resolve ``path`` to a ``(mode, object_id)`` pair.

        :param path: The tree path to resolve.
        :type path: ``str``
        :returns: The mode and object id, or ``None`` if not present.
        :rtype: ``Optional[Tuple[int, str]]``
        """
        mode, object_id = TREE_MODE, self.ref
        for part in split_path(path):
            if not stat.S_ISDIR(mode):
                return None
            entries = self._store.read_tree(object_id)
            if part not in entries:
                return None
            mode, object_id = entries[part]
        return mode, object_id

    def entry_at(self, path: str) -> Optional[Entry]:
        found = self._lookup(path)
        if found is None:
            return None
        mode, object_id = found
        return MemoryEntry(self._store, _kind_for_mode(mode), mode, object_id)

    def children(self, path: str) -> List[Tuple[str, EntryKind]]:
        found = self._lookup(path)
        if found is None or not stat.S_ISDIR(found[0]):
            return []
        entries = self._store.read_tree(found[1])
        return [(name, _kind_for_mode(mode)) for name, (mode, _) in sorted(entries.items())]


class MemoryTreeStore(TreeStore):
    """
    A content-addressed object store holding blobs and trees in memory.
    """

    def __init__(self):
        """
        Initialise a new, empty ``MemoryTreeStore``.
        """
        # object_id -> ("blob", bytes) or ("tree", {name: (mode, object_id)})
        self._objects: Dict[str, Tuple[str, Any]] = {}

    def __contains__(self, object_id: str) -> bool:
        return object_id in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def add_blob(self, data: Union[bytes, str]) -> str:
        """
        Store ``data`` as a blob.

        :param data: The blob content; ``str`` values are encoded as UTF-8.
        :type data: ``Union[bytes, str]``
        :returns: The blob object id.
        :rtype: ``str``
        """
        if isinstance(data, str):
            data = data.encode("utf8")
        object_id = hash_object("blob", data)
        self._objects[object_id] = ("blob", data)
        return object_id

    def add_tree(self, mapping: Mapping[str, TreeValue]) -> str:
        """
        Store a tree built from the nested ``mapping``.

        Mapping values may be file content (``bytes`` or ``str``), a tuple of
        ``(content, mode)``, or a nested mapping describing a sub-directory.

        :param mapping: A mapping of entry names to values.
        :type mapping: ``Mapping[str, TreeValue]``
        :returns: The tree object id (the tree reference).
        :rtype: ``str``
        """
        entries: Dict[str, Tuple[int, str]] = {}
        for name, value in mapping.items():
            if not name or "/" in name or name in (".", ".."):
                raise TreeDiffArgumentError(f"Invalid tree entry name: {name!r}")
            if isinstance(value, Mapping):
                entries[name] = (TREE_MODE, self.add_tree(value))
            elif isinstance(value, tuple):
                data, mode = value
                entries[name] = (mode, self.add_blob(data))
            elif isinstance(value, (bytes, str)):
                entries[name] = (BLOB_MODE, self.add_blob(value))
            else:
                raise TreeDiffArgumentError(
                    f"Invalid tree entry value for {name!r}: {type(value).__name__}"
                )
        object_id = hash_object("tree", _serialize_tree(entries))
        self._objects[object_id] = ("tree", entries)
        _log_debug_storage("Stored tree %s with %d entries", object_id, len(entries))
        return object_id

    def remove_object(self, object_id: str):
        """
        Discard ``object_id`` from this store, leaving it incomplete.

        :param object_id: The object to discard.
        :type object_id: ``str``
        """
        self._objects.pop(object_id, None)

    def _read(self, object_id: str, obj_type: str) -> Any:
        try:
            found_type, data = self._objects[object_id]
        except KeyError as err:
            raise TreeDiffNotFoundError(f"Object {object_id} not found") from err
        if found_type != obj_type:
            raise TreeDiffNotFoundError(
                f"Object {object_id} is a {found_type}, not a {obj_type}"
            )
        return data

    def read_tree(self, object_id: str) -> Dict[str, Tuple[int, str]]:
        """
        Return the entries of the tree ``object_id``.

        :param object_id: The tree object id.
        :type object_id: ``str``
        :returns: A mapping of ``name -> (mode, object_id)``.
        :rtype: ``Dict[str, Tuple[int, str]]``
        :raises: ``TreeDiffNotFoundError`` if the tree is not in this store.
        """
        if object_id == EMPTY_TREE_SHA:
            return {}
        return self._read(object_id, "tree")

    def read_blob(self, object_id: str) -> bytes:
        """
        Return the content of the blob ``object_id``.

        :param object_id: The blob object id.
        :type object_id: ``str``
        :returns: The blob content.
        :rtype: ``bytes``
        :raises: ``TreeDiffContentFetchError`` if the blob is not available.
        """
        try:
            return self._read(object_id, "blob")
        except TreeDiffNotFoundError as err:
            raise TreeDiffContentFetchError(
                f"Cannot read content for blob {object_id}: {err}"
            ) from err

    def resolve_tree(self, ref: str) -> MemoryTree:
        if ref == EMPTY_TREE_SHA:
            return MemoryTree(self, EMPTY_TREE_SHA)
        self.read_tree(ref)
        _log_debug_storage("Resolved memory tree %s", ref)
        return MemoryTree(self, ref)
