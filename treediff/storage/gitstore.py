# Copyright Red Hat
#
# treediff/storage/gitstore.py - Git object store tree storage
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree storage backed by a git object store.

Uses dulwich to read trees and blobs from a repository's object database.
Tree entry names are decoded as UTF-8 with ``surrogateescape`` so that paths
that are not valid UTF-8 survive the round trip back to the object store.
"""
from typing import Dict, List, Optional, Tuple, Union
import logging
import stat

from dulwich.errors import NotGitRepository
from dulwich.object_store import BaseObjectStore
from dulwich.objects import S_ISGITLINK, Blob, Commit, ShaFile, Tag
from dulwich.objects import Tree as GitTreeObject
from dulwich.repo import BaseRepo, Repo

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


_EMPTY_TREE_ID = EMPTY_TREE_SHA.encode("ascii")

#: Maximum number of tag objects to peel before giving up
_MAX_TAG_DEPTH = 32


def _encode_name(name: str) -> bytes:
    return name.encode("utf8", "surrogateescape")


def _decode_name(name: bytes) -> str:
    return name.decode("utf8", "surrogateescape")


def _ref_to_bytes(ref: Union[str, bytes]) -> bytes:
    """
    Convert a tree, commit or symbolic reference to the ``bytes`` form
    expected by dulwich.

    :param ref: The reference to convert.
    :type ref: ``Union[str, bytes]``
    :returns: The reference as ``bytes``.
    :rtype: ``bytes``
    """
    if isinstance(ref, bytes):
        return ref
    if not isinstance(ref, str) or not ref:
        raise TreeDiffArgumentError(f"Invalid object reference: {ref!r}")
    return ref.encode("utf8")


def _peel_tags(store: BaseObjectStore, obj: ShaFile) -> ShaFile:
    """
    Follow annotated tag objects to the object they point at.

    :param store: The object store to read from.
    :type store: ``BaseObjectStore``
    :param obj: The object to peel.
    :type obj: ``ShaFile``
    :returns: The first object that is not a ``Tag``.
    :rtype: ``ShaFile``
    """
    depth = 0
    while isinstance(obj, Tag):
        depth += 1
        if depth > _MAX_TAG_DEPTH:
            raise TreeDiffNotFoundError(f"Tag chain too deep at {obj.id.decode()}")
        _, target = obj.object
        try:
            obj = store[target]
        except KeyError as err:
            raise TreeDiffNotFoundError(
                f"Tag target {target.decode()} not found"
            ) from err
    return obj


def _kind_for_mode(mode: int) -> EntryKind:
    """Map a git tree entry mode to an ``EntryKind``."""
    if S_ISGITLINK(mode):
        return EntryKind.COMMIT
    if stat.S_ISDIR(mode):
        return EntryKind.TREE
    return EntryKind.BLOB


class GitEntry(Entry):
    """
    An entry in a git tree, read lazily from the object store.
    """

    def __init__(self, store: BaseObjectStore, mode: int, sha: bytes):
        self._store = store
        self._mode = mode
        self._sha = sha

    @property
    def kind(self) -> EntryKind:
        return _kind_for_mode(self._mode)

    @property
    def mode(self) -> Optional[int]:
        return self._mode

    @property
    def content_id(self) -> Optional[str]:
        return self._sha.decode("ascii")

    def content(self) -> bytes:
        try:
            obj = self._store[self._sha]
        except KeyError as err:
            raise TreeDiffContentFetchError(
                f"Blob {self._sha.decode('ascii')} not found in object store"
            ) from err
        if not isinstance(obj, Blob):
            raise TreeDiffContentFetchError(
                f"Object {self._sha.decode('ascii')} is a "
                f"{obj.type_name.decode('ascii')}, not a blob"
            )
        return obj.as_raw_string()


class GitTree(Tree):
    """
    A git tree snapshot. Sub-trees are read on demand and cached by path.
    """

    def __init__(self, store: BaseObjectStore, ref: str, tree: GitTreeObject):
        super().__init__(ref)
        self._store = store
        self._trees: Dict[Tuple[str, ...], Optional[GitTreeObject]] = {(): tree}

    def _read_tree(self, sha: bytes) -> GitTreeObject:
        try:
            obj = self._store[sha]
        except KeyError as err:
            if sha == _EMPTY_TREE_ID:
                return GitTreeObject()
            raise TreeDiffNotFoundError(
                f"Tree {sha.decode('ascii')} not found in object store"
            ) from err
        if not isinstance(obj, GitTreeObject):
            raise TreeDiffNotFoundError(f"Object {sha.decode('ascii')} is not a tree")
        return obj

    def _subtree(self, parts: Tuple[str, ...]) -> Optional[GitTreeObject]:
        """
        Return the tree object at path ``parts`` or ``None`` if that path is
        not a directory in this snapshot.
        """
        if parts in self._trees:
            return self._trees[parts]
        parent = self._subtree(parts[:-1])
        subtree = None
        if parent is not None:
            name = _encode_name(parts[-1])
            if name in parent:
                mode, sha = parent[name]
                if stat.S_ISDIR(mode) and not S_ISGITLINK(mode):
                    subtree = self._read_tree(sha)
        self._trees[parts] = subtree
        return subtree

    def entry_at(self, path: str) -> Optional[Entry]:
        parts = split_path(path)
        if not parts:
            root = self._trees[()]
            return GitEntry(self._store, stat.S_IFDIR, root.id)
        parent = self._subtree(parts[:-1])
        if parent is None:
            return None
        name = _encode_name(parts[-1])
        if name not in parent:
            return None
        mode, sha = parent[name]
        return GitEntry(self._store, mode, sha)

    def children(self, path: str) -> List[Tuple[str, EntryKind]]:
        tree = self._subtree(split_path(path))
        if tree is None:
            return []
        return sorted(
            (_decode_name(item.path), _kind_for_mode(item.mode))
            for item in tree.iteritems()
        )


class GitTreeStore(TreeStore):
    """
    Tree storage reading from a dulwich object store.
    """

    def __init__(self, object_store: BaseObjectStore):
        """
        Initialise a new ``GitTreeStore``.

        :param object_store: The object store to read from, for example
                             ``Repo.object_store``.
        :type object_store: ``BaseObjectStore``
        """
        self.object_store = object_store

    @classmethod
    def from_repo(cls, repo: BaseRepo) -> "GitTreeStore":
        """
        Construct a ``GitTreeStore`` for the object store of ``repo``.

        :param repo: An open repository.
        :type repo: ``BaseRepo``
        :returns: A new ``GitTreeStore``.
        :rtype: ``GitTreeStore``
        """
        return cls(repo.object_store)

    def resolve_tree(self, ref: str) -> GitTree:
        """
        Resolve ``ref`` to a ``GitTree``. Commit and tag ids are peeled to
        the tree they point at.

        :param ref: A tree, commit or tag object id.
        :type ref: ``str``
        :returns: The resolved tree.
        :rtype: ``GitTree``
        """
        sha = _ref_to_bytes(ref)
        if sha == _EMPTY_TREE_ID and sha not in self.object_store:
            _log_debug_storage("Resolved empty tree sentinel")
            return GitTree(self.object_store, EMPTY_TREE_SHA, GitTreeObject())
        try:
            obj = self.object_store[sha]
        except (KeyError, ValueError) as err:
            raise TreeDiffNotFoundError(f"Tree reference {ref} not found") from err

        obj = _peel_tags(self.object_store, obj)
        if isinstance(obj, Commit):
            _log_debug_storage(
                "Peeled commit %s to tree %s", obj.id.decode(), obj.tree.decode()
            )
            return self.resolve_tree(obj.tree.decode("ascii"))
        if not isinstance(obj, GitTreeObject):
            raise TreeDiffNotFoundError(
                f"Object {ref} is a {obj.type_name.decode('ascii')}, not a tree"
            )
        _log_debug_storage("Resolved git tree %s", obj.id.decode())
        return GitTree(self.object_store, obj.id.decode("ascii"), obj)


def open_repository(path: str) -> Repo:
    """
    Open the git repository at ``path``.

    :param path: Path to a git working tree or bare repository.
    :type path: ``str``
    :returns: The open repository.
    :rtype: ``Repo``
    :raises: ``TreeDiffNotFoundError`` if ``path`` is not a git repository.
    """
    try:
        return Repo(path)
    except NotGitRepository as err:
        raise TreeDiffNotFoundError(f"Not a git repository: {path}") from err


def commit_tree_refs(repo: BaseRepo, commit_ref: Union[str, bytes]) -> Tuple[str, str]:
    """
    Return the pair of tree references that describe the changes made by
    ``commit_ref``: the tree of its first parent, or the empty tree if it
    has no parents, and the commit's own tree.

    :param repo: The repository containing the commit.
    :type repo: ``BaseRepo``
    :param commit_ref: A commit id or symbolic reference such as ``HEAD``.
    :type commit_ref: ``Union[str, bytes]``
    :returns: A ``(tree_a, tree_b)`` tuple of tree ids.
    :rtype: ``Tuple[str, str]``
    """
    name = _ref_to_bytes(commit_ref)
    try:
        obj = repo[name]
    except (KeyError, ValueError) as err:
        raise TreeDiffNotFoundError(f"Commit {commit_ref!r} not found") from err

    commit = _peel_tags(repo.object_store, obj)
    if not isinstance(commit, Commit):
        raise TreeDiffNotFoundError(f"Object {commit_ref!r} is not a commit")

    if commit.parents:
        try:
            parent = repo[commit.parents[0]]
        except KeyError as err:
            raise TreeDiffNotFoundError(
                f"Parent {commit.parents[0].decode()} of {commit.id.decode()} not found"
            ) from err
        tree_a = parent.tree.decode("ascii")
    else:
        _log_debug_storage(
            "Commit %s has no parents: diffing against the empty tree",
            commit.id.decode(),
        )
        tree_a = EMPTY_TREE_SHA

    return tree_a, commit.tree.decode("ascii")
