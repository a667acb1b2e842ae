# Copyright Red Hat
#
# tests/storage/test_gitstore.py - Git object store tree storage tests.
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
import tempfile
import unittest
import time

from dulwich.object_store import MemoryObjectStore
from dulwich.objects import Blob, Commit, Tag

from treediff import (
    EMPTY_TREE_SHA,
    TreeDiffArgumentError,
    TreeDiffContentFetchError,
    TreeDiffNotFoundError,
)
from treediff.diff import TreeDiffer
from treediff.storage import (
    EntryKind,
    GitTreeStore,
    commit_tree_refs,
    open_repository,
)
from treediff.storage.gitstore import GitEntry

from .._util import (
    GIT_BLOB_MODE,
    GIT_EXEC_MODE,
    add_git_commit,
    add_git_tree,
    make_git_repo,
)


class TestGitTreeStore(unittest.TestCase):
    def setUp(self):
        self.object_store = MemoryObjectStore()
        self.store = GitTreeStore(self.object_store)

    def test_resolve_tree(self):
        ref = add_git_tree(self.object_store, {"a": "1\n"}).decode()
        tree = self.store.resolve_tree(ref)
        self.assertEqual(tree.ref, ref)
        self.assertEqual(tree.children("."), [("a", EntryKind.BLOB)])

    def test_resolve_bytes_ref(self):
        ref = add_git_tree(self.object_store, {"a": "1\n"})
        self.assertEqual(self.store.resolve_tree(ref).ref, ref.decode())

    def test_resolve_empty_sentinel_not_stored(self):
        tree = self.store.resolve_tree(EMPTY_TREE_SHA)
        self.assertEqual(tree.ref, EMPTY_TREE_SHA)
        self.assertEqual(tree.children("."), [])

    def test_resolve_missing(self):
        with self.assertRaises(TreeDiffNotFoundError):
            self.store.resolve_tree("2" * 40)

    def test_resolve_invalid(self):
        with self.assertRaises(TreeDiffArgumentError):
            self.store.resolve_tree("")

    def test_resolve_blob(self):
        blob = Blob.from_string(b"x")
        self.object_store.add_object(blob)
        with self.assertRaises(TreeDiffNotFoundError):
            self.store.resolve_tree(blob.id.decode())

    def test_entries(self):
        ref = add_git_tree(
            self.object_store,
            {"bin": {"run": ("#!/bin/sh\n", GIT_EXEC_MODE)}, "readme": "hi\n"},
        )
        tree = self.store.resolve_tree(ref.decode())
        run = tree.entry_at("bin/run")
        self.assertEqual(run.kind, EntryKind.BLOB)
        self.assertEqual(run.mode, GIT_EXEC_MODE)
        self.assertEqual(run.content(), b"#!/bin/sh\n")
        self.assertEqual(tree.entry_at("bin").kind, EntryKind.TREE)
        self.assertEqual(tree.entry_at(".").kind, EntryKind.TREE)
        self.assertIsNone(tree.entry_at("bin/missing"))
        self.assertIsNone(tree.entry_at("readme/below"))
        self.assertEqual(tree.children("bin"), [("run", EntryKind.BLOB)])
        self.assertEqual(tree.children("readme"), [])

    def test_submodule_link(self):
        link_sha = b"3" * 40
        ref = add_git_tree(self.object_store, {"lib": ("link", link_sha)})
        tree = self.store.resolve_tree(ref.decode())
        self.assertEqual(tree.entry_at("lib").kind, EntryKind.COMMIT)
        self.assertEqual(tree.children("lib"), [])

    def test_missing_blob(self):
        entry = GitEntry(self.object_store, GIT_BLOB_MODE, b"6" * 40)
        with self.assertRaises(TreeDiffContentFetchError):
            entry.content()

    def test_tree_is_not_content(self):
        ref = add_git_tree(self.object_store, {"d": {"f": "x"}})
        tree = self.store.resolve_tree(ref.decode())
        with self.assertRaises(TreeDiffContentFetchError):
            tree.entry_at("d").content()

    def test_resolve_tag(self):
        repo = make_git_repo()
        commit_id = add_git_commit(repo, {"f": "x\n"})
        tag = Tag()
        tag.name = b"v1"
        tag.tagger = b"Test User <test@example.com>"
        tag.tag_time = int(time.time())
        tag.tag_timezone = 0
        tag.message = b"v1"
        tag.object = (Commit, commit_id)
        repo.object_store.add_object(tag)
        store = GitTreeStore.from_repo(repo)
        tree = store.resolve_tree(tag.id.decode())
        self.assertEqual(tree.ref, repo[commit_id].tree.decode())

    def test_diff_submodule_ignored(self):
        ref_a = add_git_tree(self.object_store, {"f": "1\n"})
        ref_b = add_git_tree(
            self.object_store, {"f": "1\n", "lib": ("link", b"4" * 40)}
        )
        results = TreeDiffer(self.store).diff_trees(ref_a.decode(), ref_b.decode())
        self.assertEqual(len(results), 0)


class TestCommitTreeRefs(unittest.TestCase):
    def setUp(self):
        self.repo = make_git_repo()

    def test_root_commit(self):
        commit_id = add_git_commit(self.repo, {"page-1.md": "# This is the first page"})
        tree_a, tree_b = commit_tree_refs(self.repo, "HEAD")
        self.assertEqual(tree_a, EMPTY_TREE_SHA)
        self.assertEqual(tree_b, self.repo[commit_id].tree.decode())

    def test_first_parent(self):
        first = add_git_commit(self.repo, {"page-1.md": "X"})
        second = add_git_commit(
            self.repo, {"page-1.md": "X", "page-2.md": "Y"}, parents=[first]
        )
        tree_a, tree_b = commit_tree_refs(self.repo, second.decode())
        self.assertEqual(tree_a, self.repo[first].tree.decode())
        self.assertEqual(tree_b, self.repo[second].tree.decode())

        results = TreeDiffer(GitTreeStore.from_repo(self.repo)).diff_trees(tree_a, tree_b)
        self.assertEqual(results.paths(), ["page-2.md"])
        self.assertTrue(results[0].new_file)

    def test_unknown_commit(self):
        with self.assertRaises(TreeDiffNotFoundError):
            commit_tree_refs(self.repo, "5" * 40)

    def test_not_a_commit(self):
        tree_id = add_git_tree(self.repo.object_store, {"f": "x"})
        with self.assertRaises(TreeDiffNotFoundError):
            commit_tree_refs(self.repo, tree_id)


class TestOpenRepository(unittest.TestCase):
    def test_not_a_repository(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(TreeDiffNotFoundError):
                open_repository(tmpdir)
