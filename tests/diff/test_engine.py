# Copyright Red Hat
#
# tests/diff/test_engine.py - Difference engine core tests.
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import json

from treediff import (
    EMPTY_TREE_SHA,
    TreeDiffContentFetchError,
    TreeDiffIntegrityError,
)
from treediff.diff.changes import ChangeRecord
from treediff.diff.difftypes import ChangeKind
from treediff.diff.engine import DiffEngine, DiffResults, render_unified_diff
from treediff.diff.options import DiffOptions
from treediff.diff.treewalk import PathPair
from treediff.storage import MemoryTreeStore

from .._util import make_trees

PAGE_ONE = "# This is the first page"


def _record(path, kind, diff="@@ -1 +1 @@\n-a\n+b\n"):
    return ChangeRecord(
        diff=diff,
        new_path=None if kind == ChangeKind.REMOVE else path,
        old_path=None if kind == ChangeKind.ADD else path,
        a_mode=None if kind == ChangeKind.ADD else "33188",
        b_mode=None if kind == ChangeKind.REMOVE else "33188",
        new_file=kind == ChangeKind.ADD,
        renamed_file=False,
        deleted_file=kind == ChangeKind.REMOVE,
    )


class TestDiffResults(unittest.TestCase):
    def setUp(self):
        self.rec_mod = _record("a", ChangeKind.MODIFY)
        self.rec_add = _record("b", ChangeKind.ADD, "@@ -0,0 +1 @@\n+b\n")
        self.rec_rm = _record("c", ChangeKind.REMOVE, "@@ -1 +0,0 @@\n-c\n")
        self.results = DiffResults(
            [self.rec_mod, self.rec_add, self.rec_rm],
            DiffOptions(),
            "tree_a",
            "tree_b",
            1000,
        )

    def test_list_interface(self):
        """Test iteration, len, and getitem."""
        self.assertEqual(len(self.results), 3)
        self.assertEqual(self.results[0], self.rec_mod)
        self.assertEqual(list(self.results), [self.rec_mod, self.rec_add, self.rec_rm])
        self.assertEqual(self.results.records, [self.rec_mod, self.rec_add, self.rec_rm])

    def test_summary_properties(self):
        """Test aggregation properties."""
        self.assertEqual(self.results.added, [self.rec_add])
        self.assertEqual(self.results.removed, [self.rec_rm])
        self.assertEqual(self.results.modified, [self.rec_mod])

    def test_paths(self):
        self.assertEqual(self.results.paths(), ["a", "b", "c"])

    def test_json(self):
        data = json.loads(self.results.json())
        self.assertEqual(len(data), 3)
        self.assertEqual(data[1]["new_path"], "b")
        self.assertTrue(data[2]["deleted_file"])

    def test_summary(self):
        summary = self.results.summary()
        self.assertIn("Total changes:  3", summary)
        self.assertIn("Paths added:    1", summary)
        self.assertIn("Paths removed:  1", summary)
        self.assertIn("Paths modified: 1", summary)

    def test_diff(self):
        out = self.results.diff()
        self.assertIn("diff --git a/a b/a\n--- a/a\n+++ b/a\n@@ -1 +1 @@", out)
        self.assertIn("new file mode 33188\n--- /dev/null\n+++ b/b", out)
        self.assertIn("deleted file mode 33188\n--- a/c\n+++ /dev/null", out)

    def test_repr(self):
        self.assertIn("'tree_a'", repr(self.results))

    def test_render_empty_diff(self):
        rec = _record("e", ChangeKind.ADD, "")
        self.assertEqual(
            render_unified_diff(rec), "diff --git a/e b/e\nnew file mode 33188"
        )


class TestDiffEngine(unittest.TestCase):
    def _diff(self, mapping_a, mapping_b, options=None):
        store, ref_a, ref_b = make_trees(mapping_a, mapping_b)
        engine = DiffEngine(options)
        return engine.compute_diff(store.resolve_tree(ref_a), store.resolve_tree(ref_b))

    def test_identical_trees(self):
        tree = {"a": "1", "d": {"b": "2"}}
        self.assertEqual(len(self._diff(tree, tree)), 0)

    def test_first_page_added(self):
        results = self._diff({}, {"page-1.md": PAGE_ONE})
        self.assertEqual(len(results), 1)
        self.assertEqual(
            results[0].to_dict(),
            {
                "diff": "@@ -0,0 +1 @@\n+# This is the first page\n"
                "\\ No newline at end of file\n",
                "new_path": "page-1.md",
                "old_path": None,
                "a_mode": None,
                "b_mode": "33188",
                "new_file": True,
                "renamed_file": False,
                "deleted_file": False,
            },
        )

    def test_second_page_added(self):
        results = self._diff(
            {"page-1.md": "X"}, {"page-1.md": "X", "page-2.md": "Y"}
        )
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].new_path, "page-2.md")
        self.assertTrue(results[0].new_file)

    def test_removed_file(self):
        results = self._diff({"gone.txt": "a\nb\n"}, {})
        self.assertEqual(len(results), 1)
        rec = results[0]
        self.assertTrue(rec.deleted_file)
        self.assertIsNone(rec.new_path)
        self.assertEqual(rec.old_path, "gone.txt")
        self.assertEqual(rec.diff, "@@ -1,2 +0,0 @@\n-a\n-b\n")
        self.assertEqual(rec.a_mode, "33188")
        self.assertIsNone(rec.b_mode)

    def test_modified_file(self):
        results = self._diff({"f": "one\ntwo\n"}, {"f": "one\nTWO\n"})
        self.assertEqual(len(results), 1)
        rec = results[0]
        self.assertEqual(rec.kind, ChangeKind.MODIFY)
        self.assertEqual(rec.old_path, rec.new_path)
        self.assertEqual(rec.diff, "@@ -1,2 +1,2 @@\n one\n-two\n+TWO\n")

    def test_mode_only_change_ignored(self):
        results = self._diff({"run.sh": ("echo\n", 0o100644)}, {"run.sh": ("echo\n", 0o100755)})
        self.assertEqual(len(results), 0)

    def test_mode_and_content_change_legacy_b_mode(self):
        results = self._diff(
            {"run.sh": ("echo a\n", 0o100644)}, {"run.sh": ("echo b\n", 0o100755)}
        )
        self.assertEqual(results[0].a_mode, "33188")
        self.assertEqual(results[0].b_mode, "33188")

    def test_mode_and_content_change_b_mode_from_new(self):
        results = self._diff(
            {"run.sh": ("echo a\n", 0o100644)},
            {"run.sh": ("echo b\n", 0o100755)},
            DiffOptions(legacy_b_mode=False),
        )
        self.assertEqual(results[0].b_mode, "33261")

    def test_directories_produce_no_records(self):
        results = self._diff({}, {"d": {"e": {"f.txt": "x\n"}}})
        self.assertEqual(results.paths(), ["d/e/f.txt"])

    def test_ordering_deterministic(self):
        a = {"b": "1", "a": {"z": "1", "y": "2"}, "c": "3"}
        b = {"b": "2", "a": {"y": "3", "x": "4"}, "d": "5"}
        first = self._diff(a, b)
        second = self._diff(a, b)
        self.assertEqual(first.records, second.records)
        self.assertEqual(first.paths(), ["a/x", "a/y", "a/z", "b", "c", "d"])

    def test_mirror(self):
        a = {"same": "s\n", "mod": "old\n", "gone": "g\n"}
        b = {"same": "s\n", "mod": "new\n", "added": "n\n"}
        forward = {r.path: r for r in self._diff(a, b)}
        backward = {r.path: r for r in self._diff(b, a)}
        self.assertEqual(set(forward), set(backward))
        self.assertTrue(forward["added"].new_file)
        self.assertTrue(backward["added"].deleted_file)
        self.assertTrue(forward["gone"].deleted_file)
        self.assertTrue(backward["gone"].new_file)
        self.assertEqual(forward["mod"].diff, "@@ -1 +1 @@\n-old\n+new\n")
        self.assertEqual(backward["mod"].diff, "@@ -1 +1 @@\n-new\n+old\n")

    def test_empty_tree_sentinel(self):
        store = MemoryTreeStore()
        ref_b = store.add_tree({"f": "x\n"})
        engine = DiffEngine()
        results = engine.compute_diff(
            store.resolve_tree(EMPTY_TREE_SHA), store.resolve_tree(ref_b)
        )
        self.assertEqual(results.tree_a, EMPTY_TREE_SHA)
        self.assertEqual(results.tree_b, ref_b)
        self.assertEqual(results.paths(), ["f"])

    def test_context_lines_option(self):
        old = "".join(f"{i}\n" for i in range(20))
        new = old.replace("10\n", "ten\n")
        results = self._diff({"f": old}, {"f": new}, DiffOptions(context_lines=0))
        self.assertEqual(results[0].diff, "@@ -11 +11 @@\n-10\n+ten\n")

    def test_missing_content_propagates(self):
        store = MemoryTreeStore()
        blob_id = store.add_blob("lost\n")
        ref_b = store.add_tree({"f": "lost\n"})
        store.remove_object(blob_id)
        engine = DiffEngine()
        with self.assertRaises(TreeDiffContentFetchError):
            engine.compute_diff(
                store.resolve_tree(EMPTY_TREE_SHA), store.resolve_tree(ref_b)
            )

    def test_integrity_error(self):
        engine = DiffEngine()
        engine.tree_walker.walk = lambda tree_a, tree_b: [PathPair("ghost", None, None)]
        store = MemoryTreeStore()
        tree = store.resolve_tree(EMPTY_TREE_SHA)
        with self.assertRaises(TreeDiffIntegrityError):
            engine.compute_diff(tree, tree)

    def test_parallel_preserves_order(self):
        a = {f"file{i:02d}": f"{i}\n" for i in range(30)}
        b = {f"file{i:02d}": f"{i * 2}\n" for i in range(30)}
        serial = self._diff(a, b)
        parallel = self._diff(a, b, DiffOptions(max_workers=4))
        self.assertEqual(len(parallel), 29)
        self.assertEqual(serial.records, parallel.records)
