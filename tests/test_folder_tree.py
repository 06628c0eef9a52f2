"""Tests for recursive folder tree construction.

Covers natural child ordering, hidden-folder skipping, graceful handling of
unreadable subfolders and the fatal root errors.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import folder_tree
from errors import NotADirectory, StatFailed
from folder_tree import FolderNode, build_folder_tree, sort_children


class FolderTreeBuildTests(unittest.TestCase):
    def test_children_use_natural_case_insensitive_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for name in ("img10", "img2", "IMG1", "beta", "Alpha"):
                (root / name).mkdir()

            tree = build_folder_tree(tmp)

            self.assertEqual(
                [child.name for child in tree.children],
                ["Alpha", "beta", "IMG1", "img2", "img10"],
            )

    def test_img2_sorts_before_img10(self) -> None:
        nodes = [FolderNode("img10", "/r/img10"), FolderNode("img2", "/r/img2")]
        self.assertEqual([node.name for node in sort_children(nodes)], ["img2", "img10"])

    def test_hidden_folders_and_files_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / ".git" / "objects").mkdir(parents=True)
            (root / "photos").mkdir()
            (root / "notes.txt").write_text("not a folder", encoding="utf-8")

            tree = build_folder_tree(tmp)

            self.assertEqual([child.name for child in tree.children], ["photos"])
            self.assertTrue(tree.children[0].is_leaf)

    def test_nested_paths_are_absolute_and_unique(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a" / "x").mkdir(parents=True)
            (root / "b" / "x").mkdir(parents=True)

            tree = build_folder_tree(tmp)
            paths = [node.path for node in tree.walk()]

            self.assertEqual(len(paths), len(set(paths)))
            self.assertTrue(all(os.path.isabs(path) for path in paths))
            self.assertEqual(tree.count(), 5)
            self.assertIsNotNone(tree.find(str(root / "b" / "x")))

    def test_unreadable_subfolder_is_omitted(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "good").mkdir()
            (root / "locked").mkdir()
            locked = str(root / "locked")

            real_scandir = os.scandir

            def scandir(path):
                if str(path) == locked:
                    raise PermissionError(13, "Permission denied", locked)
                return real_scandir(path)

            with mock.patch.object(folder_tree.os, "scandir", side_effect=scandir):
                with self.assertLogs("picviewer.folder_tree", level="ERROR"):
                    tree = build_folder_tree(tmp)

            self.assertEqual([child.name for child in tree.children], ["good"])

    def test_unreadable_root_raises_stat_failed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.object(folder_tree.os, "scandir", side_effect=PermissionError(13, "denied")):
                with self.assertRaises(StatFailed):
                    build_folder_tree(tmp)

    def test_missing_root_raises_stat_failed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(StatFailed) as ctx:
                build_folder_tree(os.path.join(tmp, "missing"))
            self.assertTrue(ctx.exception.path.endswith("missing"))

    def test_file_root_raises_not_a_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            file_path = Path(tmp) / "image.jpg"
            file_path.write_bytes(b"\xff\xd8")
            with self.assertRaises(NotADirectory):
                build_folder_tree(str(file_path))

    def test_to_dict_omits_empty_children(self) -> None:
        tree = FolderNode("root", "/root", [FolderNode("leaf", "/root/leaf")])
        self.assertEqual(
            tree.to_dict(),
            {"name": "root", "path": "/root", "children": [{"name": "leaf", "path": "/root/leaf"}]},
        )


if __name__ == "__main__":
    unittest.main()
