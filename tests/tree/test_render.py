# Copyright Red Hat
#
# tests/tree/test_render.py - Diff tree rendering tests.
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest

from revtree.tree import Diff, DiffTree, diff

from tests._util import make_directory

_OLD = {"a": b"1", "d": {"x": b"1", "y": b"1"}, "z": b"1"}
_NEW = {"b": b"2", "d": {"x": b"2", "w": b"2"}, "z": b"1"}


class TestDiffTree(unittest.TestCase):
    def test_render_ascii(self):
        tree = DiffTree(diff(make_directory(_OLD), make_directory(_NEW)), encoding="ascii")
        self.assertEqual(
            tree.render(),
            "\n".join(
                [
                    ".",
                    "|-- [-] a",
                    "|-- [+] b",
                    "`-- [*] d",
                    "    |-- [+] w",
                    "    |-- [*] x",
                    "    `-- [-] y",
                ]
            ),
        )

    def test_render_unicode(self):
        tree = DiffTree(
            diff(make_directory(_OLD), make_directory(_NEW)),
            root_name="project",
            encoding="utf-8",
        )
        self.assertEqual(
            str(tree),
            "\n".join(
                [
                    "project",
                    "├── [-] a",
                    "├── [+] b",
                    "└── [*] d",
                    "    ├── [+] w",
                    "    ├── [*] x",
                    "    └── [-] y",
                ]
            ),
        )

    def test_render_vertical_bar(self):
        old = make_directory({"d": {"x": b"1"}, "e": b"1"})
        new = make_directory({"d": {"x": b"2"}, "e": b"2"})
        tree = DiffTree(diff(old, new), encoding="ascii")
        self.assertEqual(
            tree.render().splitlines(),
            [".", "|-- [*] d", "|   `-- [*] x", "`-- [*] e"],
        )

    def test_render_empty(self):
        self.assertEqual(DiffTree(Diff(), encoding="ascii").render(), ".")

    def test_unknown_encoding_falls_back(self):
        tree = DiffTree(Diff(), encoding="no-such-codec")
        self.assertEqual(tree.branch, "|-- ")

    def test_none_diff(self):
        with self.assertRaises(ValueError):
            DiffTree(None)
