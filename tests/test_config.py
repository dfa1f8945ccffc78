# Copyright Red Hat
#
# tests/test_config.py - Configuration tests.
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import os
from configparser import ConfigParser

from revtree import REV_DIR_NAME, RevtreeParseError
from revtree.config import RevtreeConfig
from revtree.objects import DirectoryObjectStore, InMemoryObjectStore
from revtree.tree import Ignores, UnsupportedPolicy


def _parser(text):
    cfg = ConfigParser()
    cfg.read_string(text)
    return cfg


class TestRevtreeConfig(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.tmpdir = self._tmpdir.name

    def tearDown(self):
        self._tmpdir.cleanup()

    def _write_config(self, text):
        path = os.path.join(self.tmpdir, "revtree.conf")
        with open(path, "w", encoding="utf8") as f:
            f.write(text)
        return path

    def test_defaults(self):
        config = RevtreeConfig()
        self.assertEqual(config.ignore, [REV_DIR_NAME])
        self.assertEqual(config.unsupported_entries, UnsupportedPolicy.ERROR)
        self.assertTrue(config.strict_write)
        self.assertIsNone(config.store_root)
        self.assertEqual(config.ignores(), Ignores())

    def test_from_file_missing(self):
        config = RevtreeConfig.from_file(os.path.join(self.tmpdir, "missing.conf"))
        self.assertEqual(config, RevtreeConfig())

    def test_from_file(self):
        root = os.path.join(self.tmpdir, "objects")
        path = self._write_config(
            "[global]\n"
            "ignore = .rev, .git , target\n"
            "unsupported_entries = warn\n"
            "strict_write = no\n"
            "\n"
            "[store]\n"
            f"root = {root}\n"
        )
        config = RevtreeConfig.from_file(path)
        self.assertEqual(config.ignore, [".rev", ".git", "target"])
        self.assertEqual(config.ignores(), Ignores([".rev", ".git", "target"]))
        self.assertEqual(config.unsupported_entries, UnsupportedPolicy.WARN)
        self.assertFalse(config.strict_write)
        self.assertEqual(config.store_root, root)

    def test_from_file_syntax_error(self):
        path = self._write_config("ignore = .git\n")
        with self.assertRaises(RevtreeParseError):
            RevtreeConfig.from_file(path)

    def test_from_file_not_utf8(self):
        path = os.path.join(self.tmpdir, "revtree.conf")
        with open(path, "wb") as f:
            f.write(b"[global]\nignore = \xff\xfe\n")
        with self.assertRaises(RevtreeParseError):
            RevtreeConfig.from_file(path)

    def test_empty_sections(self):
        config = RevtreeConfig.from_parser(_parser("[global]\n[store]\n"))
        self.assertEqual(config, RevtreeConfig())

    def test_empty_ignore(self):
        config = RevtreeConfig.from_parser(_parser("[global]\nignore =\n"))
        self.assertEqual(config.ignore, [])
        self.assertEqual(config.ignores(), Ignores())

    def test_ignore_keeps_rev_dir(self):
        config = RevtreeConfig.from_parser(_parser("[global]\nignore = .git\n"))
        self.assertEqual(config.ignore, [".git"])
        self.assertIn(REV_DIR_NAME, config.ignores())
        self.assertEqual(config.ignores(), Ignores([REV_DIR_NAME, ".git"]))

    def test_policy_case_insensitive(self):
        config = RevtreeConfig.from_parser(_parser("[global]\nunsupported_entries = WARN\n"))
        self.assertEqual(config.unsupported_entries, UnsupportedPolicy.WARN)

    def test_bad_policy(self):
        with self.assertRaises(RevtreeParseError):
            RevtreeConfig.from_parser(_parser("[global]\nunsupported_entries = follow\n"))

    def test_bad_boolean(self):
        with self.assertRaises(RevtreeParseError):
            RevtreeConfig.from_parser(_parser("[global]\nstrict_write = maybe\n"))

    def test_open_store_in_memory(self):
        self.assertIsInstance(RevtreeConfig().open_store(), InMemoryObjectStore)

    def test_open_store_directory(self):
        root = os.path.join(self.tmpdir, "objects")
        store = RevtreeConfig(store_root=root).open_store()
        self.assertIsInstance(store, DirectoryObjectStore)
        self.assertTrue(os.path.isdir(root))
