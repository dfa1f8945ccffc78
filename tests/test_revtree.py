# Copyright Red Hat
#
# tests/test_revtree.py - revtree package unit tests
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import logging

import revtree
from revtree.objects import object_id_of

log = logging.getLogger()


class RevtreeTestsSimple(unittest.TestCase):
    """Test revtree module"""

    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)

    def tearDown(self):
        log.debug("Tearing down (%s)", self._testMethodName)
        revtree.set_debug_mask(0)

    def test_set_debug_mask(self):
        revtree.set_debug_mask(revtree.REVTREE_DEBUG_ALL)
        self.assertEqual(revtree.get_debug_mask(), revtree.REVTREE_DEBUG_ALL)

    def test_set_debug_mask_bad_mask(self):
        with self.assertRaises(ValueError):
            revtree.set_debug_mask(revtree.REVTREE_DEBUG_ALL + 1)
        with self.assertRaises(ValueError):
            revtree.set_debug_mask(-1)

    def test_set_debug(self):
        revtree.set_debug("store, tree")
        self.assertEqual(
            revtree.get_debug_mask(),
            revtree.REVTREE_DEBUG_STORE | revtree.REVTREE_DEBUG_TREE,
        )
        revtree.set_debug("all")
        self.assertEqual(revtree.get_debug_mask(), revtree.REVTREE_DEBUG_ALL)

    def test_set_debug_empty_is_noop(self):
        revtree.set_debug_mask(revtree.REVTREE_DEBUG_CONFIG)
        revtree.set_debug("")
        self.assertEqual(revtree.get_debug_mask(), revtree.REVTREE_DEBUG_CONFIG)

    def test_set_debug_unknown(self):
        with self.assertRaises(ValueError):
            revtree.set_debug("store,nosuch")

    def test_SubsystemFilter(self):
        revtree.set_debug_mask(0)
        sf = revtree.SubsystemFilter("revtree")
        self.assertEqual(sf.enabled_subsystems, set())
        revtree.set_debug_mask(revtree.REVTREE_DEBUG_STORE)
        sf2 = revtree.SubsystemFilter("revtree")
        self.assertIn(revtree.REVTREE_SUBSYSTEM_STORE, sf2.enabled_subsystems)
        self.assertNotIn(revtree.REVTREE_SUBSYSTEM_TREE, sf2.enabled_subsystems)

    def test_SubsystemFilter_filter(self):
        sf = revtree.SubsystemFilter("revtree")
        sf.set_debug_subsystems([revtree.REVTREE_SUBSYSTEM_TREE])

        def _record(level, subsystem=None):
            record = logging.LogRecord("revtree", level, __file__, 1, "msg", (), None)
            if subsystem:
                record.subsystem = subsystem
            return record

        self.assertTrue(sf.filter(_record(logging.INFO, revtree.REVTREE_SUBSYSTEM_STORE)))
        self.assertTrue(sf.filter(_record(logging.DEBUG)))
        self.assertTrue(sf.filter(_record(logging.DEBUG, revtree.REVTREE_SUBSYSTEM_TREE)))
        self.assertFalse(sf.filter(_record(logging.DEBUG, revtree.REVTREE_SUBSYSTEM_STORE)))

    def test_setup_logging(self):
        revtree_log = logging.getLogger("revtree")
        saved_handlers = list(revtree_log.handlers)
        saved_level = revtree_log.level
        try:
            handler = revtree.setup_logging(verbose=2)
            self.assertEqual(revtree_log.handlers, [handler])
            self.assertEqual(revtree_log.level, logging.DEBUG)
            self.assertTrue(
                any(isinstance(f, revtree.SubsystemFilter) for f in handler.filters)
            )
            revtree.setup_logging(verbose=1)
            self.assertEqual(revtree_log.level, logging.INFO)
            self.assertEqual(len(revtree_log.handlers), 1)
        finally:
            revtree_log.handlers[:] = saved_handlers
            revtree_log.setLevel(saved_level)

    def test_error_hierarchy(self):
        for exc in (
            revtree.RevtreeSystemError,
            revtree.RevtreeStoreError,
            revtree.RevtreePathError,
            revtree.RevtreeInvalidIdentifierError,
            revtree.RevtreeParseError,
            revtree.RevtreeRecursionError,
        ):
            self.assertTrue(issubclass(exc, revtree.RevtreeError))

    def test_RevtreeObjectMissingError(self):
        oid = object_id_of(b"gone")
        err = revtree.RevtreeObjectMissingError(oid)
        self.assertIs(err.object_id, oid)
        self.assertIn(oid.hex, str(err))

    def test_RevtreeUnsupportedEntryError(self):
        err = revtree.RevtreeUnsupportedEntryError("/a/link", "symbolic link")
        self.assertEqual(err.path, "/a/link")
        self.assertEqual(err.kind, "symbolic link")
        self.assertIn("symbolic link", str(err))
