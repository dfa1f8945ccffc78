# Copyright Red Hat
#
# revtree/tree/__init__.py - Revision tree directory model package
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory tree snapshot package.

Provides snapshot construction, structural diffing, materialization and
JSON encoding of directory trees. The main entry points are ``build``,
``diff`` and ``write``.
"""
from .directory import (
    Directory,
    DirectoryEntry,
    EntryType,
    Ignores,
    UnsupportedPolicy,
    build,
    write,
)
from .diff import Diff, DiffEntry, apply, diff, entry_diff
from .difftypes import DiffType
from .render import DiffTree
from .serialize import (
    diff_from_dict,
    diff_to_dict,
    directory_from_dict,
    directory_to_dict,
    dump_diff,
    dump_directory,
    load_diff,
    load_directory,
)

__all__ = [
    "Diff",
    "DiffEntry",
    "DiffTree",
    "DiffType",
    "Directory",
    "DirectoryEntry",
    "EntryType",
    "Ignores",
    "UnsupportedPolicy",
    "apply",
    "build",
    "diff",
    "diff_from_dict",
    "diff_to_dict",
    "directory_from_dict",
    "directory_to_dict",
    "dump_diff",
    "dump_directory",
    "entry_diff",
    "load_diff",
    "load_directory",
    "write",
]
