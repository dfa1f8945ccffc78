# Copyright Red Hat
#
# tests/_util.py - Revision tree test utilities.
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
import os

from revtree.objects import object_id_of
from revtree.tree import Directory, DirectoryEntry


def make_tree(root, layout):
    """
    Populate ``root`` from ``layout``: a dict mapping names to ``bytes``
    (file content) or nested dicts (subdirectories).
    """
    os.makedirs(root, exist_ok=True)
    for name, value in layout.items():
        path = os.path.join(root, name)
        if isinstance(value, dict):
            make_tree(path, value)
        else:
            with open(path, "wb") as f:
                f.write(value)


def read_tree(root):
    """
    Read the directory at ``root`` back into a ``make_tree()`` layout.
    """
    layout = {}
    for name in sorted(os.listdir(root)):
        path = os.path.join(root, name)
        if os.path.isdir(path):
            layout[name] = read_tree(path)
        else:
            with open(path, "rb") as f:
                layout[name] = f.read()
    return layout


def make_directory(layout):
    """
    Build a ``Directory`` value from a ``make_tree()`` layout without
    touching disk or a store.
    """
    entries = {}
    for name, value in layout.items():
        if isinstance(value, dict):
            entries[name] = DirectoryEntry.dir(make_directory(value))
        else:
            entries[name] = DirectoryEntry.file(object_id_of(value))
    return Directory(entries)


def make_deep_tree(root, depth, name="a", content=b"leaf"):
    """
    Create ``depth`` nested directories called ``name`` below ``root`` with
    a single file ``leaf`` at the bottom. Returns the deepest directory.
    """
    path = root
    for _ in range(depth):
        path = os.path.join(path, name)
        os.mkdir(path)
    with open(os.path.join(path, "leaf"), "wb") as f:
        f.write(content)
    return path


def remove_deep_tree(root, name="a"):
    """
    Remove a chain of nested directories called ``name`` below ``root``
    without recursion, deepest first.
    """
    paths = []
    path = os.path.join(root, name)
    while os.path.isdir(path):
        paths.append(path)
        path = os.path.join(path, name)
    for path in reversed(paths):
        for entry in os.listdir(path):
            entry_path = os.path.join(path, entry)
            if not os.path.isdir(entry_path) or os.path.islink(entry_path):
                os.unlink(entry_path)
        os.rmdir(path)
