# Copyright Red Hat
#
# revtree/tree/diff.py - Revision tree diff engine
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Structural differences between directory tree snapshots.

``diff(a, b)`` describes how to turn ``a`` into ``b``: names only in ``b``
are ``added`` with their complete entry, names only in ``a`` are
``deleted``, and names present in both but differing are ``modified`` with
a ``DiffEntry`` giving the target state. Modified directories carry a nested
``Diff``.

A change of entry type keeps only the target state: a directory replaced by
a file becomes ``DiffEntry.file(new_id)`` and a file replaced by a directory
becomes a nested ``Diff`` that adds the whole new subtree. For this reason
``diff(b, a)`` is not simply ``diff(a, b)`` with ``added`` and ``deleted``
exchanged.
"""
from typing import Dict, Iterator, Mapping, Optional, Tuple
from dataclasses import dataclass, field
from types import MappingProxyType
import logging
import os

from revtree import REVTREE_SUBSYSTEM_TREE, RevtreeRecursionError
from revtree.objects import ObjectId

from .difftypes import DiffType
from .directory import Directory, DirectoryEntry, EntryType

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_tree(msg, *args, **kwargs):
    """A wrapper for tree subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": REVTREE_SUBSYSTEM_TREE}, **kwargs)


@dataclass(frozen=True, repr=False)
class DiffEntry:
    """
    The target state of a modified entry: the new ``ObjectId`` of a file,
    or a nested ``Diff`` for a directory.
    """

    entry_type: EntryType
    object_id: Optional[ObjectId] = None
    diff: Optional["Diff"] = None

    def __post_init__(self):
        if self.entry_type == EntryType.FILE:
            if not isinstance(self.object_id, ObjectId) or self.diff is not None:
                raise ValueError("File diff entries require an ObjectId and no diff")
        elif self.entry_type == EntryType.DIRECTORY:
            if not isinstance(self.diff, Diff) or self.object_id is not None:
                raise ValueError("Directory diff entries require a Diff and no ObjectId")
        else:
            raise ValueError(f"Invalid entry type: {self.entry_type}")

    @classmethod
    def file(cls, object_id: ObjectId) -> "DiffEntry":
        """Construct a file diff entry for the new content ``object_id``."""
        return cls(EntryType.FILE, object_id=object_id)

    @classmethod
    def dir(cls, diff: "Diff") -> "DiffEntry":
        """Construct a directory diff entry from a nested ``diff``."""
        return cls(EntryType.DIRECTORY, diff=diff)

    @property
    def is_file(self) -> bool:
        """``True`` if this entry describes a file."""
        return self.entry_type == EntryType.FILE

    @property
    def is_dir(self) -> bool:
        """``True`` if this entry describes a directory."""
        return self.entry_type == EntryType.DIRECTORY

    def __repr__(self):
        if self.is_file:
            return f"DiffEntry.file({self.object_id!r})"
        return f"DiffEntry.dir({self.diff!r})"


@dataclass(frozen=True)
class Diff:
    """
    The changes that turn one ``Directory`` into another.

    A ``Diff`` is an immutable value: ``added`` is a ``Directory`` and
    ``modified`` is a read-only mapping, and equal diffs hash equally.
    """

    #: Names removed, in sorted order
    deleted: Tuple[str, ...] = ()
    #: Names newly present, mapped to their complete entries
    added: Mapping[str, DirectoryEntry] = field(default_factory=dict)
    #: Names present in both but changed, mapped to their target state
    modified: Mapping[str, DiffEntry] = field(default_factory=dict)

    def __post_init__(self):
        deleted = tuple(sorted(self.deleted))
        added = dict(self.added)
        modified = dict(self.modified)

        for name, entry in modified.items():
            if not isinstance(entry, DiffEntry):
                raise ValueError(f"Invalid modified entry for {name!r}: {entry!r}")

        overlap = (
            (set(deleted) & set(added))
            | (set(deleted) & set(modified))
            | (set(added) & set(modified))
        )
        if overlap:
            raise ValueError(f"Names appear in more than one change set: {sorted(overlap)}")

        object.__setattr__(self, "deleted", deleted)
        object.__setattr__(self, "added", Directory(added))
        object.__setattr__(
            self,
            "modified",
            MappingProxyType({name: modified[name] for name in sorted(modified)}),
        )

    def __hash__(self):
        return hash((self.deleted, self.added, tuple(self.modified.items())))

    def is_empty(self) -> bool:
        """
        Test whether this ``Diff`` records no changes.

        :returns: ``True`` if there are no added, deleted or modified names.
        :rtype: ``bool``
        """
        return not (self.deleted or self.added or self.modified)

    def names(self) -> Iterator[Tuple[str, DiffType]]:
        """
        Iterate over the names changed at this level, in name order.

        :returns: An iterator of ``(name, DiffType)`` pairs.
        :rtype: ``Iterator[Tuple[str, DiffType]]``
        """
        changes: Dict[str, DiffType] = {}
        changes.update((name, DiffType.DELETED) for name in self.deleted)
        changes.update((name, DiffType.ADDED) for name in self.added)
        changes.update((name, DiffType.MODIFIED) for name in self.modified)
        for name in sorted(changes):
            yield (name, changes[name])

    def changes(self, prefix: str = "") -> Iterator[Tuple[str, DiffType]]:
        """
        Iterate over every changed path, descending into modified
        directories. Added and deleted directories are reported once, not
        per contained file.

        :param prefix: A path prefix to prepend to yielded paths.
        :type prefix: ``str``
        :returns: An iterator of ``(relative_path, DiffType)`` pairs.
        :rtype: ``Iterator[Tuple[str, DiffType]]``
        """
        for name, diff_type in self.names():
            path = os.path.join(prefix, name) if prefix else name
            yield (path, diff_type)
            if diff_type == DiffType.MODIFIED and self.modified[name].is_dir:
                yield from self.modified[name].diff.changes(path)


def _entry_diff(old: DirectoryEntry, new: DirectoryEntry) -> Optional[DiffEntry]:
    if old.is_file and new.is_file:
        if old.object_id == new.object_id:
            return None
        return DiffEntry.file(new.object_id)

    if old.is_dir and new.is_file:
        return DiffEntry.file(new.object_id)

    if old.is_file and new.is_dir:
        # Nothing to compare against: everything below is new.
        return DiffEntry.dir(Diff(added=new.directory))

    if old.directory == new.directory:
        return None
    return DiffEntry.dir(_diff(old.directory, new.directory))


def _diff(a: Directory, b: Directory) -> Diff:
    added = {name: entry for name, entry in b.items() if name not in a}
    deleted = [name for name in a if name not in b]

    modified = {}
    for name, entry in a.items():
        if name not in b:
            continue
        change = _entry_diff(entry, b[name])
        if change is not None:
            modified[name] = change

    _log_debug_tree(
        "Computed diff: %d added, %d deleted, %d modified",
        len(added),
        len(deleted),
        len(modified),
    )
    return Diff(deleted=deleted, added=added, modified=modified)


def _apply(directory: Directory, changes: Diff) -> Directory:
    entries = dict(directory.items())
    for name in changes.deleted:
        entries.pop(name, None)
    entries.update(changes.added.items())
    for name, change in changes.modified.items():
        if change.is_file:
            entries[name] = DirectoryEntry.file(change.object_id)
            continue
        current = entries.get(name)
        base = current.directory if current is not None and current.is_dir else Directory()
        entries[name] = DirectoryEntry.dir(_apply(base, change.diff))
    return Directory(entries)


def entry_diff(old: DirectoryEntry, new: DirectoryEntry) -> Optional[DiffEntry]:
    """
    Compare two entries with the same name.

    :param old: The original entry.
    :type old: ``DirectoryEntry``
    :param new: The target entry.
    :type new: ``DirectoryEntry``
    :returns: ``None`` if the entries are equal, or a ``DiffEntry``
              describing the target state.
    :rtype: ``Optional[DiffEntry]``
    :raises: ``RevtreeRecursionError`` if the entries are nested too deeply
             to compare.
    """
    try:
        return _entry_diff(old, new)
    except RecursionError as err:
        raise RevtreeRecursionError("Directory tree is nested too deeply to diff") from err


def diff(a: Directory, b: Directory) -> Diff:
    """
    Compute the changes that turn directory ``a`` into directory ``b``.

    :param a: The original directory.
    :type a: ``Directory``
    :param b: The target directory.
    :type b: ``Directory``
    :returns: The structural difference.
    :rtype: ``Diff``
    :raises: ``RevtreeRecursionError`` if the trees are nested too deeply
             to compare.
    """
    try:
        return _diff(a, b)
    except RecursionError as err:
        raise RevtreeRecursionError("Directory tree is nested too deeply to diff") from err


def apply(directory: Directory, changes: Diff) -> Directory:
    """
    Apply ``changes`` to ``directory`` and return the resulting tree.

    For any ``a`` and ``b``, ``apply(a, diff(a, b)) == b``.

    :param directory: The original directory.
    :type directory: ``Directory``
    :param changes: The changes to apply.
    :type changes: ``Diff``
    :returns: A new ``Directory``.
    :rtype: ``Directory``
    :raises: ``RevtreeRecursionError`` if ``changes`` is nested too deeply
             to apply.
    """
    try:
        return _apply(directory, changes)
    except RecursionError as err:
        raise RevtreeRecursionError("Diff is nested too deeply to apply") from err


__all__ = [
    "Diff",
    "DiffEntry",
    "apply",
    "diff",
    "entry_diff",
]
