# Copyright Red Hat
#
# revtree/tree/directory.py - Revision tree directory model
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory tree snapshots.

A ``Directory`` maps names to ``DirectoryEntry`` values: either the
``ObjectId`` of a file's content or a nested ``Directory``. Snapshots are
built by walking a real directory and inserting every regular file into an
``ObjectStore``; ``write()`` materializes a snapshot back onto disk.
"""
from typing import (
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
    TYPE_CHECKING,
)
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from enum import Enum
import logging
import stat
import os

from revtree import (
    REV_DIR_NAME,
    REVTREE_SUBSYSTEM_TREE,
    RevtreeObjectMissingError,
    RevtreePathError,
    RevtreeSystemError,
    RevtreeUnsupportedEntryError,
)
from revtree.objects import ObjectId, ObjectStore

if TYPE_CHECKING:
    from .diff import Diff, DiffEntry

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_tree(msg, *args, **kwargs):
    """A wrapper for tree subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": REVTREE_SUBSYSTEM_TREE}, **kwargs)


PathType = Union[str, "os.PathLike[str]"]


class EntryType(Enum):
    """
    Enum for the kinds of entry held in a ``Directory`` or ``Diff``.
    """

    FILE = "file"
    DIRECTORY = "directory"


class UnsupportedPolicy(Enum):
    """
    Enum for the handling of entries that are neither regular files nor
    directories when building a snapshot.
    """

    #: Raise ``RevtreeUnsupportedEntryError``
    ERROR = "error"
    #: Log a warning and leave the entry out of the snapshot
    WARN = "warn"


def _check_name(name: str):
    """
    Validate a directory entry name.

    :param name: The name to check.
    :type name: ``str``
    """
    if not isinstance(name, str):
        raise ValueError(f"Directory entry names must be str: {name!r}")
    if name in ("", ".", "..") or os.sep in name or "\0" in name:
        raise ValueError(f"Invalid directory entry name: {name!r}")
    if os.altsep and os.altsep in name:
        raise ValueError(f"Invalid directory entry name: {name!r}")


@dataclass(frozen=True, repr=False)
class DirectoryEntry:
    """
    One named child of a ``Directory``: a file identified by the
    ``ObjectId`` of its content, or a nested ``Directory``.
    """

    entry_type: EntryType
    object_id: Optional[ObjectId] = None
    directory: Optional["Directory"] = None

    def __post_init__(self):
        if self.entry_type == EntryType.FILE:
            if not isinstance(self.object_id, ObjectId) or self.directory is not None:
                raise ValueError("File entries require an ObjectId and no directory")
        elif self.entry_type == EntryType.DIRECTORY:
            if not isinstance(self.directory, Directory) or self.object_id is not None:
                raise ValueError("Directory entries require a Directory and no ObjectId")
        else:
            raise ValueError(f"Invalid entry type: {self.entry_type}")

    @classmethod
    def file(cls, object_id: ObjectId) -> "DirectoryEntry":
        """
        Construct a file entry.

        :param object_id: The identifier of the file content.
        :type object_id: ``ObjectId``
        :returns: A new file entry.
        :rtype: ``DirectoryEntry``
        """
        return cls(EntryType.FILE, object_id=object_id)

    @classmethod
    def dir(cls, directory: "Directory") -> "DirectoryEntry":
        """
        Construct a directory entry.

        :param directory: The nested directory.
        :type directory: ``Directory``
        :returns: A new directory entry.
        :rtype: ``DirectoryEntry``
        """
        return cls(EntryType.DIRECTORY, directory=directory)

    @property
    def is_file(self) -> bool:
        """``True`` if this entry is a file."""
        return self.entry_type == EntryType.FILE

    @property
    def is_dir(self) -> bool:
        """``True`` if this entry is a directory."""
        return self.entry_type == EntryType.DIRECTORY

    def diff(self, other: "DirectoryEntry") -> Optional["DiffEntry"]:
        """
        Describe how this entry changes to become ``other``.

        :param other: The target entry.
        :type other: ``DirectoryEntry``
        :returns: ``None`` if the entries are equal, or a ``DiffEntry``
                  describing the target state.
        :rtype: ``Optional[DiffEntry]``
        """
        # pylint: disable=import-outside-toplevel
        from .diff import entry_diff

        return entry_diff(self, other)

    def __repr__(self):
        if self.is_file:
            return f"DirectoryEntry.file({self.object_id!r})"
        return f"DirectoryEntry.dir({self.directory!r})"


class Directory(MappingABC):
    """
    An immutable mapping from names to ``DirectoryEntry`` values.

    Iteration is always in lexicographic order of name, independent of the
    order entries were supplied in. Two directories are equal when they map
    the same names to equal entries, recursively, and equal directories
    hash equally.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, DirectoryEntry]] = None):
        """
        Initialise a new ``Directory``.

        :param entries: An optional mapping of names to entries.
        :type entries: ``Optional[Mapping[str, DirectoryEntry]]``
        """
        entries = dict(entries or {})
        for name, entry in entries.items():
            _check_name(name)
            if not isinstance(entry, DirectoryEntry):
                raise ValueError(f"Invalid entry for {name!r}: {entry!r}")
        self._entries: Dict[str, DirectoryEntry] = {
            name: entries[name] for name in sorted(entries)
        }

    def __getitem__(self, name: str) -> DirectoryEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __hash__(self):
        return hash(tuple(self._entries.items()))

    def __repr__(self):
        return f"Directory({self._entries!r})"

    def copy(self) -> "Directory":
        """
        Return an equal, independent ``Directory``.

        :rtype: ``Directory``
        """
        return Directory(self._entries)

    def diff(self, other: "Directory") -> "Diff":
        """
        Compute the changes that turn this directory into ``other``.

        :param other: The target directory.
        :type other: ``Directory``
        :returns: The structural difference.
        :rtype: ``Diff``
        """
        # pylint: disable=import-outside-toplevel
        from .diff import diff

        return diff(self, other)

    def walk(self, prefix: str = "") -> Iterator[Tuple[str, ObjectId]]:
        """
        Iterate over every file in this tree, depth first in name order.

        :param prefix: A path prefix to prepend to yielded paths.
        :type prefix: ``str``
        :returns: An iterator of ``(relative_path, ObjectId)`` pairs.
        :rtype: ``Iterator[Tuple[str, ObjectId]]``
        """
        stack = [(prefix, iter(self._entries.items()))]
        while stack:
            base, items = stack[-1]
            item = next(items, None)
            if item is None:
                stack.pop()
                continue
            name, entry = item
            path = os.path.join(base, name) if base else name
            if entry.is_file:
                yield (path, entry.object_id)
            else:
                stack.append((path, iter(entry.directory.items())))

    def object_ids(self) -> Iterator[ObjectId]:
        """
        Iterate over the identifiers referenced by this tree. An identifier
        is yielded once for each file that references it.

        :rtype: ``Iterator[ObjectId]``
        """
        for _, object_id in self.walk():
            yield object_id

    def missing_objects(self, store: ObjectStore) -> List[ObjectId]:
        """
        Return the identifiers referenced by this tree that ``store`` does
        not hold.

        :param store: The store to check against.
        :type store: ``ObjectStore``
        :returns: A sorted list of unique missing identifiers.
        :rtype: ``List[ObjectId]``
        """
        return sorted(
            object_id
            for object_id in set(self.object_ids())
            if not store.has(object_id)
        )


def _check_names(names: Iterable[str]) -> Iterable[str]:
    """
    Reject a bare string passed where a collection of names is expected.
    """
    if isinstance(names, (str, bytes)):
        raise TypeError(
            f"Ignored names must be a collection of names, not {type(names).__name__}: "
            f"{names!r}"
        )
    return names


class Ignores:
    """
    The set of literal names ignored at every level of a snapshot.
    """

    __slots__ = ("names",)

    def __init__(self, names: Optional[Iterable[str]] = None):
        """
        Initialise a new ``Ignores`` set.

        :param names: The names to ignore. Defaults to the revision
                      metadata directory name only.
        :type names: ``Optional[Iterable[str]]``
        """
        if names is None:
            names = (REV_DIR_NAME,)
        self.names = frozenset(_check_names(names))

    def __contains__(self, name):
        return name in self.names

    def __iter__(self):
        return iter(sorted(self.names))

    def __len__(self):
        return len(self.names)

    def __eq__(self, other):
        if not isinstance(other, Ignores):
            return NotImplemented
        return self.names == other.names

    def __hash__(self):
        return hash(self.names)

    def __repr__(self):
        return f"Ignores({sorted(self.names)!r})"

    def union(self, names: Iterable[str]) -> "Ignores":
        """
        Return a new ``Ignores`` containing these names and ``names``.

        :param names: Additional names to ignore.
        :type names: ``Iterable[str]``
        :rtype: ``Ignores``
        """
        return Ignores(self.names | frozenset(_check_names(names)))


def _entry_kind(mode: int) -> str:
    """
    Return a string description of a file system entry type.

    :param mode: The ``st_mode`` value of the entry.
    :type mode: ``int``
    :rtype: ``str``
    """
    desc = "other"
    if stat.S_ISLNK(mode):
        desc = "symbolic link"
    elif stat.S_ISBLK(mode):
        desc = "block device"
    elif stat.S_ISCHR(mode):
        desc = "char device"
    elif stat.S_ISSOCK(mode):
        desc = "socket"
    elif stat.S_ISFIFO(mode):
        desc = "FIFO"
    return desc


def _read_file(path: str) -> bytes:
    """
    Read the full content of the file at ``path``.

    :param path: The file to read.
    :type path: ``str``
    :rtype: ``bytes``
    """
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as err:
        raise RevtreeSystemError(f"Failed to read {path}: {err}") from err


def _scan(path: str) -> List[os.DirEntry]:
    """
    Return the entries of directory ``path`` sorted by name.
    """
    try:
        # Release the directory handle before descending into children.
        with os.scandir(path) as it:
            return sorted(it, key=lambda ent: ent.name)
    except OSError as err:
        raise RevtreeSystemError(f"Failed to list directory {path}: {err}") from err


def _build(
    path: str, ignores: Ignores, store: ObjectStore, unsupported: UnsupportedPolicy
) -> Directory:
    """
    Build the ``Directory`` for ``path``.

    Directories are visited with an explicit stack of
    ``(name, entries, remaining children)`` frames so that tree depth is
    not limited by the interpreter recursion limit.
    """
    stack = [(None, {}, iter(_scan(path)))]
    while True:
        dir_name, entries, children = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            directory = Directory(entries)
            if not stack:
                return directory
            stack[-1][1][dir_name] = DirectoryEntry.dir(directory)
            continue

        if child.name in ignores:
            _log_debug_tree("Ignoring %s", child.path)
            continue

        try:
            is_dir = child.is_dir(follow_symlinks=False)
            is_file = child.is_file(follow_symlinks=False)
        except OSError as err:
            raise RevtreeSystemError(f"Failed to stat {child.path}: {err}") from err

        if is_dir:
            stack.append((child.name, {}, iter(_scan(child.path))))
        elif is_file:
            object_id = store.insert(_read_file(child.path))
            _log_debug_tree("Added file %s as %s", child.path, object_id)
            entries[child.name] = DirectoryEntry.file(object_id)
        else:
            try:
                kind = _entry_kind(child.stat(follow_symlinks=False).st_mode)
            except OSError as err:
                raise RevtreeSystemError(
                    f"Failed to stat {child.path}: {err}"
                ) from err
            if unsupported == UnsupportedPolicy.ERROR:
                raise RevtreeUnsupportedEntryError(child.path, kind)
            _log_warn("Skipping unsupported file system entry (%s): %s", kind, child.path)


def build(
    path: PathType,
    ignores: Optional[Ignores],
    store: ObjectStore,
    unsupported: UnsupportedPolicy = UnsupportedPolicy.ERROR,
) -> Directory:
    """
    Build a snapshot of the directory tree at ``path``.

    Every regular file found is inserted into ``store``. Names contained in
    ``ignores`` are skipped at every level. Symbolic links are not followed.

    :param path: The directory to snapshot.
    :type path: ``str`` or path-like
    :param ignores: Names to skip, or ``None`` for the default set.
    :type ignores: ``Optional[Ignores]``
    :param store: The object store to insert file content into.
    :type store: ``ObjectStore``
    :param unsupported: What to do with entries that are neither regular
                        files nor directories.
    :type unsupported: ``UnsupportedPolicy``
    :returns: The snapshot of ``path``.
    :rtype: ``Directory``
    """
    path = os.fspath(path)
    ignores = ignores if ignores is not None else Ignores()
    _log_info("Building snapshot of %s", path)
    directory = _build(path, ignores, store, unsupported)
    _log_debug_tree("Built snapshot of %s with %d entries", path, len(directory))
    return directory


def _write_file(path: str, data: bytes):
    """
    Write ``data`` to ``path``, creating or truncating the file.
    """
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as err:
        raise RevtreeSystemError(f"Failed to write {path}: {err}") from err


def _check_not_link(path: str):
    """
    Refuse to write through a symbolic link found at ``path``.
    """
    if os.path.islink(path):
        raise RevtreePathError(f"Refusing to write through symbolic link {path}")


def _write(directory: Directory, store: ObjectStore, path: str):
    """
    Write ``directory`` into the existing directory ``path``.

    Subdirectories are visited with an explicit stack so that tree depth is
    not limited by the interpreter recursion limit.
    """
    stack = [(directory, path)]
    while stack:
        directory, path = stack.pop()
        for name, entry in directory.items():
            entry_path = os.path.join(path, name)
            _check_not_link(entry_path)
            if entry.is_file:
                data = store.read(entry.object_id)
                if data is None:
                    raise RevtreeObjectMissingError(entry.object_id)
                _log_debug_tree("Writing %s from %s", entry_path, entry.object_id)
                _write_file(entry_path, data)
            else:
                if not os.path.isdir(entry_path):
                    try:
                        os.mkdir(entry_path)
                    except OSError as err:
                        raise RevtreeSystemError(
                            f"Failed to create directory {entry_path}: {err}"
                        ) from err
                stack.append((entry.directory, entry_path))


def write(
    directory: Directory, store: ObjectStore, target: PathType, strict: bool = True
):
    """
    Materialize ``directory`` at ``target`` using content from ``store``.

    Files are created or truncated; missing subdirectories are created.
    Entries already present at ``target`` that the snapshot does not name
    are left untouched. A symbolic link found where the snapshot names an
    entry raises ``RevtreePathError``: links are never written through.

    :param directory: The snapshot to write.
    :type directory: ``Directory``
    :param store: The object store holding the file content.
    :type store: ``ObjectStore``
    :param target: An existing directory to write into.
    :type target: ``str`` or path-like
    :param strict: If ``True`` a missing ``target`` raises
                   ``RevtreePathError``; otherwise a warning is logged and
                   nothing is written.
    :type strict: ``bool``
    """
    target = os.fspath(target)
    if not os.path.isdir(target):
        if strict:
            raise RevtreePathError(
                f"Target path {target} does not exist or is not a directory"
            )
        _log_warn("Target directory %s does not exist: nothing written", target)
        return

    _log_info("Writing snapshot to %s", target)
    _write(directory, store, target)


__all__ = [
    "Directory",
    "DirectoryEntry",
    "EntryType",
    "Ignores",
    "UnsupportedPolicy",
    "build",
    "write",
]
