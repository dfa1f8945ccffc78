# Copyright Red Hat
#
# revtree/objects/dirstore.py - Revision tree directory object store
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Object store backed by a sharded file system directory.

Each object is stored verbatim at ``<root>/<xx>/<rest>`` where ``xx`` is the
first two characters of the canonical identifier string and ``rest`` is the
remainder. Splitting on a two character prefix bounds the number of entries
in any single directory to keep directory scans fast as the store grows.
"""
from typing import Optional, Union
from stat import S_ISDIR
import logging
import errno
import os

from revtree import REVTREE_SUBSYSTEM_STORE, RevtreeStoreError

from .objectid import ObjectId, object_id_of
from .store import ObjectStore

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_store(msg, *args, **kwargs):
    """A wrapper for store subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": REVTREE_SUBSYSTEM_STORE}, **kwargs)


#: Errors that mean "this object is not present" on lookup.
_NOT_FOUND_ERRNOS = (errno.ENOENT, errno.ENOTDIR)


class DirectoryObjectStore(ObjectStore):
    """
    A durable object store rooted at a file system directory.
    """

    name = "directory"

    def __init__(self, root: Union[str, "os.PathLike[str]"]):
        """
        Initialise a new ``DirectoryObjectStore`` rooted at ``root``,
        creating the root directory if it does not already exist.

        :param root: The path to the object store root directory.
        :type root: ``str`` or path-like
        """
        self.root: str = os.fspath(root)

        try:
            st = os.stat(self.root)
        except FileNotFoundError:
            _log_info("Creating object store directory %s", self.root)
            try:
                os.mkdir(self.root)
            except OSError as err:
                raise RevtreeStoreError(
                    f"Failed to create object store directory {self.root}: {err}"
                ) from err
        except OSError as err:
            raise RevtreeStoreError(
                f"Failed to stat object store directory {self.root}: {err}"
            ) from err
        else:
            if not S_ISDIR(st.st_mode):
                raise RevtreeStoreError(
                    f"Object store root {self.root} exists but is not a directory"
                )

    def object_path(self, object_id: ObjectId) -> str:
        """
        Return the on-disk path for ``object_id``.

        :param object_id: The identifier to locate.
        :type object_id: ``ObjectId``
        :returns: The path the object is (or would be) stored at.
        :rtype: ``str``
        """
        shard, name = object_id.shard_parts()
        return os.path.join(self.root, shard, name)

    def has(self, object_id: ObjectId) -> bool:
        path = self.object_path(object_id)
        try:
            os.stat(path)
        except OSError as err:
            if err.errno in _NOT_FOUND_ERRNOS:
                return False
            raise RevtreeStoreError(f"Failed to stat object {object_id}: {err}") from err
        return True

    def read(self, object_id: ObjectId) -> Optional[bytes]:
        path = self.object_path(object_id)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as err:
            if err.errno in _NOT_FOUND_ERRNOS:
                _log_debug_store("Object %s not found in %s", object_id, self.root)
                return None
            raise RevtreeStoreError(f"Failed to read object {object_id}: {err}") from err

    def insert(self, data: bytes) -> ObjectId:
        object_id = object_id_of(data)
        shard, _ = object_id.shard_parts()
        shard_path = os.path.join(self.root, shard)

        try:
            if not os.path.isdir(shard_path):
                _log_debug_store("Creating shard directory %s", shard_path)
                os.makedirs(shard_path, exist_ok=True)
            # Identical identifiers imply identical content: overwriting is safe.
            with open(self.object_path(object_id), "wb") as f:
                f.write(data)
        except OSError as err:
            raise RevtreeStoreError(
                f"Failed to write object {object_id}: {err}"
            ) from err

        _log_debug_store("Inserted object %s (%d bytes)", object_id, len(data))
        return object_id

    def __repr__(self):
        return f"DirectoryObjectStore('{self.root}')"


__all__ = [
    "DirectoryObjectStore",
]
