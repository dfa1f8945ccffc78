# Copyright Red Hat
#
# revtree/objects/store.py - Revision tree object store interface
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Object store interface and in-memory backend.
"""
from typing import Dict, Optional
import logging

from revtree import REVTREE_SUBSYSTEM_STORE

from .objectid import ObjectId, object_id_of

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_store(msg, *args, **kwargs):
    """A wrapper for store subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": REVTREE_SUBSYSTEM_STORE}, **kwargs)


class ObjectStore:
    """
    Abstract base class for content-addressed object stores.

    Objects are keyed by the ``ObjectId`` of their content: callers never
    choose the identifier. Looking up an unknown identifier is not an error;
    backend failures are reported by raising ``RevtreeStoreError`` or a
    subclass of it.
    """

    name = "store"

    def has(self, object_id: ObjectId) -> bool:
        """
        Test whether the content for ``object_id`` is retrievable.

        :param object_id: The identifier to look up.
        :type object_id: ``ObjectId``
        :returns: ``True`` if the object is present or ``False`` otherwise.
        :rtype: ``bool``
        """
        raise NotImplementedError

    def read(self, object_id: ObjectId) -> Optional[bytes]:
        """
        Read the content stored for ``object_id``.

        :param object_id: The identifier to look up.
        :type object_id: ``ObjectId``
        :returns: The stored bytes, or ``None`` if the object is unknown.
        :rtype: ``Optional[bytes]``
        """
        raise NotImplementedError

    def insert(self, data: bytes) -> ObjectId:
        """
        Store ``data`` and return its identifier. Inserting identical data
        more than once returns the same identifier.

        :param data: The content to store.
        :type data: ``bytes``
        :returns: The identifier of ``data``.
        :rtype: ``ObjectId``
        """
        raise NotImplementedError

    def __contains__(self, object_id):
        if not isinstance(object_id, ObjectId):
            return False
        return self.has(object_id)


class InMemoryObjectStore(ObjectStore):
    """
    An object store held in process memory.
    """

    name = "memory"

    def __init__(self):
        self._objects: Dict[ObjectId, bytes] = {}

    def has(self, object_id: ObjectId) -> bool:
        return object_id in self._objects

    def read(self, object_id: ObjectId) -> Optional[bytes]:
        return self._objects.get(object_id)

    def insert(self, data: bytes) -> ObjectId:
        object_id = object_id_of(data)
        if object_id not in self._objects:
            _log_debug_store("Inserting object %s (%d bytes)", object_id, len(data))
            self._objects[object_id] = bytes(data)
        return object_id

    def __len__(self):
        return len(self._objects)

    def __repr__(self):
        return f"InMemoryObjectStore(<{len(self._objects)} objects>)"


__all__ = [
    "ObjectStore",
    "InMemoryObjectStore",
]
