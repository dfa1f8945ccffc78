# Copyright Red Hat
#
# revtree/objects/__init__.py - Revision tree object store package
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Content-addressed object storage.

Provides the ``ObjectId`` content identifier, the ``ObjectStore`` interface
and its in-memory and sharded directory backends.
"""
from .objectid import ObjectId, object_id_of
from .store import ObjectStore, InMemoryObjectStore
from .dirstore import DirectoryObjectStore

__all__ = [
    "DirectoryObjectStore",
    "InMemoryObjectStore",
    "ObjectId",
    "ObjectStore",
    "object_id_of",
]
