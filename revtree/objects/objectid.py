# Copyright Red Hat
#
# revtree/objects/objectid.py - Revision tree content identifiers
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Content identifiers for stored objects.
"""
from typing import Tuple, Union
from hashlib import sha256
import os

from revtree import RevtreeInvalidIdentifierError

#: Length of a raw identifier digest in bytes.
OBJECT_ID_SIZE = 32

#: Length of the canonical identifier string.
OBJECT_ID_HEX_LEN = 2 * OBJECT_ID_SIZE

#: Length of the shard directory name taken from the canonical string.
SHARD_PREFIX_LEN = 2

_HEX_DIGITS = frozenset("0123456789abcdef")

#: Read size used when hashing files.
_CHUNK_SIZE = 65536


class ObjectId:
    """
    An immutable identifier derived from the SHA-256 digest of an object's
    content.

    Two identifiers compare equal exactly when their digests are equal. The
    canonical string form is the lowercase hexadecimal digest, which is what
    ``str()`` returns and what the on-disk store layout is derived from.
    """

    __slots__ = ("_digest",)

    def __init__(self, digest: bytes):
        """
        Initialise a new ``ObjectId`` from a raw digest.

        :param digest: The 32-byte SHA-256 digest.
        :type digest: ``bytes``
        """
        if not isinstance(digest, (bytes, bytearray)):
            raise RevtreeInvalidIdentifierError(
                f"Object digest must be bytes, not {type(digest).__name__}"
            )
        if len(digest) != OBJECT_ID_SIZE:
            raise RevtreeInvalidIdentifierError(
                f"Object digest must be {OBJECT_ID_SIZE} bytes (got {len(digest)})"
            )
        object.__setattr__(self, "_digest", bytes(digest))

    def __setattr__(self, name, value):
        raise AttributeError("ObjectId is immutable")

    @classmethod
    def from_hex(cls, value: str) -> "ObjectId":
        """
        Parse an ``ObjectId`` from its canonical string form.

        :param value: A 64 character lowercase hexadecimal string.
        :type value: ``str``
        :returns: The parsed identifier.
        :rtype: ``ObjectId``
        """
        if not isinstance(value, str) or len(value) != OBJECT_ID_HEX_LEN:
            raise RevtreeInvalidIdentifierError(f"Invalid object identifier: {value!r}")
        if not set(value) <= _HEX_DIGITS:
            raise RevtreeInvalidIdentifierError(f"Invalid object identifier: {value!r}")
        return cls(bytes.fromhex(value))

    @classmethod
    def from_file(cls, path: Union[str, "os.PathLike[str]"]) -> "ObjectId":
        """
        Compute the identifier of a file's content without storing it.

        :param path: The path of the file to hash.
        :returns: The identifier of the file content.
        :rtype: ``ObjectId``
        """
        hasher = sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                hasher.update(chunk)
        return cls(hasher.digest())

    @property
    def digest(self) -> bytes:
        """The raw digest bytes."""
        return self._digest

    @property
    def hex(self) -> str:
        """The canonical lowercase hexadecimal string."""
        return self._digest.hex()

    def shard_parts(self) -> Tuple[str, str]:
        """
        Split the canonical string into the shard directory name and the
        object file name.

        :returns: A 2-tuple of (shard, remainder).
        :rtype: ``Tuple[str, str]``
        """
        value = self.hex
        return (value[:SHARD_PREFIX_LEN], value[SHARD_PREFIX_LEN:])

    def __eq__(self, other):
        if not isinstance(other, ObjectId):
            return NotImplemented
        return self._digest == other._digest

    def __lt__(self, other):
        if not isinstance(other, ObjectId):
            return NotImplemented
        return self._digest < other._digest

    def __hash__(self):
        return hash(self._digest)

    def __reduce__(self):
        return (ObjectId, (self._digest,))

    def __str__(self):
        return self.hex

    def __repr__(self):
        return f"ObjectId('{self.hex}')"


def object_id_of(data: bytes) -> ObjectId:
    """
    Compute the identifier for ``data``.

    :param data: The object content. May be empty.
    :type data: ``bytes``
    :returns: The content identifier.
    :rtype: ``ObjectId``
    """
    return ObjectId(sha256(data).digest())


__all__ = [
    "OBJECT_ID_SIZE",
    "OBJECT_ID_HEX_LEN",
    "ObjectId",
    "object_id_of",
]
