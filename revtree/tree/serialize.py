# Copyright Red Hat
#
# revtree/tree/serialize.py - Revision tree JSON encoding
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
JSON encoding for ``Directory`` and ``Diff`` values.

Entries are externally tagged: a file is ``{"File": "<hex id>"}`` and a
directory is ``{"Directory": {...}}``. A ``Diff`` is encoded as an object
with ``deleted``, ``added`` and ``modified`` members.
"""
from typing import Any, Dict
import json

from revtree import RevtreeError, RevtreeParseError, RevtreeRecursionError
from revtree.objects import ObjectId

from .diff import Diff, DiffEntry
from .directory import Directory, DirectoryEntry

_TAG_FILE = "File"
_TAG_DIRECTORY = "Directory"

_DIFF_DELETED = "deleted"
_DIFF_ADDED = "added"
_DIFF_MODIFIED = "modified"


def _untag(name: str, value: Any):
    """
    Split an externally tagged entry into its tag and payload.
    """
    if not isinstance(value, dict) or len(value) != 1:
        raise RevtreeParseError(f"Malformed entry for {name!r}: {value!r}")
    ((tag, payload),) = value.items()
    if tag not in (_TAG_FILE, _TAG_DIRECTORY):
        raise RevtreeParseError(f"Unknown entry tag for {name!r}: {tag!r}")
    return tag, payload


def _directory_to_dict(directory: Directory) -> Dict[str, Any]:
    out = {}
    for name, entry in directory.items():
        if entry.is_file:
            out[name] = {_TAG_FILE: entry.object_id.hex}
        else:
            out[name] = {_TAG_DIRECTORY: _directory_to_dict(entry.directory)}
    return out


def _directory_from_dict(value: Any) -> Directory:
    if not isinstance(value, dict):
        raise RevtreeParseError(f"Directory must be a JSON object: {value!r}")
    entries = {}
    for name, tagged in value.items():
        tag, payload = _untag(name, tagged)
        try:
            if tag == _TAG_FILE:
                entries[name] = DirectoryEntry.file(ObjectId.from_hex(payload))
            else:
                entries[name] = DirectoryEntry.dir(_directory_from_dict(payload))
        except RevtreeParseError:
            raise
        except RevtreeError as err:
            raise RevtreeParseError(f"Invalid entry for {name!r}: {err}") from err
    try:
        return Directory(entries)
    except ValueError as err:
        raise RevtreeParseError(str(err)) from err


def _diff_to_dict(diff: Diff) -> Dict[str, Any]:
    modified = {}
    for name, change in diff.modified.items():
        if change.is_file:
            modified[name] = {_TAG_FILE: change.object_id.hex}
        else:
            modified[name] = {_TAG_DIRECTORY: _diff_to_dict(change.diff)}
    return {
        _DIFF_DELETED: list(diff.deleted),
        _DIFF_ADDED: _directory_to_dict(diff.added),
        _DIFF_MODIFIED: modified,
    }


def _diff_from_dict(value: Any) -> Diff:
    if not isinstance(value, dict):
        raise RevtreeParseError(f"Diff must be a JSON object: {value!r}")
    unknown = set(value) - {_DIFF_DELETED, _DIFF_ADDED, _DIFF_MODIFIED}
    if unknown:
        raise RevtreeParseError(f"Unknown diff members: {sorted(unknown)}")

    deleted = value.get(_DIFF_DELETED, [])
    if not isinstance(deleted, list) or not all(isinstance(n, str) for n in deleted):
        raise RevtreeParseError(f"Diff deleted names must be a list of strings: {deleted!r}")

    added = _directory_from_dict(value.get(_DIFF_ADDED, {}))

    raw_modified = value.get(_DIFF_MODIFIED, {})
    if not isinstance(raw_modified, dict):
        raise RevtreeParseError(f"Diff modified must be a JSON object: {raw_modified!r}")

    modified = {}
    for name, tagged in raw_modified.items():
        tag, payload = _untag(name, tagged)
        try:
            if tag == _TAG_FILE:
                modified[name] = DiffEntry.file(ObjectId.from_hex(payload))
            else:
                modified[name] = DiffEntry.dir(_diff_from_dict(payload))
        except RevtreeParseError:
            raise
        except RevtreeError as err:
            raise RevtreeParseError(f"Invalid entry for {name!r}: {err}") from err

    try:
        return Diff(deleted=deleted, added=added, modified=modified)
    except ValueError as err:
        raise RevtreeParseError(str(err)) from err


def directory_to_dict(directory: Directory) -> Dict[str, Any]:
    """
    Convert ``directory`` into a dictionary suitable for encoding as JSON.

    :param directory: The directory to convert.
    :type directory: ``Directory``
    :rtype: ``Dict[str, Any]``
    :raises: ``RevtreeRecursionError`` if ``directory`` is nested too deeply
             to encode.
    """
    try:
        return _directory_to_dict(directory)
    except RecursionError as err:
        raise RevtreeRecursionError("Directory is nested too deeply to encode") from err


def directory_from_dict(value: Any) -> Directory:
    """
    Construct a ``Directory`` from its dictionary representation.

    :param value: The decoded JSON value.
    :returns: The decoded directory.
    :rtype: ``Directory``
    """
    try:
        return _directory_from_dict(value)
    except RecursionError as err:
        raise RevtreeParseError("Directory is nested too deeply to decode") from err


def diff_to_dict(diff: Diff) -> Dict[str, Any]:
    """
    Convert ``diff`` into a dictionary suitable for encoding as JSON.

    :param diff: The diff to convert.
    :type diff: ``Diff``
    :rtype: ``Dict[str, Any]``
    :raises: ``RevtreeRecursionError`` if ``diff`` is nested too deeply to
             encode.
    """
    try:
        return _diff_to_dict(diff)
    except RecursionError as err:
        raise RevtreeRecursionError("Diff is nested too deeply to encode") from err


def diff_from_dict(value: Any) -> Diff:
    """
    Construct a ``Diff`` from its dictionary representation.

    :param value: The decoded JSON value.
    :returns: The decoded diff.
    :rtype: ``Diff``
    """
    try:
        return _diff_from_dict(value)
    except RecursionError as err:
        raise RevtreeParseError("Diff is nested too deeply to decode") from err


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        raise RevtreeParseError(f"Invalid JSON: {err}") from err
    except RecursionError as err:
        raise RevtreeParseError("JSON document is nested too deeply") from err


def _dumps(value: Dict[str, Any], indent: int) -> str:
    try:
        return json.dumps(value, indent=indent)
    except RecursionError as err:
        raise RevtreeRecursionError("Value is nested too deeply to encode") from err


def dump_directory(directory: Directory, indent: int = 4) -> str:
    """
    Encode ``directory`` as a JSON string.

    :param directory: The directory to encode.
    :type directory: ``Directory``
    :param indent: JSON indentation level.
    :type indent: ``int``
    :rtype: ``str``
    """
    return _dumps(directory_to_dict(directory), indent)


def load_directory(text: str) -> Directory:
    """
    Decode a ``Directory`` from a JSON string.

    :param text: The JSON text.
    :type text: ``str``
    :rtype: ``Directory``
    """
    return directory_from_dict(_loads(text))


def dump_diff(diff: Diff, indent: int = 4) -> str:
    """
    Encode ``diff`` as a JSON string.

    :param diff: The diff to encode.
    :type diff: ``Diff``
    :param indent: JSON indentation level.
    :type indent: ``int``
    :rtype: ``str``
    """
    return _dumps(diff_to_dict(diff), indent)


def load_diff(text: str) -> Diff:
    """
    Decode a ``Diff`` from a JSON string.

    :param text: The JSON text.
    :type text: ``str``
    :rtype: ``Diff``
    """
    return diff_from_dict(_loads(text))


__all__ = [
    "diff_from_dict",
    "diff_to_dict",
    "directory_from_dict",
    "directory_to_dict",
    "dump_diff",
    "dump_directory",
    "load_diff",
    "load_directory",
]
