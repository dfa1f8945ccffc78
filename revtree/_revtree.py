# Copyright Red Hat
#
# revtree/_revtree.py - Revision tree global definitions
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level revtree package.
"""
import logging

_log = logging.getLogger("revtree")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Revtree debugging subsystem mask
REVTREE_DEBUG_STORE = 1
REVTREE_DEBUG_TREE = 2
REVTREE_DEBUG_CONFIG = 4
REVTREE_DEBUG_ALL = REVTREE_DEBUG_STORE | REVTREE_DEBUG_TREE | REVTREE_DEBUG_CONFIG

# Revtree debugging subsystem names
REVTREE_SUBSYSTEM_STORE = "revtree.store"
REVTREE_SUBSYSTEM_TREE = "revtree.tree"
REVTREE_SUBSYSTEM_CONFIG = "revtree.config"

_DEBUG_MASK_TO_SUBSYSTEM = {
    REVTREE_DEBUG_STORE: REVTREE_SUBSYSTEM_STORE,
    REVTREE_DEBUG_TREE: REVTREE_SUBSYSTEM_TREE,
    REVTREE_DEBUG_CONFIG: REVTREE_SUBSYSTEM_CONFIG,
}

_debug_subsystems = set()

#: Default log level for ``setup_logging()``
_DEFAULT_LOG_LEVEL = logging.WARNING

#: Name of the revision metadata directory: never content-addressed itself.
REV_DIR_NAME = ".rev"


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        # Always pass non-DEBUG messages.
        if record.levelno != logging.DEBUG:
            return True

        # Always pass DEBUG messages that aren't for a specific subsystem.
        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``revtree`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    revtree_log = logging.getLogger("revtree")

    for handler in revtree_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``revtree`` package.

    :param mask: the logical OR of the ``REVTREE_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > REVTREE_DEBUG_ALL:
        raise ValueError(f"Invalid revtree debug mask: {mask}")

    enabled_subsystems = []
    for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items():
        if mask & flag:
            enabled_subsystems.append(subsystem_name)

    revtree_log = logging.getLogger("revtree")
    for handler in revtree_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


def set_debug(debug_arg):
    """
    Set the debug mask from a comma separated list of subsystem names.

    :param debug_arg: A string like ``"store,tree"`` or ``"all"``.
    :type debug_arg: ``str``
    """
    if not debug_arg:
        return

    mask_map = {
        "store": REVTREE_DEBUG_STORE,
        "tree": REVTREE_DEBUG_TREE,
        "config": REVTREE_DEBUG_CONFIG,
        "all": REVTREE_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        name = name.strip()
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def setup_logging(verbose=0):
    """
    Set up revtree logging for an embedding tool.

    Installs a single stderr handler on the ``revtree`` logger carrying a
    ``SubsystemFilter``, replacing any handlers already present.

    :param verbose: 0 for warnings only, 1 for INFO, 2 or more for DEBUG.
    :type verbose: ``int``
    :returns: The installed handler.
    :rtype: ``logging.Handler``
    """
    level = _DEFAULT_LOG_LEVEL
    if verbose and verbose > 1:
        level = logging.DEBUG
    elif verbose and verbose > 0:
        level = logging.INFO

    revtree_log = logging.getLogger("revtree")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    revtree_log.setLevel(level)
    if revtree_log.hasHandlers():
        revtree_log.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(SubsystemFilter("revtree"))

    revtree_log.addHandler(handler)
    return handler


#
# Revtree exception types
#


class RevtreeError(Exception):
    """
    Base class for revision tree errors.
    """


class RevtreeSystemError(RevtreeError):
    """
    An error when calling the operating system while reading or writing a
    directory tree.
    """


class RevtreeStoreError(RevtreeError):
    """
    An object store backend failed to complete an operation. Backends may
    raise subclasses of this type.
    """


class RevtreeObjectMissingError(RevtreeError):
    """
    A directory tree references an object that the store does not hold.
    """

    def __init__(self, object_id):
        """
        Initialise a new `RevtreeObjectMissingError` exception.

        :param object_id: The identifier that could not be found.
        """
        self.object_id = object_id
        super().__init__(f"Object {object_id} is missing from the object store")


class RevtreeUnsupportedEntryError(RevtreeError):
    """
    A file system entry that is neither a regular file nor a directory was
    found while building a snapshot.
    """

    def __init__(self, path: str, kind: str):
        """
        Initialise a new `RevtreeUnsupportedEntryError` exception.

        :param path: The path of the unsupported entry.
        :param kind: A description of the entry type.
        """
        self.path, self.kind = path, kind
        super().__init__(f"Unsupported file system entry ({kind}): {path}")


class RevtreePathError(RevtreeError):
    """
    An invalid path was supplied, for example a materialization target that
    does not exist or is not a directory.
    """


class RevtreeInvalidIdentifierError(RevtreeError):
    """
    An invalid object identifier was given.
    """


class RevtreeParseError(RevtreeError):
    """
    An error parsing serialized trees, diffs or configuration.
    """


class RevtreeRecursionError(RevtreeError):
    """
    A directory tree or diff is nested too deeply to be processed.
    """


__all__ = [
    # Debug logging subsystems
    "REVTREE_DEBUG_STORE",
    "REVTREE_DEBUG_TREE",
    "REVTREE_DEBUG_CONFIG",
    "REVTREE_DEBUG_ALL",
    "REVTREE_SUBSYSTEM_STORE",
    "REVTREE_SUBSYSTEM_TREE",
    "REVTREE_SUBSYSTEM_CONFIG",
    "REV_DIR_NAME",
    "SubsystemFilter",
    "get_debug_mask",
    "set_debug_mask",
    "set_debug",
    "setup_logging",
    # Exception types
    "RevtreeError",
    "RevtreeSystemError",
    "RevtreeStoreError",
    "RevtreeObjectMissingError",
    "RevtreeUnsupportedEntryError",
    "RevtreePathError",
    "RevtreeInvalidIdentifierError",
    "RevtreeParseError",
    "RevtreeRecursionError",
]
