# Copyright Red Hat
#
# revtree/config.py - Revision tree configuration
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Revision tree configuration.
"""
from configparser import ConfigParser, Error as ConfigParserError
from dataclasses import dataclass, field
from os.path import exists
from typing import List, Optional
import logging

from revtree import REV_DIR_NAME, REVTREE_SUBSYSTEM_CONFIG, RevtreeParseError

from .objects import DirectoryObjectStore, InMemoryObjectStore, ObjectStore
from .tree import Ignores, UnsupportedPolicy

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_config(msg, *args, **kwargs):
    """A wrapper for config subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": REVTREE_SUBSYSTEM_CONFIG}, **kwargs)


#: Configuration global section
_REVTREE_CFG_GLOBAL = "global"

#: Comma separated list of names to ignore
_REVTREE_CFG_IGNORE = "ignore"

#: Unsupported entry policy: "error" or "warn"
_REVTREE_CFG_UNSUPPORTED = "unsupported_entries"

#: Require the materialization target to exist
_REVTREE_CFG_STRICT_WRITE = "strict_write"

#: Configuration store section
_REVTREE_CFG_STORE = "store"

#: Object store root directory
_REVTREE_CFG_STORE_ROOT = "root"


@dataclass
class RevtreeConfig:
    """
    Revision tree configuration.
    """

    #: Names ignored at every level of a snapshot, in addition to the
    #: revision metadata directory
    ignore: List[str] = field(default_factory=lambda: [REV_DIR_NAME])
    #: Handling of entries that are neither files nor directories
    unsupported_entries: UnsupportedPolicy = UnsupportedPolicy.ERROR
    #: Raise an error if the materialization target does not exist
    strict_write: bool = True
    #: Object store root, or ``None`` for an in-memory store
    store_root: Optional[str] = None

    @classmethod
    def from_file(cls, config_file: str) -> "RevtreeConfig":
        """
        Load ``RevtreeConfig`` from an INI-style configuration file located at
        ``config_file``.

        :param config_file: path to revtree.conf
        :type config_file: ``str``.
        :returns: A ``RevtreeConfig`` instance initialised from ``config_file``.
        :rtype: ``RevtreeConfig``
        """
        if not exists(config_file):
            _log_debug_config("No configuration file at '%s'", config_file)
            return RevtreeConfig()

        _log_debug("Loading configuration from '%s'", config_file)
        cfg = ConfigParser()
        try:
            cfg.read([config_file], encoding="utf8")
        except (ConfigParserError, UnicodeDecodeError) as err:
            raise RevtreeParseError(
                f"Failed to parse configuration file {config_file}: {err}"
            ) from err
        return cls.from_parser(cfg)

    @classmethod
    def from_parser(cls, cfg: ConfigParser) -> "RevtreeConfig":
        """
        Initialise ``RevtreeConfig`` from a loaded ``ConfigParser``.

        :param cfg: The parsed configuration.
        :type cfg: ``ConfigParser``
        :returns: A new ``RevtreeConfig`` instance.
        :rtype: ``RevtreeConfig``
        """
        config = RevtreeConfig()

        if cfg.has_section(_REVTREE_CFG_GLOBAL):
            section = cfg[_REVTREE_CFG_GLOBAL]
            if cfg.has_option(_REVTREE_CFG_GLOBAL, _REVTREE_CFG_IGNORE):
                names = section[_REVTREE_CFG_IGNORE]
                config.ignore = [name.strip() for name in names.split(",") if name.strip()]
            if cfg.has_option(_REVTREE_CFG_GLOBAL, _REVTREE_CFG_UNSUPPORTED):
                value = section[_REVTREE_CFG_UNSUPPORTED].strip().lower()
                try:
                    config.unsupported_entries = UnsupportedPolicy(value)
                except ValueError as err:
                    raise RevtreeParseError(
                        f"Invalid value for {_REVTREE_CFG_UNSUPPORTED}: {value}"
                    ) from err
            if cfg.has_option(_REVTREE_CFG_GLOBAL, _REVTREE_CFG_STRICT_WRITE):
                try:
                    config.strict_write = section.getboolean(_REVTREE_CFG_STRICT_WRITE)
                except ValueError as err:
                    raise RevtreeParseError(
                        f"Invalid value for {_REVTREE_CFG_STRICT_WRITE}: "
                        f"{section[_REVTREE_CFG_STRICT_WRITE]}"
                    ) from err

        if cfg.has_section(_REVTREE_CFG_STORE):
            if cfg.has_option(_REVTREE_CFG_STORE, _REVTREE_CFG_STORE_ROOT):
                root = cfg[_REVTREE_CFG_STORE][_REVTREE_CFG_STORE_ROOT].strip()
                config.store_root = root or None

        _log_debug_config("Loaded configuration: %s", repr(config))
        return config

    def ignores(self) -> Ignores:
        """
        Return the configured ignore set. The revision metadata directory
        name is always included, whatever ``ignore`` lists.

        :rtype: ``Ignores``
        """
        return Ignores(self.ignore).union((REV_DIR_NAME,))

    def open_store(self) -> ObjectStore:
        """
        Construct the configured object store.

        :returns: A ``DirectoryObjectStore`` rooted at ``store_root``, or an
                  ``InMemoryObjectStore`` if no root is configured.
        :rtype: ``ObjectStore``
        """
        if self.store_root:
            return DirectoryObjectStore(self.store_root)
        _log_info("No object store root configured: using in-memory store")
        return InMemoryObjectStore()


__all__ = [
    "RevtreeConfig",
]
