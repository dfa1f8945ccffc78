# Copyright Red Hat
#
# revtree/__init__.py - Revision tree package initialisation
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Revtree top-level package.
"""
from ._revtree import *  # noqa: F401, F403
from ._revtree import __all__  # noqa: F401

__version__ = "0.1.0"
