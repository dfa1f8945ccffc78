# Copyright Red Hat
#
# revtree/tree/difftypes.py - Revision tree diff types
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory tree diff types
"""
from enum import Enum


class DiffType(Enum):
    """
    Enum for different difference types.
    """

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
