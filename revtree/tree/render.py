# Copyright Red Hat
#
# revtree/tree/render.py - Revision tree diff renderer
#
# This file is part of the revtree project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory tree diff rendering
"""
from typing import List, Optional
import sys

from .diff import Diff
from .difftypes import DiffType


class DiffTree:
    """Render a ``Diff`` as an indented tree of change markers."""

    marker_map = {
        DiffType.ADDED: "[+]",
        DiffType.DELETED: "[-]",
        DiffType.MODIFIED: "[*]",
    }

    def __init__(self, diff: Diff, root_name: str = ".", encoding: Optional[str] = None):
        """
        Initialise a new ``DiffTree`` object.

        :param diff: The diff to render.
        :type diff: ``Diff``
        :param root_name: The label for the root node.
        :type root_name: ``str``
        :param encoding: The output encoding used to decide whether box
                         drawing characters are available. Defaults to the
                         encoding of ``sys.stdout``.
        :type encoding: ``Optional[str]``
        """
        if diff is None:
            raise ValueError("Diff is undefined")

        self.diff: Diff = diff
        self.root_name: str = root_name

        # Default to ASCII tree drawing characters
        self.branch = "|-- "
        self.last = "`-- "
        self.vbar = "|"

        if encoding is None:
            encoding = getattr(sys.stdout, "encoding", None)

        if not encoding:
            return
        try:
            "└─├│".encode(encoding)
            self.branch = "├── "
            self.last = "└── "
            self.vbar = "│"
        except (UnicodeEncodeError, LookupError):
            return

    def _render(self, diff: Diff, prefix: str, lines: List[str]):
        """
        Append the rendered lines for one level of ``diff`` to ``lines``.
        """
        names = list(diff.names())
        for i, (name, diff_type) in enumerate(names):
            is_last = i == len(names) - 1
            connector = self.last if is_last else self.branch
            lines.append(f"{prefix}{connector}{self.marker_map[diff_type]} {name}")
            if diff_type == DiffType.MODIFIED and diff.modified[name].is_dir:
                extension = "    " if is_last else f"{self.vbar}   "
                self._render(diff.modified[name].diff, prefix + extension, lines)

    def render(self) -> str:
        """
        Render the diff.

        :returns: The rendered tree, one line per changed name.
        :rtype: ``str``
        """
        lines = [self.root_name]
        self._render(self.diff, "", lines)
        return "\n".join(lines)

    def __str__(self):
        return self.render()


__all__ = [
    "DiffTree",
]
