# gridpath/core/errors.py
#!/usr/bin/env python3
"""
Error types raised by gridpath.

An unreachable goal is NOT an error: the search returns a PathResult with
status "no_path". Only caller mistakes end up here.
"""

from typing import Optional, Tuple


class GridPathError(Exception):
    """Base class for everything gridpath raises on purpose."""


class InvalidEndpointError(GridPathError, ValueError):
    """Start or goal is missing, outside the grid or on a blocked cell."""

    def __init__(self, cell: Optional[Tuple[int, int]], role: str, reason: str):
        self.cell = tuple(cell) if cell is not None else None
        self.role = role        # "start" | "goal"
        self.reason = reason    # "missing" | "out_of_bounds" | "blocked"
        if cell is None:
            super().__init__(f"{role} is not set")
            return
        super().__init__(f"{role} {self.cell} is {reason.replace('_', ' ')}")


class MapFormatError(GridPathError, ValueError):
    """A map file or ASCII grid could not be turned into a Grid."""
