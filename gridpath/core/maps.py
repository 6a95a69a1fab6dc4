# gridpath/core/maps.py
#!/usr/bin/env python3
"""
Map loading: JSON map files and ASCII grids -> Grid.

JSON layout:
    {"width": 5, "height": 3,
     "start": [0, 0], "goal": [4, 2],
     "cells": [[0,0,0,0,0],
               [0,1,1,1,0],
               [0,0,0,0,0]]}

ASCII layout (one row per line): '.' free, '#' block, 'S' start, 'G' goal.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from gridpath.core.errors import MapFormatError
from gridpath.core.types import BLOCK, FREE, Cell, Grid

logger = logging.getLogger(__name__)

GLYPHS = {".": FREE, "#": BLOCK, "S": FREE, "G": FREE}


def _cell(value, what: str) -> Optional[Cell]:
    if value is None:
        return None
    try:
        x, y = value
        return int(x), int(y)
    except (TypeError, ValueError) as ex:
        raise MapFormatError(f"{what} must be an [x, y] pair, got {value!r}") from ex


def grid_from_dict(data: dict) -> Grid:
    try:
        width = int(data["width"])
        height = int(data["height"])
        cells = data["cells"]
    except KeyError as ex:
        raise MapFormatError(f"missing key {ex.args[0]!r}") from ex
    except (TypeError, ValueError) as ex:
        raise MapFormatError(f"bad map header: {ex}") from ex

    if width <= 0 or height <= 0:
        raise MapFormatError(f"grid size must be positive, got {width}x{height}")
    if not isinstance(cells, list) or not all(isinstance(r, list) for r in cells):
        raise MapFormatError("cells must be a list of rows")
    if len(cells) != height or not all(len(r) == width for r in cells):
        raise MapFormatError("cells size mismatch")

    rows: List[List[int]] = []
    for r in cells:
        row = []
        for v in r:
            if v not in (FREE, BLOCK):
                raise MapFormatError(f"unknown cell value {v!r} (expected 0 or 1)")
            row.append(int(v))
        rows.append(row)

    return Grid(width, height, rows,
                start=_cell(data.get("start"), "start"),
                goal=_cell(data.get("goal"), "goal"))


def load_map(path: Path) -> Grid:
    """Read a JSON map file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as ex:
        raise MapFormatError(f"{path.name}: not valid JSON ({ex})") from ex
    if not isinstance(data, dict):
        raise MapFormatError(f"{path.name}: top level must be an object")
    grid = grid_from_dict(data)
    logger.debug("loaded map %s (%dx%d)", path.name, grid.width, grid.height)
    return grid


def parse_grid(text: str) -> Grid:
    """Build a Grid from ASCII rows; surrounding blank lines are ignored."""
    lines = [ln.strip() for ln in text.strip().splitlines()]
    if not lines or not lines[0]:
        raise MapFormatError("empty grid")
    width = len(lines[0])
    if any(len(ln) != width for ln in lines):
        raise MapFormatError("rows have different lengths")

    start = goal = None
    cells: List[List[int]] = []
    for y, ln in enumerate(lines):
        row = []
        for x, ch in enumerate(ln):
            if ch not in GLYPHS:
                raise MapFormatError(f"unknown glyph {ch!r} at ({x}, {y})")
            if ch == "S":
                start = (x, y)
            elif ch == "G":
                goal = (x, y)
            row.append(GLYPHS[ch])
        cells.append(row)
    return Grid(width, len(lines), cells, start=start, goal=goal)


def dump_map(grid: Grid, path: Path) -> None:
    """Write a Grid back out in the JSON layout load_map reads."""
    data = {
        "width": grid.width,
        "height": grid.height,
        "cells": grid.cells,
    }
    if grid.start is not None:
        data["start"] = list(grid.start)
    if grid.goal is not None:
        data["goal"] = list(grid.goal)
    Path(path).write_text(json.dumps(data, indent=2), encoding="utf-8")


def available_maps(map_dir: Path) -> Dict[str, Path]:
    """The *.json files in map_dir, keyed by file stem, in name order."""
    map_dir = Path(map_dir)
    if not map_dir.is_dir():
        return {}
    return {p.stem: p for p in sorted(map_dir.glob("*.json"))}
