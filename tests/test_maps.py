# tests/test_maps.py
"""Map loading: JSON files, ASCII grids and the bundled maps/ directory."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gridpath.core.errors import GridPathError, InvalidEndpointError, MapFormatError
from gridpath.core.maps import available_maps, dump_map, load_map, parse_grid
from gridpath.core.pathfinder import find_path
from gridpath.core.types import Grid

MAP_DIR = Path(__file__).resolve().parents[1] / "maps"


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data))
    return path


# ---------- JSON maps ------------------------------------------------------

def test_load_map(tmp_path):
    path = write_json(tmp_path / "tiny.json", {
        "width": 3, "height": 2,
        "start": [0, 0], "goal": [2, 1],
        "cells": [[0, 1, 0],
                  [0, 0, 0]],
    })
    grid = load_map(path)
    assert (grid.width, grid.height) == (3, 2)
    assert grid.start == (0, 0)
    assert grid.goal == (2, 1)
    assert grid.is_block((1, 0))
    assert grid.is_passable((1, 1))


def test_load_map_without_endpoints(tmp_path):
    path = write_json(tmp_path / "bare.json", {"width": 1, "height": 1, "cells": [[0]]})
    grid = load_map(path)
    assert grid.start is None and grid.goal is None


@pytest.mark.parametrize(
    "data",
    [
        {"height": 1, "cells": [[0]]},
        {"width": 2, "height": 1, "cells": [[0]]},
        {"width": 1, "height": 2, "cells": [[0]]},
        {"width": 1, "height": 1, "cells": [[5]]},
        {"width": 0, "height": 0, "cells": []},
        {"width": 1, "height": 1, "cells": [[0]], "start": [0]},
        {"width": 2, "height": 2, "cells": 5},
        {"width": 2, "height": 1, "cells": [5]},
        {"width": 1, "height": 1, "cells": ["0"]},
        [1, 2, 3],
    ],
)
def test_load_map_rejects_bad_layout(tmp_path, data):
    path = write_json(tmp_path / "bad.json", data)
    with pytest.raises(MapFormatError):
        load_map(path)


def test_load_map_rejects_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(MapFormatError):
        load_map(path)


def test_load_map_rejects_non_utf8_file(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b"\xff\xfe{\"width\": 1}")
    with pytest.raises(MapFormatError):
        load_map(path)


def test_map_without_endpoints_fails_search_with_grid_error(tmp_path):
    path = write_json(tmp_path / "bare.json", {"width": 3, "height": 1, "cells": [[0, 0, 0]]})
    grid = load_map(path)
    with pytest.raises(GridPathError) as exc:
        find_path(grid, grid.start, grid.goal)
    assert isinstance(exc.value, InvalidEndpointError)
    assert exc.value.role == "start"
    assert exc.value.reason == "missing"
    assert exc.value.cell is None


def test_dump_then_load_keeps_grid(tmp_path):
    grid = parse_grid("""
        S.#
        ..G
    """)
    dump_map(grid, tmp_path / "out.json")
    assert load_map(tmp_path / "out.json") == grid


# ---------- ASCII grids ----------------------------------------------------

def test_parse_grid():
    grid = parse_grid("""
        S.#
        #.G
    """)
    assert (grid.width, grid.height) == (3, 2)
    assert grid.start == (0, 0)
    assert grid.goal == (2, 1)
    assert grid.blocked_cells() == [(2, 0), (0, 1)]


@pytest.mark.parametrize("text", ["", "..\n...", "..x"])
def test_parse_grid_rejects_bad_text(text):
    with pytest.raises(MapFormatError):
        parse_grid(text)


def test_map_format_error_is_value_error():
    with pytest.raises(ValueError):
        parse_grid("?")


# ---------- Grid -----------------------------------------------------------

def test_grid_edit_between_searches():
    grid = Grid.empty(3, 1)
    assert find_path(grid, (0, 0), (2, 0)).found
    grid.set_block((1, 0))
    assert not find_path(grid, (0, 0), (2, 0)).found
    grid.set_block((1, 0), False)
    assert grid.blocked_cells() == []


# ---------- bundled maps ---------------------------------------------------

def test_available_maps_sorted():
    maps = available_maps(MAP_DIR)
    assert list(maps) == sorted(maps)
    assert "01_open_field" in maps


def test_available_maps_missing_dir(tmp_path):
    assert available_maps(tmp_path / "nope") == {}


@pytest.mark.parametrize(
    "name, found, edges",
    [
        ("01_open_field", True, 16),
        ("02_maze", True, None),
        ("03_walled_goal", False, None),
    ],
)
def test_bundled_maps(name, found, edges):
    grid = load_map(MAP_DIR / f"{name}.json")
    result = find_path(grid, grid.start, grid.goal)
    assert result.found is found
    if edges is not None:
        assert len(result.path) - 1 == edges
