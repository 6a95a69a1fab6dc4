# tests/test_viewer.py
"""Viewer logic, driven headless through SDL's dummy video driver."""

from __future__ import annotations

import json

import pytest

pygame = pytest.importorskip("pygame")

from gridpath.app.viewer import Button, Viewer, search_error_message  # noqa: E402
from gridpath.core.errors import GridPathError  # noqa: E402
from gridpath.core.pathfinder import PathFinder  # noqa: E402
from gridpath.core.types import Grid  # noqa: E402


def _click(pos, button=1):
    return pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=pos, button=button)


def test_missing_endpoints_ask_user_to_place_them():
    with pytest.raises(GridPathError) as exc:
        PathFinder().init(Grid.empty(3, 3))
    assert search_error_message(exc.value).startswith("Set start/goal")


def test_blocked_endpoint_message_names_the_cell():
    grid = Grid.empty(3, 3)
    grid.set_block((1, 1), True)
    with pytest.raises(GridPathError) as exc:
        PathFinder().init(grid, (0, 0), (1, 1))
    assert search_error_message(exc.value) == "goal (1, 1) is blocked"


def test_button_fires_on_left_click_inside():
    clicks = []
    btn = Button("Step", pygame.Rect(10, 10, 40, 20), lambda: clicks.append(1))
    assert btn.feed(_click((20, 15)))
    assert not btn.feed(_click((20, 15), button=3))
    assert not btn.feed(_click((100, 100)))
    assert clicks == [1]


def test_button_tracks_hover():
    btn = Button("Run", pygame.Rect(0, 0, 10, 10), lambda: None, toggle=True)
    assert not btn.feed(pygame.event.Event(pygame.MOUSEMOTION, pos=(5, 5)))
    assert btn.hover
    btn.feed(pygame.event.Event(pygame.MOUSEMOTION, pos=(50, 5)))
    assert not btn.hover


# ---------- headless viewer -------------------------------------------------

@pytest.fixture
def headless(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    yield
    pygame.quit()


def _write(path, data):
    path.write_text(json.dumps(data))
    return path


def test_viewer_opens_map_without_endpoints(tmp_path, headless):
    maps = {"bare": _write(tmp_path / "bare.json", {"width": 3, "height": 2, "cells": [[0, 0, 0], [0, 0, 0]]})}
    viewer = Viewer(maps, "bare")
    assert viewer.state == "Invalid endpoint"
    assert viewer.message.startswith("Set start/goal")

    viewer._do_step()
    viewer._solve()
    assert viewer.state == "Invalid endpoint"
    assert viewer.path == []

    viewer._move_endpoint((0, 0), "start")
    viewer._move_endpoint((2, 1), "goal")
    viewer._solve()
    assert viewer.state == "Done"
    assert viewer.path[0] == (0, 0) and viewer.path[-1] == (2, 1)


def test_viewer_keeps_current_map_when_switch_fails(tmp_path, headless):
    maps = {
        "good": _write(tmp_path / "good.json", {"width": 2, "height": 1, "start": [0, 0],
                                                "goal": [1, 0], "cells": [[0, 0]]}),
        "bad": _write(tmp_path / "bad.json", {"width": 2, "height": 2, "cells": 5}),
    }
    viewer = Viewer(maps, "good")
    viewer._switch_map("bad")
    assert viewer.selected_map_key == "good"
    assert viewer.message == "can't load bad"
