# gridpath/core/pathfinder.py
#!/usr/bin/env python3
"""
A* on a 4-connected, unweighted grid: one expansion per step() for animation.

Implements the Algorithm API expected by the viewer:
- init(grid, start, goal) - reset() - step() -> StepResult - run() -> PathResult

and the plain call for everyone else:
- find_path(grid, start, goal) -> PathResult

Search rules:
- Heuristic is Manhattan distance, computed once when a cell is first opened.
- The open set is an insertion-ordered list scanned linearly for the lowest f.
  Ties go to whichever cell entered the open list first.
- Neighbours are checked in the order (x+1,y), (x-1,y), (x,y+1), (x,y-1).
- Closed cells are final. A cheaper route found later never reopens them.
- The search stops as soon as the goal is opened, not when it is expanded.

Paths are start..goal inclusive. An unreachable goal is a normal result
(status "no_path"); a blocked or out-of-bounds endpoint raises
InvalidEndpointError before any search state exists.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from gridpath.core.errors import InvalidEndpointError
from gridpath.core.types import Cell, PathResult, StepResult

logger = logging.getLogger(__name__)

UNVISITED = 0
OPEN = 1
CLOSED = 2


@dataclass
class SearchNode:
    cell: Cell
    came_from: Optional[int] = None   # index into PathFinder.nodes
    g: int = 0                        # steps from start
    h: int = 0                        # Manhattan distance to goal, set once
    state: int = UNVISITED

    @property
    def f(self) -> int:
        return self.g + self.h


@dataclass
class PathFinder:
    name: str = "A*"

    # Internal state
    grid: Any = None                  # Grid / PredicateGrid: in_bounds, is_block, width, height
    start: Optional[Cell] = None
    goal: Optional[Cell] = None
    nodes: List[SearchNode] = field(default_factory=list)
    open_list: List[int] = field(default_factory=list)  # node indices, insertion order
    popped_count: int = 0
    done: bool = False
    no_path: bool = False

    # -------------------- lifecycle --------------------

    def init(self, grid: Any, start: Optional[Cell] = None, goal: Optional[Cell] = None) -> None:
        """Bind to a grid and endpoints (defaults: grid.start / grid.goal)."""
        start = start if start is not None else getattr(grid, "start", None)
        goal = goal if goal is not None else getattr(grid, "goal", None)
        if start is None:
            raise InvalidEndpointError(None, "start", "missing")
        if goal is None:
            raise InvalidEndpointError(None, "goal", "missing")
        start, goal = tuple(start), tuple(goal)
        _check_endpoint(grid, start, "start")
        _check_endpoint(grid, goal, "goal")

        self.grid = grid
        self.start = start
        self.goal = goal
        self.reset()

    def reset(self) -> None:
        """Drop all search state and seed the open list with the start."""
        if self.grid is None:
            return
        w, h = self.grid.width, self.grid.height
        self.nodes = [SearchNode((x, y)) for y in range(h) for x in range(w)]
        self.open_list = []
        self.popped_count = 0
        self.done = False
        self.no_path = False

        s = self.nodes[self._index(self.start)]
        s.g = 0
        s.came_from = None
        s.h = self._h(self.start)
        s.state = OPEN
        self.open_list.append(self._index(self.start))

    # -------------------- helpers --------------------

    def _index(self, c: Cell) -> int:
        x, y = c
        return y * self.grid.width + x

    def _neighbors4(self, c: Cell) -> List[Cell]:
        """Valid 4-connected neighbours of c, in the fixed check order."""
        x, y = c
        out: List[Cell] = []
        for n in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            if self.grid.in_bounds(n) and not self.grid.is_block(n):
                out.append(n)
        return out

    def _h(self, c: Cell) -> int:
        (x, y) = c
        (gx, gy) = self.goal
        return abs(gx - x) + abs(gy - y)

    def _pop_lowest(self) -> int:
        """Remove and return the open node with the lowest f (first one wins ties)."""
        lowest = 0
        min_f = self.nodes[self.open_list[0]].f
        for pos in range(1, len(self.open_list)):
            f = self.nodes[self.open_list[pos]].f
            if f < min_f:
                min_f = f
                lowest = pos
        return self.open_list.pop(lowest)

    def _goal_open(self) -> bool:
        return self.nodes[self._index(self.goal)].state == OPEN

    def _reconstruct_path(self) -> List[Cell]:
        start_idx = self._index(self.start)
        idx: Optional[int] = self._index(self.goal)
        path: List[Cell] = []
        while idx is not None:
            path.append(self.nodes[idx].cell)
            assert len(path) <= len(self.nodes), "came_from chain has a cycle"
            if idx == start_idx:
                break
            idx = self.nodes[idx].came_from
        assert path[-1] == self.start, f"path walked back to {path[-1]}, not start {self.start}"
        path.reverse()
        return path

    # -------------------- main stepping logic --------------------

    def step(self) -> StepResult:
        """
        Run ONE A* expansion step:
          - Stop if the goal is already open (or the open list is empty).
          - Move the lowest-f open node to closed.
          - Open or improve its passable, non-closed neighbours.
        """
        if self.grid is None:
            return StepResult(status="idle", metrics={"algo": self.name})

        if self.done:
            path = self._reconstruct_path()
            return StepResult(status="done", path=path, metrics=self._metrics(path_len=len(path)))

        if self.no_path:
            return StepResult(status="no_path", metrics=self._metrics())

        if self._goal_open():
            return self._finish(current=None, opened=[], closed=[])

        if not self.open_list:
            self.no_path = True
            logger.debug("%s: open list exhausted after %d expansions, no path %s -> %s",
                         self.name, self.popped_count, self.start, self.goal)
            return StepResult(status="no_path", metrics=self._metrics())

        u_idx = self._pop_lowest()
        u = self.nodes[u_idx]
        u.state = CLOSED
        self.popped_count += 1

        opened_now: List[Cell] = []
        for c in self._neighbors4(u.cell):
            v_idx = self._index(c)
            v = self.nodes[v_idx]
            if v.state == CLOSED:
                continue
            if v.state == OPEN:
                # h stays as computed on first discovery
                if u.g + 1 < v.g:
                    v.g = u.g + 1
                    v.came_from = u_idx
            else:
                v.state = OPEN
                v.g = u.g + 1
                v.h = self._h(c)
                v.came_from = u_idx
                self.open_list.append(v_idx)
                opened_now.append(c)

        if self._goal_open():
            return self._finish(current=u.cell, opened=opened_now, closed=[u.cell])

        return StepResult(status="running", opened=opened_now, closed=[u.cell], current=u.cell,
                          metrics=self._metrics())

    def _finish(self, current: Optional[Cell], opened: List[Cell], closed: List[Cell]) -> StepResult:
        self.done = True
        path = self._reconstruct_path()
        logger.debug("%s: path %s -> %s found, %d cells, %d expansions",
                     self.name, self.start, self.goal, len(path), self.popped_count)
        return StepResult(status="done", opened=opened, closed=closed, current=current, path=path,
                          metrics=self._metrics(path_len=len(path)))

    def run(self) -> PathResult:
        """Step until the search finishes and return the outcome."""
        if self.grid is None:
            raise RuntimeError("PathFinder.run() called before init()")
        while True:
            res = self.step()
            if res.status == "done":
                return PathResult(status="found", path=res.path or [], metrics=res.metrics)
            if res.status == "no_path":
                return PathResult(status="no_path", metrics=res.metrics)

    # -------------------- metrics --------------------

    def _metrics(self, path_len: int = 0) -> dict:
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": len(self.open_list),
            "closed_count": self.popped_count,
            "path_len": path_len,
        }


def _check_endpoint(grid: Any, c: Cell, role: str) -> None:
    if not grid.in_bounds(c):
        raise InvalidEndpointError(c, role, "out_of_bounds")
    if grid.is_block(c):
        raise InvalidEndpointError(c, role, "blocked")


def find_path(grid: Any, start: Cell, goal: Cell) -> PathResult:
    """
    Shortest 4-connected path from start to goal, both inclusive.

    Every call owns a fresh PathFinder, so calls never share search state.
    Raises InvalidEndpointError for a missing, blocked or out-of-bounds endpoint.
    """
    finder = PathFinder()
    finder.init(grid, start, goal)
    logger.debug("find_path %s -> %s on %dx%d grid", finder.start, finder.goal,
                 grid.width, grid.height)
    return finder.run()
