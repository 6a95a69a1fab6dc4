# gridpath/core/types.py
#!/usr/bin/env python3
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

Cell = Tuple[int, int]  # (col, row)

FREE = 0
BLOCK = 1


@dataclass
class Grid:
    width: int
    height: int
    cells: List[List[int]]             # [row][col], 0 free / 1 block
    start: Optional[Cell] = None
    goal: Optional[Cell] = None

    @classmethod
    def empty(cls, width: int, height: int) -> "Grid":
        return cls(width, height, [[FREE] * width for _ in range(height)])

    def in_bounds(self, c: Cell) -> bool:
        x, y = c
        return 0 <= x < self.width and 0 <= y < self.height

    def is_block(self, c: Cell) -> bool:
        x, y = c
        return self.cells[y][x] == BLOCK

    def is_passable(self, c: Cell) -> bool:
        return self.in_bounds(c) and not self.is_block(c)

    def set_block(self, c: Cell, blocked: bool = True) -> None:
        """Edit a cell between searches (never while one is running)."""
        x, y = c
        self.cells[y][x] = BLOCK if blocked else FREE

    def blocked_cells(self) -> List[Cell]:
        return [(x, y)
                for y in range(self.height)
                for x in range(self.width)
                if self.cells[y][x] == BLOCK]


@dataclass
class PredicateGrid:
    """Bounds plus an obstacle query, for callers that keep their own map."""
    width: int
    height: int
    blocked: Callable[[Cell], bool]

    def in_bounds(self, c: Cell) -> bool:
        x, y = c
        return 0 <= x < self.width and 0 <= y < self.height

    def is_block(self, c: Cell) -> bool:
        return bool(self.blocked(c))

    def is_passable(self, c: Cell) -> bool:
        return self.in_bounds(c) and not self.is_block(c)


@dataclass
class StepResult:
    status: str                   # "idle" | "running" | "done" | "no_path"
    opened: List[Cell] = field(default_factory=list)
    closed: List[Cell] = field(default_factory=list)
    current: Optional[Cell] = None
    path: Optional[List[Cell]] = None
    metrics: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PathResult:
    status: str                   # "found" | "no_path"
    path: List[Cell] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.status == "found"

    def __len__(self) -> int:
        return len(self.path)
