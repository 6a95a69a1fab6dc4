# gridpath/app/viewer.py
#!/usr/bin/env python3
"""
Grid Pathfinding Viewer: A* stepping, instant solve and a small map editor

- Keyboard:
    [1]..[9]     -> switch map (maps/*.json, name order)
    [SPACE]      -> run/pause
    [N]          -> single step
    [P]          -> solve the whole search at once
    [R]          -> reset search
    [C]          -> clear all walls
    [W]          -> write the edited grid to maps/edited.json
    [+]/[-]      -> steps/sec
    [Q]/[ESC]    -> quit
- Mouse:
    left click          -> toggle wall
    right click         -> move goal
    shift + right click -> move start

Config (ENV or CLI, CLI wins):
- GRIDPATH_MAP_DIR   / --maps=DIR
- GRIDPATH_MAP       / --map=NAME
- GRIDPATH_LOG_LEVEL / --log-level=LEVEL
- GRIDPATH_SPS       / --sps=N
"""

import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple

import pygame

from gridpath.core.errors import GridPathError, InvalidEndpointError
from gridpath.core.maps import available_maps, dump_map, load_map
from gridpath.core.pathfinder import PathFinder
from gridpath.core.types import Cell, Grid

logger = logging.getLogger(__name__)

# ---------- Config ----------
DEFAULT_MAP_DIR = Path(__file__).resolve().parents[2] / "maps"
EDITED_MAP_NAME = "edited.json"
SIDEBAR_W = 380
PAD = 16
MAX_CELL = 32
START_HEIGHT = 720
STATUS_H = 150
BTN_H = 32
BTN_GAP = 8

# Colors
BG          = ( 28, 31, 38)
BOARD_EDGE  = ( 44, 48, 58)
FLOOR       = (205,208,212)
WALL        = ( 52, 56, 64)
GRID_LINE   = ( 20, 22, 26)
OPEN_TINT   = ( 40,160,255,110)
CLOSED_TINT = (235, 40,120, 90)
PATH        = ( 20,230,180)
START       = ( 70,130,180)
GOAL        = (220, 50, 47)
BADGE_TEXT  = (250,250,250)
STATUS_BG   = ( 22, 26, 34)
HEADING     = (255,205, 40)
LABEL       = (225,230,236)
NOTICE      = (255,150, 60)

TERMINAL_STATES = ("Done", "No path", "Invalid endpoint")
EMPTY_METRICS = {"algo": "A*", "popped": 0, "open_size": 0, "closed_count": 0, "path_len": 0}


# ---------- Option resolution ----------
def resolve_option(flag: str, env: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(env, default)
    for arg in sys.argv[1:]:
        if arg.startswith(f"--{flag}="):
            value = arg.split("=", 1)[1]
    return value


def configure_logging(level: int = logging.INFO) -> None:
    """Attach one stdout handler to the root logger unless one exists already."""
    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    ))
    root.addHandler(handler)
    root.setLevel(level)


def search_error_message(ex: GridPathError) -> str:
    """Status-line text for a search that could not start."""
    if isinstance(ex, InvalidEndpointError) and ex.reason == "missing":
        return "Set start/goal: shift+right click / right click"
    return str(ex)


# ---------- Panel button ----------
BTN_IDLE   = (36, 40, 48)
BTN_HOVER  = (46, 50, 60)
BTN_ON     = (58, 86, 160)
BTN_EDGE   = (120, 170, 255)
BTN_TEXT   = (235, 238, 242)


@dataclass
class Button:
    """Flat panel button; `lit` marks the selected map or a running search."""
    label: str
    rect: pygame.Rect
    on_click: Callable[[], None]
    toggle: bool = False
    lit: bool = False
    hover: bool = False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font):
        lit = self.toggle and self.lit
        fill = BTN_ON if lit else (BTN_HOVER if self.hover else BTN_IDLE)
        pygame.draw.rect(screen, fill, self.rect, border_radius=8)
        if lit:
            pygame.draw.rect(screen, BTN_EDGE, self.rect, width=2, border_radius=8)
        label = font.render(self.label, True, BTN_TEXT)
        screen.blit(label, label.get_rect(center=self.rect.center))

    def feed(self, event: pygame.event.Event) -> bool:
        """Update hover / fire on left click; True when the click was ours."""
        inside = self.rect.collidepoint(event.pos)
        if event.type == pygame.MOUSEMOTION:
            self.hover = inside
            return False
        if event.button == 1 and inside:
            self.on_click()
            return True
        return False


# ---------- Viewer ----------
class Viewer:
    def __init__(self, maps: Dict[str, Path], map_key: str, steps_per_sec: int = 8):
        self.maps = maps
        self.map_dir = next(iter(maps.values())).parent
        self.selected_map_key = map_key
        self.grid: Grid = load_map(maps[map_key])

        self.open_set: Set[Cell] = set()
        self.closed_set: Set[Cell] = set()
        self.path: List[Cell] = []
        self.running = False
        self.steps_per_sec = steps_per_sec
        self._next_step_at = 0.0
        self.state = "Idle"
        self.message = ""
        self._buttons: List[Button] = []
        self._map_buttons: Dict[str, Button] = {}
        self.btn_run: Optional[Button] = None
        self.finder = PathFinder(name="A*")

        pygame.init()
        self.fonts = {size: pygame.font.Font(None, size) for size in (14, 18, 22)}
        self.clock = pygame.time.Clock()
        self.cell_size = max(14, min(MAX_CELL, (START_HEIGHT - 2 * PAD) // self.grid.height))
        size = (self.grid.width * self.cell_size + 2 * PAD + SIDEBAR_W,
                max(START_HEIGHT, self.grid.height * self.cell_size + 2 * PAD))
        self.screen = pygame.display.set_mode(size, pygame.RESIZABLE)
        self._set_caption()
        self._fit(*size)
        self._restart_search()

    def _set_caption(self):
        pygame.display.set_caption(f"gridpath: {self.selected_map_key}")

    # ---------- geometry ----------
    def _fit(self, win_w: int, win_h: int):
        """Pick the largest whole cell size that fits beside the sidebar."""
        room_w = max(1, win_w - SIDEBAR_W - 2 * PAD) // self.grid.width
        room_h = max(1, win_h - 2 * PAD) // self.grid.height
        self.cell_size = max(8, min(room_w, room_h))

        board_w = self.grid.width * self.cell_size
        board_h = self.grid.height * self.cell_size
        left = max(0, (win_w - SIDEBAR_W - board_w) // 2)
        top = max(0, (win_h - board_h) // 2)
        self.board = pygame.Rect(left, top, board_w, board_h)
        sidebar_x = max(self.board.right + PAD, win_w - SIDEBAR_W)
        self.sidebar = pygame.Rect(sidebar_x, 0, win_w - sidebar_x, win_h)
        self._build_buttons()

    def _cell_rect(self, c: Cell) -> pygame.Rect:
        cs = self.cell_size
        return pygame.Rect(self.board.x + c[0] * cs, self.board.y + c[1] * cs, cs, cs)

    def _cell_at(self, pos: Tuple[int, int]) -> Optional[Cell]:
        if not self.board.collidepoint(pos):
            return None
        c = ((pos[0] - self.board.x) // self.cell_size, (pos[1] - self.board.y) // self.cell_size)
        return c if self.grid.in_bounds(c) else None

    # ---------- search driving ----------
    def run(self):
        while True:
            self._handle_events()
            if self.running and time.monotonic() >= self._next_step_at:
                self._next_step_at = time.monotonic() + 1.0 / self.steps_per_sec
                self._do_step()
            self._draw()
            self.clock.tick(60)

    def _do_step(self):
        if self.state in TERMINAL_STATES:
            return
        res = self.finder.step()
        self.open_set.difference_update(res.closed)
        self.open_set.update(res.opened)
        self.closed_set.update(res.closed)
        if res.path is not None:
            self.path = res.path
        if res.metrics:
            self._last_metrics = res.metrics

        if res.status == "done":
            self._stop("Done")
            logger.info("path found: %d cells, %d expansions",
                        len(self.path), res.metrics.get("popped", 0))
        elif res.status == "no_path":
            self._stop("No path")
            logger.info("no path from %s to %s", self.grid.start, self.grid.goal)
        else:
            self.state = "Running" if self.running else "Paused"
        self._refresh_active_states()

    def _stop(self, state: str):
        self.state = state
        self.running = False

    def _solve(self):
        """Finish the current search in one go."""
        while self.state not in TERMINAL_STATES:
            self._do_step()

    def _restart_search(self):
        self.running = False
        self.open_set.clear()
        self.closed_set.clear()
        self.path = []
        self._last_metrics = dict(EMPTY_METRICS)
        try:
            self.finder.init(self.grid)
        except GridPathError as ex:
            self.finder = PathFinder(name="A*")
            self.state = "Invalid endpoint"
            self.message = search_error_message(ex)
            logger.warning("cannot search: %s", ex)
        else:
            self.state = "Idle"
            self.message = ""
        self._refresh_active_states()

    # ---------- editing ----------
    def _toggle_wall(self, c: Cell):
        if c in (self.grid.start, self.grid.goal):
            return
        self.grid.set_block(c, not self.grid.is_block(c))
        self._restart_search()

    def _move_endpoint(self, c: Cell, role: str):
        if self.grid.is_block(c):
            self.message = f"{role} can't go on a wall"
            return
        setattr(self.grid, role, c)
        self._restart_search()

    def _clear_walls(self):
        for c in self.grid.blocked_cells():
            self.grid.set_block(c, False)
        self._restart_search()

    def _write_map(self):
        target = self.map_dir / EDITED_MAP_NAME
        try:
            dump_map(self.grid, target)
        except OSError as ex:
            logger.error("failed to write %s: %s", target, ex)
            self.message = f"write failed: {ex.strerror}"
            return
        self.maps[target.stem] = target
        self.message = f"saved {target.name}"
        logger.info("wrote edited map to %s", target)
        self._build_buttons()

    def _switch_map(self, key: str):
        if key not in self.maps:
            return
        try:
            grid = load_map(self.maps[key])
        except (GridPathError, OSError) as ex:
            logger.error("failed to load map %s: %s", key, ex)
            self.message = f"can't load {key}"
            return
        self.grid = grid
        self.selected_map_key = key
        self._set_caption()
        self._fit(*self.screen.get_size())
        self._restart_search()

    def _toggle_run(self):
        if self.state in TERMINAL_STATES:
            return
        self.running = not self.running
        self.state = "Running" if self.running else "Paused"
        self._refresh_active_states()

    def _bump_speed(self, dv: int):
        self.steps_per_sec = max(1, min(60, self.steps_per_sec + dv))

    def _quit(self):
        pygame.quit()
        sys.exit(0)

    # ---------- events ----------
    def _key_actions(self) -> Dict[int, Callable[[], None]]:
        actions = {
            pygame.K_ESCAPE: self._quit, pygame.K_q: self._quit,
            pygame.K_SPACE: self._toggle_run,
            pygame.K_n: self._do_step,
            pygame.K_p: self._solve,
            pygame.K_r: self._restart_search,
            pygame.K_c: self._clear_walls,
            pygame.K_w: self._write_map,
        }
        for k in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            actions[k] = lambda: self._bump_speed(+1)
        for k in (pygame.K_MINUS, pygame.K_UNDERSCORE, pygame.K_KP_MINUS):
            actions[k] = lambda: self._bump_speed(-1)
        for i, key in enumerate(list(self.maps)[:9]):
            actions[pygame.K_1 + i] = lambda k=key: self._switch_map(k)
        return actions

    def _handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                self._quit()
            elif e.type == pygame.KEYDOWN:
                action = self._key_actions().get(e.key)
                if action is not None:
                    action()
            elif e.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.set_mode((e.w, e.h), pygame.RESIZABLE)
                self._fit(e.w, e.h)
            elif e.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN):
                hit = [b.feed(e) for b in list(self._buttons)]
                if e.type == pygame.MOUSEBUTTONDOWN and not any(hit):
                    self._handle_board_click(e)

    def _handle_board_click(self, e: pygame.event.Event):
        c = self._cell_at(e.pos)
        if c is None:
            return
        if e.button == 1:
            self._toggle_wall(c)
        elif e.button == 3:
            shift = pygame.key.get_mods() & pygame.KMOD_SHIFT
            self._move_endpoint(c, "start" if shift else "goal")

    # ---------- drawing ----------
    def _draw(self):
        self.screen.fill(BG)
        pygame.draw.rect(self.screen, BOARD_EDGE, self.board.inflate(PAD, PAD), border_radius=10)
        self._draw_board()
        self._draw_sidebar()
        pygame.display.flip()

    def _draw_board(self):
        for y in range(self.grid.height):
            for x in range(self.grid.width):
                rect = self._cell_rect((x, y))
                self.screen.fill(WALL if self.grid.is_block((x, y)) else FLOOR, rect)
                pygame.draw.rect(self.screen, GRID_LINE, rect, 1)

        tint = pygame.Surface((self.cell_size, self.cell_size), pygame.SRCALPHA)
        for cells, rgba in ((self.closed_set, CLOSED_TINT), (self.open_set, OPEN_TINT)):
            tint.fill(rgba)
            for c in cells:
                self.screen.blit(tint, self._cell_rect(c).topleft)

        if len(self.path) >= 2:
            centers = [self._cell_rect(c).center for c in self.path]
            pygame.draw.lines(self.screen, PATH, False, centers, max(2, self.cell_size // 6))
            for p in centers:
                pygame.draw.circle(self.screen, PATH, p, max(2, self.cell_size // 8))

        for cell, color, letter in ((self.grid.start, START, "S"), (self.grid.goal, GOAL, "G")):
            if cell is not None:
                self._draw_badge(cell, color, letter)

    def _draw_badge(self, cell: Cell, color: Tuple[int, int, int], letter: str):
        center = self._cell_rect(cell).center
        pygame.draw.circle(self.screen, color, center, max(6, self.cell_size // 2 - 2))
        txt = self.fonts[14].render(letter, True, BADGE_TEXT)
        self.screen.blit(txt, txt.get_rect(center=center))

    # ---------- sidebar ----------
    def _build_buttons(self):
        self._buttons.clear()
        self._map_buttons.clear()
        x = self.sidebar.x + 16
        y = self.sidebar.y + STATUS_H + 20
        w = max(160, self.sidebar.width - 32)
        half = (w - BTN_GAP) // 2

        def add(label, cb, rect, *, togglable=False) -> Button:
            btn = Button(label, rect, cb, toggle=togglable)
            self._buttons.append(btn)
            return btn

        pairs = [
            (("Run / Pause", self._toggle_run), ("Step (N)", self._do_step)),
            (("Solve (P)", self._solve), ("Reset (R)", self._restart_search)),
            (("Clear walls", self._clear_walls), ("Save map (W)", self._write_map)),
            (("Slower", lambda: self._bump_speed(-1)), ("Faster", lambda: self._bump_speed(+1))),
        ]
        for left, right in pairs:
            a = add(left[0], left[1], pygame.Rect(x, y, half, BTN_H), togglable=left[0] == "Run / Pause")
            add(right[0], right[1], pygame.Rect(x + half + BTN_GAP, y, half, BTN_H))
            if a.toggle:
                self.btn_run = a
            y += BTN_H + BTN_GAP

        y += BTN_GAP
        for i, key in enumerate(self.maps):
            rect = pygame.Rect(x, y, w, BTN_H)
            self._map_buttons[key] = add(f"{i + 1}  {key}", lambda k=key: self._switch_map(k),
                                         rect, togglable=True)
            y += BTN_H + BTN_GAP

        self._refresh_active_states()

    def _refresh_active_states(self):
        if self.btn_run is not None:
            self.btn_run.lit = self.running
        for key, btn in self._map_buttons.items():
            btn.lit = key == self.selected_map_key

    def _status_rows(self) -> List[Tuple[str, int, Tuple[int, int, int]]]:
        m = self._last_metrics
        rows = [
            (f"{m.get('algo', 'A*')} on {self.selected_map_key}", 22, HEADING),
            (f"expanded {m.get('popped', 0)}   open {m.get('open_size', 0)}", 18, LABEL),
            (f"closed {m.get('closed_count', 0)}   path {m.get('path_len', 0)}", 18, LABEL),
            (f"{self.state}, {self.steps_per_sec} steps/s", 18, LABEL),
        ]
        if self.message:
            rows.append((self.message, 18, NOTICE))
        return rows

    def _draw_sidebar(self):
        box = pygame.Rect(self.sidebar.x + 10, self.sidebar.y + 10, self.sidebar.width - 20, STATUS_H)
        pygame.draw.rect(self.screen, STATUS_BG, box, border_radius=12)
        y = box.y + 10
        for text, size, color in self._status_rows():
            surf = self.fonts[size].render(text, True, color)
            self.screen.blit(surf, (box.x + 14, y))
            y += surf.get_height() + 8

        for b in self._buttons:
            b.draw(self.screen, self.fonts[18])


# ---------- main ----------
def main():
    level_name = (resolve_option("log-level", "GRIDPATH_LOG_LEVEL", "INFO") or "INFO").upper()
    configure_logging(getattr(logging, level_name, logging.INFO))

    map_dir = Path(resolve_option("maps", "GRIDPATH_MAP_DIR", str(DEFAULT_MAP_DIR)))
    maps = available_maps(map_dir)
    if not maps:
        logger.error("no maps found in %s", map_dir)
        sys.exit(1)

    map_key = resolve_option("map", "GRIDPATH_MAP") or next(iter(maps))
    if map_key not in maps:
        logger.error("unknown map %r (have: %s)", map_key, ", ".join(maps))
        sys.exit(1)

    try:
        sps = int(resolve_option("sps", "GRIDPATH_SPS", "8"))
    except ValueError:
        logger.error("--sps must be an integer")
        sys.exit(1)

    try:
        viewer = Viewer(maps, map_key, steps_per_sec=max(1, min(60, sps)))
    except GridPathError as ex:
        logger.error("failed to load map %s: %s", map_key, ex)
        sys.exit(1)
    viewer.run()


if __name__ == "__main__":
    main()
