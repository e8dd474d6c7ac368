from __future__ import annotations
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

import numpy as np

from .cells import CellContent, CellState, Coordinate
from .snapshot import Snapshot, take_snapshot

MAX_MINE_PERCENTAGE = 50
MAX_PLACEMENT_ATTEMPTS = 1000


class Action(Enum):
    MOVE_UP = 'move_up'
    MOVE_DOWN = 'move_down'
    MOVE_LEFT = 'move_left'
    MOVE_RIGHT = 'move_right'
    OPEN = 'open'
    FLAG = 'flag'
    UNKNOWN = 'unknown'


class Outcome(Enum):
    CONTINUE = 'continue'
    WIN = 'win'
    LOSS = 'loss'

    @property
    def is_stop(self) -> bool:
        return self is not Outcome.CONTINUE


KEY_BINDINGS: Dict[str, Action] = {
    'w': Action.MOVE_UP,
    's': Action.MOVE_DOWN,
    'a': Action.MOVE_LEFT,
    'd': Action.MOVE_RIGHT,
    ' ': Action.OPEN,
    'f': Action.FLAG,
}

_MOVES: Dict[Action, Coordinate] = {
    Action.MOVE_UP: (-1, 0),
    Action.MOVE_DOWN: (1, 0),
    Action.MOVE_LEFT: (0, -1),
    Action.MOVE_RIGHT: (0, 1),
}


def action_for_key(key: Union[str, bytes]) -> Action:
    """Translate one input character (case-insensitive) into an action."""
    if isinstance(key, bytes):
        key = key.decode('latin-1')
    return KEY_BINDINGS.get(key.lower(), Action.UNKNOWN)


def mine_count(rows: int, cols: int, mine_percent: int) -> int:
    if not 0 <= mine_percent <= MAX_MINE_PERCENTAGE:
        raise ValueError(f'mine percentage must be between 0 and {MAX_MINE_PERCENTAGE}, got {mine_percent}')
    return rows * cols * mine_percent // 100


class Field:
    """Row-major grid of cell contents and visibility states.

    Contents and states live in two flat int8 arrays of equal length, addressed
    by ``row * cols + col``. Callers use (row, col); an address outside the grid
    raises IndexError instead of wrapping around.
    """

    def __init__(self, rows: int, cols: int):
        if rows < 1 or cols < 1:
            raise ValueError(f'field needs at least one row and one column, got {rows}x{cols}')
        self.rows = rows
        self.cols = cols
        self.cells = np.full(rows * cols, int(CellContent.EMPTY), dtype=np.int8)
        self.states = np.full(rows * cols, int(CellState.CLOSED), dtype=np.int8)

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def check(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(f'cell ({row}, {col}) is outside the {self.rows}x{self.cols} field')

    def index(self, row: int, col: int) -> int:
        self.check(row, col)
        return row * self.cols + col

    def neighbors(self, row: int, col: int) -> List[Coordinate]:
        coords = []
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                nr, nc = row + dr, col + dc
                if self.in_bounds(nr, nc):
                    coords.append((nr, nc))
        return coords

    def get_content(self, row: int, col: int) -> CellContent:
        return CellContent(int(self.cells[self.index(row, col)]))

    def get_state(self, row: int, col: int) -> CellState:
        return CellState(int(self.states[self.index(row, col)]))

    def set_content(self, row: int, col: int, content: CellContent) -> None:
        self.cells[self.index(row, col)] = int(content)

    def set_state(self, row: int, col: int, state: CellState) -> None:
        self.states[self.index(row, col)] = int(state)

    def reset_contents(self) -> None:
        self.cells[:] = int(CellContent.EMPTY)

    @property
    def num_mines(self) -> int:
        return int(np.count_nonzero(self.cells == CellContent.MINE))

    @property
    def num_closed(self) -> int:
        # Flagged cells count as closed.
        return int(np.count_nonzero(self.states != CellState.OPEN))

    def is_mine_open(self) -> bool:
        return bool(np.any((self.cells == CellContent.MINE) & (self.states == CellState.OPEN)))

    def reveal_mines(self) -> None:
        self.states[self.cells == CellContent.MINE] = int(CellState.OPEN)

    def open_all(self) -> None:
        self.states[:] = int(CellState.OPEN)

    def mine_positions(self) -> List[Coordinate]:
        return [divmod(int(i), self.cols) for i in np.flatnonzero(self.cells == CellContent.MINE)]

    def content_grid(self) -> np.ndarray:
        return self.cells.reshape(self.rows, self.cols).copy()

    def state_grid(self) -> np.ndarray:
        return self.states.reshape(self.rows, self.cols).copy()


def count_neighbor_mines(field: Field, row: int, col: int) -> int:
    field.check(row, col)
    return sum(1 for (nr, nc) in field.neighbors(row, col) if field.get_content(nr, nc) == CellContent.MINE)


def has_strict_safe_zone(field: Field, row: int, col: int, num_mines: int) -> bool:
    """Whether the mines fit outside the cell and all of its neighbors.

    When they do not (tiny or very dense grids) first-move safety only keeps
    the cell itself free of mines.
    """
    zone = 1 + len(field.neighbors(row, col))
    return num_mines <= field.size - zone


def is_safe_start(field: Field, row: int, col: int, strict: bool = True) -> bool:
    if field.get_content(row, col) == CellContent.MINE:
        return False
    return not strict or count_neighbor_mines(field, row, col) == 0


def _scatter(field: Field, num_mines: int, rng: np.random.Generator) -> None:
    field.reset_contents()
    for i in rng.choice(field.size, size=num_mines, replace=False):
        row, col = divmod(int(i), field.cols)
        field.set_content(row, col, CellContent.MINE)


def clear_safe_zone(field: Field, row: int, col: int, rng: np.random.Generator, strict: bool = True) -> int:
    """Move every mine out of the safe zone around (row, col).

    Each offending mine swaps places with a random empty cell outside the
    zone, so the mine count is unchanged. Returns the number of mines moved.
    """
    zone = {(row, col)}
    if strict:
        zone.update(field.neighbors(row, col))
    spare = [(r, c) for r in range(field.rows) for c in range(field.cols)
             if (r, c) not in zone and field.get_content(r, c) == CellContent.EMPTY]
    moved = 0
    for r, c in sorted(zone):
        if field.get_content(r, c) != CellContent.MINE:
            continue
        if not spare:
            raise ValueError(f'no room to move mines away from ({row}, {col})')
        sr, sc = spare.pop(int(rng.integers(len(spare))))
        field.set_content(r, c, CellContent.EMPTY)
        field.set_content(sr, sc, CellContent.MINE)
        moved += 1
    return moved


def place_mines(field: Field, row: int, col: int, mine_percent: int,
                rng: Optional[np.random.Generator] = None) -> int:
    """Scatter mines so that opening (row, col) first is safe.

    Placements are sampled until the cell is empty with no mine neighbors.
    After MAX_PLACEMENT_ATTEMPTS the last placement is repaired with
    clear_safe_zone instead. Returns the number of placements sampled.
    """
    num_mines = mine_count(field.rows, field.cols, mine_percent)
    field.check(row, col)
    if rng is None:
        rng = np.random.default_rng()
    strict = has_strict_safe_zone(field, row, col, num_mines)
    attempts = 0
    while True:
        attempts += 1
        _scatter(field, num_mines, rng)
        if is_safe_start(field, row, col, strict=strict):
            return attempts
        if attempts >= MAX_PLACEMENT_ATTEMPTS:
            clear_safe_zone(field, row, col, rng, strict=strict)
            return attempts


class Minesweeper:
    def __init__(self, rows: int = 10, cols: int = 10, mine_percent: int = 20, seed: Optional[int] = None):
        self.field = Field(rows, cols)
        mine_count(rows, cols, mine_percent)
        self.mine_percent = mine_percent
        self.rng = np.random.default_rng(seed)
        self.cursor_row = 0
        self.cursor_col = 0
        self.first_move_done = False
        self.placement_attempts = 0
        self.outcome = Outcome.CONTINUE

    @classmethod
    def from_mines(cls, rows: int, cols: int, mines: Iterable[Coordinate]) -> 'Minesweeper':
        """Game with mines at fixed coordinates; the first Open places nothing."""
        game = cls(rows, cols, mine_percent=0)
        for r, c in mines:
            game.field.set_content(r, c, CellContent.MINE)
        game.first_move_done = True
        return game

    @property
    def rows(self) -> int:
        return self.field.rows

    @property
    def cols(self) -> int:
        return self.field.cols

    @property
    def cursor(self) -> Coordinate:
        return (self.cursor_row, self.cursor_col)

    @property
    def game_over(self) -> bool:
        return self.outcome.is_stop

    @property
    def win(self) -> bool:
        return self.outcome is Outcome.WIN

    def is_mine_open(self) -> bool:
        return self.field.is_mine_open()

    def move(self, d_row: int, d_col: int) -> None:
        self.cursor_row = max(0, min(self.rows - 1, self.cursor_row + d_row))
        self.cursor_col = max(0, min(self.cols - 1, self.cursor_col + d_col))

    def open_at_cursor(self) -> Optional[CellContent]:
        """Open the cursor cell; returns its content, or None if nothing opened.

        The first Open places the mines even when the cursor cell is flagged
        and so stays closed. That Open then changes contents and num_mines,
        and the safe zone is centred on the flagged cell, not on whichever
        cell the player opens next.
        """
        row, col = self.cursor
        if not self.first_move_done:
            self.placement_attempts = place_mines(self.field, row, col, self.mine_percent, self.rng)
            self.first_move_done = True
        if self.field.get_state(row, col) != CellState.CLOSED:
            return None
        self.field.set_state(row, col, CellState.OPEN)
        if self.field.num_mines == 0:
            # Nothing left to find on a board without mines.
            self.field.open_all()
        return self.field.get_content(row, col)

    def flag_at_cursor(self) -> None:
        row, col = self.cursor
        state = self.field.get_state(row, col)
        if state == CellState.CLOSED:
            self.field.set_state(row, col, CellState.FLAGGED)
        elif state == CellState.FLAGGED:
            self.field.set_state(row, col, CellState.CLOSED)

    def perform(self, action: Action) -> Outcome:
        if self.game_over:
            return self.outcome
        if action in _MOVES:
            self.move(*_MOVES[action])
        elif action is Action.OPEN:
            if self.open_at_cursor() == CellContent.MINE:
                self.field.reveal_mines()
                self.outcome = Outcome.LOSS
                return self.outcome
        elif action is Action.FLAG:
            self.flag_at_cursor()
        self.outcome = self._check_outcome()
        return self.outcome

    def _check_outcome(self) -> Outcome:
        if self.field.is_mine_open():
            return Outcome.LOSS
        if self.field.num_closed == self.field.num_mines:
            return Outcome.WIN
        return Outcome.CONTINUE

    def snapshot(self) -> Snapshot:
        return take_snapshot(self.field, self.cursor)
