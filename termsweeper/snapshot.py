from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple
import numpy as np

from .cells import CellContent, CellState, Coordinate

if TYPE_CHECKING:
    from .engine import Field

# Read-only view of a field for renderers:
# - Every cell reduces to one visual category (flag, closed, open mine, open number)
# - Content is only exposed for open cells, neighbor counts only for open empty ones
# - Neighbor counts for the whole grid come from shifted sums over a zero-padded mine mask


class Visual(Enum):
    FLAGGED = 'flagged'
    CLOSED = 'closed'
    OPEN_MINE = 'open_mine'
    OPEN_EMPTY = 'open_empty'


@dataclass(frozen=True)
class CellView:
    state: CellState
    content: Optional[CellContent] = None
    neighbors: Optional[int] = None

    @property
    def visual(self) -> Visual:
        if self.state == CellState.FLAGGED:
            return Visual.FLAGGED
        if self.state == CellState.CLOSED:
            return Visual.CLOSED
        if self.content == CellContent.MINE:
            return Visual.OPEN_MINE
        return Visual.OPEN_EMPTY


@dataclass(frozen=True)
class Snapshot:
    rows: int
    cols: int
    cursor: Coordinate
    cells: Tuple[Tuple[CellView, ...], ...]

    def cell(self, row: int, col: int) -> CellView:
        return self.cells[row][col]

    def is_cursor(self, row: int, col: int) -> bool:
        return self.cursor == (row, col)


def neighbor_counts(field: Field) -> np.ndarray:
    mines = (field.content_grid() == CellContent.MINE).astype(np.int64)
    padded = np.pad(mines, 1)
    counts = np.zeros_like(mines)
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            counts += padded[1 + dr:1 + dr + field.rows, 1 + dc:1 + dc + field.cols]
    return counts


def take_snapshot(field: Field, cursor: Coordinate) -> Snapshot:
    contents = field.content_grid()
    states = field.state_grid()
    counts = neighbor_counts(field)
    rows = []
    for r in range(field.rows):
        row = []
        for c in range(field.cols):
            state = CellState(int(states[r, c]))
            if state != CellState.OPEN:
                row.append(CellView(state))
                continue
            content = CellContent(int(contents[r, c]))
            n = int(counts[r, c]) if content == CellContent.EMPTY else None
            row.append(CellView(state, content, n))
        rows.append(tuple(row))
    return Snapshot(field.rows, field.cols, tuple(cursor), tuple(rows))
