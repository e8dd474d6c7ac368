from __future__ import annotations
from enum import IntEnum
from typing import Tuple

# Values are stored in int8 numpy arrays, hence IntEnum.

Coordinate = Tuple[int, int]


class CellContent(IntEnum):
    EMPTY = 0
    MINE = 1


class CellState(IntEnum):
    CLOSED = 0
    OPEN = 1
    FLAGGED = 2
