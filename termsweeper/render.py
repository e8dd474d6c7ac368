from __future__ import annotations
from .engine import Outcome
from .snapshot import CellView, Snapshot, Visual

RESET = '\033[0m'
RED = '\033[31m'
GREEN = '\033[32m'
COLOR_MAP = {
    1: '\033[34m',
    2: '\033[32m',
    3: '\033[31m',
    4: '\033[35m',
    5: '\033[33m',
    6: '\033[36m',
    7: '\033[37m',
    8: '\033[90m',
}

FLAG = 'F'
CLOSED = '.'
MINE = '@'


def _paint(text: str, code: str, color: bool) -> str:
    return f'{code}{text}{RESET}' if color else text


def glyph(view: CellView, color: bool = True) -> str:
    visual = view.visual
    if visual is Visual.FLAGGED:
        return _paint(FLAG, RED, color)
    if visual is Visual.CLOSED:
        return CLOSED
    if visual is Visual.OPEN_MINE:
        return MINE
    if not view.neighbors:
        return ' '
    return _paint(str(view.neighbors), COLOR_MAP.get(view.neighbors, ''), color)


def render_frame(snapshot: Snapshot, color: bool = True) -> str:
    lines = []
    for r in range(snapshot.rows):
        row = []
        for c in range(snapshot.cols):
            ch = glyph(snapshot.cell(r, c), color)
            if snapshot.is_cursor(r, c):
                row.append(f'[{ch}]')
            else:
                row.append(f' {ch} ')
        lines.append(''.join(row))
    return '\n'.join(lines) + '\n'


def rewind(snapshot: Snapshot) -> str:
    """Escapes that move the terminal cursor back to the top-left of a frame."""
    return f'\033[{snapshot.rows}A\033[{snapshot.cols * 3}D'


def controls_banner() -> str:
    return (
        '\n------ MINESWEEPER ------\n'
        'Move: W, S, A, D\n'
        'Open a field: <SPACE>\n'
        'Flag a suspected mine: F\n'
        '-------------------------\n\n'
    )


def result_message(outcome: Outcome, color: bool = True) -> str:
    if outcome is Outcome.LOSS:
        return 'OOPS! You lost...'
    if outcome is Outcome.WIN:
        return _paint('Congratulations, you win!', GREEN, color)
    return ''
