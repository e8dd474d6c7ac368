from __future__ import annotations
import argparse
import sys
from typing import Iterable, List, Optional, TextIO
from termsweeper.engine import MAX_MINE_PERCENTAGE, Minesweeper, Outcome, action_for_key
from termsweeper.render import controls_banner, render_frame, result_message, rewind
from termsweeper.terminal import keys, raw_input


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Minesweeper in the terminal')
    parser.add_argument('--rows', type=int, default=10)
    parser.add_argument('--cols', type=int, default=10)
    parser.add_argument('--mines-percent', type=int, default=20,
                        help=f'Share of cells holding mines, 0..{MAX_MINE_PERCENTAGE}')
    parser.add_argument('--seed', type=int, default=-1, help='RNG seed; <0 uses OS entropy (random every run)')
    parser.add_argument('--no-color', action='store_true', help='Never emit color escapes')
    return parser


def run(game: Minesweeper, key_stream: Iterable[str], out: TextIO, color: bool = True) -> Outcome:
    """Play until the game stops or the key stream runs dry.

    Each frame is drawn over the previous one. Returns the final outcome,
    CONTINUE when input ended first.
    """
    out.write(controls_banner())
    key_iter = iter(key_stream)
    outcome = game.outcome
    while not outcome.is_stop:
        snapshot = game.snapshot()
        out.write(render_frame(snapshot, color=color))
        out.flush()
        key = next(key_iter, None)
        out.write(rewind(snapshot))
        if key is None:
            break
        outcome = game.perform(action_for_key(key))
    out.write(render_frame(game.snapshot(), color=color))
    out.write('\n')
    if outcome.is_stop:
        out.write(result_message(outcome, color=color) + '\n')
    out.flush()
    return outcome


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    seed = None if args.seed < 0 else args.seed
    try:
        game = Minesweeper(args.rows, args.cols, args.mines_percent, seed=seed)
    except ValueError as e:
        parser.error(str(e))
    color = not args.no_color and sys.stdout.isatty()
    try:
        with raw_input(sys.stdin):
            outcome = run(game, keys(sys.stdin.buffer), sys.stdout, color=color)
    except KeyboardInterrupt:
        print('\n[play] Interrupted', file=sys.stderr)
        return 130
    if outcome is Outcome.CONTINUE:
        print('[play] Input closed before the game ended', file=sys.stderr)
    return 0


if __name__ == '__main__':
    sys.exit(main())
