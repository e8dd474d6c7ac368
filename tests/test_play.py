import io
import os
import termios

import pytest

import play
from termsweeper.engine import Minesweeper, Outcome
from termsweeper.terminal import keys, raw_input, read_key


def test_run_until_win():
    out = io.StringIO()
    game = Minesweeper(3, 3, 0)
    assert play.run(game, 'ds ', out, color=False) is Outcome.WIN
    text = out.getvalue()
    assert text.startswith('\n------ MINESWEEPER ------')
    assert text.count('\033[3A\033[9D') == 3
    assert text.endswith('Congratulations, you win!\n')


def test_run_until_loss():
    out = io.StringIO()
    game = Minesweeper.from_mines(2, 2, [(0, 1)])
    assert play.run(game, 'xd ', out, color=False) is Outcome.LOSS
    assert out.getvalue().endswith(' . [@]\n .  . \n\nOOPS! You lost...\n')


def test_run_stops_when_input_ends():
    out = io.StringIO()
    game = Minesweeper(3, 3, 0)
    assert play.run(game, 'd', out, color=False) is Outcome.CONTINUE
    assert 'win' not in out.getvalue()
    assert game.cursor == (0, 1)


def test_read_key_from_byte_stream():
    stream = io.BytesIO(b'Wf')
    assert read_key(stream) == 'W'
    assert read_key(stream) == 'f'
    assert read_key(stream) is None
    assert list(keys(io.BytesIO(b'ab '))) == ['a', 'b', ' ']


def test_raw_input_leaves_pipes_alone():
    stream = io.BytesIO(b'')
    with raw_input(stream):
        assert read_key(stream) is None


def test_main_plays_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr('sys.stdin', io.TextIOWrapper(io.BytesIO(b'S ')))
    assert play.main(['--rows', '2', '--cols', '2', '--mines-percent', '0']) == 0
    captured = capsys.readouterr()
    assert 'Congratulations, you win!' in captured.out
    assert '\033[32m' not in captured.out
    assert captured.err == ''


def test_main_reports_closed_input(monkeypatch, capsys):
    monkeypatch.setattr('sys.stdin', io.TextIOWrapper(io.BytesIO(b'')))
    assert play.main(['--seed', '4']) == 0
    assert '[play] Input closed' in capsys.readouterr().err


@pytest.mark.parametrize('argv', [
    ['--mines-percent', '51'],
    ['--mines-percent', '-5'],
    ['--rows', '0'],
    ['--cols', '-2'],
])
def test_main_rejects_bad_configuration(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        play.main(argv)
    assert exc.value.code == 2
    assert 'error' in capsys.readouterr().err


def test_raw_input_sets_cbreak_and_restores_after_error():
    pty = pytest.importorskip('pty')
    master, slave = pty.openpty()
    try:
        with open(slave, 'rb', buffering=0, closefd=False) as stream:
            saved = termios.tcgetattr(slave)
            with pytest.raises(RuntimeError):
                with raw_input(stream):
                    lflag = termios.tcgetattr(slave)[3]
                    assert not lflag & termios.ICANON
                    assert not lflag & termios.ECHO
                    raise RuntimeError('boom')
            assert termios.tcgetattr(slave) == saved
    finally:
        os.close(master)
        os.close(slave)


def test_main_returns_130_on_ctrl_c(monkeypatch, capsys):
    def interrupted(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(play, 'run', interrupted)
    monkeypatch.setattr('sys.stdin', io.TextIOWrapper(io.BytesIO(b'')))
    assert play.main([]) == 130
    assert '[play] Interrupted' in capsys.readouterr().err
