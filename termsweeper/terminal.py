from __future__ import annotations
import termios
import tty
from contextlib import contextmanager
from typing import IO, Iterator, Optional


@contextmanager
def raw_input(stream: IO) -> Iterator[None]:
    """Turn off line buffering and echo on a TTY for the duration of the block.

    Uses cbreak mode, so Ctrl-C still raises KeyboardInterrupt. The previous
    attributes are restored on every exit path. Non-TTY streams are left alone.
    """
    if not stream.isatty():
        yield
        return
    fd = stream.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSAFLUSH, old_settings)


def read_key(stream: IO) -> Optional[str]:
    data = stream.read(1)
    if not data:
        return None
    if isinstance(data, bytes):
        return data.decode('latin-1')
    return data


def keys(stream: IO) -> Iterator[str]:
    while True:
        key = read_key(stream)
        if key is None:
            return
        yield key
