from __future__ import annotations

import shutil
import signal
import sys
from dataclasses import dataclass
from typing import Callable


CSI = "\x1b["

ALT_SCREEN_ON = CSI + "?1049h"
ALT_SCREEN_OFF = CSI + "?1049l"
CURSOR_HIDE = CSI + "?25l"
CURSOR_SHOW = CSI + "?25h"
HOME_CLEAR = CSI + "H" + CSI + "2J"


def _sgr(*codes: int) -> str:
    return CSI + ";".join(str(c) for c in codes) + "m"


@dataclass(frozen=True, slots=True)
class Theme:
    title: str = _sgr(36, 1)  # cyan bold
    revealed: str = _sgr(33, 1)  # yellow bold
    pending: str = _sgr(37)  # white
    dim: str = _sgr(90)  # bright black
    reset: str = _sgr(0)


def split_revealed(text: str, revealed: int) -> tuple[str, str]:
    revealed = max(0, min(len(text), revealed))
    return text[:revealed], text[revealed:]


def _emit(*parts: str) -> None:
    sys.stdout.write("".join(parts))
    sys.stdout.flush()


class AnsiRenderer:
    """
    Full-frame karaoke renderer: the active row shows its revealed prefix
    highlighted, other rows are dimmed. Redraws the last frame on SIGWINCH.
    """

    def __init__(self, use_alt_screen: bool = True, theme: Theme | None = None):
        self.use_alt_screen = use_alt_screen
        self.theme = theme or Theme()
        self._entered = False
        self._resize_handler: Callable[..., None] | None = None
        self._last_render_args: tuple[str, list[str], int, int] | None = None

    def __enter__(self):
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exit()

    def enter(self) -> None:
        if self._entered:
            return
        _emit(ALT_SCREEN_ON if self.use_alt_screen else "", CURSOR_HIDE, HOME_CLEAR)
        self._entered = True
        self._resize_handler = self._redraw
        signal.signal(signal.SIGWINCH, self._resize_handler)

    def exit(self) -> None:
        if not self._entered:
            return
        if self._resize_handler is not None:
            signal.signal(signal.SIGWINCH, signal.SIG_DFL)
            self._resize_handler = None
        _emit(self.theme.reset, CURSOR_SHOW, ALT_SCREEN_OFF if self.use_alt_screen else "")
        self._entered = False
        self._last_render_args = None

    def _redraw(self, signum=None, frame=None) -> None:
        if self._last_render_args:
            self.render(*self._last_render_args)

    def _paint(self, text: str, color: str) -> str:
        if not text:
            return ""
        reset = self.theme.reset
        return color + text.replace("\n", f"{reset}\n{color}") + reset

    def frame(self, title: str, rows: list[str], current_idx: int, revealed: int) -> list[str]:
        """Build the screen lines without writing them; clipped to the terminal height."""
        height = shutil.get_terminal_size(fallback=(80, 24)).lines
        t = self.theme
        out = [f"{t.title}♫ {title} ♫{t.reset}"]
        for i, row in enumerate(rows):
            if i != current_idx:
                painted = self._paint(row, t.dim)
            else:
                done, rest = split_revealed(row, revealed)
                painted = self._paint(done, t.revealed) + self._paint(rest, t.pending)
            # wrapped rows carry their own break
            out += painted.split("\n")
        return out[: max(height, 2)]

    def render(self, title: str, rows: list[str], current_idx: int, revealed: int = 0) -> None:
        self._last_render_args = (title, rows, current_idx, revealed)
        _emit(HOME_CLEAR, "\n".join(self.frame(title, rows, current_idx, revealed)), self.theme.reset)
