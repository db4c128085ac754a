import io
from collections.abc import Callable, Iterator

import pytest

import tracert.coloring as coloring
from tracert.coloring import RGB, Color


class TTY(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.fixture
def as_tty(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[], None]]:
    """
    Make stdout look like a terminal. Call it from the test body: output
    capture rebinds `sys.stdout` between fixture setup and the test call.
    """
    for var in ("NO_COLOR", "COLORTERM", "ITERM_SESSION_ID", "WT_SESSION"):
        monkeypatch.delenv(var, raising=False)
    coloring.enable_colors()

    def patch() -> None:
        monkeypatch.setattr("sys.stdout", TTY())

    yield patch
    coloring.enable_colors()


def test_ansi(as_tty: Callable[[], None]) -> None:
    as_tty()
    assert Color.red("x") == "\x1b[0;31mx\x1b[0m"
    assert Color.color("x", "red bold") == "\x1b[0;31m\x1b[1mx\x1b[0m"


def test_true_color(as_tty: Callable[[], None], monkeypatch: pytest.MonkeyPatch) -> None:
    as_tty()
    monkeypatch.setenv("COLORTERM", "truecolor")
    assert Color.red("x") == "\x1b[38;2;255;92;79mx\x1b[0m"
    assert Color.color("x", RGB(1, 2, 3, bold=True)) == "\x1b[1;38;2;1;2;3mx\x1b[0m"


def test_disable_colors(as_tty: Callable[[], None]) -> None:
    as_tty()
    coloring.disable_colors()
    assert not coloring.supports_colors()
    assert Color.yellow("x") == "x"


def test_no_color_env(as_tty: Callable[[], None], monkeypatch: pytest.MonkeyPatch) -> None:
    as_tty()
    monkeypatch.setenv("NO_COLOR", "1")
    assert Color.cyan("x") == "x"


def test_none_color() -> None:
    assert Color.color("x", None) == "x"


def test_palettes_match() -> None:
    styles = {"normal", "bold"}
    assert Color.ANSI_COLORS.keys() - styles == Color.TRUE_COLORS.keys()
    assert Color.TRUE_COLORS.keys() == {
        "red", "green", "yellow", "blue", "pink", "cyan", "light_gray",
    }
