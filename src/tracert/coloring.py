"""
Colorify terminal output.
"""


import os
import sys
from dataclasses import dataclass
from typing import Final

__all__ = [
    "disable_colors",
    "enable_colors",
    "supports_colors",
    "supports_true_color",
    "RGB",
    "Color",
]


_on = True


def disable_colors() -> None:
    global _on
    _on = False


def enable_colors() -> None:
    global _on
    _on = True


def supports_colors() -> bool:
    """
    Check if ANSI colors are supported.

    Returns
    -------
    bool
        True if ansi colors are supported. False otherwise.
    """
    if not _on:
        return False

    if "NO_COLOR" in os.environ:
        return False

    supported_platform = (os.name != "nt" or "ANSICON" in os.environ
                          or "WT_SESSION" in os.environ)
    is_a_tty = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    return supported_platform and is_a_tty


def supports_true_color() -> bool:
    """
    Check if true colors are supported.

    Returns
    -------
    bool
        True if true colors are supported. False otherwise.
    """
    if not supports_colors():
        return False

    true_color_terms = {"truecolor", "24bit"}

    if os.environ.get("COLORTERM", "") in true_color_terms:
        return True

    return "ITERM_SESSION_ID" in os.environ or "WT_SESSION" in os.environ


@dataclass(frozen=True)
class RGB:
    r: int
    g: int
    b: int
    bold: bool = False


class Color:
    """
    Colorify terminal output.
    """

    ANSI_COLORS: Final = {
        "red": "\x1b[0;31m",
        "green": "\x1b[0;32m",
        "yellow": "\x1b[0;33m",
        "blue": "\x1b[0;34m",
        "pink": "\x1b[0;35m",
        "cyan": "\x1b[0;36m",
        "light_gray": "\x1b[0;37m",
        "normal": "\x1b[0m",
        "bold": "\x1b[1m",
    }

    # true color variants, picked over ANSI when the terminal allows it
    TRUE_COLORS: Final = {
        "red": RGB(255, 92, 79),
        "green": RGB(5, 255, 125),
        "yellow": RGB(253, 157, 99),
        "blue": RGB(4, 165, 229),
        "pink": RGB(255, 71, 215),
        "cyan": RGB(28, 255, 228),
        "light_gray": RGB(160, 160, 160),
    }

    @staticmethod
    def red(msg: str, /) -> str:
        return Color.color(msg, "red")

    @staticmethod
    def green(msg: str, /) -> str:
        return Color.color(msg, "green")

    @staticmethod
    def yellow(msg: str, /) -> str:
        return Color.color(msg, "yellow")

    @staticmethod
    def blue(msg: str, /) -> str:
        return Color.color(msg, "blue")

    @staticmethod
    def cyan(msg: str, /) -> str:
        return Color.color(msg, "cyan")

    @staticmethod
    def light_gray(msg: str, /) -> str:
        return Color.color(msg, "light_gray")

    @staticmethod
    def bold(msg: str, /) -> str:
        return Color.color(msg, "bold")

    @staticmethod
    def color(msg: str, color: RGB | str | None = None, /) -> str:
        """
        Color a message.

        Parameters
        ----------
        msg : str
            String to be colored.

        color : RGB | str | None
            Color name (or space separated names, e.g. "red bold") or an RGB
            object. (default None)

        Returns
        -------
        str
            Colorified `msg`.
        """
        if color is None:
            return msg
        elif isinstance(color, RGB):
            return Color.rgb(msg, color)

        true_color = Color.TRUE_COLORS.get(color)
        if true_color is not None and supports_true_color():
            return Color.rgb(msg, true_color)

        return Color.ansi(msg, color)

    @staticmethod
    def ansi(msg: str, color_or_colors: str, /) -> str:
        """
        Color a message using ANSI color.

        Parameters
        ----------
        msg : str
            String to be colored.

        color_or_colors : str
            Color name or names.

        Returns
        -------
        str
            Colorified `msg`.
        """
        if not supports_colors() or not len(color_or_colors):
            return msg

        colors = Color.ANSI_COLORS
        text = [colors[color] for color in color_or_colors.split() if color in colors]

        text.append(str(msg))
        text.append(colors["normal"])

        return "".join(text)

    @staticmethod
    def rgb(msg: str, color: RGB, /) -> str:
        """
        Color a message using RGB values.
        """
        if not supports_true_color():
            return msg

        bold_prefix = "1;" if color.bold else ""
        return f"\x1b[{bold_prefix}38;2;{color.r};{color.g};{color.b}m{msg}\x1b[0m"
