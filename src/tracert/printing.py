import locale
import sys
from enum import StrEnum

from tracert.coloring import Color

__all__ = ["eprint", "wprint", "supports_utf8", "Assets"]


def eprint(
        msg: str,
        /,
        *,
        terminate: bool = True,
        exit_code: int = 1,
        flush: bool = False,
        precedence: str = "error",
        end: str = "\n",
) -> None:
    """
    Print an error message to stderr and exit the program if needed.
    """
    if not msg:
        return
    sys.stderr.write(f"{Color.red(Color.bold(f'{precedence}'))}: {msg}{end}")
    if flush:
        sys.stderr.flush()
    if terminate:
        sys.exit(exit_code)


def wprint(
        msg: str,
        /,
        *,
        flush: bool = False,
        precedence: str = "warning",
        end: str = "\n",
) -> None:
    """
    Print a warning message to stderr.
    """
    if not msg:
        return
    sys.stderr.write(f"{Color.yellow(Color.bold(f'{precedence}'))}: {msg}{end}")
    if flush:
        sys.stderr.flush()


def supports_utf8() -> bool:
    """
    Check if the current system supports UTF-8.
    """
    is_a_tty = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    return locale.getpreferredencoding().lower() == "utf-8" and is_a_tty


class Assets(StrEnum):
    """
    UTF-8 characters used by the trace output and their ASCII equivalents if
    UTF-8 is not supported.
    """

    RIGHTWARDS_ARROW = "→" if supports_utf8() else "->"
    TIMEOUT_MARK = "*"
