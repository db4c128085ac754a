"""
Read, write, print trace log files.
"""


import datetime
from pathlib import Path
from typing import Literal

from tracert.coloring import Color

__all__ = ["LogRWP"]


class LogRWP:
    """
    Read, write, print trace log files.
    """

    def __init__(self, path: str, mode: Literal["read", "write"], /) -> None:
        self._logdir_path = Path(path).expanduser().resolve()
        self._mode = mode

    def write(self, name: str, msg: str, /) -> int:
        """
        Append a timestamped message to a log file, creating the log
        directory and file when needed.

        Parameters
        ----------
        name : str
            File to which write a message.

        msg : str
            Message to write.

        Returns
        -------
        int
            The number of characters written.
        """
        if self._mode != "write":
            return 0

        self._logdir_path.mkdir(parents=True, exist_ok=True)
        fpath = self._logdir_path / name

        datefmt = datetime.datetime.today().strftime("%Y-%m-%d %I:%M:%S %p")
        fmt = f"[{datefmt}]: {msg}\n"

        with fpath.open("a+") as f:
            return f.write(fmt)

    def write_lines(self, name: str, lines: list[str], /) -> int:
        return sum(self.write(name, line) for line in lines)

    def print(self, name: str, /) -> None:
        """
        Print the contents of a log file.

        Parameters
        ----------
        name : str
            Name of a log file to print.
        """
        if self._mode != "read":
            return

        fpath = self._logdir_path / name

        if not fpath.is_file():
            print("there's nothing to print")
            return

        with fpath.open("r") as f:
            for line in f:
                date, sep, msg = line.partition(": ")
                if not sep:
                    print(line, end="")
                    continue
                print(f"{Color.yellow(date)}: {msg}", end="")
