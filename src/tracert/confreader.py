"""
Config file reader.
"""


import json
from pathlib import Path
from typing import Any

from tracert.coloring import Color
from tracert.configure import DEFAULT_CONFIG

__all__ = ["ConfError", "ConfReader"]


class ConfError(Exception):
    """
    The config file is missing, not valid JSON, or holds a value of the
    wrong type.
    """


class ConfReader:
    """
    Config file reader.
    """

    def __init__(self, file: str, /) -> None:
        self._file = Path(file).expanduser().resolve()
        self._data: dict[str, Any] = {}

    @property
    def path(self) -> Path:
        return self._file

    def read(self) -> dict[str, Any]:
        """
        Read the contents of the config file. Keys missing from the file take
        their default values.

        Returns
        -------
        dict[str, Any]
            The contents of the config file.

        Raises
        ------
        ConfError
            If the file does not exist, cannot be parsed, or a value has an
            unexpected type.
        """
        if not self._file.is_file():
            raise ConfError(f"supplied config path does not exist: {self._file}")

        try:
            with self._file.open("r") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            raise ConfError(f"{self._file}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfError(f"{self._file}: expected a JSON object")

        data = dict(DEFAULT_CONFIG)
        data.update(raw)

        for key, default in DEFAULT_CONFIG.items():
            value = data[key]
            # bool is an int subclass, don't let `true` pass for a hop count
            if (not isinstance(value, type(default))
                    or (isinstance(value, bool) and not isinstance(default, bool))):
                raise ConfError(f"{self._file}: '{key}' must be of type "
                                f"{type(default).__name__}, got {value!r}")

        self._data = data
        return self._data

    def print(self) -> None:
        """
        Print the contents of the config file.
        """
        print(f"path: {Color.blue(str(self._file))}", end="\n\n")

        for key, value in self._data.items():
            print(f"{Color.cyan(key)}: {Color.green(json.dumps(value))}")
