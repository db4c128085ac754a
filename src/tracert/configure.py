import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal

__all__ = ["DEFAULT_CONFIG_DIR", "DEFAULT_CONFIG", "configure", "is_configured"]


DEFAULT_CONFIG_DIR: Final = "~/.config/tracert"

# Default config data
DEFAULT_CONFIG: Final[dict[str, Any]] = {
    "max_hops": 30,
    "timeout": 4000,
    "colors": True,
    "log": False,
    "log_dir": f"{DEFAULT_CONFIG_DIR}/logs",
}


def is_configured(dest_dir: str | None = None) -> bool:
    if dest_dir is None:
        dest_dir = DEFAULT_CONFIG_DIR
    return (Path(dest_dir) / ".tracertcfgok").expanduser().resolve().exists()


@dataclass(frozen=True)
class _PathSpec:
    path: str
    type: Literal["dir", "file"]


def configure(dest_dir: str | None = None) -> None:
    if dest_dir is None:
        dest_dir = DEFAULT_CONFIG_DIR

    # Directories/files to populate
    paths = [
        _PathSpec(f"{dest_dir}/", "dir"),
        _PathSpec(f"{dest_dir}/logs/", "dir"),
        _PathSpec(f"{dest_dir}/logs/trace.log", "file"),
    ]

    for path in paths:
        if path.type == "dir":
            Path(path.path).expanduser().resolve().mkdir(mode=0o755, parents=True,
                                                         exist_ok=True)
        else:
            Path(path.path).expanduser().resolve().touch(mode=0o644, exist_ok=True)

    conf_data = dict(DEFAULT_CONFIG)
    conf_data["log_dir"] = f"{dest_dir}/logs"

    # Never clobber a config the user already edited
    conf_file = Path(f"{dest_dir}/config.json").expanduser().resolve()
    if not conf_file.exists():
        with conf_file.open("w") as f:
            f.write(json.dumps(conf_data, indent=2))

    Path(f"{dest_dir}/.tracertcfgok").expanduser().resolve().touch(mode=0o644,
                                                                   exist_ok=True)
