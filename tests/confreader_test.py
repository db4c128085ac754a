import json
from pathlib import Path

import pytest

from tracert.configure import DEFAULT_CONFIG
from tracert.confreader import ConfError, ConfReader


def write_conf(tmp_path: Path, data) -> str:
    path = tmp_path / "config.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return str(path)


def test_read_full_config(tmp_path: Path) -> None:
    data = {
        "max_hops": 12,
        "timeout": 500,
        "colors": False,
        "log": True,
        "log_dir": str(tmp_path / "logs"),
    }
    assert ConfReader(write_conf(tmp_path, data)).read() == data


def test_missing_keys_take_defaults(tmp_path: Path) -> None:
    conf = ConfReader(write_conf(tmp_path, {"timeout": 1000})).read()

    assert conf["timeout"] == 1000
    assert conf["max_hops"] == DEFAULT_CONFIG["max_hops"]
    assert conf["colors"] is DEFAULT_CONFIG["colors"]


def test_empty_object_is_all_defaults(tmp_path: Path) -> None:
    assert ConfReader(write_conf(tmp_path, {})).read() == DEFAULT_CONFIG


def test_unknown_keys_are_kept(tmp_path: Path) -> None:
    conf = ConfReader(write_conf(tmp_path, {"theme": "dark"})).read()
    assert conf["theme"] == "dark"


def test_out_of_range_values_are_not_rejected_here(tmp_path: Path) -> None:
    # range checks belong to the tracer
    conf = ConfReader(write_conf(tmp_path, {"max_hops": 0, "timeout": -1})).read()
    assert conf["max_hops"] == 0
    assert conf["timeout"] == -1


@pytest.mark.parametrize("data", [
    "{not json",
    "[1, 2, 3]",
    {"max_hops": "thirty"},
    {"max_hops": True},
    {"timeout": 4.5},
    {"colors": "yes"},
    {"log_dir": None},
])
def test_invalid_config(tmp_path: Path, data) -> None:
    with pytest.raises(ConfError):
        ConfReader(write_conf(tmp_path, data)).read()


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfError, match="does not exist"):
        ConfReader(str(tmp_path / "nope.json")).read()


def test_print(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    conf = ConfReader(write_conf(tmp_path, {"max_hops": 7}))
    conf.read()
    conf.print()

    out = capsys.readouterr().out
    assert str(conf.path) in out
    assert "max_hops: 7" in out
    assert "timeout: 4000" in out


@pytest.mark.parametrize("raw", [
    b"\xff",
    b'{"log_dir": "\xff\xfe"}',
])
def test_config_not_utf8(tmp_path: Path, raw: bytes) -> None:
    path = tmp_path / "config.json"
    path.write_bytes(raw)

    with pytest.raises(ConfError):
        ConfReader(str(path)).read()


def test_unreadable_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = Path(write_conf(tmp_path, {}))

    def deny(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "open", deny)

    with pytest.raises(ConfError, match="Permission denied"):
        ConfReader(str(path)).read()
