import argparse

import pytest

from cartapi import __main__ as bootstrap
from cartapi.db import session as db


@pytest.fixture
def started(monkeypatch):
    monkeypatch.setattr(db, "engine", db.engine)
    monkeypatch.setattr(bootstrap, "configure_logging", lambda level: None)
    calls = []
    monkeypatch.setattr(bootstrap.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    return calls


@pytest.mark.parametrize(
    "addr, expected",
    [
        (":5120", ("0.0.0.0", 5120)),
        ("127.0.0.1:8080", ("127.0.0.1", 8080)),
    ],
)
def test_parse_addr(addr, expected):
    assert bootstrap.parse_addr(addr) == expected


@pytest.mark.parametrize("addr", ["localhost", "localhost:", "localhost:http", ":0", ":70000"])
def test_parse_addr_rejects_malformed(addr):
    with pytest.raises(argparse.ArgumentTypeError):
        bootstrap.parse_addr(addr)


def test_malformed_addr_is_a_usage_error(started, capsys):
    with pytest.raises(SystemExit) as excinfo:
        bootstrap.main(["--addr", "localhost"])

    assert excinfo.value.code == 2
    assert "expected HOST:PORT" in capsys.readouterr().err
    assert started == []


def test_missing_database_file_is_fatal(tmp_path, started):
    missing = tmp_path / "db.sqlite3"

    assert bootstrap.main(["--data", str(missing)]) == 1
    assert not missing.exists()
    assert started == []


def test_unopenable_database_exits_non_zero(tmp_path, started):
    # a directory cannot be opened as a database file
    assert bootstrap.main(["--data", str(tmp_path)]) == 1
    assert started == []


def test_starts_server(tmp_path, started):
    data = tmp_path / "db.sqlite3"
    data.touch()

    assert bootstrap.main(["--addr", "127.0.0.1:9999", "--data", str(data)]) == 0
    assert started == [{"host": "127.0.0.1", "port": 9999, "log_config": None}]
