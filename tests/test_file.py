import os

import pytest

from schemamigrate.sources.driver import list_drivers, open_source
from schemamigrate.sources.file import FileSource, parse_url
from schemamigrate.sources.migrations import DuplicateMigrationError

STANDARD_FILES = {
    "1_foobar.up.sql": "1 up",
    "1_foobar.down.sql": "1 down",
    "3_foobar.up.sql": "3 up",
    "4_foobar.up.sql": "4 up",
    "4_foobar.down.sql": "4 down",
    "5_foobar.down.sql": "5 down",
    "7_foobar.up.sql": "7 up",
    "7_foobar.down.sql": "7 down",
}

PREV = {0: None, 1: None, 2: None, 3: 1, 4: 3, 5: 4, 6: None, 7: 5, 8: None, 9: None}
NEXT = {0: None, 1: 3, 2: None, 3: 4, 4: 5, 5: 7, 6: None, 7: None, 8: None, 9: None}
HAS_UP = {1, 3, 4, 7}
HAS_DOWN = {1, 4, 5, 7}


def _write(directory, files):
    for name, body in files.items():
        (directory / name).write_text(body)


def _assert_standard_source(d):
    assert d.first() == 1
    for version, expected in PREV.items():
        if expected is None:
            with pytest.raises(FileNotFoundError):
                d.prev(version)
        else:
            assert d.prev(version) == expected
    for version, expected in NEXT.items():
        if expected is None:
            with pytest.raises(FileNotFoundError):
                d.next(version)
        else:
            assert d.next(version) == expected
    for version in range(9):
        if version in HAS_UP:
            body, identifier = d.read_up(version)
            with body:
                assert body.read() == f"{version} up".encode()
            assert identifier == "foobar"
        else:
            with pytest.raises(FileNotFoundError):
                d.read_up(version)
    for version in range(9):
        if version in HAS_DOWN:
            body, identifier = d.read_down(version)
            with body:
                assert body.read() == f"{version} down".encode()
            assert identifier == "foobar"
        else:
            with pytest.raises(FileNotFoundError):
                d.read_down(version)


def test_standard_source(tmp_path):
    _write(tmp_path, STANDARD_FILES)
    d = FileSource().open("file://" + str(tmp_path))
    _assert_standard_source(d)


def test_open_absolute_path(tmp_path):
    _write(tmp_path, {"1_foobar.up.sql": "", "1_foobar.down.sql": ""})
    assert tmp_path.is_absolute()
    d = FileSource().open("file://" + str(tmp_path))
    assert d.path == str(tmp_path)
    assert d.first() == 1


def test_open_with_relative_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "foo").mkdir()
    _write(tmp_path / "foo", {"1_foobar.up.sql": ""})
    expected = os.path.join(os.getcwd(), "foo")

    d = FileSource().open("file://foo")
    assert d.first() == 1
    assert d.path == expected

    d = FileSource().open("file://./foo")
    assert d.first() == 1
    assert d.path == expected


def test_open_defaults_to_current_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    d = FileSource().open("file://")
    assert d.path == os.getcwd()


def test_open_with_duplicate_version(tmp_path):
    _write(tmp_path, {"1_foo.up.sql": "", "1_bar.up.sql": ""})
    with pytest.raises(DuplicateMigrationError):
        FileSource().open("file://" + str(tmp_path))


def test_open_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileSource().open("file://" + str(tmp_path / "missing"))


def test_close(tmp_path):
    _write(tmp_path, {"2_foobar.up.sql": ""})
    d = FileSource().open("file://" + str(tmp_path))
    assert d.first() == 2
    assert d.close() is None


def test_registered_and_opened_by_scheme(tmp_path):
    _write(tmp_path, STANDARD_FILES)
    assert "file" in list_drivers()
    d = open_source("file://" + str(tmp_path))
    assert isinstance(d, FileSource)
    assert d.url == "file://" + str(tmp_path)
    assert d.next(1) == 3


def test_parse_url_absolute():
    assert parse_url("file:///tmp/migrations") == "/tmp/migrations"


def test_parse_url_empty_is_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert parse_url("file://") == os.getcwd()


def test_parse_url_relative_forms(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    expected = os.path.join(os.getcwd(), "foo")
    assert parse_url("file://foo") == expected
    assert parse_url("file://./foo") == expected
    assert parse_url("file:foo") == expected


def test_parse_url_unescapes():
    assert parse_url("file:///tmp/my%20dir") == "/tmp/my dir"