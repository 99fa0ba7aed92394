import io
import uuid

import pytest

from schemamigrate.sources.driver import (
    SourceDriver,
    list_drivers,
    open_source,
    register,
)


class _EchoDriver(SourceDriver):
    def __init__(self, url=""):
        self.url = url
        self.closed = False

    def open(self, url):
        return _EchoDriver(url)

    def close(self):
        self.closed = True

    def first(self):
        raise FileNotFoundError(self.url)

    def prev(self, version):
        raise FileNotFoundError(self.url)

    def next(self, version):
        raise FileNotFoundError(self.url)

    def read_up(self, version):
        return io.BytesIO(b""), "up"

    def read_down(self, version):
        return io.BytesIO(b""), "down"


def _name():
    return "t" + uuid.uuid4().hex


def test_registered_driver_is_listed():
    name = _name()
    register(name, _EchoDriver())
    assert name in list_drivers()


def test_open_source_dispatches_by_scheme():
    name = _name()
    register(name, _EchoDriver())
    url = f"{name}://host/path"
    driver = open_source(url)
    assert isinstance(driver, _EchoDriver)
    assert driver.url == url


def test_register_twice_raises():
    name = _name()
    register(name, _EchoDriver())
    with pytest.raises(ValueError, match="called twice"):
        register(name, _EchoDriver())


def test_register_none_raises():
    name = _name()
    with pytest.raises(ValueError):
        register(name, None)
    assert name not in list_drivers()


def test_open_source_without_scheme():
    with pytest.raises(ValueError, match="invalid URL scheme"):
        open_source("no-scheme-here")


def test_open_source_unknown_driver():
    name = _name()
    with pytest.raises(ValueError, match=f"unknown driver '{name}'"):
        open_source(f"{name}://x")


def test_context_manager_closes():
    name = _name()
    register(name, _EchoDriver())
    opened = open_source(f"{name}://x")
    with opened as driver:
        assert driver.closed is False
        assert driver.url == f"{name}://x"
    assert opened.closed is True


def test_interface_is_abstract():
    with pytest.raises(TypeError):
        SourceDriver()