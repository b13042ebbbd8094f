import socket

import pytest

from autosathi.dev_server import find_available_port, is_port_available


@pytest.fixture
def busy_port():
    """A port held open on localhost for the duration of the test"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        s.listen(1)
        yield s.getsockname()[1]


def test_busy_port_is_not_available(busy_port) -> None:
    assert is_port_available("127.0.0.1", busy_port) is False


def test_search_skips_busy_port(busy_port) -> None:
    port = find_available_port("127.0.0.1", busy_port, search_range=20)

    assert port != busy_port
    assert busy_port < port <= busy_port + 20


def test_search_gives_up(busy_port) -> None:
    with pytest.raises(RuntimeError):
        find_available_port("127.0.0.1", busy_port, search_range=0)
