# tests/test_prober_unit.py
import socket
import threading
import time

import pytest

from tcping.engine.cancel import CancelToken
from tcping.prober.tcp import TcpProber
from tcping.schemas import ResolvedTarget


@pytest.fixture
def listener():
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(8)
    yield srv
    srv.close()


@pytest.fixture
def closed_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture
def cancel():
    with CancelToken() as token:
        yield token


def loopback(port):
    return ResolvedTarget(host="localhost", ip="127.0.0.1", family="v4", port=port)


def test_success_against_listening_port(listener, cancel):
    port = listener.getsockname()[1]
    res = TcpProber(timeout_ms=2000).probe_once(cancel, loopback(port), 0)

    assert res["status"] == "success"
    assert res["seq"] == 0
    assert res["elapsed_ms"] >= 0.0
    assert res["remote_addr"] == f"127.0.0.1:{port}"
    assert res["local_addr"].startswith("127.0.0.1:")


def test_refused_port_fails_within_timeout(closed_port, cancel):
    timeout_ms = 1000
    started = time.monotonic()
    res = TcpProber(timeout_ms=timeout_ms).probe_once(cancel, loopback(closed_port), 4)
    took_ms = (time.monotonic() - started) * 1000

    assert res["status"] == "failure"
    assert res["seq"] == 4
    assert res["error"]
    assert took_ms < timeout_ms + 500


def test_cancelled_token_reports_interrupted(listener, cancel):
    """Cancellation wins even when the handshake itself would succeed."""
    cancel.cancel()
    port = listener.getsockname()[1]
    res = TcpProber(timeout_ms=2000).probe_once(cancel, loopback(port), 2)

    assert res["status"] == "interrupted"
    assert "error" not in res


def test_token_is_selectable_after_cancel(cancel):
    import select

    readable, _, _ = select.select([cancel], [], [], 0)
    assert readable == []
    cancel.cancel()
    cancel.cancel()
    readable, _, _ = select.select([cancel], [], [], 1)
    assert readable == [cancel]
    assert cancel.wait(0)


@pytest.fixture
def stalled_target():
    """
    A listener whose accept backlog is full, so new handshakes get no answer.
    Skips when the kernel still completes connects (e.g. SYN cookies).
    """
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(0)
    addr = srv.getsockname()
    fillers = []
    stalled = False
    try:
        for _ in range(16):
            c = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            c.settimeout(0.2)
            fillers.append(c)
            try:
                c.connect(addr)
            except socket.timeout:
                stalled = True
                break
            except OSError:
                break
        if not stalled:
            pytest.skip("could not saturate the listen backlog on this host")
        yield loopback(addr[1])
    finally:
        for c in fillers:
            c.close()
        srv.close()


def test_in_flight_connect_wakes_on_cancel(stalled_target, cancel):
    timer = threading.Timer(0.3, cancel.cancel)
    timer.start()
    started = time.monotonic()
    try:
        res = TcpProber(timeout_ms=10000).probe_once(cancel, stalled_target, 7)
    finally:
        timer.cancel()
    took = time.monotonic() - started

    assert res["status"] == "interrupted"
    assert res["seq"] == 7
    assert took < 3


def test_unanswered_connect_times_out(stalled_target, cancel):
    timeout_ms = 300
    started = time.monotonic()
    res = TcpProber(timeout_ms=timeout_ms).probe_once(cancel, stalled_target, 1)
    took_ms = (time.monotonic() - started) * 1000

    assert res["status"] == "failure"
    assert res["error"] == "connection timed out"
    assert timeout_ms - 50 <= took_ms < timeout_ms + 500
