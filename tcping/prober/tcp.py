# tcping/prober/tcp.py
import errno
import logging
import os
import select
import socket
import time
from typing import Optional

from tcping.engine.cancel import CancelToken
from tcping.prober.base import Prober
from tcping.schemas import AttemptResult, ResolvedTarget

logger = logging.getLogger(__name__)

_IN_PROGRESS = {errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EALREADY}
if hasattr(errno, "WSAEWOULDBLOCK"):
    _IN_PROGRESS.add(errno.WSAEWOULDBLOCK)


class ConnectCancelled(Exception):
    pass


def _format_sockaddr(sockaddr) -> str:
    host, port = sockaddr[0], sockaddr[1]
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _describe(exc: OSError) -> str:
    if isinstance(exc, socket.timeout):
        return "connection timed out"
    return exc.strerror or str(exc)


class TcpProber(Prober):
    """
    Plain TCP connect probe. The handshake is the whole measurement: the
    socket is closed as soon as connect() completes, no payload is sent.
    """

    def __init__(self, timeout_ms: int = 1000):
        self.timeout_ms = timeout_ms

    def _connect(self, cancel: CancelToken, target: ResolvedTarget) -> socket.socket:
        family = socket.AF_INET6 if target.family == "v6" else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setblocking(False)
            err = sock.connect_ex(target.sockaddr)
            if err == 0:
                return sock
            if err not in _IN_PROGRESS:
                raise OSError(err, os.strerror(err))

            # wait for whichever comes first: handshake, cancel or timeout
            timeout_s = self.timeout_ms / 1000.0
            readable, writable, failed = select.select([cancel], [sock], [sock], timeout_s)
            if cancel in readable:
                raise ConnectCancelled()
            if not writable and not failed:
                raise socket.timeout("timed out")

            err = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
            if err != 0:
                raise OSError(err, os.strerror(err))
            return sock
        except BaseException:
            sock.close()
            raise

    def probe_once(self, cancel: CancelToken, target: ResolvedTarget, seq: int) -> AttemptResult:
        sock: Optional[socket.socket] = None
        error: Optional[str] = None

        start = time.perf_counter()
        try:
            sock = self._connect(cancel, target)
        except ConnectCancelled:
            pass
        except OSError as e:
            error = _describe(e)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        try:
            # parent cancellation wins over whatever the connect produced
            if cancel.is_set():
                logger.debug("seq=%d to %s aborted by cancellation", seq, target.endpoint)
                return {"seq": seq, "elapsed_ms": elapsed_ms, "status": "interrupted"}

            if sock is None:
                logger.debug("seq=%d to %s failed: %s", seq, target.endpoint, error)
                return {"seq": seq, "elapsed_ms": elapsed_ms, "status": "failure", "error": error}

            return {
                "seq": seq,
                "elapsed_ms": elapsed_ms,
                "status": "success",
                "local_addr": _format_sockaddr(sock.getsockname()),
                "remote_addr": target.endpoint,
            }
        finally:
            if sock is not None:
                sock.close()
