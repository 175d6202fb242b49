# tcping/prober/fake.py
from collections import deque

from tcping.prober.base import Prober

HANG = "hang"


class FakeProber(Prober):
    """
    script: iterable of AttemptResult-like dicts returned one per call, in order.
    seq is filled in from the call. The HANG marker blocks until the token is
    cancelled and then reports an interrupted attempt. When the script runs
    dry every call is a refused connection.
    """
    def __init__(self, script=None):
        self.script = deque(script or [])
        self.calls = []

    def probe_once(self, cancel, target, seq):
        self.calls.append(seq)
        step = self.script.popleft() if self.script else None

        if step == HANG:
            cancel.wait()
            return {"seq": seq, "elapsed_ms": 0.0, "status": "interrupted"}

        if step is None:
            step = {"status": "failure", "elapsed_ms": 0.05, "error": "Connection refused"}

        event = {"elapsed_ms": 0.0}
        event.update(step)
        event["seq"] = seq
        if event["status"] == "success":
            event.setdefault("local_addr", "127.0.0.1:50000")
            event.setdefault("remote_addr", target.endpoint)
        return event
