# tcping/engine/shutdown.py
import logging
import queue
import signal
import threading

from tcping.engine.controller import ProbeLoop
from tcping.engine.state import StatsSnapshot
from tcping.output import Reporter

logger = logging.getLogger(__name__)

DONE = "done"
INTERRUPTED = "interrupted"

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """
    Runs the probe loop on a background thread and waits for whichever comes
    first: an interrupt or the loop finishing. Either way the loop thread is
    joined before the one and only summary is printed.
    """

    def __init__(self, loop: ProbeLoop, reporter: Reporter, signals=DEFAULT_SIGNALS):
        self.loop = loop
        self.reporter = reporter
        self.signals = tuple(signals)
        # SimpleQueue.put is reentrant, so a signal handler may call it
        self._events = queue.SimpleQueue()
        self.outcome = None
        self.error = None

    def interrupt(self) -> None:
        self._events.put(INTERRUPTED)

    def _on_signal(self, signum, frame):
        logger.debug("received signal %d", signum)
        self.interrupt()

    def _drive(self) -> None:
        try:
            self.loop.run()
        except BaseException as e:
            # handed to the main thread, re-raised from run()
            self.error = e
        finally:
            self._events.put(DONE)

    def _install(self) -> dict:
        previous = {}
        for sig in self.signals:
            previous[sig] = signal.signal(sig, self._on_signal)
        return previous

    def run(self) -> StatsSnapshot:
        previous = self._install()
        worker = threading.Thread(target=self._drive, name="tcping-loop", daemon=True)
        try:
            worker.start()
            self.outcome = self._events.get()
            if self.outcome == INTERRUPTED:
                self.reporter.interrupted()
                self.loop.cancel.cancel()
            worker.join()
            logger.debug("loop thread joined (%s)", self.outcome)
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler if handler is not None else signal.SIG_DFL)

        snapshot = self.loop.stats.snapshot()
        self.reporter.summary(snapshot, self.loop.target.host)
        if self.error is not None:
            raise self.error
        return snapshot
