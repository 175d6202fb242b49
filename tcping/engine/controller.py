# tcping/engine/controller.py

import logging

from tcping.config import Settings
from tcping.engine.cancel import CancelToken
from tcping.engine.state import Statistics
from tcping.output import Reporter
from tcping.prober.base import Prober
from tcping.schemas import ResolvedTarget

logger = logging.getLogger(__name__)

COUNT_REACHED = "count_reached"
CANCELLED = "cancelled"


class ProbeLoop:
    def __init__(self, prober: Prober, target: ResolvedTarget, settings: Settings,
                 stats: Statistics, reporter: Reporter, cancel: CancelToken):
        self.prober = prober
        self.target = target
        self.s = settings
        self.stats = stats
        self.reporter = reporter
        self.cancel = cancel
        self.completed = 0
        self.stop_reason = None

    def run(self) -> str:
        logger.debug("probe loop starting: target=%s count=%d interval=%dms",
                     self.target.endpoint, self.s.count, self.s.interval_ms)
        self.stop_reason = self._run()
        logger.debug("probe loop done: %s after %d attempts", self.stop_reason, self.completed)
        return self.stop_reason

    def _run(self) -> str:
        seq = 0
        interval_s = self.s.interval_ms / 1000.0

        while True:
            # -------------------------------
            # 1) Bail out before dialing if already cancelled
            # -------------------------------
            if self.cancel.is_set():
                return CANCELLED

            # -------------------------------
            # 2) One attempt
            # -------------------------------
            result = self.prober.probe_once(self.cancel, self.target, seq)
            if result["status"] == "interrupted":
                # aborted mid-connect: not sent, not lost
                self.reporter.attempt_aborted()
                return CANCELLED

            self.stats.update(result["elapsed_ms"], result["status"] == "success")
            self.completed += 1
            self.reporter.attempt(result, self.target)

            # -------------------------------
            # 3) Bounded runs stop after the last seq
            # -------------------------------
            if not self.s.unbounded and seq >= self.s.count - 1:
                return COUNT_REACHED

            # -------------------------------
            # 4) Wait out the interval unless cancelled first
            # -------------------------------
            if self.cancel.wait(interval_s):
                return CANCELLED

            seq += 1
