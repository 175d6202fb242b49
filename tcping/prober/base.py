# tcping/prober/base.py
from abc import ABC, abstractmethod

from tcping.engine.cancel import CancelToken
from tcping.schemas import AttemptResult, ResolvedTarget


class Prober(ABC):
    @abstractmethod
    def probe_once(self, cancel: CancelToken, target: ResolvedTarget, seq: int) -> AttemptResult:
        """Make exactly one timed connect attempt to target and classify it."""
        raise NotImplementedError
