# tcping/output.py
import sys
import threading

from tcping.config import COPYRIGHT, PROGRAM_NAME, VERSION
from tcping.engine.state import StatsSnapshot
from tcping.schemas import AttemptResult, ResolvedTarget

GREEN = "32"
RED = "31"
CYAN = "36"


def color_text(text: str, code: str, use_color: bool) -> str:
    if not use_color:
        return text
    return f"\033[{code}m{text}\033[0m"


def version_text() -> str:
    return f"{PROGRAM_NAME} version {VERSION}\n{COPYRIGHT}"


class Reporter:
    """Everything the user sees on stdout goes through here."""

    def __init__(self, stream=None, color: bool = False, verbose: bool = False):
        self.stream = stream if stream is not None else sys.stdout
        self.color = color
        self.verbose = verbose
        self._lock = threading.Lock()

    def _write(self, text: str) -> None:
        with self._lock:
            self.stream.write(text)
            self.stream.flush()

    def header(self, target: ResolvedTarget) -> None:
        self._write(
            f"TCP ping {target.host} ({target.family_label} - {target.ip}) port {target.port}\n"
        )

    def attempt(self, result: AttemptResult, target: ResolvedTarget) -> None:
        seq = result["seq"]
        elapsed = result.get("elapsed_ms", 0.0)
        where = f"{target.ip}:{target.port}"

        if result["status"] == "failure":
            line = f"TCP connection to {where} failed: seq={seq} error={result.get('error')}\n"
            self._write(color_text(line, RED, self.color))
            if self.verbose:
                self._write(f"  details: attempt took {elapsed:.2f}ms, target {target.endpoint}\n")
            return

        line = f"Reply from {where}: seq={seq} time={elapsed:.2f}ms\n"
        self._write(color_text(line, GREEN, self.color))
        if self.verbose:
            self._write(
                f"  details: local={result.get('local_addr')}, remote={result.get('remote_addr')}\n"
            )

    def attempt_aborted(self) -> None:
        self._write(color_text("\nOperation interrupted, connection attempt aborted\n", CYAN, self.color))

    def interrupted(self) -> None:
        self._write("\nOperation interrupted.\n")

    def summary(self, stats: StatsSnapshot, host: str) -> None:
        lines = [f"\n\n--- {host} TCP ping statistics ---\n"]
        if stats.sent > 0:
            lines.append(
                f"Sent = {stats.sent}, Received = {stats.responded}, "
                f"Lost = {stats.lost} ({stats.loss_pct:.1f}% loss)\n"
            )
            if stats.responded > 0:
                lines.append(
                    f"RTT: min = {stats.min_ms:.2f}ms, max = {stats.max_ms:.2f}ms, "
                    f"avg = {stats.avg_ms:.2f}ms\n"
                )
        self._write("".join(lines))
