# tcping/config.py
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from tcping.errors import ValidationError
from tcping.schemas import Family

PROGRAM_NAME = "TCPing"
VERSION = "1.7.3"
COPYRIGHT = "Copyright (c) 2025. All rights reserved."

DEFAULT_PORT = 80
DEFAULT_INTERVAL_MS = 1000
DEFAULT_TIMEOUT_MS = 1000
# longest wait select() and Event.wait() accept on every platform
MAX_WAIT_MS = 2**31 - 1

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    family: Family = "auto"
    count: int = 0                          # 0 = keep probing until interrupted
    interval_ms: int = DEFAULT_INTERVAL_MS  # pause between attempts
    timeout_ms: int = DEFAULT_TIMEOUT_MS    # per-connect bound
    color: bool = False
    verbose: bool = False

    def __post_init__(self):
        if self.family not in ("auto", "v4", "v6"):
            raise ValidationError(f"unknown address family {self.family!r}")
        if self.count < 0:
            raise ValidationError("count cannot be negative")
        if self.interval_ms < 0:
            raise ValidationError("interval cannot be negative")
        if self.timeout_ms < 0:
            raise ValidationError("timeout cannot be negative")
        if self.interval_ms > MAX_WAIT_MS:
            raise ValidationError(f"interval cannot exceed {MAX_WAIT_MS}ms")
        if self.timeout_ms > MAX_WAIT_MS:
            raise ValidationError(f"timeout cannot exceed {MAX_WAIT_MS}ms")

    @property
    def unbounded(self) -> bool:
        return self.count == 0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build defaults from TCPING_* environment variables. Anything unset keeps
        the dataclass default; command-line flags are applied on top by the CLI.
        """
        env = os.environ if environ is None else environ
        return cls(
            count=_env_int(env, "TCPING_COUNT", 0),
            interval_ms=_env_int(env, "TCPING_INTERVAL", DEFAULT_INTERVAL_MS),
            timeout_ms=_env_int(env, "TCPING_TIMEOUT", DEFAULT_TIMEOUT_MS),
            color=_env_bool(env, "TCPING_COLOR", False),
            verbose=_env_bool(env, "TCPING_VERBOSE", False),
        )


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in _TRUTHY:
        return True
    if val in _FALSY:
        return False
    raise ValidationError(f"{name} must be a boolean, got {raw!r}")
