# tcping/schemas.py
from dataclasses import dataclass
from typing import Literal, Optional, TypedDict

Family = Literal["auto", "v4", "v6"]
AddressFamily = Literal["v4", "v6"]
AttemptStatus = Literal["success", "failure", "interrupted"]


class AttemptResult(TypedDict, total=False):
    seq: int
    elapsed_ms: float
    status: AttemptStatus
    error: Optional[str]        # failures only
    local_addr: Optional[str]   # successes only
    remote_addr: Optional[str]


@dataclass(frozen=True)
class ResolvedTarget:
    host: str                   # as typed by the user, for display
    ip: str                     # bare literal, no brackets
    family: AddressFamily
    port: int

    @property
    def address(self) -> str:
        if self.family == "v6":
            return f"[{self.ip}]"
        return self.ip

    @property
    def family_label(self) -> str:
        return "IPv6" if self.family == "v6" else "IPv4"

    @property
    def endpoint(self) -> str:
        return f"{self.address}:{self.port}"

    @property
    def sockaddr(self) -> tuple:
        if self.family == "v6":
            return (self.ip, self.port, 0, 0)
        return (self.ip, self.port)
