# records.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ArpRecord:
    interface: str
    address: str  # Textual IP as reported by the firewall, not yet validated
    mac: Optional[str] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class ProbeTask:
    address: str
    timeout: float  # Seconds


@dataclass(frozen=True)
class ProbeResult:
    address: str
    reachable: bool
