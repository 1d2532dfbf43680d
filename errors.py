# errors.py
"""Exceptions raised while harvesting pingable addresses.

Every fatal condition derives from PingableHostsError so the command line
entry point can catch a single type. Unreachable hosts and placeholder
addresses are ordinary outcomes and never raise.
"""


class PingableHostsError(Exception):
    """Base class for fatal conditions that stop a run."""


class RetrievalError(PingableHostsError):
    """The ARP table could not be fetched from the firewall."""


class ParseError(PingableHostsError):
    """The firewall response could not be decoded into ARP entries."""


class ProbeSetupError(PingableHostsError):
    """ICMP probing is unusable, usually for lack of raw socket privileges."""


class InvalidAddressError(PingableHostsError, ValueError):
    """A string that should hold an IP address does not parse as one."""

    def __init__(self, address: str):
        super().__init__(f"Invalid IP address: {address!r}")
        self.address = address
