# prober.py
import logging
from typing import Callable

from scapy.config import conf
from scapy.layers.inet import ICMP, IP
from scapy.layers.inet6 import ICMPv6EchoReply, ICMPv6EchoRequest, IPv6
from scapy.sendrecv import sr1

from errors import ProbeSetupError
from records import ProbeResult, ProbeTask
from utils import parse_ip

logger = logging.getLogger(__name__)

ICMP_ECHO_REPLY = 0

# Anything that maps a ProbeTask to a ProbeResult can stand in for the prober.
Prober = Callable[[ProbeTask], ProbeResult]


class IcmpProber:
    """Sends a single ICMP echo request per task and reports whether it was answered."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        conf.verb = 1 if verbose else 0

    def __call__(self, task: ProbeTask) -> ProbeResult:
        ip = parse_ip(task.address)  # Raises InvalidAddressError before any packet is built
        if ip.version == 4:
            packet = IP(dst=str(ip)) / ICMP()
        else:
            packet = IPv6(dst=str(ip)) / ICMPv6EchoRequest()

        try:
            response = sr1(packet, timeout=task.timeout, verbose=self.verbose)
        except PermissionError as e:
            raise ProbeSetupError(
                "ICMP socket operations require root privileges or CAP_NET_RAW"
            ) from e
        except OSError as e:
            # Per-address send failures (no route, host down) count as loss
            logger.warning(f"Probe to {task.address} failed: {e}")
            return ProbeResult(address=task.address, reachable=False)

        reachable = self._is_echo_reply(response, ip.version)
        logger.debug(f"Probed {task.address}: {'reply' if reachable else 'no reply'}")
        return ProbeResult(address=task.address, reachable=reachable)

    @staticmethod
    def _is_echo_reply(response, version: int) -> bool:
        if response is None:
            return False
        if version == 4:
            return bool(response.haslayer(ICMP)) and response[ICMP].type == ICMP_ECHO_REPLY
        return bool(response.haslayer(ICMPv6EchoReply))
