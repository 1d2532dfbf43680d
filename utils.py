# utils.py
import sys
import getpass
import ipaddress
import logging
from typing import Optional, Tuple, Union

from errors import InvalidAddressError

logger = logging.getLogger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def is_placeholder_address(address: str) -> bool:
    """Checks if an ARP cache address is a placeholder that must not be probed."""
    return address.startswith("0")


def parse_ip(address: str) -> IPAddress:
    """Parses an IPv4 or IPv6 address, raising InvalidAddressError on failure."""
    try:
        return ipaddress.ip_address(address.strip())
    except ValueError:
        raise InvalidAddressError(address) from None


def address_sort_key(address: str) -> bytes:
    """Returns the 16-byte form of an address, IPv4 mapped into ::ffff:0:0/96."""
    ip = parse_ip(address)
    if ip.version == 4:
        return b"\x00" * 10 + b"\xff\xff" + ip.packed
    return ip.packed


def prompt_credentials(user: Optional[str] = None) -> Tuple[str, str]:
    """Asks for the firewall user (unless given) and password on the terminal.

    Prompts are written to stderr so stdout only ever carries results.
    """
    if not user:
        sys.stderr.write("PAN User: ")
        sys.stderr.flush()
        user = sys.stdin.readline().strip()
    password = getpass.getpass(f"Password ({user}): ", stream=sys.stderr)
    logger.debug(f"Collected credentials for user {user}")
    return user, password
