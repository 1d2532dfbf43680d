# pingable_hosts.py
import sys
import time
import argparse
import logging
from typing import List, Optional

from dynaconf import Dynaconf

from errors import PingableHostsError
from firewalls import BaseFirewall, get_firewall
from harvest import DEFAULT_ADDRESSES_PER_INTERFACE, DEFAULT_TIMEOUT_MS, harvest_pingable_addresses
from prober import Prober
from reporting import StatusReporter
from utils import prompt_credentials

# Load settings
config = Dynaconf(
    settings_files=['config/settings.toml'],
    envvar_prefix="PINGABLE_HOSTS",
)

logger = logging.getLogger(__name__)

EPILOG = """\
examples:
  > pan-pingable-hosts fw01.domain.com
  > pan-pingable-hosts -u user panwfw01.corp.com
  > pan-pingable-hosts -u user -n 4 panwfw01.corp.com
"""


def collect_pingable_addresses(firewall: BaseFirewall, quota: int, timeout_ms: int,
                               reporter: StatusReporter, prober: Optional[Prober] = None,
                               workers: int = 1) -> List[str]:
    """Downloads the ARP cache and harvests pingable addresses, reporting each stage."""
    reporter.step(f"Downloading ARP cache from {firewall.host}")
    try:
        document = firewall.fetch_arp_cache()
    except PingableHostsError:
        reporter.fail()
        raise
    reporter.success()

    reporter.step("Parsing ARP cache")
    try:
        records = firewall.parse_arp_cache(document)
    except PingableHostsError:
        reporter.fail()
        raise
    reporter.success()

    reporter.step("Pinging IP addresses")
    try:
        addresses = harvest_pingable_addresses(records, quota=quota, timeout_ms=timeout_ms,
                                               prober=prober, workers=workers)
    except PingableHostsError:
        reporter.fail()
        raise
    reporter.success()
    reporter.blank()
    return addresses


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    general = config.get("general", {})
    parser = argparse.ArgumentParser(
        prog="pan-pingable-hosts",
        description="Harvests pingable IP addresses from a Palo Alto Networks firewall ARP cache",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("firewall", help="Firewall hostname or address")
    parser.add_argument("-u", dest="user", default="", help="PAN user")
    parser.add_argument("-n", dest="num_addresses", type=_non_negative_int,
                        default=general.get("addresses_per_interface", DEFAULT_ADDRESSES_PER_INTERFACE),
                        help="Number of addresses per interface (default: %(default)s)")
    parser.add_argument("-t", dest="timeout", type=_non_negative_int,
                        default=general.get("timeout_ms", DEFAULT_TIMEOUT_MS),
                        help="ICMP timeout in milliseconds (default: %(default)s)")
    parser.add_argument("-w", dest="workers", type=int, default=general.get("workers", 1),
                        help="Interfaces probed in parallel (default: %(default)s)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format='%(asctime)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(levelname)s - %(message)s')

    reporter = StatusReporter()
    try:
        reporter.blank()
        user, password = prompt_credentials(args.user)
        reporter.blank()

        start = time.monotonic()
        firewall = get_firewall(config, args.firewall, user, password)
        addresses = collect_pingable_addresses(firewall, args.num_addresses, args.timeout,
                                               reporter, workers=args.workers)
    except (PingableHostsError, ValueError) as e:
        logger.error(e)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)

    for address in addresses:
        print(address)
    reporter.blank()
    reporter.summary(len(addresses), time.monotonic() - start)


if __name__ == "__main__":
    main()
