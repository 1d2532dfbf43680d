# harvest.py
"""Harvests pingable addresses from ARP records.

Records are grouped by interface, each interface's candidates are probed in
order until ``quota`` addresses answer, and the survivors from every interface
are merged into one list sorted by numeric address value.
"""
import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Dict, Iterable, List, Optional, Sequence

from prober import IcmpProber, Prober
from records import ArpRecord, ProbeTask
from utils import address_sort_key, is_placeholder_address, parse_ip

logger = logging.getLogger(__name__)

DEFAULT_ADDRESSES_PER_INTERFACE = 2
DEFAULT_TIMEOUT_MS = 250


def group_by_interface(records: Iterable[ArpRecord]) -> Dict[str, List[str]]:
    """Maps each interface name to its addresses, in the order they were seen."""
    interfaces: Dict[str, List[str]] = {}
    for record in records:
        interfaces.setdefault(record.interface, []).append(record.address)
    return interfaces


def harvest(candidates: Sequence[str], quota: int, timeout: float, prober: Prober,
            stop: Optional[threading.Event] = None) -> List[str]:
    """Probes candidates in order and returns the first ``quota`` that answer.

    Args:
        candidates: Addresses for one interface, in ARP table order.
        quota: Maximum number of reachable addresses to keep.
        timeout: Per-probe timeout in seconds.
        prober: Callable turning a ProbeTask into a ProbeResult.
        stop: Optional event; once set, no further probes are sent.

    Returns:
        The reachable addresses, in candidate order.
    """
    if quota < 0:
        raise ValueError(f"quota must be >= 0, got {quota}")

    pingable: List[str] = []
    if quota == 0:
        return pingable

    for address in candidates:
        if is_placeholder_address(address):
            logger.debug(f"Skipping placeholder address {address}")
            continue
        if stop is not None and stop.is_set():
            logger.debug("Stop requested, abandoning remaining candidates")
            break

        result = prober(ProbeTask(address=address, timeout=timeout))
        if result.reachable:
            pingable.append(address)

        if len(pingable) == quota:
            break

    return pingable


def aggregate(per_interface_results: Iterable[Sequence[str]]) -> List[str]:
    """Concatenates per-interface results and sorts them by numeric address.

    Duplicates are kept. Addresses are returned in their canonical form.
    """
    addresses = [address for results in per_interface_results for address in results]
    addresses.sort(key=address_sort_key)  # Raises InvalidAddressError on garbage
    return [str(parse_ip(address)) for address in addresses]


def harvest_pingable_addresses(records: Iterable[ArpRecord],
                               quota: int = DEFAULT_ADDRESSES_PER_INTERFACE,
                               timeout_ms: int = DEFAULT_TIMEOUT_MS,
                               prober: Optional[Prober] = None,
                               workers: int = 1) -> List[str]:
    """Runs grouping, per-interface harvesting and aggregation end to end.

    With ``workers > 1`` interfaces are harvested concurrently, one thread per
    interface at a time. Probing inside an interface stays sequential, so the
    addresses that count towards the quota are the same as in a sequential run.
    The first exception from any interface stops every other harvester before
    its next probe and is re-raised here.
    """
    if prober is None:
        prober = IcmpProber()

    interfaces = group_by_interface(records)
    timeout = timeout_ms / 1000.0
    logger.info(f"Harvesting up to {quota} addresses from each of {len(interfaces)} interfaces")

    if workers <= 1 or len(interfaces) <= 1:
        results = []
        for name, candidates in interfaces.items():
            pingable = harvest(candidates, quota, timeout, prober)
            logger.debug(f"{name}: {len(pingable)} pingable of {len(candidates)} candidates")
            results.append(pingable)
        return aggregate(results)

    return aggregate(_harvest_concurrently(interfaces, quota, timeout, prober, workers))


def _harvest_concurrently(interfaces: Dict[str, List[str]], quota: int, timeout: float,
                          prober: Prober, workers: int) -> List[List[str]]:
    stop = threading.Event()

    def run(name: str, candidates: List[str]) -> List[str]:
        try:
            pingable = harvest(candidates, quota, timeout, prober, stop=stop)
        except Exception:
            stop.set()
            raise
        logger.debug(f"{name}: {len(pingable)} pingable of {len(candidates)} candidates")
        return pingable

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(run, name, candidates) for name, candidates in interfaces.items()]
        _, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        for future in futures:
            if future.done() and not future.cancelled() and future.exception() is not None:
                raise future.exception()
        # Every future is now finished, in submission order
        return [future.result() for future in futures]
