# firewalls/base.py
from abc import ABC, abstractmethod
from typing import List

from records import ArpRecord


class BaseFirewall(ABC):
    """Abstract base class for fetching the ARP table from a firewall."""

    host: str

    @abstractmethod
    def fetch_arp_cache(self) -> str:
        """Downloads the raw ARP table document.

        Raises:
            RetrievalError: The firewall could not be reached or refused the request.
        """

    @abstractmethod
    def parse_arp_cache(self, document: str) -> List[ArpRecord]:
        """Decodes a document returned by fetch_arp_cache.

        Raises:
            RetrievalError: The document reports a failed request.
            ParseError: The document could not be decoded into ARP records.
        """

    def get_arp_entries(self) -> List[ArpRecord]:
        """Retrieves the ARP table, in the order the firewall reports it."""
        return self.parse_arp_cache(self.fetch_arp_cache())
