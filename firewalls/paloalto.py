# firewalls/paloalto.py
import logging
from typing import List, Mapping, Optional
from xml.etree import ElementTree as ET

import requests
import urllib3

from .base import BaseFirewall
from errors import ParseError, RetrievalError
from records import ArpRecord

logger = logging.getLogger(__name__)

ARP_COMMAND = "<show><arp><entry name = 'all'/></arp></show>"


class PaloAltoFirewall(BaseFirewall):
    """Implementation of BaseFirewall for PAN-OS firewalls using the XML API."""

    def __init__(self, host: str, user: str, password: str, config: Optional[Mapping] = None):
        config = config or {}
        self.host = host
        self.user = user
        self.password = password
        self.api_timeout = config.get("api_timeout", 30)
        self.verify_tls = config.get("verify_tls", False)
        self.url = f"https://{host}/api/"

    def fetch_arp_cache(self) -> str:
        """Runs the ARP show command through the operational API."""
        if not self.verify_tls:
            # Firewalls usually serve self-signed management certificates
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        logger.debug(f"Requesting ARP cache from {self.url} as {self.user}")
        try:
            response = requests.get(
                self.url,
                params={"type": "op", "cmd": ARP_COMMAND},
                auth=(self.user, self.password),
                verify=self.verify_tls,
                timeout=self.api_timeout,
            )
        except requests.RequestException as e:
            raise RetrievalError(f"Error connecting to {self.host}: {e}") from e

        if response.status_code in (401, 403):
            raise RetrievalError(f"Authentication rejected by {self.host}: {response.status_code} {response.reason}")
        if response.status_code != 200:
            raise RetrievalError(f"Unexpected response from {self.host}: {response.status_code} {response.reason}")
        return response.text

    def parse_arp_cache(self, document: str) -> List[ArpRecord]:
        """Parses the ``result/entries/entry`` elements of an API response."""
        try:
            root = ET.fromstring(document)
        except ET.ParseError as e:
            raise ParseError(f"Malformed XML from {self.host}: {e}") from e

        status = root.get("status")
        if status is not None and status != "success":
            message = " ".join(t.strip() for t in root.itertext() if t.strip())
            raise RetrievalError(f"{self.host} returned status {status!r}: {message or 'no message'}")

        entries = root.find("result/entries")
        if entries is None:
            raise ParseError(f"Response from {self.host} has no result/entries element")

        records: List[ArpRecord] = []
        for entry in entries.findall("entry"):
            record = self._parse_entry(entry)
            if record:
                records.append(record)
        logger.info(f"Parsed {len(records)} ARP entries from {self.host}")
        return records

    def _parse_entry(self, entry: ET.Element) -> Optional[ArpRecord]:
        """Parses a single ARP entry element."""
        interface = (entry.findtext("interface") or "").strip()
        ip = (entry.findtext("ip") or "").strip()
        if not interface or not ip:
            logger.warning(f"Ignoring ARP entry without interface or ip: {ET.tostring(entry, encoding='unicode')!r}")
            return None

        mac = (entry.findtext("mac") or "").strip() or None
        status = (entry.findtext("status") or "").strip() or None
        return ArpRecord(interface=interface, address=ip, mac=mac, status=status)
