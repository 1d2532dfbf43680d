# firewalls/__init__.py
from dynaconf import Dynaconf

from .base import BaseFirewall
from .paloalto import PaloAltoFirewall  # Import all concrete implementations


def get_firewall(config: Dynaconf, host: str, user: str, password: str) -> BaseFirewall:
    """Firewall factory: returns an instance of the appropriate firewall class."""

    firewall_type = config.get("general", {}).get("firewall_type", "paloalto")

    if firewall_type == "paloalto":
        return PaloAltoFirewall(host, user, password, config.get("paloalto", {}))
    # Add other firewall types here:
    # elif firewall_type == "fortigate":
    #     return FortiGateFirewall(host, user, password, config.fortigate)
    else:
        raise ValueError(f"Unsupported firewall type: {firewall_type}")
