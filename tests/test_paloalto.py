"""Tests for the PAN-OS firewall backend."""

from unittest import mock

import pytest
import requests

from errors import ParseError, RetrievalError
from firewalls import PaloAltoFirewall, get_firewall
from records import ArpRecord

ARP_RESPONSE = """<response status="success"><result>
  <max>3000</max><total>4</total><timeout>1800</timeout><dp>s1dp0</dp>
  <entries>
    <entry><status>  c  </status><ip>10.0.0.1</ip><mac>00:11:22:33:44:55</mac><ttl>1200</ttl>
      <interface>ethernet1/1</interface><port>ethernet1/1</port></entry>
    <entry><status>  i  </status><ip>0.0.0.0</ip><mac>(incomplete)</mac><ttl>2</ttl>
      <interface>ethernet1/1</interface><port></port></entry>
    <entry><status>  c  </status><ip>192.168.1.10</ip><mac>66:77:88:99:aa:bb</mac><ttl>900</ttl>
      <interface>ethernet1/2.100</interface><port>ethernet1/2</port></entry>
    <entry><status>  s  </status><mac>de:ad:be:ef:00:01</mac><interface>ethernet1/3</interface></entry>
  </entries>
</result></response>"""


def make_response(status_code=200, text=ARP_RESPONSE, reason="OK"):
    response = mock.Mock()
    response.status_code = status_code
    response.reason = reason
    response.text = text
    return response


@pytest.fixture
def firewall():
    return PaloAltoFirewall("fw01.example.com", "admin", "secret")


class TestPaloAltoFirewall:
    """Tests for PaloAltoFirewall.get_arp_entries."""

    def test_parses_entries_in_order(self, firewall):
        """Entries come back in document order; entries without an ip are dropped."""
        with mock.patch("firewalls.paloalto.requests.get", return_value=make_response()):
            records = firewall.get_arp_entries()
        assert [(r.interface, r.address) for r in records] == [
            ("ethernet1/1", "10.0.0.1"),
            ("ethernet1/1", "0.0.0.0"),
            ("ethernet1/2.100", "192.168.1.10"),
        ]
        assert records[0] == ArpRecord("ethernet1/1", "10.0.0.1", mac="00:11:22:33:44:55", status="c")

    def test_request_shape(self, firewall):
        """The ARP show command is sent to the op API with basic auth."""
        with mock.patch("firewalls.paloalto.requests.get", return_value=make_response()) as get:
            firewall.get_arp_entries()
        args, kwargs = get.call_args
        assert args[0] == "https://fw01.example.com/api/"
        assert kwargs["params"] == {"type": "op", "cmd": "<show><arp><entry name = 'all'/></arp></show>"}
        assert kwargs["auth"] == ("admin", "secret")
        assert kwargs["verify"] is False
        assert kwargs["timeout"] == 30

    def test_config_overrides(self):
        """TLS verification and API timeout come from configuration."""
        firewall = PaloAltoFirewall("fw", "u", "p", {"verify_tls": True, "api_timeout": 5})
        with mock.patch("firewalls.paloalto.requests.get", return_value=make_response()) as get:
            firewall.get_arp_entries()
        assert get.call_args.kwargs["verify"] is True
        assert get.call_args.kwargs["timeout"] == 5

    def test_transport_error(self, firewall):
        """Connection failures become RetrievalError."""
        with mock.patch("firewalls.paloalto.requests.get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(RetrievalError):
                firewall.get_arp_entries()

    @pytest.mark.parametrize("status_code", [401, 403, 500])
    def test_http_failure(self, firewall, status_code):
        """Any non-200 response is a RetrievalError."""
        response = make_response(status_code=status_code, text="", reason="Nope")
        with mock.patch("firewalls.paloalto.requests.get", return_value=response):
            with pytest.raises(RetrievalError) as exc_info:
                firewall.get_arp_entries()
        assert str(status_code) in str(exc_info.value)

    def test_api_error_status(self, firewall):
        """A PAN-OS error response is reported with its message."""
        text = '<response status="error"><msg><line>Invalid credentials.</line></msg></response>'
        with mock.patch("firewalls.paloalto.requests.get", return_value=make_response(text=text)):
            with pytest.raises(RetrievalError) as exc_info:
                firewall.get_arp_entries()
        assert "Invalid credentials." in str(exc_info.value)

    def test_malformed_xml(self, firewall):
        """A body that is not XML is a ParseError."""
        with mock.patch("firewalls.paloalto.requests.get", return_value=make_response(text="<html><body>")):
            with pytest.raises(ParseError):
                firewall.get_arp_entries()

    def test_missing_entries(self, firewall):
        """A success response without result/entries is a ParseError."""
        text = '<response status="success"><result/></response>'
        with mock.patch("firewalls.paloalto.requests.get", return_value=make_response(text=text)):
            with pytest.raises(ParseError):
                firewall.get_arp_entries()

    def test_empty_entries(self, firewall):
        """An empty ARP cache is not an error."""
        text = '<response status="success"><result><entries/></result></response>'
        with mock.patch("firewalls.paloalto.requests.get", return_value=make_response(text=text)):
            assert firewall.get_arp_entries() == []


class TestGetFirewall:
    """Tests for the firewall factory."""

    def test_default_is_paloalto(self):
        """Without configuration the PAN-OS backend is used."""
        firewall = get_firewall({}, "fw", "u", "p")
        assert isinstance(firewall, PaloAltoFirewall)
        assert firewall.host == "fw"

    def test_passes_backend_config(self):
        """The backend's own section is handed to it."""
        config = {"general": {"firewall_type": "paloalto"}, "paloalto": {"api_timeout": 7}}
        assert get_firewall(config, "fw", "u", "p").api_timeout == 7

    def test_unsupported_type(self):
        """Unknown firewall types are rejected."""
        with pytest.raises(ValueError):
            get_firewall({"general": {"firewall_type": "nonexistent"}}, "fw", "u", "p")


class TestPaloAltoStages:
    """Tests for the separate download and parse stages."""

    def test_fetch_returns_raw_document(self, firewall):
        """fetch_arp_cache hands back the response body untouched."""
        with mock.patch("firewalls.paloalto.requests.get", return_value=make_response()):
            assert firewall.fetch_arp_cache() == ARP_RESPONSE

    def test_parse_needs_no_network(self, firewall):
        """parse_arp_cache decodes a document without any HTTP request."""
        with mock.patch("firewalls.paloalto.requests.get") as get:
            records = firewall.parse_arp_cache(ARP_RESPONSE)
        get.assert_not_called()
        assert len(records) == 3
