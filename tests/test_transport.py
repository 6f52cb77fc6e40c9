"""Tests for the UDP channel and wifi backends"""

import socket
import subprocess

import pytest

from core.errors import ChannelOpenError, PairingError, ScanError, TransmitError
from core.transport import UdpChannel, NmcliWifi, NetshWifi
from core.transport import wifi as wifi_module
from core.transport.wifi import UnsupportedWifi, split_terse


NMCLI_OUTPUT = (
    "HomeWifi:AA\\:BB\\:CC\\:DD\\:EE\\:01:82:WPA2:6\n"
    "HelicMax-3021:AA\\:BB\\:CC\\:DD\\:EE\\:02:64::11\n"
    ":AA\\:BB\\:CC\\:DD\\:EE\\:03:20:WPA2:1\n"
    "Cafe\\:Guest:AA\\:BB\\:CC\\:DD\\:EE\\:04:40::36\n"
)

NETSH_OUTPUT = """
Interface name : Wi-Fi
There are 2 networks currently visible.

SSID 1 : HomeWifi
    Network type            : Infrastructure
    Authentication          : WPA2-Personal
    Encryption              : CCMP
    BSSID 1                 : aa:bb:cc:dd:ee:01
         Signal             : 82%
         Radio type         : 802.11ac
         Channel            : 6

SSID 2 : HelicMax-3021
    Network type            : Infrastructure
    Authentication          : Open
    Encryption              : None
    BSSID 1                 : AA:BB:CC:DD:EE:02
         Signal             : 64%
         Radio type         : 802.11n
         Channel            : 11
"""


@pytest.fixture
def receiver():
    """Local UDP socket standing in for the drone"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


def fake_run(returncode=0, stdout="", stderr="", exc=None):
    """Replacement for wifi._run returning canned output"""
    calls = []

    def _run(cmd, timeout):
        calls.append(list(cmd))
        if exc is not None:
            raise exc
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)

    _run.calls = calls
    return _run


def test_udp_channel_sends(receiver):
    """Test datagrams arrive unchanged"""
    port = receiver.getsockname()[1]
    channel = UdpChannel("127.0.0.1", port)
    channel.open()
    try:
        channel.send(b"\x63\x63\x01")
        data, _ = receiver.recvfrom(64)
    finally:
        channel.close()

    assert data == b"\x63\x63\x01"
    assert channel.sent_count == 1
    assert channel.is_open is False


def test_udp_channel_open_failure(monkeypatch):
    """Test a socket failure raises ChannelOpenError"""
    def refuse(*args, **kwargs):
        raise PermissionError("Operation not permitted")

    monkeypatch.setattr(socket, "socket", refuse)
    channel = UdpChannel("192.168.0.1", 40000)
    with pytest.raises(ChannelOpenError):
        channel.open()
    assert channel.is_open is False


def test_udp_send_before_open():
    """Test sending on a closed channel raises TransmitError"""
    with pytest.raises(TransmitError):
        UdpChannel("127.0.0.1", 40000).send(b"\x00")


def test_udp_close_twice(receiver):
    """Test close is safe to repeat"""
    channel = UdpChannel("127.0.0.1", receiver.getsockname()[1])
    channel.open()
    channel.close()
    channel.close()
    assert channel.is_open is False


def test_split_terse():
    """Test nmcli escaping is undone"""
    assert split_terse("a\\:b:c") == ["a:b", "c"]
    assert split_terse("x::y") == ["x", "", "y"]
    assert split_terse("back\\\\slash:z") == ["back\\slash", "z"]


def test_nmcli_parse_scan():
    """Test nmcli output parsing, hidden networks dropped"""
    networks = NmcliWifi.parse_scan(NMCLI_OUTPUT)

    assert [n.ssid for n in networks] == ["HomeWifi", "HelicMax-3021", "Cafe:Guest"]
    drone = networks[1]
    assert drone.bssid == "aa:bb:cc:dd:ee:02"
    assert drone.signal == 64
    assert drone.channel == 11
    assert drone.is_open is True
    assert networks[0].is_open is False


def test_nmcli_scan_uses_iface(monkeypatch):
    """Test scan passes the interface and parses stdout"""
    run = fake_run(stdout=NMCLI_OUTPUT)
    monkeypatch.setattr(wifi_module, "_run", run)

    networks = NmcliWifi(iface="wlan1").scan()

    assert len(networks) == 3
    assert run.calls[0][-2:] == ["ifname", "wlan1"]


def test_nmcli_scan_missing_tool(monkeypatch):
    """Test missing nmcli is a ScanError"""
    monkeypatch.setattr(wifi_module, "_run", fake_run(exc=FileNotFoundError("nmcli")))
    with pytest.raises(ScanError):
        NmcliWifi().scan()


def test_nmcli_scan_failure(monkeypatch):
    """Test a failing nmcli is a ScanError"""
    monkeypatch.setattr(wifi_module, "_run", fake_run(returncode=10, stderr="Error: No Wi-Fi device found."))
    with pytest.raises(ScanError, match="No Wi-Fi device"):
        NmcliWifi().scan()


def test_nmcli_connect(monkeypatch):
    """Test connect reports the activated device"""
    run = fake_run(stdout="Device 'wlan0' successfully activated with 'abc'.\n")
    monkeypatch.setattr(wifi_module, "_run", run)

    iface = NmcliWifi().connect("HelicMax-3021", 15)

    assert iface == "wlan0"
    assert run.calls[0][:3] == ["nmcli", "--wait", "15"]
    assert "HelicMax-3021" in run.calls[0]


def test_nmcli_connect_rejected(monkeypatch):
    """Test a refused association is a PairingError"""
    monkeypatch.setattr(wifi_module, "_run", fake_run(returncode=4, stderr="Error: Connection activation failed."))
    with pytest.raises(PairingError, match="activation failed"):
        NmcliWifi().connect("HelicMax-3021", 15)


def test_nmcli_connect_timeout(monkeypatch):
    """Test a hung association is a PairingError"""
    monkeypatch.setattr(wifi_module, "_run", fake_run(exc=subprocess.TimeoutExpired("nmcli", 20)))
    with pytest.raises(PairingError, match="timed out"):
        NmcliWifi().connect("HelicMax-3021", 15)


def test_netsh_parse_scan():
    """Test netsh output parsing"""
    networks = NetshWifi.parse_scan(NETSH_OUTPUT)

    assert [n.ssid for n in networks] == ["HomeWifi", "HelicMax-3021"]
    drone = networks[1]
    assert drone.bssid == "aa:bb:cc:dd:ee:02"
    assert drone.signal == 64
    assert drone.channel == 11
    assert drone.security == "Open"
    assert drone.is_open is True


def test_unsupported_platform():
    """Test platforms without a backend fail cleanly"""
    backend = UnsupportedWifi("darwin")
    with pytest.raises(ScanError):
        backend.scan()
    with pytest.raises(PairingError):
        backend.connect("HelicMax-1", 5)
