"""Tests for discovery and pairing"""

import pytest

from core.discovery import find_target, scan, select_target
from core.errors import PairingError, ScanError, TargetNotFound
from core.pairing import connect
from core.transport import MockWifi
from core.types import Connected, WifiNetwork


@pytest.fixture
def visible_networks():
    """Scan result with two drones behind a home network"""
    return [
        WifiNetwork(ssid="HomeWifi", bssid="aa:aa:aa:aa:aa:aa", security="WPA2"),
        WifiNetwork(ssid="HelicMax-3021", bssid="bb:bb:bb:bb:bb:bb"),
        WifiNetwork(ssid="HelicMax-9", bssid="cc:cc:cc:cc:cc:cc"),
    ]


def test_select_first_match(visible_networks):
    """Test first matching network in scan order wins"""
    target = select_target(visible_networks)
    assert target is not None
    assert target.ssid == "HelicMax-3021"


def test_select_ignores_signal_strength():
    """Test a stronger later match does not win"""
    networks = [
        WifiNetwork(ssid="HelicMax-1", signal=10),
        WifiNetwork(ssid="HelicMax-2", signal=99),
    ]
    assert select_target(networks).ssid == "HelicMax-1"


def test_select_empty():
    """Test empty scan is NotFound"""
    assert select_target([]) is None


def test_select_no_match():
    """Test all non-matching scan is NotFound"""
    networks = [
        WifiNetwork(ssid="HomeWifi"),
        WifiNetwork(ssid="HelicMax-"),        # no digits
        WifiNetwork(ssid="MyHelicMax-12"),    # prefix not at start
        WifiNetwork(ssid="helicmax-12"),      # wrong case
    ]
    assert select_target(networks) is None


def test_select_custom_pattern():
    """Test pattern can be overridden"""
    networks = [WifiNetwork(ssid="HelicMax-1"), WifiNetwork(ssid="SkyToy_42")]
    assert select_target(networks, r"^SkyToy_\d+").ssid == "SkyToy_42"


def test_scan_returns_list(visible_networks):
    """Test scan passes through backend results"""
    backend = MockWifi(visible_networks)
    assert scan(backend) == visible_networks
    assert backend.scan_count == 1


def test_scan_error():
    """Test scan failures surface as ScanError"""
    backend = MockWifi(scan_error="No wireless interface")
    with pytest.raises(ScanError, match="No wireless interface"):
        scan(backend)


def test_scan_wraps_os_error():
    """Test OS level failures are converted to ScanError"""
    class BrokenBackend:
        def scan(self):
            raise PermissionError("Operation not permitted")

    with pytest.raises(ScanError):
        scan(BrokenBackend())


def test_find_target(visible_networks):
    """Test scan + select"""
    assert find_target(MockWifi(visible_networks)).ssid == "HelicMax-3021"


def test_find_target_not_found():
    """Test TargetNotFound when nothing matches"""
    with pytest.raises(TargetNotFound):
        find_target(MockWifi([WifiNetwork(ssid="HomeWifi")]))


def test_connect(visible_networks):
    """Test pairing associates with the target"""
    backend = MockWifi(visible_networks)
    result = connect(backend, visible_networks[1])

    assert isinstance(result, Connected)
    assert result.network.ssid == "HelicMax-3021"
    assert result.iface == "mock0"
    assert backend.connected_ssid == "HelicMax-3021"


def test_connect_failure(visible_networks):
    """Test association failures surface as PairingError"""
    backend = MockWifi(visible_networks, connect_error="Association timed out")
    with pytest.raises(PairingError, match="timed out"):
        connect(backend, visible_networks[1])


def test_connect_wraps_os_error():
    """Test OS level failures are converted to PairingError"""
    class BrokenBackend:
        def connect(self, ssid, timeout):
            raise OSError("Device busy")

    with pytest.raises(PairingError):
        connect(BrokenBackend(), WifiNetwork(ssid="HelicMax-1"))
