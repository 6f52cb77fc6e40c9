"""
Wifi Transport - OS wireless integration for scan and connect.

Wraps the platform network tools:
- Linux: NetworkManager's nmcli
- Windows: netsh wlan

Both calls are blocking; run them in an executor from async code.
"""

import logging
import os
import re
import subprocess
import sys
import tempfile
import time
from typing import List, Optional, Sequence
from xml.sax.saxutils import escape

from core.errors import PairingError, ScanError
from core.types import WifiNetwork


logger = logging.getLogger(__name__)


def _run(cmd: Sequence[str], timeout: float) -> subprocess.CompletedProcess:
    """Run a tool, capturing text output. Raises OSError/TimeoutExpired as-is."""
    logger.debug(f"Running: {' '.join(cmd)}")
    return subprocess.run(list(cmd), capture_output=True, text=True, timeout=timeout)


def split_terse(line: str) -> List[str]:
    """Split an nmcli --terse line on unescaped colons"""
    fields = []
    current = []
    escaped = False
    for ch in line:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
    fields.append("".join(current))
    return fields


def _to_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


class NmcliWifi:
    """NetworkManager backend (Linux)"""

    FIELDS = "SSID,BSSID,SIGNAL,SECURITY,CHAN"

    def __init__(self, iface: Optional[str] = None, scan_timeout: float = 30.0) -> None:
        """
        Args:
            iface: Wireless interface to use (None = any)
            scan_timeout: Seconds to wait for a rescan
        """
        self.iface = iface
        self.scan_timeout = scan_timeout

    def scan(self) -> List[WifiNetwork]:
        cmd = ["nmcli", "--terse", "--fields", self.FIELDS,
               "device", "wifi", "list", "--rescan", "yes"]
        if self.iface:
            cmd += ["ifname", self.iface]

        try:
            result = _run(cmd, self.scan_timeout)
        except FileNotFoundError as e:
            raise ScanError("nmcli not found - is NetworkManager installed?") from e
        except subprocess.TimeoutExpired as e:
            raise ScanError(f"Wifi scan timed out after {self.scan_timeout}s") from e

        if result.returncode != 0:
            raise ScanError(f"Could not scan for wifi networks: {result.stderr.strip()}")

        return self.parse_scan(result.stdout)

    @staticmethod
    def parse_scan(output: str) -> List[WifiNetwork]:
        """Parse `nmcli --terse` list output, skipping hidden networks"""
        networks = []
        for line in output.splitlines():
            if not line.strip():
                continue
            fields = split_terse(line)
            if len(fields) < 5:
                logger.debug(f"Skipping malformed scan line: {line!r}")
                continue
            ssid, bssid, signal, security, chan = fields[:5]
            if not ssid:
                continue
            networks.append(WifiNetwork(
                ssid=ssid,
                bssid=bssid.lower(),
                signal=_to_int(signal),
                security=security,
                channel=_to_int(chan),
            ))
        return networks

    def connect(self, ssid: str, timeout: float) -> Optional[str]:
        cmd = ["nmcli", "--wait", str(int(timeout)), "device", "wifi", "connect", ssid]
        if self.iface:
            cmd += ["ifname", self.iface]

        try:
            # Give nmcli a little longer than its own --wait
            result = _run(cmd, timeout + 5.0)
        except FileNotFoundError as e:
            raise PairingError("nmcli not found - is NetworkManager installed?") from e
        except subprocess.TimeoutExpired as e:
            raise PairingError(f"Association with \"{ssid}\" timed out after {timeout}s") from e

        if result.returncode != 0:
            message = (result.stderr or result.stdout).strip()
            raise PairingError(f"Could not connect to \"{ssid}\": {message}")

        # "Device 'wlan0' successfully activated with '...'"
        match = re.search(r"Device '([^']+)'", result.stdout)
        return match.group(1) if match else self.iface


OPEN_PROFILE_XML = """<?xml version="1.0"?>
<WLANProfile xmlns="http://www.microsoft.com/networking/WLAN/profile/v1">
    <name>{name}</name>
    <SSIDConfig>
        <SSID>
            <name>{name}</name>
        </SSID>
    </SSIDConfig>
    <connectionType>ESS</connectionType>
    <connectionMode>manual</connectionMode>
    <MSM>
        <security>
            <authEncryption>
                <authentication>open</authentication>
                <encryption>none</encryption>
                <useOneX>false</useOneX>
            </authEncryption>
        </security>
    </MSM>
</WLANProfile>
"""


class NetshWifi:
    """netsh wlan backend (Windows)"""

    def __init__(self, iface: Optional[str] = None, scan_timeout: float = 30.0,
                 poll_interval: float = 0.5) -> None:
        self.iface = iface
        self.scan_timeout = scan_timeout
        self.poll_interval = poll_interval

    def _iface_args(self) -> List[str]:
        return [f"interface={self.iface}"] if self.iface else []

    def scan(self) -> List[WifiNetwork]:
        cmd = ["netsh", "wlan", "show", "networks", "mode=bssid"] + self._iface_args()
        try:
            result = _run(cmd, self.scan_timeout)
        except FileNotFoundError as e:
            raise ScanError("netsh not found") from e
        except subprocess.TimeoutExpired as e:
            raise ScanError(f"Wifi scan timed out after {self.scan_timeout}s") from e

        if result.returncode != 0:
            raise ScanError(f"Could not scan for wifi networks: {result.stdout.strip()}")

        return self.parse_scan(result.stdout)

    @staticmethod
    def parse_scan(output: str) -> List[WifiNetwork]:
        """Parse `netsh wlan show networks mode=bssid`; first BSSID per SSID"""
        networks = []
        current = None

        def flush():
            if current and current["ssid"]:
                networks.append(WifiNetwork(**current))

        for raw in output.splitlines():
            line = raw.strip()
            ssid_match = re.match(r"^SSID \d+\s*:\s?(.*)$", line)
            if ssid_match:
                flush()
                current = {"ssid": ssid_match.group(1).strip(), "bssid": "",
                           "signal": None, "security": "", "channel": None}
                continue
            if current is None or ":" not in line:
                continue

            key, _, value = line.partition(":")
            key = key.strip()
            value = value.strip()
            if key == "Authentication":
                current["security"] = value
            elif key.startswith("BSSID") and not current["bssid"]:
                current["bssid"] = value.lower()
            elif key == "Signal" and current["signal"] is None:
                current["signal"] = _to_int(value.rstrip("%"))
            elif key == "Channel" and current["channel"] is None:
                current["channel"] = _to_int(value)
        flush()
        return networks

    def connect(self, ssid: str, timeout: float) -> Optional[str]:
        self._add_open_profile(ssid)

        cmd = ["netsh", "wlan", "connect", f"ssid={ssid}", f"name={ssid}"] + self._iface_args()
        try:
            result = _run(cmd, timeout)
        except subprocess.TimeoutExpired as e:
            raise PairingError(f"Association with \"{ssid}\" timed out after {timeout}s") from e
        if result.returncode != 0:
            raise PairingError(f"Could not connect to \"{ssid}\": {result.stdout.strip()}")

        # netsh returns before association completes
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            try:
                iface = self._associated_iface(ssid)
            except (OSError, subprocess.TimeoutExpired) as e:
                raise PairingError(f"Could not query wifi interfaces: {e}") from e
            if iface:
                return iface
            time.sleep(self.poll_interval)

        raise PairingError(f"Association with \"{ssid}\" timed out after {timeout}s")

    def _add_open_profile(self, ssid: str) -> None:
        fd, path = tempfile.mkstemp(suffix=".xml", prefix="helicmax_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(OPEN_PROFILE_XML.format(name=escape(ssid)))
            result = _run(["netsh", "wlan", "add", "profile", f"filename={path}"]
                          + self._iface_args(), 10.0)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise PairingError(f"Could not add wifi profile for \"{ssid}\": {e}") from e
        finally:
            if os.path.exists(path):
                os.remove(path)

        if result.returncode != 0:
            raise PairingError(f"Could not add wifi profile for \"{ssid}\": {result.stdout.strip()}")

    def _associated_iface(self, ssid: str) -> Optional[str]:
        """Name of the interface connected to ssid, if any"""
        result = _run(["netsh", "wlan", "show", "interfaces"], 10.0)
        name = state = current_ssid = None
        for raw in result.stdout.splitlines():
            key, _, value = raw.strip().partition(":")
            key = key.strip()
            value = value.strip()
            if key == "Name":
                name, state, current_ssid = value, None, None
            elif key == "State":
                state = value
            elif key == "SSID":
                current_ssid = value
            if state == "connected" and current_ssid == ssid:
                return name
        return None


class UnsupportedWifi:
    """Placeholder for platforms without a backend"""

    def __init__(self, platform: str) -> None:
        self.platform = platform

    def scan(self) -> List[WifiNetwork]:
        raise ScanError(f"Wifi scanning is not supported on {self.platform}")

    def connect(self, ssid: str, timeout: float) -> Optional[str]:
        raise PairingError(f"Wifi pairing is not supported on {self.platform}")


def create_wifi_backend(iface: Optional[str] = None):
    """Pick the wifi backend for this platform"""
    if sys.platform.startswith("linux"):
        return NmcliWifi(iface=iface)
    if sys.platform == "win32":
        return NetshWifi(iface=iface)
    return UnsupportedWifi(sys.platform)
