#!/usr/bin/env python3
"""
HelicMax Environment Configuration Helper

Provides easy access to .env configuration for the pilot tools.
Automatically loads .env file and provides defaults.
"""

import os
import re
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from core.codec import validate_frame
from core.errors import ConfigError, ProtocolError
from core.types import (
    DEFAULT_DRONE_IP,
    DEFAULT_DRONE_PORT,
    DEFAULT_SSID_PATTERN,
    LinkConfig,
    SessionConfig,
)
from hm_utils import format_hex, parse_hex_safe


class HelicMaxConfig:
    """Configuration manager for the pilot tools"""

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration

        Args:
            env_file: Path to .env file (default: .env in current directory)
        """
        self._loaded = False

        if env_file is None:
            env_path = Path(".env")
        else:
            env_path = Path(env_file)

        if env_path.exists():
            load_dotenv(env_path)
            self._loaded = True

    @property
    def drone_ip(self) -> str:
        """Drone control address (default: 192.168.0.1)"""
        return os.getenv("HM_DRONE_IP", DEFAULT_DRONE_IP)

    @property
    def drone_port(self) -> int:
        """Drone control UDP port (default: 40000)"""
        return int(os.getenv("HM_DRONE_PORT", str(DEFAULT_DRONE_PORT)))

    @property
    def ssid_pattern(self) -> str:
        """Regex matched against scanned SSIDs"""
        return os.getenv("HM_SSID_PATTERN", DEFAULT_SSID_PATTERN)

    @property
    def wifi_iface(self) -> Optional[str]:
        """Wireless interface to scan and join with (default: any)"""
        return os.getenv("HM_WIFI_IFACE") or None

    @property
    def connect_timeout(self) -> float:
        """Association timeout in seconds (default: 30)"""
        return float(os.getenv("HM_CONNECT_TIMEOUT", "30"))

    @property
    def tick_interval(self) -> float:
        """Control frame period in seconds (default: 0.05)"""
        return float(os.getenv("HM_TICK_INTERVAL", "0.05"))

    @property
    def disarm_grace(self) -> float:
        """Wait after the disarm frame in seconds (default: 1.0)"""
        return float(os.getenv("HM_DISARM_GRACE", "1.0"))

    @property
    def wake_packet_hex(self) -> Optional[str]:
        """Wake packet override (hex)"""
        return os.getenv("HM_WAKE_PACKET") or None

    @property
    def frame_template_hex(self) -> Optional[str]:
        """Neutral frame template override (hex, 14 bytes)"""
        return os.getenv("HM_FRAME_TEMPLATE") or None

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate configuration

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        try:
            port = self.drone_port
            if not 0 < port < 65536:
                errors.append(f"HM_DRONE_PORT out of range: {port}")
        except ValueError:
            errors.append("HM_DRONE_PORT must be an integer")

        if not self._is_valid_ipv4(self.drone_ip):
            errors.append(f"HM_DRONE_IP has invalid format (expected a.b.c.d): {self.drone_ip}")

        try:
            re.compile(self.ssid_pattern)
        except re.error as e:
            errors.append(f"HM_SSID_PATTERN is not a valid regex: {e}")

        for name, attr in [("HM_CONNECT_TIMEOUT", "connect_timeout"),
                           ("HM_TICK_INTERVAL", "tick_interval"),
                           ("HM_DISARM_GRACE", "disarm_grace")]:
            try:
                if getattr(self, attr) <= 0:
                    errors.append(f"{name} must be positive")
            except ValueError:
                errors.append(f"{name} must be a number")

        if self.wake_packet_hex is not None:
            wake = parse_hex_safe(self.wake_packet_hex)
            if not wake:
                errors.append("HM_WAKE_PACKET has invalid format (expected hex bytes)")

        if self.frame_template_hex is not None:
            template = parse_hex_safe(self.frame_template_hex)
            if template is None:
                errors.append("HM_FRAME_TEMPLATE has invalid format (expected hex bytes)")
            else:
                try:
                    validate_frame(template)
                except ProtocolError as e:
                    errors.append(f"HM_FRAME_TEMPLATE rejected: {e}")

        return len(errors) == 0, errors

    @staticmethod
    def _is_valid_ipv4(address: str) -> bool:
        """Check if address is a dotted IPv4 address"""
        parts = address.split(".")
        if len(parts) != 4:
            return False
        for part in parts:
            if not part.isdigit() or not 0 <= int(part) <= 255:
                return False
        return True

    def to_session_config(self) -> SessionConfig:
        """
        Build a typed SessionConfig.

        Raises:
            ConfigError: configuration is invalid
        """
        self._raise_if_invalid()
        return SessionConfig(
            drone_ip=self.drone_ip,
            drone_port=self.drone_port,
            tick_interval=self.tick_interval,
            disarm_grace=self.disarm_grace,
            wake_packet=parse_hex_safe(self.wake_packet_hex) if self.wake_packet_hex else None,
            frame_template=parse_hex_safe(self.frame_template_hex) if self.frame_template_hex else None,
        )

    def to_link_config(self) -> LinkConfig:
        """
        Build a typed LinkConfig.

        Raises:
            ConfigError: configuration is invalid
        """
        self._raise_if_invalid()
        return LinkConfig(
            ssid_pattern=self.ssid_pattern,
            iface=self.wifi_iface,
            connect_timeout=self.connect_timeout,
        )

    def _raise_if_invalid(self) -> None:
        is_valid, errors = self.validate()
        if not is_valid:
            raise ConfigError("Invalid configuration: " + "; ".join(errors))

    def print_status(self):
        """Print configuration status"""
        print("HelicMax Configuration Status:")
        print(f"  .env loaded:    {'Yes' if self._loaded else 'No'}")
        print(f"  Drone:          {self.drone_ip}:{os.getenv('HM_DRONE_PORT', DEFAULT_DRONE_PORT)}")
        print(f"  SSID pattern:   {self.ssid_pattern}")
        print(f"  Wifi iface:     {self.wifi_iface or '(any)'}")
        print(f"  Tick interval:  {os.getenv('HM_TICK_INTERVAL', '0.05')}s")
        print(f"  Disarm grace:   {os.getenv('HM_DISARM_GRACE', '1.0')}s")
        print(f"  Wake packet:    {self.wake_packet_hex or '(built-in)'}")
        print(f"  Frame template: {self.frame_template_hex or '(built-in)'}")

        is_valid, errors = self.validate()
        if is_valid:
            print("\n  Status: Configuration is valid")
        else:
            print("\n  Status: Configuration has errors:")
            for error in errors:
                print(f"    - {error}")


def main():
    """Command-line utility to check configuration"""
    import argparse

    parser = argparse.ArgumentParser(
        description="HelicMax Configuration Utility",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Check current configuration:
    python hm_config.py

  Validate configuration:
    python hm_config.py --validate

  Use custom .env file:
    python hm_config.py --env-file /path/to/.env
        """
    )

    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument("--validate", action="store_true",
                       help="Validate configuration and exit with error if invalid")

    args = parser.parse_args()

    config = HelicMaxConfig(args.env_file)
    config.print_status()

    if args.validate:
        is_valid, _ = config.validate()
        if not is_valid:
            print("\nValidation failed!")
            sys.exit(1)
        print("\nValidation passed!")
        if config.frame_template_hex:
            template = parse_hex_safe(config.frame_template_hex)
            print(f"  Template bytes: {format_hex(template, ' ')}")


if __name__ == "__main__":
    main()
