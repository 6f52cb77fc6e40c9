#!/usr/bin/env python3
"""
HelicMax Launcher - find the drone, join its wifi, fly it.

Usage:
    python launch.py                          # Keyboard control
    python launch.py --input gamepad          # Gamepad control (requires pygame)
    python launch.py --skip-wifi              # Already on the drone network
    python launch.py --mock --script hover    # No hardware, scripted input
"""

import sys
import argparse
import asyncio
import logging
import signal
from typing import Optional

from core.errors import ConfigError, ESTABLISHMENT_ERRORS, HelicMaxError
from core.flight import Flight
from core.types import SessionState, WifiNetwork
from hm_config import HelicMaxConfig


logger = logging.getLogger("helicmax")


def setup_logging(level: str = "INFO") -> None:
    """Configure logging"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='[%(asctime)s] %(levelname)s %(name)s: %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stdout
    )


def fatal(message: str) -> None:
    """Report a fatal error and stop the process"""
    logger.critical(message)
    sys.exit(1)


def create_input(kind: str, script: Optional[str] = None):
    """Build the input provider selected on the command line"""
    if kind == "gamepad":
        from input.gamepad_input import GamepadInput
        return GamepadInput(deadzone=0.1)

    if kind == "mock":
        from input.mock_input import MockInput
        provider = MockInput(quit_when_done=True)
        provider.load_script(script or "hover")
        return provider

    from input.keyboard_input import KeyboardInput
    return KeyboardInput()


async def run_flight(flight: Flight) -> None:
    """Run the flight with SIGINT/SIGTERM mapped to a graceful disarm"""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, flight.request_shutdown)
        except (NotImplementedError, RuntimeError):
            # Windows: Ctrl-C cancels the task, the session still disarms
            pass

    await flight.run()


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="HelicMax - Toy Quadcopter Wifi Control",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python launch.py                         Keyboard control
  python launch.py --input gamepad         Gamepad control
  python launch.py --mock --script circle  Dry run without hardware
        """
    )

    parser.add_argument(
        "--input",
        default="keyboard",
        choices=["keyboard", "gamepad", "mock"],
        help="Input provider (default: keyboard)"
    )
    parser.add_argument(
        "--script",
        choices=["hover", "climb_and_descend", "circle"],
        help="Flight script for --input mock"
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use mock wifi and channel (no hardware needed)"
    )
    parser.add_argument(
        "--skip-wifi",
        action="store_true",
        help="Skip discovery and pairing (host already on the drone network)"
    )
    parser.add_argument("--iface", help="Wireless interface to use")
    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level"
    )

    args = parser.parse_args()

    setup_logging(args.log_level)

    config = HelicMaxConfig(args.env_file)
    try:
        session_config = config.to_session_config()
        link_config = config.to_link_config()
    except ConfigError as e:
        fatal(str(e))
    if args.iface:
        link_config.iface = args.iface

    if args.mock:
        from core.transport import MockChannel, MockWifi
        logger.info("Using MOCK wifi and channel (no actual hardware)")
        wifi = MockWifi([WifiNetwork(ssid="HelicMax-0000", bssid="02:00:00:00:00:00")])
        channel = MockChannel()
        input_kind = "mock" if args.input == "keyboard" else args.input
    else:
        from core.transport import UdpChannel, create_wifi_backend
        wifi = create_wifi_backend(link_config.iface)
        channel = UdpChannel(session_config.drone_ip, session_config.drone_port)
        input_kind = args.input

    if args.skip_wifi:
        wifi = None

    try:
        input_provider = create_input(input_kind, args.script)
    except (RuntimeError, ValueError) as e:
        fatal(f"Could not set up {input_kind} input: {e}")

    flight = Flight(
        channel=channel,
        input_provider=input_provider,
        wifi=wifi,
        link_config=link_config,
        session_config=session_config,
    )

    try:
        asyncio.run(run_flight(flight))
    except ESTABLISHMENT_ERRORS as e:
        fatal(f"{type(e).__name__}: {e}")
    except (HelicMaxError, RuntimeError) as e:
        fatal(f"Flight aborted: {e}")
    except KeyboardInterrupt:
        logger.info("Interrupted")

    session = flight.session
    if session is not None and session.state == SessionState.TERMINATED:
        logger.info(
            f"Session ended: {session.frames_sent} frame(s) sent, "
            f"{session.send_failures} send failure(s)"
        )


if __name__ == "__main__":
    main()
