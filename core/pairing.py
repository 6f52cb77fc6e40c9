"""
Pairing - join the drone's open network.

No retry here: a failed attempt is reported and the operator re-runs.
"""

import logging

from .errors import PairingError
from .interfaces import WifiBackend
from .types import Connected, WifiNetwork


logger = logging.getLogger(__name__)


def connect(backend: WifiBackend, network: WifiNetwork, timeout: float = 30.0) -> Connected:
    """
    Associate with the drone network using no credential.

    Args:
        backend: Host wifi integration
        network: Target picked by discovery
        timeout: Seconds to wait for the OS to confirm association

    Returns:
        Connected result

    Raises:
        PairingError: association rejected or timed out
    """
    if not network.is_open:
        logger.warning(f"\"{network.ssid}\" reports security '{network.security}', trying without password anyway")

    logger.info(f"Connecting to \"{network.ssid}\" ({network.bssid or 'unknown BSSID'})")
    try:
        iface = backend.connect(network.ssid, timeout)
    except PairingError:
        raise
    except OSError as e:
        raise PairingError(f"Could not connect to the drone wifi network: {e}") from e

    logger.info(f"Associated with \"{network.ssid}\"" + (f" on {iface}" if iface else ""))
    return Connected(network=network, iface=iface)
