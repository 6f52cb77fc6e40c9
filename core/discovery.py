"""
Discovery - find the drone's access point among visible networks.
"""

import logging
import re
from typing import Iterable, List, Optional, Pattern, Union

from .errors import ScanError, TargetNotFound
from .interfaces import WifiBackend
from .types import WifiNetwork, DEFAULT_SSID_PATTERN


logger = logging.getLogger(__name__)


def scan(backend: WifiBackend) -> List[WifiNetwork]:
    """
    Ask the backend for visible networks.

    Raises:
        ScanError: interface could not be queried
    """
    try:
        networks = list(backend.scan())
    except ScanError:
        raise
    except OSError as e:
        raise ScanError(f"Could not scan for wifi networks: {e}") from e

    logger.debug(f"Scan returned {len(networks)} network(s)")
    return networks


def select_target(
    networks: Iterable[WifiNetwork],
    pattern: Union[str, Pattern[str]] = DEFAULT_SSID_PATTERN,
) -> Optional[WifiNetwork]:
    """
    Pick the drone network.

    First match in scan order wins; signal strength is ignored.

    Returns:
        Matching network, or None if nothing matches
    """
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    for network in networks:
        if regex.search(network.ssid):
            return network
    return None


def find_target(
    backend: WifiBackend,
    pattern: Union[str, Pattern[str]] = DEFAULT_SSID_PATTERN,
) -> WifiNetwork:
    """
    Scan and select in one step.

    Raises:
        ScanError: interface could not be queried
        TargetNotFound: no network matched the pattern
    """
    logger.info("Scanning for drone wifi network...")
    networks = scan(backend)
    target = select_target(networks, pattern)
    if target is None:
        seen = ", ".join(n.ssid for n in networks) or "none"
        raise TargetNotFound(f"Could not find drone network (seen: {seen})")

    logger.info(f"Found drone network \"{target.ssid}\" ({target.bssid or 'unknown BSSID'})")
    return target
