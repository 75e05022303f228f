"""Find cast receivers on the local network via mDNS.

Receivers advertise ``_castplay._tcp.local.`` with their control port and
an optional ``name`` TXT entry. Browsing is blocking and short-lived: the
CLI looks once at startup and connects to what it found.
"""

import ipaddress
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from zeroconf import ServiceBrowser, ServiceInfo, ServiceListener, Zeroconf

from castplay.api.client import DEFAULT_RECEIVER_PORT

logger = logging.getLogger(__name__)

CAST_SERVICE_TYPE = "_castplay._tcp.local."
_TXT_NAME = b"name"


def _unpack_addresses(packed: Iterable[bytes]) -> tuple[str, ...]:
    """Convert packed IPv4/IPv6 addresses to strings, skipping malformed ones."""
    addresses: list[str] = []
    for raw in packed:
        try:
            addresses.append(str(ipaddress.ip_address(raw)))
        except ValueError:
            logger.debug("Skipping malformed receiver address %r", raw)
    return tuple(addresses)


@dataclass(frozen=True)
class DiscoveredReceiver:
    """A receiver that answered an mDNS browse."""

    name: str
    host: str
    port: int = DEFAULT_RECEIVER_PORT
    addresses: tuple[str, ...] = ()
    hostname: str = ""  # e.g. "livingroom.local"

    @property
    def display_name(self) -> str:
        """Return the name without the service type, or the host."""
        return self.name.removesuffix(f".{CAST_SERVICE_TYPE}") or self.host

    @classmethod
    def from_service_info(cls, service_name: str, info: ServiceInfo) -> "DiscoveredReceiver | None":
        """Build a receiver from resolved service info.

        Args:
            service_name: mDNS instance name, used when no TXT name is set.
            info: Resolved service info.

        Returns:
            The receiver, or None if it advertised no usable address.
        """
        addresses = _unpack_addresses(info.addresses)
        if not addresses:
            return None

        txt_name = (info.properties or {}).get(_TXT_NAME) or b""
        return cls(
            name=txt_name.decode("utf-8", errors="replace") or service_name,
            host=addresses[0],
            port=info.port or DEFAULT_RECEIVER_PORT,
            addresses=addresses,
            hostname=(info.server or "").rstrip("."),
        )


class _ReceiverCollector(ServiceListener):
    """Collects announced receivers; ``enough`` is set once ``wanted`` answered."""

    def __init__(self, wanted: int | None = None) -> None:
        self.enough = threading.Event()
        self._wanted = wanted
        self._lock = threading.Lock()
        self._receivers: dict[str, DiscoveredReceiver] = {}

    @property
    def receivers(self) -> list[DiscoveredReceiver]:
        with self._lock:
            return list(self._receivers.values())

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        info = zc.get_service_info(type_, name)
        receiver = DiscoveredReceiver.from_service_info(name, info) if info else None
        if receiver is None:
            logger.debug("Ignoring unresolvable service %s", name)
            return

        logger.info("Found cast receiver %s at %s:%d", receiver.display_name, receiver.host, receiver.port)
        with self._lock:
            self._receivers[name] = receiver
            if self._wanted is not None and len(self._receivers) >= self._wanted:
                self.enough.set()

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self.add_service(zc, type_, name)

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:  # noqa: ARG002
        with self._lock:
            removed = self._receivers.pop(name, None)
        if removed is not None:
            logger.info("Cast receiver %s went away", removed.display_name)


def browse(timeout: float, wanted: int | None = None) -> list[DiscoveredReceiver]:
    """Browse for receivers.

    Args:
        timeout: Longest time to listen, in seconds.
        wanted: Stop as soon as this many receivers answered; None listens
            for the whole timeout.

    Returns:
        Receivers still announced when browsing stopped, in answer order.
    """
    collector = _ReceiverCollector(wanted)
    zeroconf = Zeroconf()
    try:
        browser = ServiceBrowser(zeroconf, CAST_SERVICE_TYPE, collector)
        try:
            collector.enough.wait(timeout)
        finally:
            browser.cancel()
    finally:
        zeroconf.close()
    return collector.receivers


def discover_one(timeout: float = 5.0) -> DiscoveredReceiver | None:
    """Return the first receiver to answer within ``timeout``, or None."""
    receivers = browse(timeout, wanted=1)
    return receivers[0] if receivers else None


def discover_all(timeout: float = 5.0) -> list[DiscoveredReceiver]:
    """Return every receiver that answers within ``timeout``."""
    return browse(timeout)
