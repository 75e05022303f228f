"""Configuration manager using QSettings for persistent storage."""

import logging

from PySide6.QtCore import QSettings

from castplay.api.client import DEFAULT_RECEIVER_PORT
from castplay.core.scheduler import DEFAULT_CAST_INTERVAL_MS, DEFAULT_LOCAL_INTERVAL_MS

logger = logging.getLogger(__name__)

# Progress sync
_KEY_LOCAL_INTERVAL = "sync/local_interval_ms"
_KEY_CAST_INTERVAL = "sync/cast_interval_ms"

# Receiver
_KEY_RECEIVER_HOST = "receiver/host"
_KEY_RECEIVER_PORT = "receiver/port"
_KEY_AUTO_DISCOVER = "receiver/auto_discover"
_KEY_REQUEST_TIMEOUT = "receiver/request_timeout"

_LOCAL_INTERVAL_RANGE = (250, 5000)
_CAST_INTERVAL_RANGE = (100, 5000)
_REQUEST_TIMEOUT_RANGE = (1, 60)
_PORT_RANGE = (1, 65535)
_DEFAULT_REQUEST_TIMEOUT = 10


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, value))


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\CastPlay\\CastPlay
    - macOS: ~/Library/Preferences/com.CastPlay.CastPlay.plist
    - Linux: ~/.config/CastPlay/CastPlay.conf

    Playback position is never persisted.

    Example:
        config = ConfigManager()
        controller = PlaybackController(
            transport,
            session,
            item,
            local_interval_ms=config.get_local_interval_ms(),
            cast_interval_ms=config.get_cast_interval_ms(),
        )
    """

    def __init__(self, organization: str = "CastPlay", application: str = "CastPlay") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    @property
    def settings(self) -> QSettings:
        """Return the underlying QSettings instance."""
        return self._settings

    # -- Progress sync ---------------------------------------------------------

    def get_local_interval_ms(self) -> int:
        """Return the local progress period in milliseconds.

        Returns:
            Interval in ms (default 1000).
        """
        value = self._settings.value(_KEY_LOCAL_INTERVAL, DEFAULT_LOCAL_INTERVAL_MS, int)
        return _clamp(int(value), _LOCAL_INTERVAL_RANGE)  # type: ignore[arg-type]

    def set_local_interval_ms(self, interval_ms: int) -> None:
        """Set the local progress period.

        Args:
            interval_ms: Interval in ms (250-5000).
        """
        self._settings.setValue(_KEY_LOCAL_INTERVAL, _clamp(interval_ms, _LOCAL_INTERVAL_RANGE))

    def get_cast_interval_ms(self) -> int:
        """Return the remote progress period in milliseconds.

        Returns:
            Interval in ms (default 500).
        """
        value = self._settings.value(_KEY_CAST_INTERVAL, DEFAULT_CAST_INTERVAL_MS, int)
        return _clamp(int(value), _CAST_INTERVAL_RANGE)  # type: ignore[arg-type]

    def set_cast_interval_ms(self, interval_ms: int) -> None:
        """Set the remote progress period.

        Args:
            interval_ms: Interval in ms (100-5000).
        """
        self._settings.setValue(_KEY_CAST_INTERVAL, _clamp(interval_ms, _CAST_INTERVAL_RANGE))

    # -- Receiver --------------------------------------------------------------

    def get_receiver_host(self) -> str:
        """Return the configured receiver host.

        Returns:
            Host string, or empty string to rely on discovery.
        """
        value = self._settings.value(_KEY_RECEIVER_HOST, "", str)
        return str(value) if value else ""

    def set_receiver_host(self, host: str) -> None:
        """Set the receiver host.

        Args:
            host: Hostname or IP, or empty string to rely on discovery.
        """
        self._settings.setValue(_KEY_RECEIVER_HOST, host)

    def get_receiver_port(self) -> int:
        """Return the receiver control port.

        Returns:
            Port number (default 8009).
        """
        value = self._settings.value(_KEY_RECEIVER_PORT, DEFAULT_RECEIVER_PORT, int)
        return _clamp(int(value), _PORT_RANGE)  # type: ignore[arg-type]

    def set_receiver_port(self, port: int) -> None:
        """Set the receiver control port.

        Args:
            port: Port number (1-65535).
        """
        self._settings.setValue(_KEY_RECEIVER_PORT, _clamp(port, _PORT_RANGE))

    def get_auto_discover(self) -> bool:
        """Return whether receivers are discovered via mDNS when no host is set.

        Returns:
            True if auto-discovery is enabled (default True).
        """
        return bool(self._settings.value(_KEY_AUTO_DISCOVER, True, bool))

    def set_auto_discover(self, enabled: bool) -> None:
        """Enable or disable receiver auto-discovery.

        Args:
            enabled: Whether to browse for receivers.
        """
        self._settings.setValue(_KEY_AUTO_DISCOVER, enabled)

    def get_request_timeout(self) -> int:
        """Return the receiver request timeout in seconds.

        Returns:
            Timeout in seconds (default 10).
        """
        value = self._settings.value(_KEY_REQUEST_TIMEOUT, _DEFAULT_REQUEST_TIMEOUT, int)
        return _clamp(int(value), _REQUEST_TIMEOUT_RANGE)  # type: ignore[arg-type]

    def set_request_timeout(self, seconds: int) -> None:
        """Set the receiver request timeout.

        Args:
            seconds: Timeout in seconds (1-60).
        """
        self._settings.setValue(_KEY_REQUEST_TIMEOUT, _clamp(seconds, _REQUEST_TIMEOUT_RANGE))

    # -- General settings ------------------------------------------------------

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()
