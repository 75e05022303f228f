"""Core playback logic layer.

This module contains the playback state machine and the transports it
arbitrates between, bridging the async receiver client with the Qt UI.

Classes:
    PlaybackController: State machine for local vs remote playback.
    ProgressSyncScheduler: Periodic progress reporting to the UI.
    QtMediaTransport: QMediaPlayer-backed local transport.
    CastSession: QThread-hosted remote cast session.
    ConfigManager: QSettings wrapper for configuration.
    DiscoveredReceiver: A cast receiver found via mDNS.
"""

from castplay.core.cast_session import CastSession, NoReceiverSession, RemoteSession
from castplay.core.config import ConfigManager
from castplay.core.controller import PlaybackController
from castplay.core.discovery import DiscoveredReceiver, discover_all, discover_one
from castplay.core.scheduler import ProgressSyncScheduler
from castplay.core.transport import LocalTransport, QtMediaTransport

__all__ = [
    "CastSession",
    "ConfigManager",
    "DiscoveredReceiver",
    "LocalTransport",
    "NoReceiverSession",
    "PlaybackController",
    "ProgressSyncScheduler",
    "QtMediaTransport",
    "RemoteSession",
    "discover_all",
    "discover_one",
]
