"""Test fixtures for castplay tests."""

import os
from collections.abc import Generator

import pytest
from fakes import FakeRemoteSession, FakeTransport
from PySide6.QtWidgets import QApplication

from castplay.core.controller import PlaybackController
from castplay.models.media_item import MediaItem

# Headless runs
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def media_item() -> MediaItem:
    """A typical media item."""
    return MediaItem(
        name="Big Buck Bunny",
        about="A short film",
        thumbnail_url="https://example.com/bbb.jpg",
        video_url="https://example.com/bbb.mp4",
    )


@pytest.fixture
def transport() -> FakeTransport:
    """Local transport at 0 s of a 120 s asset."""
    return FakeTransport()


@pytest.fixture
def remote() -> FakeRemoteSession:
    """Remote session without an established connection."""
    return FakeRemoteSession()


@pytest.fixture
def connected_remote() -> FakeRemoteSession:
    """Remote session with an established connection."""
    return FakeRemoteSession(connected=True)


@pytest.fixture
def controller(
    qapp: QApplication,  # noqa: ARG001
    transport: FakeTransport,
    remote: FakeRemoteSession,
    media_item: MediaItem,
) -> Generator[PlaybackController, None, None]:
    """Controller over the fake transport and the disconnected session."""
    ctrl = PlaybackController(transport, remote, media_item)
    yield ctrl
    ctrl.shutdown()


@pytest.fixture
def cast_controller(
    qapp: QApplication,  # noqa: ARG001
    transport: FakeTransport,
    connected_remote: FakeRemoteSession,
    media_item: MediaItem,
) -> Generator[PlaybackController, None, None]:
    """Controller over the fake transport and the connected session."""
    ctrl = PlaybackController(transport, connected_remote, media_item)
    yield ctrl
    ctrl.shutdown()
