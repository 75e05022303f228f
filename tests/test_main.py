"""Tests for command line handling."""

from unittest.mock import MagicMock, patch

import pytest

from castplay.__main__ import build_parser, media_item_from_args, resolve_receiver
from castplay.core.discovery import DiscoveredReceiver


@pytest.fixture
def config() -> MagicMock:
    """Config with no saved receiver and discovery enabled."""
    mock = MagicMock()
    mock.get_receiver_host.return_value = ""
    mock.get_receiver_port.return_value = 8009
    mock.get_auto_discover.return_value = True
    return mock


class TestMediaItemFromArgs:
    """Tests for building the media item."""

    def test_name_from_url(self) -> None:
        """Test the file name is used when no name is given."""
        args = build_parser().parse_args(["https://example.com/films/bbb.mp4"])
        item = media_item_from_args(args)

        assert item.name == "bbb.mp4"
        assert item.video_url == "https://example.com/films/bbb.mp4"
        assert item.about == ""

    def test_explicit_metadata(self) -> None:
        """Test name, description and thumbnail options."""
        args = build_parser().parse_args(
            [
                "movie.mp4",
                "--name",
                "Big Buck Bunny",
                "--about",
                "A short film",
                "--thumbnail",
                "https://example.com/bbb.jpg",
            ]
        )
        item = media_item_from_args(args)

        assert item.name == "Big Buck Bunny"
        assert item.about == "A short film"
        assert item.thumbnail_url == "https://example.com/bbb.jpg"


class TestResolveReceiver:
    """Tests for receiver selection."""

    def test_command_line_wins(self, config: MagicMock) -> None:
        """Test --receiver and --port are used as given."""
        args = build_parser().parse_args(["a.mp4", "--receiver", "tv.local", "--port", "9000"])
        assert resolve_receiver(args, config) == ("tv.local", 9000)

    def test_saved_receiver(self, config: MagicMock) -> None:
        """Test the saved host and port are used without discovery."""
        config.get_receiver_host.return_value = "192.168.1.50"
        args = build_parser().parse_args(["a.mp4"])

        with patch("castplay.__main__.discover_one") as discover_one:
            assert resolve_receiver(args, config) == ("192.168.1.50", 8009)
        discover_one.assert_not_called()

    def test_discovered_receiver(self, config: MagicMock) -> None:
        """Test mDNS discovery supplies the receiver."""
        args = build_parser().parse_args(["a.mp4"])
        found = DiscoveredReceiver(name="Den", host="192.168.1.60", port=8010)

        with patch("castplay.__main__.discover_one") as discover_one:
            discover_one.return_value = found
            assert resolve_receiver(args, config) == ("192.168.1.60", 8010)

    def test_nothing_found(self, config: MagicMock) -> None:
        """Test playing locally when discovery finds nothing."""
        args = build_parser().parse_args(["a.mp4"])

        with patch("castplay.__main__.discover_one") as discover_one:
            discover_one.return_value = None
            assert resolve_receiver(args, config) is None

    def test_discovery_disabled(self, config: MagicMock) -> None:
        """Test --no-discovery skips browsing."""
        args = build_parser().parse_args(["a.mp4", "--no-discovery"])

        with patch("castplay.__main__.discover_one") as discover_one:
            assert resolve_receiver(args, config) is None
        discover_one.assert_not_called()

    def test_discovery_disabled_in_config(self, config: MagicMock) -> None:
        """Test the saved auto-discover setting is honored."""
        config.get_auto_discover.return_value = False
        args = build_parser().parse_args(["a.mp4"])

        with patch("castplay.__main__.discover_one") as discover_one:
            assert resolve_receiver(args, config) is None
        discover_one.assert_not_called()
