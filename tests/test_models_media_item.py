"""Tests for media item and receiver status models."""

from castplay.models.media_item import DEFAULT_STUDIO, CastMediaInfo, MediaItem, StreamType
from castplay.models.receiver_status import ReceiverStatus


class TestMediaItem:
    """Tests for MediaItem."""

    def test_to_cast_media_info_copies_fields(self, media_item: MediaItem) -> None:
        """Test the cast request uses the descriptor verbatim."""
        info = media_item.to_cast_media_info(95.5)

        assert info.title == "Big Buck Bunny"
        assert info.subtitle == "A short film"
        assert info.content_url == "https://example.com/bbb.mp4"
        assert info.image_url == "https://example.com/bbb.jpg"
        assert info.duration == 95.5
        assert info.studio == DEFAULT_STUDIO
        assert info.stream_type is StreamType.BUFFERED

    def test_live_stream(self, media_item: MediaItem) -> None:
        """Test a live stream type can be requested."""
        info = media_item.to_cast_media_info(None, StreamType.LIVE)
        assert info.stream_type is StreamType.LIVE
        assert info.duration is None


class TestCastMediaInfo:
    """Tests for CastMediaInfo wire parameters."""

    def test_to_params_full(self) -> None:
        """Test all fields land in the media parameter."""
        info = CastMediaInfo(
            title="Clip",
            subtitle="About",
            content_url="https://example.com/clip.mp4",
            duration=60.0,
            image_url="https://example.com/clip.jpg",
        )

        assert info.to_params() == {
            "contentUrl": "https://example.com/clip.mp4",
            "streamType": "buffered",
            "metadata": {
                "title": "Clip",
                "subtitle": "About",
                "studio": DEFAULT_STUDIO,
                "images": [{"url": "https://example.com/clip.jpg"}],
            },
            "duration": 60.0,
        }

    def test_to_params_omits_unknowns(self) -> None:
        """Test missing duration and thumbnail are left out."""
        params = CastMediaInfo(title="Clip", subtitle="", content_url="u").to_params()

        assert "duration" not in params
        assert "images" not in params["metadata"]


class TestReceiverStatus:
    """Tests for ReceiverStatus parsing."""

    def test_from_dict(self) -> None:
        """Test a full status result."""
        status = ReceiverStatus.from_dict({"position": 12.5, "duration": 100, "state": "playing"})

        assert status.position == 12.5
        assert status.duration == 100.0
        assert status.is_playing

    def test_from_dict_defaults(self) -> None:
        """Test missing fields fall back to idle with unknown times."""
        status = ReceiverStatus.from_dict({})

        assert status.position is None
        assert status.duration is None
        assert status.player_state == "idle"
        assert not status.is_playing

    def test_rejects_garbage(self) -> None:
        """Test negative, boolean and text values are treated as unknown."""
        status = ReceiverStatus.from_dict({"position": -1, "duration": True})
        assert status.position is None
        assert status.duration is None

        assert ReceiverStatus.from_dict({"position": "12"}).position is None

    def test_non_dict_result(self) -> None:
        """Test a non-object result yields an empty status."""
        assert ReceiverStatus.from_dict(None) == ReceiverStatus()
        assert ReceiverStatus.from_dict([1, 2]) == ReceiverStatus()
