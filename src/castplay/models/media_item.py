"""Media descriptor and the cast request built from it."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

DEFAULT_STUDIO = "Nodes"


class StreamType(StrEnum):
    """How the receiver should treat the media stream."""

    NONE = "none"
    BUFFERED = "buffered"
    LIVE = "live"


@dataclass(frozen=True, slots=True)
class CastMediaInfo:
    """Media information sent to a receiver to start remote playback.

    Attributes:
        title: Display title.
        subtitle: Description text shown under the title.
        studio: Publisher shown by the receiver.
        duration: Media duration in seconds, or None if unknown.
        content_url: URL the receiver streams from.
        stream_type: Buffered (seekable) or live stream.
        image_url: Thumbnail URL.
    """

    title: str
    subtitle: str
    content_url: str
    duration: float | None = None
    studio: str = DEFAULT_STUDIO
    stream_type: StreamType = StreamType.BUFFERED
    image_url: str = ""

    def to_params(self) -> dict[str, Any]:
        """Convert to the JSON-serializable ``media`` parameter."""
        params: dict[str, Any] = {
            "contentUrl": self.content_url,
            "streamType": self.stream_type.value,
            "metadata": {
                "title": self.title,
                "subtitle": self.subtitle,
                "studio": self.studio,
            },
        }
        if self.duration is not None:
            params["duration"] = self.duration
        if self.image_url:
            params["metadata"]["images"] = [{"url": self.image_url}]
        return params


@dataclass(frozen=True, slots=True)
class MediaItem:
    """An item the user asked to play.

    Supplied by the embedding application and never modified here.

    Attributes:
        name: Display name.
        about: Description text.
        thumbnail_url: Thumbnail image URL.
        video_url: Source URL, used by both the local and remote backends.
    """

    name: str
    about: str = ""
    thumbnail_url: str = ""
    video_url: str = ""

    def to_cast_media_info(
        self,
        duration: float | None,
        stream_type: StreamType = StreamType.BUFFERED,
    ) -> CastMediaInfo:
        """Build the remote start request for this item.

        Args:
            duration: Duration read from the local asset, if known.
            stream_type: Stream type to announce to the receiver.

        Returns:
            CastMediaInfo carrying this item's fields verbatim.
        """
        return CastMediaInfo(
            title=self.name,
            subtitle=self.about,
            content_url=self.video_url,
            duration=duration,
            stream_type=stream_type,
            image_url=self.thumbnail_url,
        )
