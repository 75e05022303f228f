"""Main entry point for the CastPlay player."""

import argparse
import logging
import sys
from pathlib import PurePosixPath
from urllib.parse import urlparse

from PySide6.QtMultimediaWidgets import QVideoWidget
from PySide6.QtWidgets import QApplication

from castplay.core.cast_session import CastSession, NoReceiverSession, RemoteSession
from castplay.core.config import ConfigManager
from castplay.core.controller import PlaybackController
from castplay.core.discovery import discover_one
from castplay.core.transport import QtMediaTransport
from castplay.models.media_item import MediaItem
from castplay.ui.player_view import PlayerView

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
logger = logging.getLogger(__name__)

_DISCOVERY_TIMEOUT = 3.0
_SESSION_STOP_TIMEOUT_MS = 2000


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="castplay",
        description="CastPlay: play a video locally or on a cast receiver",
    )
    parser.add_argument("video_url", help="video URL or local file path")
    parser.add_argument("--name", default="", help="display name (default: file name)")
    parser.add_argument("--about", default="", help="description shown by the receiver")
    parser.add_argument("--thumbnail", default="", help="thumbnail image URL")
    parser.add_argument("--receiver", default=None, help="receiver hostname or IP")
    parser.add_argument("--port", type=int, default=None, help="receiver control port")
    parser.add_argument(
        "--no-discovery", action="store_true", help="do not browse for receivers via mDNS"
    )
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser


def media_item_from_args(args: argparse.Namespace) -> MediaItem:
    """Build the media item from parsed arguments."""
    name = args.name or PurePosixPath(urlparse(args.video_url).path).name or args.video_url
    return MediaItem(
        name=name,
        about=args.about,
        thumbnail_url=args.thumbnail,
        video_url=args.video_url,
    )


def resolve_receiver(
    args: argparse.Namespace, config: ConfigManager
) -> tuple[str, int] | None:
    """Pick the receiver from arguments, saved config or mDNS discovery.

    Returns:
        Tuple of (host, port), or None to play locally only.
    """
    host = args.receiver or config.get_receiver_host()
    port = args.port if args.port is not None else config.get_receiver_port()
    if host:
        return host, port

    if args.no_discovery or not config.get_auto_discover():
        return None

    logger.info("Searching for cast receivers via mDNS...")
    receiver = discover_one(timeout=_DISCOVERY_TIMEOUT)
    if receiver is None:
        logger.info("No cast receiver found; playing locally")
        return None
    logger.info(
        "Found receiver: %s at %s:%d", receiver.display_name, receiver.host, receiver.port
    )
    return receiver.host, receiver.port


def main() -> int:
    """Run the CastPlay player.

    Returns:
        Exit code (0 for success).
    """
    QApplication.setApplicationName("CastPlay")
    QApplication.setApplicationDisplayName("CastPlay")
    QApplication.setOrganizationName("CastPlay")

    app = QApplication(sys.argv)
    args = build_parser().parse_args(app.arguments()[1:])

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format=LOG_FORMAT)

    config = ConfigManager()
    item = media_item_from_args(args)

    receiver = resolve_receiver(args, config)
    cast_session: CastSession | None = None
    session: RemoteSession
    if receiver is not None:
        cast_session = CastSession(receiver[0], receiver[1], timeout=config.get_request_timeout())
        session = cast_session
    else:
        session = NoReceiverSession()

    video_widget = QVideoWidget()
    transport = QtMediaTransport()
    transport.set_video_output(video_widget)
    transport.load(item.video_url)

    controller = PlaybackController(
        transport,
        session,
        item,
        local_interval_ms=config.get_local_interval_ms(),
        cast_interval_ms=config.get_cast_interval_ms(),
    )
    transport.playback_finished.connect(controller.on_local_playback_finished)
    transport.error_occurred.connect(lambda message: logger.error("Local playback: %s", message))
    controller.state_changed.connect(lambda state: logger.info("Playback state: %s", state))

    view = PlayerView(video_widget)
    view.setWindowTitle(item.name)
    view.resize(960, 600)
    controller.connect_to_view(view)
    controller.scheduler.schedule_local_timer()
    view.show()

    if cast_session is not None:
        cast_session.error_occurred.connect(lambda e: logger.debug("Cast session error: %s", e))
        cast_session.start()

    exit_code = app.exec()

    logger.info("Shutting down")
    controller.shutdown()
    if cast_session is not None:
        cast_session.stop()
        cast_session.wait(_SESSION_STOP_TIMEOUT_MS)
    transport.unload()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
