"""Tests for the QThread-hosted cast session."""

import socket
from collections.abc import Iterator

import pytest
from pytestqt.qtbot import QtBot

from castplay.api.protocol import NOTIFY_MEDIA_FINISHED, NOTIFY_SESSION_STATUS, JsonRpcNotification
from castplay.core.cast_session import CastSession, NoReceiverSession, RemoteSession
from castplay.models.media_item import MediaItem
from castplay.models.session_status import CastSessionStatus
from fakes import FakeReceiver, ReceiverThread


def unused_port() -> int:
    """Return a loopback port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def receiver() -> FakeReceiver:
    """Create a fake receiver with a status answer."""
    fake = FakeReceiver()
    fake.results["Receiver.GetStatus"] = {"position": 42.5, "duration": 120, "state": "playing"}
    return fake


@pytest.fixture
def receiver_thread(receiver: FakeReceiver) -> Iterator[ReceiverThread]:
    """Serve the fake receiver on its own thread."""
    thread = ReceiverThread(receiver)
    thread.start_serving()
    yield thread
    thread.shutdown()


@pytest.fixture
def session(qapp: object, receiver_thread: ReceiverThread) -> Iterator[CastSession]:
    """Create a session pointed at the fake receiver (not started)."""
    cast = CastSession("127.0.0.1", receiver_thread.port, timeout=2.0, reconnect_delay=0.1)
    yield cast
    cast.stop()
    cast.wait(5000)


class TestCastSessionInit:
    """Tests for construction and the offline paths."""

    def test_initialization(self, qapp: object) -> None:
        """Test session defaults."""
        session = CastSession("192.168.1.50")
        assert session.host == "192.168.1.50"
        assert session.port == 8009
        assert session.has_connection_established is False
        assert isinstance(session, RemoteSession)

    def test_stop_clears_run_flag(self, qapp: object) -> None:
        """Test stop before start only clears the flag."""
        session = CastSession("192.168.1.50")
        session.stop()
        assert session._should_run is False

    def test_request_without_session_fails_queued(self, qtbot: QtBot) -> None:
        """Test a request with no loop completes not-done on a later turn."""
        session = CastSession("192.168.1.50")
        results: list[bool] = []

        session.play_selected_item_remotely(results.append)
        assert results == []

        qtbot.waitUntil(lambda: results == [False], timeout=1000)

    def test_position_without_session_is_none(self, qtbot: QtBot) -> None:
        """Test the position answer is None with no receiver."""
        session = CastSession("192.168.1.50")
        positions: list[float | None] = []

        session.request_remote_position(positions.append)

        qtbot.waitUntil(lambda: positions == [None], timeout=1000)


class TestNotifications:
    """Tests for translating receiver notifications."""

    def test_session_status_notification(self, qtbot: QtBot) -> None:
        """Test Session.OnStatus reaches listeners and the signal."""
        session = CastSession("192.168.1.50")
        statuses: list[CastSessionStatus] = []
        session.add_session_status_listener(statuses.append)

        with qtbot.waitSignal(session.session_status_changed, timeout=1000) as blocker:
            session._on_notification(
                JsonRpcNotification(method=NOTIFY_SESSION_STATUS, params={"status": "resumed"})
            )

        assert blocker.args == [CastSessionStatus.RESUMED]
        assert statuses == [CastSessionStatus.RESUMED]

    def test_media_finished_notification(self, qtbot: QtBot) -> None:
        """Test Receiver.OnMediaFinished reaches listeners."""
        session = CastSession("192.168.1.50")
        finished: list[bool] = []
        session.add_media_finished_listener(lambda: finished.append(True))

        with qtbot.waitSignal(session.media_finished, timeout=1000):
            session._on_notification(JsonRpcNotification(method=NOTIFY_MEDIA_FINISHED))

        assert finished == [True]

    def test_unknown_notification_ignored(self, qtbot: QtBot) -> None:
        """Test other notifications produce no signals."""
        session = CastSession("192.168.1.50")
        statuses: list[CastSessionStatus] = []
        session.add_session_status_listener(statuses.append)

        session._on_notification(JsonRpcNotification(method="Receiver.OnVolume"))
        qtbot.wait(50)

        assert statuses == []


class TestLiveSession:
    """Tests against a fake receiver on a real socket."""

    def test_started_then_requests(
        self,
        qtbot: QtBot,
        session: CastSession,
        receiver: FakeReceiver,
        media_item: MediaItem,
    ) -> None:
        """Test the first connect reports STARTED and requests complete done."""
        statuses: list[CastSessionStatus] = []
        session.add_session_status_listener(statuses.append)
        session.start()
        qtbot.waitUntil(lambda: CastSessionStatus.STARTED in statuses, timeout=5000)
        assert session.has_connection_established

        results: list[bool] = []
        session.start_selected_item_remotely(
            media_item.to_cast_media_info(120.0), 12.0, results.append
        )
        session.pause_selected_item_remotely(results.append)
        session.seek_selected_item_remotely(30.0, results.append)
        qtbot.waitUntil(lambda: len(results) == 3, timeout=5000)

        assert results == [True, True, True]
        methods = [r["method"] for r in receiver.requests]
        assert methods[0] == "Receiver.Load"
        assert receiver.requests[0]["params"]["position"] == 12.0
        assert set(methods) == {"Receiver.Load", "Receiver.Pause", "Receiver.Seek"}

    def test_position_answer(self, qtbot: QtBot, session: CastSession) -> None:
        """Test the receiver position is handed back on the main thread."""
        statuses: list[CastSessionStatus] = []
        session.add_session_status_listener(statuses.append)
        session.start()
        qtbot.waitUntil(lambda: CastSessionStatus.STARTED in statuses, timeout=5000)

        positions: list[float | None] = []
        session.request_remote_position(positions.append)
        qtbot.waitUntil(lambda: bool(positions), timeout=5000)

        assert positions == [42.5]

    def test_error_response_completes_not_done(
        self, qtbot: QtBot, session: CastSession, receiver: FakeReceiver
    ) -> None:
        """Test a receiver error completes the request with False."""
        receiver.errors["Receiver.Play"] = {"code": -1, "message": "Nothing loaded"}
        statuses: list[CastSessionStatus] = []
        session.add_session_status_listener(statuses.append)
        session.start()
        qtbot.waitUntil(lambda: CastSessionStatus.STARTED in statuses, timeout=5000)

        results: list[bool] = []
        with qtbot.waitSignal(session.error_occurred, timeout=5000):
            session.play_selected_item_remotely(results.append)
        qtbot.waitUntil(lambda: bool(results), timeout=5000)

        assert results == [False]

    def test_receiver_notifications(
        self, qtbot: QtBot, session: CastSession, receiver_thread: ReceiverThread
    ) -> None:
        """Test pushed notifications are delivered to listeners."""
        statuses: list[CastSessionStatus] = []
        finished: list[bool] = []
        session.add_session_status_listener(statuses.append)
        session.add_media_finished_listener(lambda: finished.append(True))
        session.start()
        qtbot.waitUntil(lambda: CastSessionStatus.STARTED in statuses, timeout=5000)

        receiver_thread.notify(NOTIFY_MEDIA_FINISHED)
        qtbot.waitUntil(lambda: bool(finished), timeout=5000)

    def test_receiver_hang_up_reports_ended(
        self,
        qtbot: QtBot,
        session: CastSession,
        receiver_thread: ReceiverThread,
    ) -> None:
        """Test losing the channel reports ENDED."""
        statuses: list[CastSessionStatus] = []
        session.add_session_status_listener(statuses.append)
        session.start()
        qtbot.waitUntil(lambda: CastSessionStatus.STARTED in statuses, timeout=5000)

        receiver_thread.shutdown()

        qtbot.waitUntil(lambda: CastSessionStatus.ENDED in statuses, timeout=5000)
        assert statuses[0] is CastSessionStatus.STARTED

    def test_failed_to_start(self, qtbot: QtBot) -> None:
        """Test an unreachable receiver reports FAILED_TO_START once."""
        session = CastSession("127.0.0.1", unused_port(), timeout=1.0, reconnect_delay=5.0)
        statuses: list[CastSessionStatus] = []
        session.add_session_status_listener(statuses.append)

        session.start()
        try:
            qtbot.waitUntil(lambda: bool(statuses), timeout=5000)
        finally:
            session.stop()
            session.wait(5000)

        assert statuses == [CastSessionStatus.FAILED_TO_START]
        assert session.has_connection_established is False


class TestNoReceiverSession:
    """Tests for the offline remote session."""

    def test_never_connected(self) -> None:
        """Test the session reports no connection."""
        session = NoReceiverSession()
        assert session.has_connection_established is False
        assert isinstance(session, RemoteSession)

    def test_requests_fail(self, media_item: MediaItem) -> None:
        """Test every request completes not-done."""
        session = NoReceiverSession()
        results: list[bool] = []

        session.start_selected_item_remotely(media_item.to_cast_media_info(None), 0.0, results.append)
        session.play_selected_item_remotely(results.append)
        session.pause_selected_item_remotely(results.append)
        session.seek_selected_item_remotely(5.0, results.append)

        assert results == [False, False, False, False]

    def test_position_is_none(self) -> None:
        """Test position requests answer None."""
        positions: list[float | None] = []
        NoReceiverSession().request_remote_position(positions.append)
        assert positions == [None]
