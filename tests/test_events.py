import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from gcal_mcp.services.events import Notification, NotificationHub


def _note(token="list_events", level="info"):
    return Notification(level=level, logger="gcal_mcp.auth", data={"correlation_token": token})


def _peer(side_effect=None):
    peer = MagicMock()
    peer.send_notification = AsyncMock(side_effect=side_effect)
    return peer


def test_notify_without_route_is_noop():
    hub = NotificationHub()
    hub.open_session()

    assert hub.notify("list_events", _note()) == 0


def test_notify_delivers_once_and_consumes_route():
    hub = NotificationHub()
    session = hub.open_session()
    hub.route("list_events", session.id)

    assert hub.notify("list_events", _note()) == 1
    assert hub.notify("list_events", _note()) == 0
    assert session.queue.get_nowait() == _note()
    assert session.queue.empty()


def test_route_for_unknown_session_is_ignored():
    hub = NotificationHub()

    assert hub.route("list_events", "missing") is False
    assert hub.routes_for("list_events") == []


def test_closed_session_drops_notifications():
    hub = NotificationHub()
    session = hub.open_session()
    hub.route("list_events", session.id)

    hub.close_session(session.id)

    assert session.closed
    assert hub.get(session.id) is None
    assert hub.routes_for("list_events") == []
    assert hub.notify("list_events", _note()) == 0
    assert session.offer(_note()) is False


def test_closing_one_subscriber_keeps_the_other():
    hub = NotificationHub()
    first = hub.open_session()
    second = hub.open_session()
    hub.route("list_events", first.id)
    hub.route("list_events", second.id)

    hub.close_session(first.id)

    assert hub.routes_for("list_events") == [second.id]
    assert hub.notify("list_events", _note()) == 1


def test_full_queue_drops_without_blocking():
    hub = NotificationHub(queue_size=2)
    session = hub.open_session()

    assert session.offer(_note("a"))
    assert session.offer(_note("b"))
    assert session.offer(_note("c")) is False
    assert session.dropped == 1
    assert [session.queue.get_nowait().data["correlation_token"] for _ in range(2)] == ["a", "b"]


def test_session_preserves_order():
    hub = NotificationHub()
    session = hub.open_session()
    for token in ("a", "b", "c"):
        hub.route(token, session.id)
        hub.notify(token, _note(token))

    assert [session.queue.get_nowait().data["correlation_token"] for _ in range(3)] == ["a", "b", "c"]


def test_notification_converts_to_logging_message():
    message = _note().to_mcp()

    assert message.method == "notifications/message"
    assert message.params.level == "info"
    assert message.params.logger == "gcal_mcp.auth"
    assert message.params.data == {"correlation_token": "list_events"}


def test_set_level_rejects_unknown_levels():
    hub = NotificationHub()
    session = hub.open_session()

    with pytest.raises(ValueError, match="verbose"):
        hub.set_level(session.id, "verbose")
    assert hub.set_level("missing", "error") is False
    assert hub.set_level(session.id, "error") is True
    assert session.min_level == "error"


def test_bind_requires_an_open_session():
    hub = NotificationHub()

    assert hub.bind("missing", _peer()) is False


@pytest.mark.asyncio
async def test_bound_peer_receives_queued_notifications():
    hub = NotificationHub()
    session = hub.open_session()
    peer = _peer()
    hub.route("list_events", session.id)
    hub.notify("list_events", _note())

    assert hub.bind(session.id, peer)
    await asyncio.wait_for(session.queue.join(), timeout=1)

    peer.send_notification.assert_awaited_once()
    sent = peer.send_notification.await_args.args[0]
    assert sent.params.data == {"correlation_token": "list_events"}
    hub.close_session(session.id)


@pytest.mark.asyncio
async def test_notifications_below_session_level_are_filtered():
    hub = NotificationHub()
    session = hub.open_session()
    peer = _peer()
    hub.bind(session.id, peer)
    hub.set_level(session.id, "warning")

    session.offer(_note("quiet", level="info"))
    session.offer(_note("loud", level="error"))
    await asyncio.wait_for(session.queue.join(), timeout=1)

    assert peer.send_notification.await_count == 1
    assert peer.send_notification.await_args.args[0].params.data["correlation_token"] == "loud"
    hub.close_session(session.id)


@pytest.mark.asyncio
async def test_failing_peer_closes_the_session():
    hub = NotificationHub()
    session = hub.open_session()
    hub.bind(session.id, _peer(side_effect=ConnectionError("gone")))

    session.offer(_note())
    await asyncio.wait_for(session.queue.join(), timeout=1)

    assert session.closed
    assert hub.get(session.id) is None


@pytest.mark.asyncio
async def test_close_session_stops_the_pump():
    hub = NotificationHub()
    session = hub.open_session()
    hub.bind(session.id, _peer())
    pump = session.pump

    hub.close_session(session.id)
    with pytest.raises(asyncio.CancelledError):
        await pump

    assert pump.cancelled()
