"""Tests for the in-process event bus."""

import logging

from logiflow.services.events import EventBus, SystemEvent


def _event(event_type="approval:approved"):
    return SystemEvent(
        type=event_type,
        entity_type="mrf",
        entity_id="doc-1",
        action="approve",
        payload={"total_levels": 2},
        performed_by_id="emp-1",
    )


def test_delivers_to_type_and_wildcard_subscribers():
    bus = EventBus()
    specific, wildcard = [], []
    bus.subscribe("approval:approved", specific.append)
    bus.subscribe("*", wildcard.append)

    assert bus.publish(_event()) == 2
    assert bus.publish(_event("approval:rejected")) == 1
    assert [e.type for e in specific] == ["approval:approved"]
    assert [e.type for e in wildcard] == ["approval:approved", "approval:rejected"]


def test_failing_handler_is_isolated(caplog):
    bus = EventBus()
    received = []

    def broken(event):
        raise ValueError("boom")

    bus.subscribe("approval:approved", broken)
    bus.subscribe("approval:approved", received.append)

    with caplog.at_level(logging.ERROR, logger="logiflow.services.events"):
        assert bus.publish(_event()) == 1

    assert len(received) == 1
    assert "boom" in caplog.text


def test_unsubscribe_and_clear():
    bus = EventBus()
    received = []
    bus.subscribe("approval:approved", received.append)
    bus.unsubscribe("approval:approved", received.append)
    bus.unsubscribe("approval:approved", received.append)

    assert bus.publish(_event()) == 0

    bus.subscribe("*", received.append)
    bus.clear()
    assert bus.publish(_event()) == 0
    assert received == []


def test_event_timestamp_defaults_to_iso_string():
    assert "T" in _event().timestamp
