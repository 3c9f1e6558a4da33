"""Tests for the event channel and its consumer thread."""

import queue
import threading

import pytest

from tradeforge_engine.backtest import run
from tradeforge_engine.backtest.events import (
    BacktestEvent,
    BacktestObserver,
    CallbackObserver,
    ChannelConsumer,
    EventChannel,
    EventType,
)
from tradeforge_engine.strategies import BuyAndHoldStrategy


def test_channel_is_an_observer() -> None:
    assert isinstance(EventChannel(), BacktestObserver)
    assert isinstance(CallbackObserver(), BacktestObserver)


def test_invalid_size() -> None:
    with pytest.raises(ValueError, match="at least 1"):
        EventChannel(maxsize=0)


def test_full_channel_drops_events() -> None:
    channel = EventChannel(maxsize=2)
    for i in range(5):
        channel.publish(BacktestEvent(EventType.TRADE, i))

    assert channel.dropped == 3
    assert [e.payload for e in channel.drain()] == [0, 1]


def test_publish_after_close_rejected() -> None:
    channel = EventChannel()
    channel.close()
    assert channel.closed
    with pytest.raises(RuntimeError, match="closed"):
        channel.publish(BacktestEvent(EventType.REPORT, None))


def test_get_returns_none_after_close() -> None:
    channel = EventChannel()
    channel.publish(BacktestEvent(EventType.TRADE, "t"))
    channel.close()

    assert channel.get(timeout=1).payload == "t"
    assert channel.get(timeout=1) is None
    # Marker stays for further readers
    assert channel.get(timeout=1) is None


def test_get_times_out_when_empty() -> None:
    with pytest.raises(queue.Empty):
        EventChannel().get(timeout=0.01)


def test_consumer_receives_run_events(make_candles) -> None:
    channel = EventChannel(maxsize=100)
    received: list[BacktestEvent] = []
    consumer = ChannelConsumer(channel, received.append)
    consumer.start()

    result = run(
        make_candles([100.0, 110.0, 120.0]),
        BuyAndHoldStrategy(exit_at=0),
        observers=[channel],
    )
    channel.close()
    consumer.join(timeout=5.0)

    assert not consumer.is_alive
    assert [e.type for e in received] == [EventType.TRADE, EventType.TRADE, EventType.REPORT]
    assert received[-1].payload is result
    assert consumer.processed == 3
    assert channel.dropped == 0


def test_consumer_survives_handler_errors() -> None:
    channel = EventChannel()
    done = threading.Event()
    seen: list[int] = []

    def handler(event: BacktestEvent) -> None:
        if event.payload == 1:
            raise ValueError("bad payload")
        seen.append(event.payload)
        if event.payload == 2:
            done.set()

    consumer = ChannelConsumer(channel, handler)
    consumer.start()
    for i in range(3):
        channel.publish(BacktestEvent(EventType.TRADE, i))

    assert done.wait(timeout=5.0)
    channel.close()
    consumer.join()

    assert seen == [0, 2]
    assert consumer.failures == 1
    assert consumer.processed == 2
