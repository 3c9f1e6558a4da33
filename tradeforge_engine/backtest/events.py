"""Per-trade and per-report notifications emitted by the runner."""

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from tradeforge_engine.models.result import BacktestResult
from tradeforge_engine.models.trade import Trade

logger = logging.getLogger(__name__)


@runtime_checkable
class BacktestObserver(Protocol):
    """Receives events synchronously from the runner loop."""

    def on_trade(self, trade: Trade) -> None: ...

    def on_report(self, result: BacktestResult) -> None: ...


class CallbackObserver:
    """Observer built from plain callables; either may be omitted."""

    def __init__(
        self,
        on_trade: Callable[[Trade], None] | None = None,
        on_report: Callable[[BacktestResult], None] | None = None,
    ):
        self._on_trade = on_trade
        self._on_report = on_report

    def on_trade(self, trade: Trade) -> None:
        if self._on_trade is not None:
            self._on_trade(trade)

    def on_report(self, result: BacktestResult) -> None:
        if self._on_report is not None:
            self._on_report(result)


class EventType(str, Enum):
    TRADE = "trade"
    REPORT = "report"


@dataclass(frozen=True)
class BacktestEvent:
    """Event queued on an EventChannel."""

    type: EventType
    payload: Any


class EventChannel:
    """Bounded queue the runner writes events into without blocking.

    When the queue is full the event is dropped and counted, so a slow
    consumer never stalls the simulation. Consumers drain it from another
    thread, typically through ChannelConsumer.
    """

    _CLOSED = object()

    def __init__(self, maxsize: int = 1000):
        if maxsize < 1:
            raise ValueError("Channel size must be at least 1")
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=maxsize)
        self.dropped = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: BacktestEvent) -> bool:
        """Enqueue an event; return False when it was dropped."""
        if self._closed:
            raise RuntimeError("Cannot publish on a closed channel")
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            self.dropped += 1
            logger.warning("Event channel full, dropped %s event (%d total)", event.type.value, self.dropped)
            return False
        return True

    def on_trade(self, trade: Trade) -> None:
        self.publish(BacktestEvent(EventType.TRADE, trade))

    def on_report(self, result: BacktestResult) -> None:
        self.publish(BacktestEvent(EventType.REPORT, result))

    def get(self, timeout: float | None = None) -> BacktestEvent | None:
        """Next event, or None once the channel is closed and drained.

        Raises:
            queue.Empty: If ``timeout`` elapses with nothing queued
        """
        item = self._queue.get(timeout=timeout)
        if item is self._CLOSED:
            # Keep the marker for any other consumer
            self._queue.put(item)
            return None
        return item

    def drain(self) -> list[BacktestEvent]:
        """Return all queued events without waiting."""
        events = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is self._CLOSED:
                self._queue.put(item)
                break
            events.append(item)
        return events

    def close(self) -> None:
        """Mark the end of the stream. Blocks until the marker fits."""
        if not self._closed:
            self._closed = True
            self._queue.put(self._CLOSED)


class ChannelConsumer:
    """Daemon thread dispatching channel events to a handler.

    Handler exceptions are logged and do not stop the consumer.

    Example:
        >>> channel = EventChannel(maxsize=100)
        >>> consumer = ChannelConsumer(channel, notify)
        >>> consumer.start()
        >>> run(candles, strategy, config, observers=[channel])
        >>> channel.close()
        >>> consumer.join()
    """

    def __init__(self, channel: EventChannel, handler: Callable[[BacktestEvent], None]):
        self.channel = channel
        self.handler = handler
        self.processed = 0
        self.failures = 0
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self._loop, name="BacktestEventConsumer", daemon=True
        )
        self._thread.start()

    def join(self, timeout: float | None = 5.0) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self) -> None:
        while True:
            event = self.channel.get()
            if event is None:
                return
            try:
                self.handler(event)
                self.processed += 1
            except Exception:
                self.failures += 1
                logger.error("Event handler failed for %s event", event.type.value, exc_info=True)
