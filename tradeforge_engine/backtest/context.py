"""Per-run context threaded through the runner."""

import random
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from tradeforge_engine.backtest.events import BacktestObserver
from tradeforge_engine.config.models import BacktestConfig
from tradeforge_engine.models.trade import Diagnostic


class CancellationToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class RunContext:
    """Everything one run needs besides candles and strategy.

    Each run builds its own context, so concurrent runs share no mutable
    state.
    """

    config: BacktestConfig
    rng: random.Random
    cancel_token: CancellationToken
    observers: Sequence[BacktestObserver] = ()
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        config: BacktestConfig,
        cancel_token: CancellationToken | None = None,
        observers: Sequence[BacktestObserver] | None = None,
    ) -> "RunContext":
        return cls(
            config=config,
            rng=random.Random(config.seed),
            cancel_token=cancel_token or CancellationToken(),
            observers=tuple(observers or ()),
        )
