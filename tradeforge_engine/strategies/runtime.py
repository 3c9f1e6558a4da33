"""Strategy runtime adapting user strategies to the per-candle protocol."""

import logging
from collections.abc import Mapping
from typing import Any

from tradeforge_engine.errors import (
    InvalidInputError,
    StrategyEvaluationError,
    StrategyInitError,
)
from tradeforge_engine.models.advice import Advice
from tradeforge_engine.models.candle import Candle, CandleHistory
from tradeforge_engine.models.trade import Diagnostic, DiagnosticKind
from tradeforge_engine.strategies.facade import IndicatorFacade

logger = logging.getLogger(__name__)


def coerce_advice(raw: Any) -> Advice:
    """Normalize a strategy return value to Advice.

    Raises:
        TypeError: If the value is not Advice, a mapping or None
        ValueError: If a mapping describes invalid advice
    """
    if raw is None:
        return Advice.none()
    if isinstance(raw, Advice):
        return raw
    if isinstance(raw, Mapping):
        return Advice.from_dict(raw)
    raise TypeError(f"Strategy returned {type(raw).__name__}, expected Advice, mapping or None")


class StrategyRuntime:
    """Drives one strategy through ``initialize`` and per-candle ``evaluate``.

    Single-phase strategies implement ``on_candle``; two-phase strategies
    implement ``update`` and ``check``. An exception raised during
    evaluation becomes a ``none`` advice plus a diagnostic, or aborts the
    run in strict mode.

    Example:
        >>> runtime = StrategyRuntime(SmaRsiStrategy(), diagnostics=[])
        >>> runtime.initialize(config.strategy_config())
        >>> advice = runtime.evaluate(candle, history, facade, candle_index=0)
    """

    def __init__(
        self,
        strategy: Any,
        strict: bool = False,
        diagnostics: list[Diagnostic] | None = None,
    ):
        self.strategy = strategy
        self.strict = strict
        self.diagnostics: list[Diagnostic] = diagnostics if diagnostics is not None else []
        self.errors = 0
        self._initialized = False
        self._two_phase = False

    @property
    def name(self) -> str:
        return getattr(self.strategy, "name", None) or type(self.strategy).__name__

    def initialize(self, config: dict[str, Any]) -> None:
        """Call the strategy's ``init`` exactly once.

        Raises:
            StrategyInitError: If the strategy lacks evaluation hooks, is
                initialized twice, or raises from ``init``
        """
        if self._initialized:
            raise StrategyInitError(f"Strategy {self.name} already initialized")

        if callable(getattr(self.strategy, "on_candle", None)):
            self._two_phase = False
        elif callable(getattr(self.strategy, "update", None)) and callable(
            getattr(self.strategy, "check", None)
        ):
            self._two_phase = True
        else:
            raise StrategyInitError(
                f"Strategy {self.name} must implement on_candle or update and check"
            )

        init = getattr(self.strategy, "init", None)
        if callable(init):
            try:
                init(config)
            except Exception as exc:
                raise StrategyInitError(f"Strategy {self.name} failed to initialize: {exc}") from exc

        self._initialized = True
        logger.info("Initialized strategy %s", self.name)

    def evaluate(
        self,
        candle: Candle,
        history: CandleHistory,
        facade: IndicatorFacade,
        candle_index: int,
    ) -> Advice:
        """Return the strategy's advice for one candle.

        Raises:
            StrategyEvaluationError: In strict mode when the strategy raises
                or returns something that is not valid advice
        """
        if not self._initialized:
            raise StrategyEvaluationError(
                f"Strategy {self.name} evaluated before initialize",
                candle_index=candle_index,
                timestamp=candle.timestamp,
            )

        try:
            if self._two_phase:
                self.strategy.update(candle, facade)
                raw = self.strategy.check(candle, facade)
            else:
                raw = self.strategy.on_candle(candle, history, facade)
            return coerce_advice(raw)
        except InvalidInputError as exc:
            if exc.candle_index is None:
                raise InvalidInputError(
                    exc.message, candle_index=candle_index, timestamp=candle.timestamp
                ) from exc
            raise
        except Exception as exc:
            self.errors += 1
            message = f"{type(exc).__name__}: {exc}"
            if self.strict:
                raise StrategyEvaluationError(
                    f"Strategy {self.name} failed: {message}",
                    candle_index=candle_index,
                    timestamp=candle.timestamp,
                ) from exc

            logger.error(
                "Strategy %s failed at candle %d: %s", self.name, candle_index, message,
                exc_info=True,
            )
            self.diagnostics.append(
                Diagnostic(
                    DiagnosticKind.STRATEGY_ERROR,
                    message,
                    candle_index=candle_index,
                    timestamp=candle.timestamp,
                )
            )
            return Advice.none(reason="strategy_error")
