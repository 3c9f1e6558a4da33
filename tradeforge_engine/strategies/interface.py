"""Strategy interface definition."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, runtime_checkable

from tradeforge_engine.models.advice import Advice
from tradeforge_engine.models.candle import Candle, CandleHistory

if TYPE_CHECKING:
    from tradeforge_engine.strategies.facade import IndicatorFacade

AdviceLike: TypeAlias = Advice | Mapping[str, Any] | None


@runtime_checkable
class Strategy(Protocol):
    """Interface for single-phase strategies."""

    def init(self, config: dict[str, Any]) -> None:
        """
        Prepare the strategy before the first candle.

        Args:
            config: Run settings (currency, asset, balances, strategy params).
        """
        ...

    def on_candle(
        self,
        candle: Candle,
        history: CandleHistory,
        engine: "IndicatorFacade",
    ) -> AdviceLike:
        """
        Evaluate the current candle and return trading advice.

        Args:
            candle: Current candle.
            history: Candles up to and including the current one (newest last).
            engine: Read-only indicator lookups for the current candle.

        Returns:
            Advice, an advice mapping, or None to hold.
        """
        ...


@runtime_checkable
class TwoPhaseStrategy(Protocol):
    """Interface for strategies splitting state updates from decisions."""

    def update(self, candle: Candle, engine: "IndicatorFacade") -> None:
        """Update internal state with the current candle."""
        ...

    def check(self, candle: Candle, engine: "IndicatorFacade") -> AdviceLike:
        """Return advice for the current candle."""
        ...


class BaseStrategy:
    """Convenience base storing the init config and tunable parameters.

    Subclasses declare ``defaults`` and read parameters from ``self.params``.
    Values under the same keys in the run config's strategy params override
    the defaults at ``init`` time.
    """

    name: str = "base"
    description: str = ""
    defaults: dict[str, Any] = {}

    def __init__(self, **params: Any) -> None:
        unknown = set(params) - set(self.defaults)
        if unknown:
            raise ValueError(f"Unknown parameters for {self.name}: {sorted(unknown)}")
        self._base_params: dict[str, Any] = {**self.defaults, **params}
        self.params: dict[str, Any] = dict(self._base_params)
        self.config: dict[str, Any] = {}
        self.initialized = False

    def init(self, config: dict[str, Any]) -> None:
        self.config = dict(config)
        overrides = {key: config[key] for key in self.defaults if key in config}
        self.params = {**self._base_params, **overrides}
        self.validate_params()
        self.initialized = True

    def validate_params(self) -> None:
        """Hook for subclasses to reject inconsistent parameters."""

    def info(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": dict(self.params),
        }
