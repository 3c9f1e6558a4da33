"""Strategy interface, runtime and built-in strategies."""

from tradeforge_engine.strategies.basic import BuyAndHoldStrategy, HoldStrategy
from tradeforge_engine.strategies.facade import IndicatorFacade
from tradeforge_engine.strategies.interface import (
    AdviceLike,
    BaseStrategy,
    Strategy,
    TwoPhaseStrategy,
)
from tradeforge_engine.strategies.loader import load_strategy
from tradeforge_engine.strategies.registry import (
    STRATEGY_REGISTRY,
    available_strategies,
    create_strategy,
    register_strategy,
)
from tradeforge_engine.strategies.rules import (
    Condition,
    RuleSet,
    RuleStrategy,
    RuleStrategyConfig,
)
from tradeforge_engine.strategies.runtime import StrategyRuntime, coerce_advice
from tradeforge_engine.strategies.sma_rsi import SmaRsiStrategy

__all__ = [
    "AdviceLike",
    "BaseStrategy",
    "BuyAndHoldStrategy",
    "Condition",
    "HoldStrategy",
    "IndicatorFacade",
    "RuleSet",
    "RuleStrategy",
    "RuleStrategyConfig",
    "STRATEGY_REGISTRY",
    "SmaRsiStrategy",
    "Strategy",
    "StrategyRuntime",
    "TwoPhaseStrategy",
    "available_strategies",
    "coerce_advice",
    "create_strategy",
    "load_strategy",
    "register_strategy",
]
