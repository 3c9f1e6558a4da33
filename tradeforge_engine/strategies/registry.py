"""Registry of strategies shipped with the engine."""

from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T", bound=type)

STRATEGY_REGISTRY: dict[str, type] = {}


def register_strategy(name: str) -> Callable[[T], T]:
    """Class decorator adding a strategy to the registry under ``name``."""

    def decorator(cls: T) -> T:
        if name in STRATEGY_REGISTRY and STRATEGY_REGISTRY[name] is not cls:
            raise ValueError(f"Strategy already registered: {name}")
        STRATEGY_REGISTRY[name] = cls
        return cls

    return decorator


def available_strategies() -> list[str]:
    return sorted(STRATEGY_REGISTRY)


def create_strategy(name: str, **params: Any) -> Any:
    """Instantiate a registered strategy.

    Raises:
        KeyError: If no strategy is registered under ``name``
    """
    try:
        cls = STRATEGY_REGISTRY[name]
    except KeyError:
        raise KeyError(
            f"Unknown strategy: {name}. Available: {available_strategies()}"
        ) from None
    return cls(**params)
