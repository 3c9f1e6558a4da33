"""Resolve a strategy reference to a strategy object."""

import importlib
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tradeforge_engine.errors import StrategyLoadError
from tradeforge_engine.strategies.registry import STRATEGY_REGISTRY, create_strategy
from tradeforge_engine.strategies.rules import RuleStrategy

logger = logging.getLogger(__name__)


def load_strategy(reference: str, params: dict[str, Any] | None = None) -> Any:
    """
    Build a strategy from a reference string.

    Accepted references, in lookup order:
        - path to a ``.json`` rule file (declarative, nothing is executed)
        - ``package.module:ClassName`` of an installed, importable class
        - name of a registered built-in strategy

    Args:
        reference: Strategy reference
        params: Keyword arguments for class-based strategies

    Returns:
        Strategy instance

    Raises:
        StrategyLoadError: If the reference cannot be resolved or instantiated
    """
    params = params or {}

    if reference.endswith(".json"):
        return _load_rules(Path(reference))

    if ":" in reference:
        return _load_class(reference, params)

    if reference in STRATEGY_REGISTRY:
        try:
            return create_strategy(reference, **params)
        except (TypeError, ValueError) as exc:
            raise StrategyLoadError(f"Cannot create strategy {reference}: {exc}") from exc

    raise StrategyLoadError(
        f"Unknown strategy: {reference}. Use a registered name "
        f"({', '.join(sorted(STRATEGY_REGISTRY))}), module:Class, or a .json rule file"
    )


def _load_rules(path: Path) -> RuleStrategy:
    if not path.exists():
        raise StrategyLoadError(f"Strategy file not found: {path}")
    try:
        strategy = RuleStrategy.from_file(path)
    except json.JSONDecodeError as exc:
        raise StrategyLoadError(f"Invalid JSON in {path}: {exc}") from exc
    except ValidationError as exc:
        raise StrategyLoadError(f"Invalid rules in {path}: {exc}") from exc
    logger.info("Loaded rule strategy %s from %s", strategy.name, path)
    return strategy


def _load_class(reference: str, params: dict[str, Any]) -> Any:
    module_name, _, attr = reference.partition(":")
    if not module_name or not attr:
        raise StrategyLoadError(f"Expected module:Class, got {reference}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise StrategyLoadError(f"Cannot import {module_name}: {exc}") from exc

    target = getattr(module, attr, None)
    if target is None:
        raise StrategyLoadError(f"{module_name} has no attribute {attr}")
    if not callable(target):
        raise StrategyLoadError(f"{reference} is not a class or factory")

    try:
        strategy = target(**params)
    except (TypeError, ValueError) as exc:
        raise StrategyLoadError(f"Cannot instantiate {reference}: {exc}") from exc

    logger.info("Loaded strategy %s", reference)
    return strategy
