"""Command line entry point: ``backtest --data FILE --strategy REF``."""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from tradeforge_engine.backtest.report import result_to_json, save_report
from tradeforge_engine.backtest.runner import run
from tradeforge_engine.config.loader import load_config
from tradeforge_engine.errors import (
    BacktestError,
    InvalidSeriesError,
    StrategyInitError,
    StrategyLoadError,
)
from tradeforge_engine.market_data.csv_loader import filter_by_date, load_candles
from tradeforge_engine.persistence.repository import ResultRepository, create_session
from tradeforge_engine.strategies.loader import load_strategy
from tradeforge_engine.strategies.registry import available_strategies

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_SERIES = 2
EXIT_STRATEGY_ERROR = 3


def _parse_param(raw: str) -> tuple[str, Any]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected key=value, got {raw!r}")
    try:
        return key, json.loads(value)
    except json.JSONDecodeError:
        return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="backtest",
        description="Replay historical candles through a trading strategy.",
    )
    parser.add_argument("--data", required=True, help="Candle file (.csv or .json)")
    parser.add_argument(
        "--strategy",
        required=True,
        help=(
            "Registered strategy name "
            f"({', '.join(available_strategies())}), module:Class, or a .json rule file"
        ),
    )
    parser.add_argument("--config", help="JSON config file")
    parser.add_argument("--initial-balance", type=float, help="Starting cash")
    parser.add_argument("--commission-rate", type=float, help="Commission as a fraction, e.g. 0.001")
    parser.add_argument("--slippage-rate", type=float, help="Slippage as a fraction, e.g. 0.0005")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--strict", action="store_true", help="Abort on strategy errors")
    parser.add_argument("--start", help="First candle to include (ISO date or epoch)")
    parser.add_argument("--end", help="Last candle to include (ISO date or epoch)")
    parser.add_argument(
        "--param",
        action="append",
        type=_parse_param,
        default=[],
        metavar="KEY=VALUE",
        help="Strategy parameter (repeatable, values parsed as JSON when possible)",
    )
    parser.add_argument(
        "--format",
        choices=("api", "full"),
        default="api",
        help="Output shape: api (trades/equity/summary) or full",
    )
    parser.add_argument("--output", help="Write JSON here instead of stdout")
    parser.add_argument("--db", help="SQLAlchemy URL to store the result, e.g. sqlite:///runs.db")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run one backtest from the command line.

    Returns:
        Exit code: 0 success, 2 invalid series, 3 strategy load/init failure,
        1 any other error
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config(args.config)
        overrides: dict[str, Any] = {}
        if args.initial_balance is not None:
            overrides["initial_balance"] = args.initial_balance
        if args.commission_rate is not None:
            overrides["commission_rate"] = args.commission_rate
        if args.slippage_rate is not None:
            overrides["slippage_rate"] = args.slippage_rate
        if args.seed is not None:
            overrides["seed"] = args.seed
        if args.strict:
            overrides["strict_mode"] = True
        if args.param:
            overrides["strategy_params"] = {**config.strategy_params, **dict(args.param)}
        if overrides:
            config = config.model_validate({**config.model_dump(), **overrides})
    except (FileNotFoundError, json.JSONDecodeError, ValidationError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_ERROR

    try:
        candles = load_candles(args.data)
        if args.start or args.end:
            candles = filter_by_date(candles, args.start, args.end)
        strategy = load_strategy(args.strategy)
        result = run(candles, strategy, config)
    except InvalidSeriesError as exc:
        logger.error("Invalid candle series: %s", exc)
        return EXIT_INVALID_SERIES
    except (StrategyLoadError, StrategyInitError) as exc:
        logger.error("Strategy error: %s", exc)
        return EXIT_STRATEGY_ERROR
    except BacktestError as exc:
        logger.error("Backtest aborted: %s", exc)
        return EXIT_ERROR
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Cannot load data: %s", exc)
        return EXIT_ERROR

    if args.db:
        session = create_session(args.db)
        try:
            run_id = ResultRepository(session).save_result(
                result, args.strategy, config=config.model_dump()
            )
            logger.info("Stored run %d in %s", run_id, args.db.split("@")[-1])
        finally:
            session.close()

    if args.output:
        path = save_report(result, args.output, shape=args.format)
        logger.info("Report saved to %s", path)
    else:
        sys.stdout.write(result_to_json(result, shape=args.format) + "\n")

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
