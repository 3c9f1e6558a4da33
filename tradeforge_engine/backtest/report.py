"""Serialize backtest results to JSON.

Two shapes are produced: the full snake_case dump from
``BacktestResult.to_dict`` and the compact camelCase payload served over
HTTP (``trades``, ``equity``, ``summary``). Non-finite floats are written
as ``"Infinity"``, ``"-Infinity"`` or null so the output is strict JSON.
"""

import json
import math
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from tradeforge_engine.models.result import BacktestResult


def json_safe(obj: Any) -> Any:
    """Recursively convert to strict-JSON primitives."""
    if isinstance(obj, Enum):
        return json_safe(obj.value)
    if isinstance(obj, float):
        if math.isnan(obj):
            return None
        if math.isinf(obj):
            return "Infinity" if obj > 0 else "-Infinity"
        return obj
    if isinstance(obj, (str, int, bool, type(None))):
        return obj
    if isinstance(obj, dict):
        return {str(k): json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_safe(x) for x in obj]
    if hasattr(obj, "to_dict"):
        return json_safe(obj.to_dict())
    return str(obj)


def to_api_payload(result: BacktestResult) -> dict[str, Any]:
    """Map a result onto the HTTP response shape.

    ``roi`` and ``maxDrawdown`` in the summary are percentages.
    """
    metrics = result.metrics
    return {
        "trades": [
            {
                "id": t.id,
                "timestamp": t.timestamp,
                "side": t.side.value,
                "price": t.price,
                "quantity": t.quantity,
                "commission": t.commission,
                "slippage": t.slippage,
                "realizedPnl": t.realized_pnl,
                "reason": t.reason,
                "confidence": t.confidence,
                "balanceAfter": t.cash_after,
                "positionAfter": t.position_after,
            }
            for t in result.trades
        ],
        "equity": [{"timestamp": s.timestamp, "equity": s.equity} for s in result.equity_curve],
        "summary": {
            "totalTrades": metrics.total_trades,
            "profitableTrades": metrics.winning_trades,
            "totalProfit": metrics.net_profit,
            "maxDrawdown": metrics.max_drawdown * 100.0,
            "roi": metrics.roi * 100.0,
            "initialBalance": result.initial_balance,
            "finalBalance": metrics.final_equity,
            "winRate": metrics.win_rate * 100.0,
            "profitFactor": metrics.profit_factor,
            "sharpeRatio": metrics.sharpe_ratio,
            "startDate": metrics.start_time,
            "endDate": metrics.end_time,
            "status": result.status.value,
            "diagnostics": len(result.diagnostics),
        },
    }


def result_to_json(
    result: BacktestResult,
    shape: Literal["full", "api"] = "full",
    indent: int | None = 2,
) -> str:
    data = result.to_dict() if shape == "full" else to_api_payload(result)
    return json.dumps(json_safe(data), indent=indent, allow_nan=False)


def save_report(
    result: BacktestResult,
    output_path: str | Path,
    shape: Literal["full", "api"] = "full",
) -> Path:
    """Write a result to a JSON file, creating parent directories.

    Args:
        result: Backtest result
        output_path: Destination file
        shape: "full" for the complete dump, "api" for the HTTP payload

    Returns:
        Path to the saved file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(result_to_json(result, shape))
    return path
