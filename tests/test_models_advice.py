"""Tests for Advice."""

import pytest

from tradeforge_engine.models.advice import ALL, Advice, AdviceAction


def test_default_advice_is_none() -> None:
    advice = Advice()
    assert advice.is_none
    assert advice.amount == ALL


def test_buy_and_sell_constructors() -> None:
    buy = Advice.buy(2.5, reason="entry", confidence=0.7)
    assert buy.action is AdviceAction.BUY
    assert buy.amount == 2.5
    assert not buy.is_all
    assert Advice.sell().is_all


@pytest.mark.parametrize("confidence", [-0.1, 1.5])
def test_confidence_out_of_range_rejected(confidence: float) -> None:
    with pytest.raises(ValueError, match="Confidence"):
        Advice.buy(confidence=confidence)


@pytest.mark.parametrize("amount", [0, -1.0, float("nan"), float("inf"), "half", True])
def test_invalid_amount_rejected(amount: object) -> None:
    with pytest.raises(ValueError, match="Amount"):
        Advice(AdviceAction.BUY, amount)  # type: ignore[arg-type]


def test_from_dict_defaults_amount_to_all() -> None:
    advice = Advice.from_dict({"action": "BUY", "reason": "x"})
    assert advice.action is AdviceAction.BUY
    assert advice.is_all
    assert advice.confidence == 1.0


def test_from_dict_parses_numeric_strings() -> None:
    advice = Advice.from_dict({"action": "sell", "amount": "0.5", "confidence": 0.3})
    assert advice.amount == 0.5
    assert advice.confidence == 0.3


def test_from_dict_unknown_action() -> None:
    with pytest.raises(ValueError):
        Advice.from_dict({"action": "short"})


def test_to_dict() -> None:
    assert Advice.sell(1.0, "exit").to_dict() == {
        "action": "sell",
        "amount": 1.0,
        "reason": "exit",
        "confidence": 1.0,
    }
