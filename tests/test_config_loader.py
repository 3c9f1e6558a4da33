"""Unit tests for configuration models and loader."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from tradeforge_engine.config import BacktestConfig, load_config


def test_defaults() -> None:
    """Test default configuration values."""
    config = BacktestConfig()
    assert config.initial_balance == 10000.0
    assert config.commission_rate == 0.001
    assert config.slippage_rate == 0.0
    assert config.slippage_model == "fixed"
    assert config.strict_mode is False
    assert config.seed == 42
    assert config.indicators == []


def test_load_config_without_path_uses_defaults() -> None:
    """Test that no path and no env var yields defaults."""
    config = load_config()
    assert config == BacktestConfig()


def test_load_config_from_explicit_path(tmp_path: Path) -> None:
    """Test loading config from explicit file path."""
    config_file = tmp_path / "custom.json"
    config_file.write_text(
        json.dumps(
            {
                "initial_balance": 5000.0,
                "commission_rate": 0.002,
                "indicators": [{"kind": "ema", "period": 9}],
            }
        )
    )

    config = load_config(str(config_file))
    assert config.initial_balance == 5000.0
    assert config.commission_rate == 0.002
    assert config.indicators[0].kind == "ema"
    assert config.indicators[0].source == "close"


def test_load_config_from_env_var(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test loading config from TRADEFORGE_CONFIG_PATH environment variable."""
    config_file = tmp_path / "env_config.json"
    config_file.write_text(json.dumps({"initial_balance": 20000.0}))
    monkeypatch.setenv("TRADEFORGE_CONFIG_PATH", str(config_file))

    config = load_config()
    assert config.initial_balance == 20000.0


def test_load_config_file_not_found(tmp_path: Path) -> None:
    """Test error when config file doesn't exist."""
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_config(str(tmp_path / "nonexistent.json"))


def test_load_config_invalid_json(tmp_path: Path) -> None:
    """Test error when config file has invalid JSON."""
    config_file = tmp_path / "invalid.json"
    config_file.write_text("{invalid json")

    with pytest.raises(json.JSONDecodeError):
        load_config(str(config_file))


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test env vars take priority over file values."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"initial_balance": 5000.0, "seed": 1}))
    monkeypatch.setenv("TRADEFORGE_INITIAL_BALANCE", "750")
    monkeypatch.setenv("TRADEFORGE_COMMISSION_RATE", "0")
    monkeypatch.setenv("TRADEFORGE_SLIPPAGE_RATE", "0.01")
    monkeypatch.setenv("TRADEFORGE_STRICT_MODE", "yes")
    monkeypatch.setenv("TRADEFORGE_SEED", "7")

    config = load_config(config_file)
    assert config.initial_balance == 750.0
    assert config.commission_rate == 0.0
    assert config.slippage_rate == 0.01
    assert config.strict_mode is True
    assert config.seed == 7


def test_strict_mode_env_false(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRADEFORGE_STRICT_MODE", "off")
    assert load_config().strict_mode is False


@pytest.mark.parametrize(
    "overrides",
    [
        {"initial_balance": 0},
        {"commission_rate": -0.1},
        {"commission_rate": 1.0},
        {"slippage_rate": 1.5},
        {"slippage_model": "gaussian"},
        {"indicators": [{"kind": "macd", "period": 12}]},
        {"indicators": [{"kind": "sma", "period": 0}]},
    ],
)
def test_invalid_values_rejected(overrides: dict) -> None:
    """Test out-of-range values fail validation."""
    with pytest.raises(ValidationError):
        BacktestConfig(**overrides)


def test_duplicate_indicator_rejected() -> None:
    with pytest.raises(ValidationError, match="Duplicate indicator"):
        BacktestConfig(indicators=[{"kind": "sma", "period": 5}, {"kind": "sma", "period": 5}])


def test_strategy_config_merges_params() -> None:
    """Test the mapping handed to strategy init."""
    config = BacktestConfig(asset="ETH", strategy_params={"fast_sma": 5})
    data = config.strategy_config()
    assert data["asset"] == "ETH"
    assert data["currency"] == "USD"
    assert data["initial_balance"] == 10000.0
    assert data["fast_sma"] == 5
