import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:  # pragma: no cover
    sys.path.append(str(PROJECT_ROOT))

from tradeforge_engine.models.candle import Candle  # noqa: E402

START_TS = 1_700_000_000_000  # 2023-11-14T22:13:20Z
STEP_MS = 60_000


def build_candles(
    closes: list[float],
    volumes: list[float] | None = None,
    start: int = START_TS,
    step: int = STEP_MS,
) -> list[Candle]:
    """Candles whose open is the previous close and whose range spans both."""
    candles = []
    prev = closes[0] if closes else 0.0
    for i, close in enumerate(closes):
        open_ = prev
        candles.append(
            Candle(
                timestamp=start + i * step,
                open=open_,
                high=max(open_, close),
                low=min(open_, close),
                close=close,
                volume=volumes[i] if volumes else 1.0,
            )
        )
        prev = close
    return candles


@pytest.fixture
def make_candles() -> Callable[..., list[Candle]]:
    """Factory building a well-formed candle series from closes."""
    return build_candles


@pytest.fixture
def in_memory_db() -> Generator[Session, None, None]:
    """Create an in-memory SQLite database for testing."""
    from tradeforge_engine.persistence.models import Base

    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def clean_config_env() -> Generator[None, None, None]:
    """Ensure TRADEFORGE_* env vars do not interfere with tests unless explicitly set."""
    original_env = {}
    keys_to_clear = [
        "TRADEFORGE_CONFIG_PATH",
        "TRADEFORGE_INITIAL_BALANCE",
        "TRADEFORGE_COMMISSION_RATE",
        "TRADEFORGE_SLIPPAGE_RATE",
        "TRADEFORGE_STRICT_MODE",
        "TRADEFORGE_SEED",
    ]

    for key in keys_to_clear:
        if key in os.environ:
            original_env[key] = os.environ[key]
            os.environ.pop(key, None)

    yield

    for key, value in original_env.items():
        os.environ[key] = value
