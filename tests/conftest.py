"""Shared fixtures."""
import pytest
import numpy as np

from core.models import Candle

DAY_MS = 86_400_000
START_MS = 1_700_000_000_000


def make_candles(closes, start=START_MS, step=DAY_MS):
    """Daily candles with the given closes, ascending time."""
    return [
        Candle(
            time=start + i * step,
            open=float(c),
            high=float(c) + 1,
            low=float(c) - 1,
            close=float(c),
            volume=1000,
            currency='USD'
        )
        for i, c in enumerate(closes)
    ]


@pytest.fixture
def sample_candles():
    """Random walk of 100 daily candles."""
    np.random.seed(42)
    n = 100

    returns = np.random.randn(n) * 0.02
    close = 100 * np.exp(np.cumsum(returns))

    return make_candles(close)
