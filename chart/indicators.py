"""
Technical Indicators Module

Pure pandas/numpy implementations of the chart overlays: simple moving
average, Bollinger Bands and Wilder's RSI.

All functions take candles (a list of Candle, or a DataFrame built by
candles_to_frame) and return lists of IndicatorPoint aligned to the tail
of the time-sorted input. Point times are in seconds; candle times are
in milliseconds.
"""
from numbers import Integral, Real
from typing import List, Sequence, Union

import numpy as np
import pandas as pd

from core.models import Candle, IndicatorPoint, BollingerBands

COLUMNS = ['time', 'open', 'high', 'low', 'close', 'volume']

CandleInput = Union[Sequence[Candle], pd.DataFrame]


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """
    Build a new DataFrame of candles sorted ascending by time.

    The input sequence is never reordered.

    Args:
        candles: Candles in any order.

    Returns:
        DataFrame with columns time, open, high, low, close, volume.
    """
    if len(candles) == 0:
        return pd.DataFrame({
            'time': pd.Series(dtype='int64'),
            'open': pd.Series(dtype=float),
            'high': pd.Series(dtype=float),
            'low': pd.Series(dtype=float),
            'close': pd.Series(dtype=float),
            'volume': pd.Series(dtype='int64'),
        })

    df = pd.DataFrame(
        [(c.time, c.open, c.high, c.low, c.close, c.volume) for c in candles],
        columns=COLUMNS
    )
    df['time'] = df['time'].astype('int64')
    df['close'] = df['close'].astype(float)

    return df.sort_values('time', kind='mergesort').reset_index(drop=True)


def _ensure_frame(data: CandleInput) -> pd.DataFrame:
    """Return a time-sorted frame without touching the caller's data."""
    if isinstance(data, pd.DataFrame):
        if data['time'].is_monotonic_increasing:
            return data.reset_index(drop=True)
        return data.sort_values('time', kind='mergesort').reset_index(drop=True)
    return candles_to_frame(data)


def to_points(times_ms, values) -> List[IndicatorPoint]:
    """Pair candle times (ms) with values, flooring time to whole seconds."""
    return [
        IndicatorPoint(time=int(t) // 1000, value=float(v))
        for t, v in zip(times_ms, values)
    ]


def _check_period(period) -> None:
    if isinstance(period, bool) or not isinstance(period, Integral) or period < 1:
        raise ValueError(f"period must be a positive integer, got {period!r}")


def _check_std_dev(std_dev) -> None:
    if isinstance(std_dev, bool) or not isinstance(std_dev, Real) or not std_dev > 0:
        raise ValueError(f"std_dev must be a positive number, got {std_dev!r}")


def compute_moving_average(candles: CandleInput, period: int) -> List[IndicatorPoint]:
    """
    Simple Moving Average (SMA) of close prices.

    Uses pandas rolling windows; values may differ from a per-window
    sum by floating-point noise.

    Args:
        candles: Candle data, any order.
        period: Window length.

    Returns:
        max(0, N - period + 1) points, the first at candle period - 1.
    """
    _check_period(period)
    df = _ensure_frame(candles)

    if len(df) < period:
        return []

    sma = df['close'].rolling(window=period).mean()

    return to_points(df['time'].iloc[period - 1:], sma.iloc[period - 1:])


def compute_bollinger_bands(
    candles: CandleInput,
    period: int = 20,
    std_dev: float = 2.0
) -> BollingerBands:
    """
    Bollinger Bands

    Middle band is the SMA of close; upper and lower bands sit std_dev
    population standard deviations away, measured over the same window.
    pandas computes rolling windows incrementally, so results can differ
    from a per-window recomputation by floating-point noise (~1e-9 at
    prices in the tens of thousands).

    Args:
        candles: Candle data, any order.
        period: Window length.
        std_dev: Standard deviation multiplier.

    Returns:
        BollingerBands with three equally long, time-aligned series.
    """
    _check_period(period)
    _check_std_dev(std_dev)
    df = _ensure_frame(candles)

    if len(df) < period:
        return BollingerBands()

    window = df['close'].rolling(window=period)
    middle = window.mean()
    std = window.std(ddof=0)

    width = std_dev * std
    upper = middle + width
    lower = middle - width

    times = df['time'].iloc[period - 1:]

    return BollingerBands(
        upper=to_points(times, upper.iloc[period - 1:]),
        middle=to_points(times, middle.iloc[period - 1:]),
        lower=to_points(times, lower.iloc[period - 1:])
    )


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0 and avg_gain == 0:
        # Flat price
        return 50.0
    if avg_loss == 0:
        return 100.0
    if avg_gain == 0:
        return 0.0

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def compute_rsi(candles: CandleInput, period: int = 14) -> List[IndicatorPoint]:
    """
    Relative Strength Index (RSI), Wilder smoothing.

    Averages are seeded with the simple mean of the first `period` price
    changes, then smoothed one change at a time. Each point sits on the
    later candle of the change it ends with.
    Range: 0-100. Typically >70 = overbought, <30 = oversold.

    Args:
        candles: Candle data, any order.
        period: Lookback period (default 14).

    Returns:
        N - period points (empty when N <= period).
    """
    _check_period(period)
    df = _ensure_frame(candles)

    n = len(df)
    if n <= period:
        return []

    closes = df['close'].to_numpy(dtype=float)
    changes = np.diff(closes)

    # np.maximum keeps NaN
    gains = np.maximum(changes, 0.0)
    losses = np.maximum(-changes, 0.0)

    avg_gain = float(gains[:period].mean())
    avg_loss = float(losses[:period].mean())

    values = [_rsi_value(avg_gain, avg_loss)]

    for i in range(period, n - 1):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        values.append(_rsi_value(avg_gain, avg_loss))

    return to_points(df['time'].iloc[period:], values)
