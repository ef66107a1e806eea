"""
Chart Overlay Module

Assembles everything the candlestick chart draws for one symbol:
candles, moving average lines, Bollinger Bands, RSI and the initial
visible range. Candles are sorted once per build and shared by every
indicator.
"""
import logging
from typing import Optional, Dict, Any, List, Sequence

import pandas as pd

from core.models import Candle, IndicatorParameters, finite_or_none
from .indicators import (
    candles_to_frame,
    compute_moving_average,
    compute_bollinger_bands,
    compute_rsi
)

log = logging.getLogger(__name__)


def chart_candles(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Candlestick series for the chart, times floored to seconds, NaN as None."""
    return [
        {
            'time': int(row.time) // 1000,
            'open': finite_or_none(row.open),
            'high': finite_or_none(row.high),
            'low': finite_or_none(row.low),
            'close': finite_or_none(row.close),
        }
        for row in df.itertuples(index=False)
    ]


def visible_range(n: int, visible_bars: int = 50) -> Optional[Dict[str, int]]:
    """
    Logical range of the most recent bars to show on first render.

    Returns:
        {'from': first_index, 'to': last_index}, or None without data.
    """
    if n <= 0:
        return None

    bars = min(visible_bars, n)
    return {'from': max(0, n - bars), 'to': n - 1}


class ChartOverlays:
    """
    Builds chart overlays from one candle set.

    An overlay is left out when it is switched off or when there are
    fewer candles than its period.
    """

    def __init__(self, params: Optional[IndicatorParameters] = None):
        """
        Args:
            params: Indicator configuration (defaults if None).
        """
        self.params = params or IndicatorParameters()

    def build(self, candles: Sequence[Candle]) -> Dict[str, Any]:
        """
        Compute all enabled overlays.

        Args:
            candles: Candles in any order.

        Returns:
            Dict with candles, moving_averages, bollinger, rsi and
            visible_range. Series are lists of {'time', 'value'} dicts.
        """
        df = candles_to_frame(candles)
        n = len(df)

        result = {
            'candles': chart_candles(df),
            'moving_averages': self._moving_averages(df),
            'bollinger': self._bollinger(df),
            'rsi': self._rsi(df),
            'visible_range': visible_range(n, self.params.visible_bars),
        }

        log.debug(
            f"Built overlays for {n} candles: "
            f"ma={list(result['moving_averages'])}, "
            f"bollinger={result['bollinger'] is not None}, "
            f"rsi={result['rsi'] is not None}"
        )

        return result

    def _moving_averages(self, df: pd.DataFrame) -> Dict[str, List[Dict]]:
        lines = {}
        if not self.params.show_ma:
            return lines

        for period in self.params.ma_periods:
            if len(df) < period:
                log.debug(f"Skipping MA{period}: only {len(df)} candles")
                continue
            points = compute_moving_average(df, period)
            lines[f'ma{period}'] = [p.to_dict() for p in points]

        return lines

    def _bollinger(self, df: pd.DataFrame) -> Optional[Dict[str, List[Dict]]]:
        if not self.params.show_bollinger or len(df) < self.params.bb_period:
            return None

        bands = compute_bollinger_bands(
            df,
            period=self.params.bb_period,
            std_dev=self.params.bb_std_dev
        )
        return bands.to_dict()

    def _rsi(self, df: pd.DataFrame) -> Optional[List[Dict]]:
        # RSI needs period + 1 candles
        if not self.params.show_rsi or len(df) <= self.params.rsi_period:
            return None

        points = compute_rsi(df, period=self.params.rsi_period)
        return [p.to_dict() for p in points]
