"""Core components - candle models and data sources."""
from .models import Candle, IndicatorPoint, BollingerBands, IndicatorParameters
from .data import CandleFetcher, load_candles, parse_candles, normalize_timeframe

__all__ = [
    'Candle',
    'IndicatorPoint',
    'BollingerBands',
    'IndicatorParameters',
    'CandleFetcher',
    'load_candles',
    'parse_candles',
    'normalize_timeframe'
]
