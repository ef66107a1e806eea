"""Chart components - indicator engine and overlay assembly."""
from .indicators import (
    candles_to_frame,
    compute_moving_average,
    compute_bollinger_bands,
    compute_rsi
)
from .overlays import ChartOverlays

__all__ = [
    'candles_to_frame',
    'compute_moving_average',
    'compute_bollinger_bands',
    'compute_rsi',
    'ChartOverlays'
]
