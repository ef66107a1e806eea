"""
Data Models

Candles as delivered by the stock API, and the point/band shapes the
chart widget consumes.
"""
import math
import logging
from typing import Optional, Dict, Any, List, Tuple
from dataclasses import dataclass, field, asdict, fields

log = logging.getLogger(__name__)


def finite_or_none(value: float) -> Optional[float]:
    """Value for JSON output: NaN and infinities become None (null)."""
    value = float(value)
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class Candle:
    """
    A single OHLC bar.

    `time` is milliseconds since epoch and is the ordering key.
    """
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int = 0
    currency: str = 'USD'
    datetime: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Candle':
        """Build a candle from an API payload. Unknown keys are ignored."""
        return cls(
            time=int(data['time']),
            open=float(data['open']),
            high=float(data['high']),
            low=float(data['low']),
            close=float(data['close']),
            volume=int(data.get('volume') or 0),
            currency=data.get('currency') or 'USD',
            datetime=data.get('datetime')
        )

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class IndicatorPoint:
    """One indicator value. `time` is in seconds, as the chart expects."""
    time: int
    value: float

    def to_dict(self) -> Dict:
        return {'time': self.time, 'value': finite_or_none(self.value)}


@dataclass
class BollingerBands:
    """Upper, middle and lower bands sharing the same time alignment."""
    upper: List[IndicatorPoint] = field(default_factory=list)
    middle: List[IndicatorPoint] = field(default_factory=list)
    lower: List[IndicatorPoint] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.middle)

    def to_dict(self) -> Dict:
        return {
            'upper': [p.to_dict() for p in self.upper],
            'middle': [p.to_dict() for p in self.middle],
            'lower': [p.to_dict() for p in self.lower],
        }


@dataclass
class IndicatorParameters:
    """Overlay configuration for one chart."""
    ma_periods: Tuple[int, ...] = (5, 20, 60, 200)
    bb_period: int = 20
    bb_std_dev: float = 2.0
    rsi_period: int = 14

    show_ma: bool = True
    show_bollinger: bool = True
    show_rsi: bool = True

    visible_bars: int = 50      # bars shown when the chart first opens

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'IndicatorParameters':
        """Build parameters from a (partial) config mapping."""
        data = data or {}
        known = {f.name for f in fields(cls)}

        kwargs = {}
        for key, value in data.items():
            if key not in known:
                log.warning(f"Ignoring unknown indicator option: {key}")
                continue
            kwargs[key] = value

        if 'ma_periods' in kwargs:
            kwargs['ma_periods'] = tuple(int(p) for p in kwargs['ma_periods'])

        return cls(**kwargs)

    def to_dict(self) -> Dict:
        d = asdict(self)
        d['ma_periods'] = list(self.ma_periods)
        return d
