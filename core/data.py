"""
Data Fetching Module

Retrieves candle data from the stock API backend, or from a local JSON
dump of the same payload.
"""
import os
import json
import time
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List

import requests

from .models import Candle

log = logging.getLogger(__name__)

TIMEFRAMES = (
    'MIN1', 'MIN5', 'MIN15', 'MIN30', 'MIN45',
    'HOUR1', 'HOUR2', 'HOUR4',
    'DAY1', 'WEEK1', 'MONTH1',
)
DEFAULT_TIMEFRAME = 'DAY1'


def normalize_timeframe(timeframe: Optional[str]) -> str:
    """Return the backend timeframe name, falling back to DAY1."""
    tf = (timeframe or '').upper()
    if tf in TIMEFRAMES:
        return tf

    log.warning(f"Unknown timeframe {timeframe!r}, using {DEFAULT_TIMEFRAME}")
    return DEFAULT_TIMEFRAME


def parse_candles(payload: Any) -> List[Candle]:
    """
    Convert an API/JSON payload into candles.

    Accepts a list of candle objects or {'candles': [...]}.
    """
    if isinstance(payload, dict) and 'candles' in payload:
        payload = payload['candles']

    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of candles, got {type(payload).__name__}")

    return [Candle.from_dict(item) for item in payload]


def load_candles(path: str) -> List[Candle]:
    """Load candles from a JSON file."""
    with open(Path(path)) as f:
        candles = parse_candles(json.load(f))

    log.debug(f"Loaded {len(candles)} candles from {path}")
    return candles


class CandleFetcher:
    """
    Fetches candles from the stock API.

    Responses are cached briefly so several charts for the same symbol
    do not hit the backend repeatedly.
    """

    DEFAULT_API_URL = "http://localhost:8080"

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 10
    ):
        """
        Args:
            base_url: API root. If None, reads STOCK_API_URL.
            token: Bearer token. If None, reads STOCK_API_TOKEN.
            timeout: Request timeout in seconds.
        """
        self.base_url = (
            base_url or os.environ.get('STOCK_API_URL') or self.DEFAULT_API_URL
        ).rstrip('/')
        self.token = token or os.environ.get('STOCK_API_TOKEN')
        self.timeout = timeout

        self._cache = {}
        self._cache_ttl = 30  # seconds

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    def _get(self, path: str, params: Optional[Dict] = None) -> Any:
        url = f"{self.base_url}{path}"

        try:
            response = requests.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()

        except requests.RequestException as e:
            log.error(f"Request to {url} failed: {e}")
            raise

    def get_candles(self, symbol: str, timeframe: str = DEFAULT_TIMEFRAME) -> List[Candle]:
        """
        Fetch candles for a symbol.

        Args:
            symbol: Ticker (e.g., 'AAPL', '005930').
            timeframe: One of TIMEFRAMES; unknown values fall back to DAY1.

        Returns:
            Candles as returned by the backend (order not guaranteed).
        """
        tf = normalize_timeframe(timeframe)
        key = (symbol, tf)

        cached = self._cache.get(key)
        if cached and time.monotonic() - cached[0] < self._cache_ttl:
            log.debug(f"Cache hit for {symbol} {tf}")
            return list(cached[1])

        data = self._get(f"/api/stock/candles/{symbol}", params={'tf': tf})
        candles = parse_candles(data)

        self._cache[key] = (time.monotonic(), candles)
        log.debug(f"Fetched {len(candles)} candles for {symbol} {tf}")
        return list(candles)

    def get_candle_status(self, symbol: str) -> Dict[str, Any]:
        """
        Check whether candle data for a symbol is ready on the backend.

        Returns:
            Dict with symbol, ready, state, message.
        """
        return self._get(f"/api/stock/candles/{symbol}/status")

    def clear_cache(self):
        self._cache.clear()
