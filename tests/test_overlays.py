"""Tests for chart overlay assembly."""
import random

import pytest

from core.models import IndicatorParameters
from chart.indicators import candles_to_frame
from chart.overlays import ChartOverlays, chart_candles, visible_range
from conftest import make_candles, START_MS


@pytest.fixture
def long_candles():
    return make_candles([100 + (i % 7) - (i % 3) for i in range(250)])


def test_all_overlays_present(long_candles):
    result = ChartOverlays().build(long_candles)

    assert set(result['moving_averages']) == {'ma5', 'ma20', 'ma60', 'ma200'}
    assert len(result['moving_averages']['ma200']) == 51
    assert len(result['bollinger']['middle']) == 231
    assert len(result['rsi']) == 236
    assert len(result['candles']) == 250


def test_short_series_skips_long_periods():
    candles = make_candles(range(1, 31))
    result = ChartOverlays().build(candles)

    assert set(result['moving_averages']) == {'ma5', 'ma20'}
    assert result['bollinger'] is not None
    assert len(result['rsi']) == 16


def test_too_few_for_bollinger_and_rsi():
    result = ChartOverlays().build(make_candles(range(10)))

    assert set(result['moving_averages']) == {'ma5'}
    assert result['bollinger'] is None
    assert result['rsi'] is None


def test_bollinger_middle_is_ma20(long_candles):
    result = ChartOverlays().build(long_candles)

    middle = [p['value'] for p in result['bollinger']['middle']]
    ma20 = [p['value'] for p in result['moving_averages']['ma20']]
    assert middle == pytest.approx(ma20)


def test_toggles():
    params = IndicatorParameters(show_ma=False, show_bollinger=False, show_rsi=False)
    result = ChartOverlays(params).build(make_candles(range(100)))

    assert result['moving_averages'] == {}
    assert result['bollinger'] is None
    assert result['rsi'] is None
    assert len(result['candles']) == 100


def test_custom_periods():
    params = IndicatorParameters(ma_periods=(3, 10), bb_period=10, bb_std_dev=1.5, rsi_period=5)
    result = ChartOverlays(params).build(make_candles(range(12)))

    assert set(result['moving_averages']) == {'ma3', 'ma10'}
    assert len(result['bollinger']['upper']) == 3
    assert len(result['rsi']) == 7


def test_candles_sorted_and_in_seconds():
    candles = make_candles([1, 2, 3, 4])
    mixed = list(candles)
    random.Random(3).shuffle(mixed)

    result = ChartOverlays().build(mixed)
    times = [c['time'] for c in result['candles']]

    assert times == sorted(times)
    assert times[0] == START_MS // 1000
    assert [c['close'] for c in result['candles']] == [1, 2, 3, 4]


def test_empty_input():
    result = ChartOverlays().build([])

    assert result['candles'] == []
    assert result['moving_averages'] == {}
    assert result['bollinger'] is None
    assert result['rsi'] is None
    assert result['visible_range'] is None


def test_visible_range():
    assert visible_range(250, 50) == {'from': 200, 'to': 249}
    assert visible_range(30, 50) == {'from': 0, 'to': 29}
    assert visible_range(1) == {'from': 0, 'to': 0}
    assert visible_range(0) is None


def test_build_visible_range(long_candles):
    result = ChartOverlays(IndicatorParameters(visible_bars=20)).build(long_candles)
    assert result['visible_range'] == {'from': 230, 'to': 249}


def test_chart_candles_nan_close_is_none():
    df = candles_to_frame(make_candles([1, float('nan'), 3]))
    rows = chart_candles(df)

    assert rows[1]['close'] is None
    assert rows[2]['close'] == 3.0
