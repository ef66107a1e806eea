#!/usr/bin/env python3
"""
Chart Overlay Builder - command line entry point

Loads candles (from the stock API or a JSON file), computes the chart
overlays and writes them as JSON.
Run with: python overlay.py --help
"""
import sys
import json
import logging
import argparse
from pathlib import Path

from dotenv import load_dotenv

from core import CandleFetcher, IndicatorParameters, load_candles
from chart import ChartOverlays

log = logging.getLogger(__name__)

# Base directory
BASE_DIR = Path(__file__).parent.resolve()

DEFAULT_CONFIG = 'config/chart_config.json'


def setup_logging(verbose: bool = False):
    """Configure root logging for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def load_config(path: str) -> IndicatorParameters:
    """Load indicator configuration from a JSON file, or use defaults."""
    config_file = Path(path)
    if not config_file.is_absolute():
        config_file = BASE_DIR / config_file

    if config_file.exists():
        with open(config_file) as f:
            log.debug(f"Loading config from {config_file}")
            return IndicatorParameters.from_dict(json.load(f))

    return IndicatorParameters()


def get_candles(args) -> list:
    """Read candles from --input, or fetch them for --symbol."""
    if args.input:
        return load_candles(args.input)

    fetcher = CandleFetcher()
    return fetcher.get_candles(args.symbol, args.timeframe)


def run(args) -> dict:
    params = load_config(args.config)
    candles = get_candles(args)

    if not candles:
        log.warning("No candles available")

    overlays = ChartOverlays(params).build(candles)
    log.info(
        f"Built overlays from {len(candles)} candles "
        f"({len(overlays['moving_averages'])} moving averages)"
    )
    return overlays


# ============================================================
# CLI
# ============================================================

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Stock chart overlay builder')
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--symbol', help='Ticker to fetch from the stock API')
    source.add_argument('--input', help='JSON file with candle data')
    parser.add_argument('--timeframe', default='DAY1', help='Candle timeframe (e.g. MIN5, DAY1)')
    parser.add_argument('--config', default=DEFAULT_CONFIG, help='Indicator config file path')
    parser.add_argument('--output', help='Write JSON here instead of stdout')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args(argv)

    # Load environment variables (STOCK_API_URL, STOCK_API_TOKEN)
    load_dotenv()
    setup_logging(args.verbose)

    try:
        overlays = run(args)

        # Strict JSON: missing values are already null
        text = json.dumps(overlays, indent=2, allow_nan=False)
        if args.output:
            Path(args.output).write_text(text)
            log.info(f"Wrote overlays to {args.output}")
        else:
            print(text)

    except Exception as e:
        log.error(f"Failed to build overlays: {e}", exc_info=args.verbose)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
