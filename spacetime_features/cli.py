"""Command-line interface for feature generation."""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Config
from .exceptions import FeatureError
from .features import ORDERING_POLICIES
from .infrastructure.logging import get_logger, setup_logging
from .pipelines import FeaturePipeline

logger = get_logger(__name__)


def _range(value: str) -> List[int]:
    """Parse ``min,max`` into two integers."""
    parts = value.split(',')
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected MIN,MAX, got {value!r}")
    try:
        return [int(part) for part in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected integers, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='spacetime-features',
        description="Accumulate point events into per-cell space-time activity counts"
    )

    parser.add_argument('input_csv', help='Event CSV with columns id,start,end,category,x,y')
    parser.add_argument('-o', '--output',
                        help='Feature CSV path (default: <output_dir>/<input>_features.csv)')
    parser.add_argument('-c', '--config', help='YAML configuration file')

    # Feature and grid overrides
    parser.add_argument('--span-hours', type=int,
                        help='Hours each event keeps its cell open (default from config)')
    parser.add_argument('--x-range', type=_range, metavar='MIN,MAX',
                        help='Half-open column range of the grid')
    parser.add_argument('--y-range', type=_range, metavar='MIN,MAX',
                        help='Half-open row range of the grid')
    parser.add_argument('--on-out-of-order', choices=ORDERING_POLICIES,
                        help='What to do with events that arrive out of order')
    parser.add_argument('--gzip', action='store_true', help='Gzip the feature CSV')

    # Logging
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Console log level (default from config)')
    parser.add_argument('--log-file', help='JSON log file')

    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.span_hours is not None:
        overrides.setdefault('features', {})['span_hours'] = args.span_hours
    if args.on_out_of_order is not None:
        overrides.setdefault('features', {})['on_out_of_order'] = args.on_out_of_order
    if args.x_range is not None:
        overrides.setdefault('grid', {})['x_range'] = args.x_range
    if args.y_range is not None:
        overrides.setdefault('grid', {})['y_range'] = args.y_range
    if args.gzip:
        overrides.setdefault('output', {})['compression'] = 'gzip'
    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = Config(Path(args.config) if args.config else None)
        config.update(_overrides(args))
    except FeatureError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config, log_file=args.log_file, log_level=args.log_level)

    try:
        result = FeaturePipeline(config).run(args.input_csv, args.output)
    except FeatureError as e:
        logger.log_error_with_context(e, operation='feature_run')
        return 1
    except OSError as e:
        logger.error(f"Couldn't read or write files: {e}")
        return 1

    print(f"Wrote {result.open_cells:,} open cells from "
          f"{result.events_accumulated:,} events to {result.output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
