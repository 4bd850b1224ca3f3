#!/usr/bin/env python3
"""
Analyze Vehicle Logs

Runs the batch analyzer over one or more telemetry CSV files and prints
the per-vehicle results as JSON.

Usage:
    python scripts/analyze_logs.py logs/*.csv
    python scripts/analyze_logs.py logs/*.csv --capacity 75 --month 2024-03
    python scripts/analyze_logs.py logs/*.csv --full > analysis.json
"""

import argparse
import json
import os
import sys

# Add parent directory to path for imports when running from scripts/
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analyzer.config import Config  # noqa: E402
from analyzer.exceptions import AnalyzerError  # noqa: E402
from analyzer.models import Settings  # noqa: E402
from analyzer.services import (  # noqa: E402
    BatchAnalyzer,
    LogFile,
    filter_analysis_by_day,
    filter_analysis_by_month,
)
from analyzer.utils.wide_events import configure_logging  # noqa: E402


def analyze(args) -> int:
    """Analyze the given files and print JSON; returns the exit code."""
    try:
        settings = Settings(
            usable_battery_capacity_kwh=args.capacity,
            trip_min_break_minutes=args.break_minutes,
            power_threshold_kw=args.power_threshold,
        )
    except AnalyzerError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    files = []
    for path in args.files:
        try:
            files.append(LogFile.from_path(path))
        except (OSError, UnicodeDecodeError) as e:
            print(f"Cannot read {path}: {e}", file=sys.stderr)
            return 1

    batch_analyzer = BatchAnalyzer(settings, batch_size=args.batch_size)
    analyses = batch_analyzer.run(files)

    output = []
    for analysis in analyses:
        if args.day:
            analysis = filter_analysis_by_day(analysis, args.day)
        elif args.month:
            analysis = filter_analysis_by_month(analysis, args.month)

        if args.full:
            output.append(analysis.to_dict())
        else:
            output.append({
                'vehicle': analysis.vehicle_id,
                'summary': analysis.summary.to_dict(),
                'car_info': analysis.car_info.to_dict(),
                'date_range': analysis.date_range.to_dict(),
                'unique_months': analysis.unique_months,
            })

    json.dump({'analyses': output, 'errors': batch_analyzer.errors}, sys.stdout, indent=2)
    sys.stdout.write('\n')
    return 1 if batch_analyzer.errors and not analyses else 0


def main():
    parser = argparse.ArgumentParser(description='Derive trips and charging sessions from vehicle logs')
    parser.add_argument('files', nargs='+', help='CSV log files')
    parser.add_argument('--capacity', type=float, default=Config.USABLE_BATTERY_CAPACITY_KWH,
                        help='Usable battery capacity in kWh')
    parser.add_argument('--break-minutes', type=float, default=Config.TRIP_MIN_BREAK_MINUTES,
                        help='Logging gap in minutes that splits a trip')
    parser.add_argument('--power-threshold', type=float, default=Config.POWER_THRESHOLD_KW,
                        help='Discharge power in kW that counts as driving')
    parser.add_argument('--batch-size', type=int, default=Config.BATCH_SIZE,
                        help='Files analyzed per batch')
    parser.add_argument('--month', type=str, help='Restrict output to a YYYY-MM month')
    parser.add_argument('--day', type=str, help='Restrict output to a YYYY-MM-DD day')
    parser.add_argument('--full', action='store_true',
                        help='Include trips and charging sessions in the output')
    parser.add_argument('--log-level', type=str, default=Config.LOG_LEVEL,
                        help='Logging level')

    args = parser.parse_args()
    configure_logging(args.log_level)
    sys.exit(analyze(args))


if __name__ == '__main__':
    main()
