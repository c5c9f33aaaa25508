#!/usr/bin/env python3
"""
Start the Fleet Telemetry Analytics API under uvicorn.

Usage:
    python run_server.py [--bind HOST] [--port PORT] [--set NAME=VALUE ...] [--reload]

Examples:
    python run_server.py                          # http://127.0.0.1:8000
    python run_server.py --bind 0.0.0.0 --port 9000
    python run_server.py --set overspeed_kmh=80 --set trip_idle_packets=5
    FLEET_HIGH_TEMP_C=55 python run_server.py     # same as --set high_temp_c=55
"""

import argparse
import os
import sys
from pathlib import Path

# Make fleet_analytics importable without installing
sys.path.insert(0, str(Path(__file__).parent))

from fleet_analytics.config import ENV_PREFIX, AnalyticsThresholds  # noqa: E402


def parse_override(text: str) -> tuple[str, str]:
    """Split NAME=VALUE and check NAME is a known threshold."""
    name, sep, value = text.partition("=")
    name = name.strip().lower()
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    if name not in AnalyticsThresholds().as_dict():
        raise argparse.ArgumentTypeError(f"unknown threshold {name!r}")
    return name, value.strip()


def main():
    parser = argparse.ArgumentParser(description="Fleet Telemetry Analytics API server")
    parser.add_argument("--bind", "-b", default="127.0.0.1", help="Interface to listen on")
    parser.add_argument("--port", "-p", type=int, default=8000, help="TCP port (default: 8000)")
    parser.add_argument(
        "--set", "-s",
        dest="overrides",
        action="append",
        default=[],
        type=parse_override,
        metavar="NAME=VALUE",
        help="Override an analytics threshold; repeatable",
    )
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
    )
    args = parser.parse_args()

    # The API reads FLEET_* once at import, so export before uvicorn loads it
    for name, value in args.overrides:
        os.environ[ENV_PREFIX + name.upper()] = value

    try:
        thresholds = AnalyticsThresholds.from_env()
    except ValueError as e:
        parser.error(str(e))

    print("Fleet Telemetry Analytics")
    print(f"Listening on http://{args.bind}:{args.port}")
    print("Thresholds:")
    for name, value in thresholds.as_dict().items():
        print(f"  {name:<28} {value}")

    print("Routes:")
    print("  GET  /                          - service info")
    print("  GET  /health                    - status and active thresholds")
    print("  POST /devices/{imei}/analytics  - analyze a packet snapshot")
    print("  GET  /alert-codes/{code}        - describe an alert/error code")

    import uvicorn

    uvicorn.run(
        "fleet_analytics.main:app",
        host=args.bind,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
