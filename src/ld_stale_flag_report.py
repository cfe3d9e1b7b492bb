#!/usr/bin/env python3
"""
LaunchDarkly Stale Flag Report

Lists the live flags of a project/environment that were created and last
modified more than a threshold ago, grouped by maintainer, with flags no SDK
has requested recently listed first.

Usage:
    ld-stale-flag-report [options]
"""

import argparse
import logging
import os
import re
import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from launchdarkly_api_client import LaunchDarklyAPI, DEFAULT_HOST
from launchdarkly_reports import FORMATS, build_report

DEFAULT_THRESHOLD = timedelta(days=180)
DEFAULT_TOKEN_VAR = "LAUNCH_DARKLY_API_TOKEN"

# microseconds per unit
_DURATION_UNITS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "ms": 1000,
    "s": 1000 ** 2,
    "m": 60 * 1000 ** 2,
    "h": 60 * 60 * 1000 ** 2,
    "d": 24 * 60 * 60 * 1000 ** 2,
    "w": 7 * 24 * 60 * 60 * 1000 ** 2,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h|d|w)")


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration such as "4320h", "1h30m", "90s" or "180d"

    Raises:
        argparse.ArgumentTypeError: If the value is not a valid duration
    """
    text = value.strip()
    if text == "0":
        return timedelta(0)

    microseconds = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        microseconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if not text or position != len(text):
        raise argparse.ArgumentTypeError(
            f"invalid duration '{value}' (examples: 180d, 4320h, 1h30m)"
        )
    try:
        return timedelta(microseconds=microseconds)
    except OverflowError as e:
        raise argparse.ArgumentTypeError(f"duration '{value}' is too large") from e


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments

    Options accept both the single-dash (-project) and double-dash (--project)
    spelling.
    """
    parser = argparse.ArgumentParser(
        description="LaunchDarkly Stale Flag Report Generator",
        usage="%(prog)s [options]"
    )
    parser.add_argument("--project", "-project", default="default",
                        help="Project to check (default: default)")
    parser.add_argument("--env", "-env", default="production",
                        help="Environment to check (default: production)")
    parser.add_argument("--token", "-token", "--key", "-key", dest="token", default=DEFAULT_TOKEN_VAR,
                        help=f"Name of the environment variable holding the API token (default: {DEFAULT_TOKEN_VAR})")
    parser.add_argument("--threshold", "-threshold", type=parse_duration, default=DEFAULT_THRESHOLD,
                        help="Threshold for creation, last modification and last request (default: 180d)")
    parser.add_argument("--format", "-format", choices=FORMATS, default="text",
                        help="Output format (default: text)")
    parser.add_argument("--with-permanent", "-with-permanent", action="store_true",
                        help="Show permanent flags as well")
    parser.add_argument("--host", default=DEFAULT_HOST,
                        help=f"LaunchDarkly host (default: {DEFAULT_HOST})")
    parser.add_argument("--no-progress", action="store_true",
                        help="Do not display a progress bar while fetching")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--log-file",
                        help="Write logs to specified file in addition to console")
    return parser.parse_args(argv)


def setup_logging(debug: bool = False, log_file: Optional[str] = None):
    """Setup logging configuration"""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(level=log_level, format=log_format)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(log_format))
        root_logger.addHandler(file_handler)


def load_api_key(token_var: str = DEFAULT_TOKEN_VAR) -> str:
    """
    Load the LaunchDarkly API token from the environment or a .env file

    Args:
        token_var: Name of the environment variable holding the token

    Raises:
        ValueError: If the token is not set
    """
    env_path = Path('.') / '.env'
    if env_path.exists():
        load_dotenv(env_path)

    api_key = os.getenv(token_var)
    if not api_key:
        raise ValueError(
            f"{token_var} not found. Please create a .env file with your API token "
            "or set it as an environment variable."
        )
    return api_key


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the LaunchDarkly stale flag report.
    """
    args = parse_args(argv)
    setup_logging(args.debug, args.log_file)
    logger = logging.getLogger(__name__)

    try:
        api_key = load_api_key(args.token)

        ld_api = LaunchDarklyAPI(api_key, host=args.host, show_progress=not args.no_progress)
        flags = ld_api.get_live_flags(args.project, args.env)

        report = build_report(
            flags,
            args.project,
            args.env,
            args.threshold,
            args.host,
            fmt=args.format,
            with_permanent=args.with_permanent,
        )
        output = report.render(args.format)

    except KeyboardInterrupt:
        logger.error("Operation cancelled by user")
        return 1
    except Exception as e:
        logger.error(f"Error: {e}")
        logger.debug("Traceback", exc_info=True)
        return 1

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
