#!/usr/bin/env python3
"""
Fetch one city's incident feed and print the normalized batch as JSON.

Usage:
    incident-feeds --city nashville
    incident-feeds --city pdx --pretty
    incident-feeds --city sf --output sf.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from incident_feeds.core import settings, UpstreamFetchError
from incident_feeds.adapters import get_adapter, CITY_ADAPTERS, FeedConfigurationError
from incident_feeds.geocoding import GeocoderNotConfiguredError
from incident_feeds.pipeline import build_context

logger = logging.getLogger(__name__)


async def fetch_city(city: str) -> dict:
    """Run one city through the pipeline and return the serialized batch."""
    adapter = get_adapter(city)
    context = build_context()
    try:
        batch = await adapter.fetch_city(city, context)
    finally:
        await context.aclose()
    return batch.as_dict()


def write_output(payload: dict, output: Optional[str], pretty: bool) -> None:
    text = json.dumps(payload, indent=2 if pretty else None, ensure_ascii=False)
    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {len(payload['places'])} places to {path}", file=sys.stderr)
    else:
        print(text)


def main():
    parser = argparse.ArgumentParser(
        description="Normalize a city's police incident feed into canonical places"
    )

    parser.add_argument(
        "--city", "-c",
        type=str,
        default="nashville",
        help=f"City to fetch ({', '.join(sorted(CITY_ADAPTERS))}); unknown cities use Nashville"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Write the batch JSON to this file instead of stdout"
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Indent the JSON output"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        payload = asyncio.run(fetch_city(args.city))
    except (UpstreamFetchError, FeedConfigurationError, GeocoderNotConfiguredError) as e:
        logger.error(str(e))
        sys.exit(1)

    write_output(payload, args.output, args.pretty)


if __name__ == "__main__":
    main()
