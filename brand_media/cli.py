"""Command-line entry point for the brand media collector."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence

from .config import PipelineConfig, PipelineInput
from .pipeline import collect_brand_media
from .platform import ApifyPlatform, DirectoryStore

logger = logging.getLogger("brand_media.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return ("collect",)
    first = argv[0]
    if first in commands or first in ("-h", "--help"):
        return argv
    return ("collect", *argv)


def _add_collect_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="JSON file with actor-style input (brandName, instagram, ...)",
    )
    parser.add_argument(
        "--platform-input",
        action="store_true",
        help="Read the input from the INPUT record of the run's default key-value store",
    )
    parser.add_argument("--brand", dest="brandName", help="Brand display name")
    parser.add_argument("--instagram", help="Instagram profile URL")
    parser.add_argument("--facebook", help="Facebook page URL")
    parser.add_argument("--tiktok", help="TikTok profile URL")
    parser.add_argument(
        "--google-maps",
        dest="googleMaps",
        help="Google Maps place URL or search query",
    )
    parser.add_argument(
        "--google-maps-by-brand",
        dest="googleMapsSearchByBrand",
        action="store_true",
        default=None,
        help="Search Google Maps for the brand name when no place is given",
    )
    parser.add_argument("--website", help="Website URL to crawl")
    parser.add_argument(
        "--keyword",
        dest="keywords",
        action="append",
        help="Search keyword; repeat for several",
    )
    parser.add_argument(
        "--max-media",
        dest="maxMediaPerSource",
        type=int,
        default=None,
        help="Download at most this many media files per scraper",
    )
    parser.add_argument(
        "--results-limit",
        type=int,
        default=100,
        help="Maximum number of posts/items each scraper job should return",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Per-file download timeout in seconds",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write results to this directory instead of the run's default storages",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Collect brand media from social and web scrapers into one archive.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    collect_parser = subparsers.add_parser(
        "collect", help="Run the scrapers and package every discovered media file"
    )
    _add_collect_arguments(collect_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


_INPUT_FIELDS = (
    "brandName",
    "instagram",
    "facebook",
    "tiktok",
    "googleMaps",
    "googleMapsSearchByBrand",
    "website",
    "keywords",
    "maxMediaPerSource",
)


def build_input_mapping(args: argparse.Namespace, base: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay command-line values on top of an input document."""
    data = dict(base)
    for name in _INPUT_FIELDS:
        value = getattr(args, name, None)
        if value is not None:
            data[name] = value
    return data


def _run_collect(args: argparse.Namespace) -> None:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    platform = ApifyPlatform.from_env()
    base: Dict[str, Any] = {}
    if args.input:
        base = json.loads(args.input.read_text(encoding="utf-8"))
    elif args.platform_input:
        base = platform.get_input()
    request = PipelineInput.from_mapping(build_input_mapping(args, base))

    output: Any = platform
    if args.output:
        output = DirectoryStore(Path(args.output).resolve())

    config = PipelineConfig(
        results_limit=args.results_limit,
        download_timeout=args.timeout,
    )
    overall_start = time.perf_counter()
    outcome = collect_brand_media(request, platform, output, config)
    total_elapsed = time.perf_counter() - overall_start

    failures = sum(
        len(summary["media"]["failed"]) for summary in outcome.result.scrapers.values()
    )
    logger.info(
        "Finished in %.2fs (%d media downloaded, %d failed, %d scrapers)",
        total_elapsed,
        outcome.result.total_media_downloaded,
        failures,
        len(outcome.result.scrapers),
    )
    if args.verbose:
        for name, summary in outcome.result.scrapers.items():
            logger.debug(
                "%s -> records: %d | items: %d | downloaded: %d | archives: %d",
                name,
                summary["itemCount"],
                summary["mediaItemCount"],
                summary["media"]["count"],
                summary["media"]["mergedArchives"],
            )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    if args.command == "collect":
        _run_collect(args)


if __name__ == "__main__":
    main()
