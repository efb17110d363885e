"""CLI interface for addon-mirror.

    python -m addonmirror --config config.yaml check
    python -m addonmirror --config config.yaml export --output /srv/repo
"""

import argparse
import asyncio
import sys
from typing import List, Optional

import yaml

from .common.config import DEFAULT_CONFIG_PATH, MirrorConfig, load_typed_config
from .common.errors import AddonMirrorError
from .common.logger import configure_logging
from .repos.aggregator import AggregationResult
from .repos.export import write_static_repository
from .service import build_service
from .upstream.github import build_client


async def _aggregate(config: MirrorConfig) -> AggregationResult:
    async with build_client(config.upstream) as client:
        service = build_service(config, client)
        return await service.reload()


def _print_result(result: AggregationResult) -> None:
    snapshot = result.snapshot
    for manifest in snapshot:
        print(f"{manifest.addon_id} {manifest.declared_version} ({manifest.repository})")
    for failure in snapshot.failures:
        print(f"FAILED {failure.repository}: {failure.error_type}: {failure.message}")
    print(f"Checksum: {snapshot.checksum}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="addonmirror",
        description="Aggregate GitHub releases into an addon repository",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("check", help="Aggregate once and print a summary")

    export = subparsers.add_parser("export", help="Write a static repository")
    export.add_argument("--output", required=True, help="Output directory")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the addon-mirror CLI."""
    args = build_parser().parse_args(argv)

    try:
        config = load_typed_config(args.config)
        configure_logging(config.logging)
    except (FileNotFoundError, TypeError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if not config.repositories:
        print("Error: no repositories configured", file=sys.stderr)
        return 2

    try:
        result = asyncio.run(_aggregate(config))
        _print_result(result)
        if args.command == "export":
            written = write_static_repository(result.snapshot, args.output)
            print(f"Wrote {len(written)} files to {args.output}")
    except AddonMirrorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
