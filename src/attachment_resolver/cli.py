from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence, cast

from attachment_resolver.bootstrap import build_services
from attachment_resolver.data import AssetRepository
from attachment_resolver.services import (
    AttachmentResolver,
    DiagnosticsService,
    ServiceRegistry,
)
from attachment_resolver.utils import LoggingOptions, configure_logging, get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="attachment-resolver",
        description="Resolve featured-image references to local attachments.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve URLs or attachment ids")
    resolve.add_argument("references", nargs="+", metavar="REF")

    info = subparsers.add_parser("info", help="Show system information")
    info.add_argument("--json", type=Path, metavar="PATH", help="Export to a JSON file")

    subparsers.add_parser("list", help="List catalogued assets")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(LoggingOptions(level="WARNING", debug=args.debug))
    logger = get_logger(__name__)

    services = build_services()
    try:
        if args.command == "resolve":
            return _resolve(services, args.references)
        if args.command == "info":
            return _info(services, args.json)
        if args.command == "list":
            return _list(services)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    finally:
        services.close()
    return 2


def _resolve(services: ServiceRegistry, references: Sequence[str]) -> int:
    resolver = cast(AttachmentResolver, services.get("resolver"))
    failures = 0
    for reference in references:
        asset_id = resolver.resolve(reference)
        if asset_id is None:
            failures += 1
            print(f"{reference} -> not found")
        else:
            print(f"{reference} -> {asset_id}")
    return 1 if failures else 0


def _info(services: ServiceRegistry, target: Path | None) -> int:
    diagnostics = cast(DiagnosticsService, services.get("diagnostics"))
    if target is not None:
        path = diagnostics.export_system_info(target)
        print(f"System info written to {path}")
    else:
        print(diagnostics.format_system_info())
    return 0


def _list(services: ServiceRegistry) -> int:
    catalog = cast(AssetRepository, services.get("catalog"))
    for asset in catalog.list_all():
        print(json.dumps(asset.to_dict(), sort_keys=True))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
