"""Command-line entry point: parse a menu file and print the result envelope."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from menu_ingest.app_logging import configure_logging
from menu_ingest.containers import AppContainer, build_container
from menu_ingest.domain.menu import MenuParseResult

_logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="menu-ingest",
        description=(
            "Parse a restaurant menu (PDF, Word, Excel, text, CSV or JSON) "
            "into structured items."
        ),
    )
    parser.add_argument("path", type=Path, help="menu file to parse")
    parser.add_argument("--menu-name", help="override the detected menu name")
    parser.add_argument("--mime-type", help="content type hint for files without an extension")
    parser.add_argument("--verbose", action="store_true", help="log every pipeline step")
    return parser


async def run(
    container: AppContainer,
    path: Path,
    *,
    menu_name: str | None = None,
    mime_type: str | None = None,
) -> MenuParseResult:
    """Parse one file and release the container's resources."""
    try:
        return await container.pipeline.parse_upload(
            path.read_bytes(),
            path.name,
            mime_type=mime_type,
            menu_name=menu_name,
        )
    finally:
        await container.close_resources()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    if not args.path.is_file():
        _logger.error("File not found: %s", args.path)
        return 2

    result = asyncio.run(
        run(
            build_container(),
            args.path,
            menu_name=args.menu_name,
            mime_type=args.mime_type,
        )
    )
    json.dump(result.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
