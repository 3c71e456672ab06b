"""Export the canonical catalog (baseline + staged edits) or the analytics log."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from storefront.config import load_settings
from storefront.logic.export import EXPORT_FILENAMES
from storefront.session import StorefrontSession

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("kind", choices=sorted(EXPORT_FILENAMES))
    parser.add_argument("--output", type=Path, help="destination file (default: the download name)")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    session = StorefrontSession.from_settings(load_settings())
    if args.kind == "analytics":
        content = session.export_analytics()
    else:
        content = await session.export_json(args.kind)
    for notice in session.notices:
        logger.info("%s", notice.message)
    if content is None:
        return 1
    output = args.output or Path(EXPORT_FILENAMES[args.kind])
    output.write_text(content, encoding="utf-8")
    print("Wrote", output)
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(asyncio.run(main()))
