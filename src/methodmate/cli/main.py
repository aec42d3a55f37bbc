from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from methodmate.settings import settings


def _configure_logging() -> None:
    import logging

    level = (settings.log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def cmd_version() -> int:
    from methodmate import __version__

    print(__version__)
    return 0


async def _extract(text: str) -> int:
    from methodmate.extract.orchestrator import MethodExtractor
    from methodmate.extract.types import Found
    from methodmate.oracle.client import CozeOracle

    oracle = CozeOracle(settings)
    try:
        outcome = await MethodExtractor(oracle, settings).extract(text)
    finally:
        await oracle.aclose()

    if isinstance(outcome, Found):
        print(f"[{outcome.provenance}]")
        print(outcome.text)
        return 0
    print("no methodology found", file=sys.stderr)
    return 1


def cmd_extract(args: argparse.Namespace) -> int:
    _configure_logging()
    text = sys.stdin.read() if args.path == "-" else Path(args.path).read_text(encoding="utf-8")
    return asyncio.run(_extract(text))


def cmd_section(args: argparse.Namespace) -> int:
    _configure_logging()
    from methodmate.extract.sections import locate_method_section

    text = sys.stdin.read() if args.path == "-" else Path(args.path).read_text(encoding="utf-8")
    section = locate_method_section(text, fallback_chars=settings.section_fallback_chars)
    if section is None:
        print("no method section located", file=sys.stderr)
        return 1
    print(f"[{section.start_offset}:{section.end_offset}] title={section.matched_title!r}")
    print(section.text)
    return 0


def cmd_venue(args: argparse.Namespace) -> int:
    from methodmate.venues.classifier import classify_venue

    match = classify_venue(args.venue)
    print(match.canonical_name if match.matched else "-")
    return 0 if match.matched else 1


def cmd_keywords(args: argparse.Namespace) -> int:
    from methodmate.search.keywords import format_keyword_query

    print(format_keyword_query(args.text))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    _configure_logging()
    from methodmate.server.server import main

    main(host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="methodmate")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version").set_defaults(func=lambda _a: cmd_version())

    ext = sub.add_parser("extract", help="Extract the research method from a paper's text")
    ext.add_argument("path", help="Text file with the paper, or - for stdin")
    ext.set_defaults(func=cmd_extract)

    sec = sub.add_parser("section", help="Show the located method section without calling the oracle")
    sec.add_argument("path", help="Text file with the paper, or - for stdin")
    sec.set_defaults(func=cmd_section)

    ven = sub.add_parser("venue", help="Check a venue against the top-venue list")
    ven.add_argument("venue")
    ven.set_defaults(func=cmd_venue)

    kw = sub.add_parser("keywords", help="Format keywords as a phrase-preserving search query")
    kw.add_argument("text")
    kw.set_defaults(func=cmd_keywords)

    srv = sub.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=3002)
    srv.set_defaults(func=cmd_serve)

    return p


def app() -> None:
    parser = build_parser()
    args = parser.parse_args()
    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    app()
