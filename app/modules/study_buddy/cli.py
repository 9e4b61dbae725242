from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from app.core.config import get_settings
from app.core.errors import StudyBuddyError
from app.modules.study_buddy.client import CompletionClient
from app.modules.study_buddy.extractor import extract_json_object
from app.modules.study_buddy.handler import GenerationHandler
from app.modules.study_buddy.validator import load_study_package


def _load_text(value: str | None, file: str | None, what: str) -> str:
    if value and file:
        raise SystemExit(f"Provide either --{what} or --{what}-file, not both")
    if file:
        return Path(file).read_text(encoding="utf-8")
    if value:
        return value
    raise SystemExit(f"--{what} or --{what}-file is required")


def _print(payload: dict) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="study-buddy", description="Bilingual study package CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate a study package for a query")
    g.add_argument("--query", "-q", help="Topic or question")
    g.add_argument("--query-file", help="Path to a file containing the query")

    c = sub.add_parser(
        "check", help="Extract and validate a saved model reply (no network)"
    )
    c.add_argument("--reply", help="Raw reply text")
    c.add_argument("--reply-file", help="Path to a file containing the reply")

    args = parser.parse_args(argv)
    try:
        if args.cmd == "generate":
            query = _load_text(args.query, args.query_file, "query")
            settings = get_settings()
            handler = GenerationHandler(
                CompletionClient(settings.completion),
                auth_required=False,
                max_query_length=settings.app.max_query_length,
            )
            result = asyncio.run(handler.handle({"query": query}))
            _print(result.payload)
            return 0
        if args.cmd == "check":
            reply = _load_text(args.reply, args.reply_file, "reply")
            result = load_study_package(extract_json_object(reply))
            _print(result.payload)
            return 0
    except StudyBuddyError as e:
        print(f"error [{e.kind.value}]: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
