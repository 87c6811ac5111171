#!/usr/bin/env python3
"""Show how a question is classified and the context the assistant would get.

Usage:
  python -m sessionsearch.scripts.explain_intent "what did andrewwang work on after 2025-11-01"
  python -m sessionsearch.scripts.explain_intent --data-dir ./data --json "how many users are there"
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from sessionsearch import config
from sessionsearch.entity_store import StoreManager
from sessionsearch.services.context_builder import ContextBuilder
from sessionsearch.services.search import SearchEngine


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("question", help="Free-text question to classify")
    parser.add_argument("--data-dir", type=Path, default=config.DATA_DIR, help="Directory holding export files")
    parser.add_argument(
        "--files",
        default=",".join(config.DATA_FILES),
        help="Comma separated export file names (default: configured list)",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    return parser


def run(args: argparse.Namespace) -> dict:
    files = [name.strip() for name in args.files.split(",") if name.strip()]
    manager = StoreManager(args.data_dir, files)
    store = manager.load()
    intent, context = ContextBuilder(SearchEngine(store)).build_for_message(args.question)
    return {
        "intent": intent.model_dump(by_alias=True, exclude_none=True),
        "context": context.strip(),
        "store": store.status().model_dump(),
    }


def main() -> int:
    logging.basicConfig(level=logging.WARNING)
    args = build_parser().parse_args()
    report = run(args)
    if args.json:
        print(json.dumps(report, indent=2))
        return 0

    intent = report["intent"]
    print(f"Intent: {intent['type']} (rule: {intent.get('rule', '')})")
    if intent.get("value"):
        print(f"Value: {intent['value']}")
    if intent.get("dateFilter"):
        print(f"Date filter: {json.dumps(intent['dateFilter'])}")
    print()
    print(report["context"])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
