"""Command-line front end for WebStash.

Usage:
    webstash add "https://example.com/photo.jpg" --title "Launch" --tags "#space"
    webstash list --query "#space rocket" --order title
    webstash ask "What is my favorite hashtag?" --query "#space"
    webstash delete <id>
    webstash open <id>
    webstash export webstash-export.json
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from webstash.actions import open_item
from webstash.app_state import AppState, AskResult
from webstash.config import Settings, settings
from webstash.display import cards_for
from webstash.filtering import group_by_date
from webstash.models import Item, SortOrder
from webstash.storage import write_export

# ---------------------------------------------------------------------------
# ANSI colours
# ---------------------------------------------------------------------------
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"
CYAN = "\033[96m"
GREEN = "\033[92m"
RED = "\033[91m"
MAGENTA = "\033[95m"


def success(msg: str) -> None:
    """Print a success line."""
    print(f"  {GREEN}{msg}{RESET}")


def error(msg: str) -> None:
    """Print an error line to stderr."""
    print(f"  {RED}{msg}{RESET}", file=sys.stderr)


def print_item(item: Item) -> None:
    title = item.title or item.type.value.capitalize()
    tags = " ".join(f"{MAGENTA}#{t}{RESET}" for t in item.tags)
    print(f"  {BOLD}{title}{RESET} {DIM}[{item.type.value}] {item.id}{RESET}")
    print(f"    {item.content}")
    if tags:
        print(f"    {tags}")


def print_answer(result: AskResult) -> None:
    """Print a normalised answer as plain text or cards."""
    print(f"  {DIM}Grounded on {result.item_count} items · {result.latency_ms:.0f}ms{RESET}")
    for card in cards_for(result.response):
        if card.text is not None:
            print(f"    {card.text}")
            continue
        if card.header:
            print(f"    {CYAN}{BOLD}{card.header}{RESET}")
        for key, value in card.rows:
            print(f"      {DIM}{key}:{RESET} {value}")
        print()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_add(state: AppState, args: argparse.Namespace) -> int:
    item = state.save_item(args.title, args.content, args.tags)
    if item is None:
        error("Content is empty; nothing saved.")
        return 1
    success(f"Saved {item.type.value} {item.id}")
    return 0


def cmd_list(state: AppState, args: argparse.Namespace) -> int:
    visible = state.refresh_view(query=args.query, order=args.order)
    if not visible:
        print(f"  {DIM}No items match.{RESET}")
        return 0
    for label, items in group_by_date(visible).items():
        print(f"\n{CYAN}{BOLD}{label}{RESET}")
        for item in items:
            print_item(item)
    return 0


def cmd_delete(state: AppState, args: argparse.Namespace) -> int:
    if not state.delete_item(args.id):
        error(f"No item with id {args.id}")
        return 1
    success(f"Deleted {args.id}")
    return 0


def cmd_open(state: AppState, args: argparse.Namespace) -> int:
    item = state.get_item(args.id)
    if item is None:
        error(f"No item with id {args.id}")
        return 1
    result = open_item(item)
    (success if result.ok else error)(result.message)
    return 0 if result.ok else 1


def cmd_export(state: AppState, args: argparse.Namespace) -> int:
    path = write_export(state.items, Path(args.path))
    success(f"Exported {len(state.items)} items to {path}")
    return 0


def cmd_ask(state: AppState, args: argparse.Namespace) -> int:
    state.refresh_view(query=args.query, order=args.order)
    if args.temperature is not None:
        state.sessions.set_temperature(args.temperature)
    if args.top_k is not None:
        state.sessions.set_top_k(args.top_k)

    result = asyncio.run(state.ask(args.question))
    if result is None:
        error("Question is empty.")
        return 1
    if result.error:
        error(result.error)
        return 1
    print_answer(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="webstash", description="Save, browse and ask.")
    parser.add_argument("--store", type=Path, help="Path to the items JSON file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Save a note, link or media URL")
    add.add_argument("content")
    add.add_argument("--title", default="")
    add.add_argument("--tags", default="", help="e.g. '#space, rockets'")
    add.set_defaults(func=cmd_add)

    orders = [o.value for o in SortOrder]
    for name, func, help_text in (
        ("list", cmd_list, "List items matching a query"),
        ("ask", cmd_ask, "Ask a question over the matching items"),
    ):
        p = sub.add_parser(name, help=help_text)
        if name == "ask":
            p.add_argument("question")
            p.add_argument("--temperature", type=float)
            p.add_argument("--top-k", type=int)
        p.add_argument("--query", default="", help="Free text and/or #tags")
        p.add_argument("--order", choices=orders, default=SortOrder.NEWEST.value)
        p.set_defaults(func=func)

    for name, func, help_text in (
        ("delete", cmd_delete, "Delete an item by id"),
        ("open", cmd_open, "Open a link or media item in the browser"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("id")
        p.set_defaults(func=func)

    export = sub.add_parser("export", help="Export every item as JSON")
    export.add_argument("path", nargs="?", default="webstash-export.json")
    export.set_defaults(func=cmd_export)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = settings
    if args.store:
        config = Settings(storage_path=args.store)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )
    state = AppState.from_settings(config)
    return args.func(state, args)


if __name__ == "__main__":
    sys.exit(main())
