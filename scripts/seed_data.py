"""Seed a WebStash store with realistic items for demos and screenshots.

Usage:
    python scripts/seed_data.py [--store ~/.webstash/items.json]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from webstash.app_state import AppState  # noqa: E402
from webstash.config import Settings, settings  # noqa: E402

# Each entry: (title, content, tags)
ITEMS: list[tuple[str, str, str]] = [
    (
        "Starship flight recap",
        "https://example.com/blog/starship-flight-5",
        "#space #rockets",
    ),
    (
        "Booster catch",
        "https://example.com/media/booster-catch.mp4",
        "#space, rockets, video",
    ),
    (
        "Launch pad at dusk",
        "https://example.com/photos/pad-39a.jpg",
        "#space #photography",
    ),
    (
        "Reading list",
        "Attention Is All You Need; ReAct: Synergizing Reasoning and Acting; "
        "Toolformer: Language Models Can Teach Themselves to Use Tools.",
        "#reading #papers #ai",
    ),
    (
        "Project idea",
        "Browser extension that answers questions over exactly the bookmarks "
        "you are looking at, using a local model.",
        "#ideas #ai",
    ),
    (
        "",
        "Buy coffee beans, oat milk and a new kettle.",
        "#personal",
    ),
    (
        "Sourdough ratios",
        "100% flour, 75% water, 20% starter, 2% salt. Bulk 5h at 24C.",
        "#cooking",
    ),
    (
        "Rust async book",
        "https://example.com/docs/async-book/",
        "#programming #reading",
    ),
]


def main() -> None:
    """Save every sample item into the configured store."""
    parser = argparse.ArgumentParser(description="Seed sample items")
    parser.add_argument("--store", type=Path, help="Path to the items JSON file")
    args = parser.parse_args()
    config = Settings(storage_path=args.store) if args.store else settings

    state = AppState.from_settings(config)
    print(f"\n  Seeding {len(ITEMS)} items into {config.storage_path}")
    for i, (title, content, tags) in enumerate(ITEMS, 1):
        item = state.save_item(title, content, tags)
        print(f"  [{i}/{len(ITEMS)}] {item.type.value:<5} {title or content[:40]}")
    print(f"\n  Done. Store now holds {len(state.items)} items.")
    print("  Browse them with:  streamlit run ui/app.py\n")


if __name__ == "__main__":
    main()
