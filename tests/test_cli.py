"""Tests for webstash.cli — commands against a temp store."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from webstash import cli
from webstash.app_state import AskResult
from webstash.normalize import StructuredSequence
from webstash.storage import ItemStorage


@pytest.fixture()
def store(tmp_path: Path) -> Path:
    return tmp_path / "items.json"


def _run(store: Path, *argv: str) -> int:
    return cli.main(["--store", str(store), *argv])


class TestCommands:
    def test_add_and_list(self, store: Path, capsys) -> None:
        assert _run(store, "add", "https://example.com/a.jpg", "--title", "Pic", "--tags", "#Space") == 0
        assert _run(store, "add", "plain note") == 0
        capsys.readouterr()

        assert _run(store, "list", "--query", "#space") == 0
        out = capsys.readouterr().out
        assert "Pic" in out
        assert "[image]" in out
        assert "plain note" not in out

    def test_add_empty_fails(self, store: Path) -> None:
        assert _run(store, "add", "   ") == 1
        assert ItemStorage(store).load() == []

    def test_delete(self, store: Path) -> None:
        _run(store, "add", "to remove")
        item_id = ItemStorage(store).load()[0].id
        assert _run(store, "delete", item_id) == 0
        assert ItemStorage(store).load() == []
        assert _run(store, "delete", item_id) == 1

    def test_export(self, store: Path, tmp_path: Path) -> None:
        _run(store, "add", "one")
        target = tmp_path / "out.json"
        assert _run(store, "export", str(target)) == 0
        assert len(json.loads(target.read_text())["items"]) == 1

    def test_open_note_fails(self, store: Path) -> None:
        _run(store, "add", "a note")
        item_id = ItemStorage(store).load()[0].id
        assert _run(store, "open", item_id) == 1
        assert _run(store, "open", "missing") == 1

    def test_ask_prints_cards(self, store: Path, capsys) -> None:
        _run(store, "add", "x", "--tags", "#space")
        result = AskResult(
            response=StructuredSequence([{"title": "Top tag", "tag": "space"}]),
            error=None,
            latency_ms=12.0,
            item_count=1,
        )
        with patch("webstash.cli.AppState.ask", new=AsyncMock(return_value=result)) as ask:
            assert _run(store, "ask", "favorite tag?", "--query", "#space") == 0
        ask.assert_awaited_once_with("favorite tag?")
        out = capsys.readouterr().out
        assert "Top tag" in out
        assert "space" in out

    def test_ask_error(self, store: Path, capsys) -> None:
        result = AskResult(response=None, error="model down", latency_ms=1.0, item_count=0)
        with patch("webstash.cli.AppState.ask", new=AsyncMock(return_value=result)):
            assert _run(store, "ask", "q") == 1
        assert "model down" in capsys.readouterr().err
