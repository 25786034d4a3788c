"""Unit tests for webstash.display and webstash.actions."""

from __future__ import annotations

import webbrowser
from unittest.mock import patch

from webstash.actions import open_item
from webstash.display import Card, cards_for, format_value, record_to_card
from webstash.models import Item
from webstash.normalize import PlainText, StructuredSequence


class TestRecordToCard:
    def test_title_becomes_header(self) -> None:
        card = record_to_card({"title": "Launch", "id": "1", "tags": ["space", "ai"]})
        assert card.header == "Launch"
        assert card.rows == [("id", "1"), ("tags", "#space, #ai")]

    def test_name_or_heading_header(self) -> None:
        assert record_to_card({"name": "N", "x": 1}).header == "N"
        assert record_to_card({"heading": "H"}).header == "H"

    def test_no_header(self) -> None:
        card = record_to_card({"answer": "42", "extra": None})
        assert card.header is None
        assert card.rows == [("answer", "42"), ("extra", "")]

    def test_non_object_record(self) -> None:
        assert record_to_card(7) == Card(text="7")

    def test_nested_object_as_json(self) -> None:
        assert format_value("meta", {"a": 1}) == '{"a": 1}'

    def test_mixed_list(self) -> None:
        assert format_value("ids", ["a", 2]) == "#a, 2"

    def test_created_at_formatted(self) -> None:
        assert format_value("createdAt", "2024-01-02T03:04:05") == "2024-01-02 03:04:05"
        assert format_value("createdAt", "not a date") == "not a date"


class TestCardsFor:
    def test_plain_text(self) -> None:
        assert cards_for(PlainText("hello")) == [Card(text="hello")]

    def test_structured(self) -> None:
        cards = cards_for(StructuredSequence([{"title": "A"}, "b"]))
        assert cards == [Card(header="A", rows=[]), Card(text="b")]

    def test_empty_sequence(self) -> None:
        assert cards_for(StructuredSequence([])) == []


class TestOpenItem:
    def test_note_rejected(self) -> None:
        result = open_item(Item.create("", "just text"))
        assert result.ok is False

    def test_link_opened(self) -> None:
        item = Item.create("", "https://example.com/page")
        with patch("webstash.actions.webbrowser.open_new_tab", return_value=True) as opener:
            result = open_item(item)
        opener.assert_called_once_with("https://example.com/page")
        assert result.ok is True

    def test_no_browser(self) -> None:
        item = Item.create("", "https://example.com/p.png")
        with patch("webstash.actions.webbrowser.open_new_tab", return_value=False):
            assert open_item(item).ok is False

    def test_browser_error_reported(self) -> None:
        item = Item.create("", "https://example.com/v.mp4")
        with patch(
            "webstash.actions.webbrowser.open_new_tab",
            side_effect=webbrowser.Error("boom"),
        ):
            result = open_item(item)
        assert result.ok is False
        assert "boom" in result.message
