"""Tests for Tiptap content helpers, entry helpers, and char diffs."""

from datetime import datetime, timedelta, timezone

import pytest

from dochistory.services.content_utils import (
    EMPTY_DOCUMENT,
    build_metrics,
    count_characters,
    count_words,
    extract_plain_text,
    is_empty,
    is_valid_tiptap_content,
    with_telemetry,
)
from dochistory.services.history_graph import compute_char_diffs
from dochistory.services.history_utils import elapsed_ms, sort_chronologically, to_utc
from tests.conftest import make_doc

RICH_DOC = {
    "type": "doc",
    "content": [
        {"type": "heading", "attrs": {"level": 1}, "content": [{"type": "text", "text": "Title"}]},
        {
            "type": "paragraph",
            "content": [
                {"type": "text", "text": "Hello "},
                {"type": "text", "marks": [{"type": "bold"}], "text": "bold"},
                {"type": "text", "text": " world"},
            ],
        },
        {
            "type": "bulletList",
            "content": [
                {"type": "listItem", "content": [make_doc("first")["content"][0]]},
                {"type": "listItem", "content": [make_doc("second item")["content"][0]]},
            ],
        },
        {"type": "horizontalRule"},
        {"type": "codeBlock", "content": [{"type": "text", "text": "x = 1"}]},
    ],
}


class TestPlainText:

    def test_rich_document(self):
        assert extract_plain_text(RICH_DOC) == "Title\nHello bold world\nfirst\nsecond item\nx = 1"

    def test_marks_do_not_split_words(self):
        assert count_words(RICH_DOC) == 10

    def test_characters_exclude_formatting(self):
        assert count_characters(make_doc("Hello")) == 5
        assert count_characters(make_doc("ab", "cd")) == 5

    def test_empty_paragraph(self):
        assert extract_plain_text(make_doc("")) == ""
        assert is_empty(make_doc("", "  "))

    def test_non_document_input(self):
        assert extract_plain_text("just a string") == ""
        assert extract_plain_text(None) == ""
        assert count_words({"type": "doc"}) == 0


class TestValidation:

    @pytest.mark.parametrize("content", [EMPTY_DOCUMENT, make_doc("x"), {"type": "doc"}])
    def test_valid(self, content):
        assert is_valid_tiptap_content(content)

    @pytest.mark.parametrize("content", [
        None,
        [],
        {"type": "paragraph"},
        {"type": "doc", "content": "text"},
    ])
    def test_invalid(self, content):
        assert not is_valid_tiptap_content(content)


class TestMetrics:

    def test_build_metrics(self):
        assert build_metrics(make_doc("one two", "three")) == {"word_count": 3, "char_count": 13}

    def test_with_telemetry_adds_counts(self):
        metrics = with_telemetry(build_metrics, paste_word_count=2, keystroke_count=40)(make_doc("a b"))
        assert metrics == {"word_count": 2, "char_count": 3, "paste_word_count": 2, "keystroke_count": 40}

    def test_with_telemetry_omits_missing(self):
        metrics = with_telemetry(build_metrics)(make_doc("a"))
        assert "paste_word_count" not in metrics
        assert "keystroke_count" not in metrics


class TestHistoryUtils:

    def test_to_utc_handles_z_suffix(self):
        assert to_utc("2025-01-01T09:00:00Z") == datetime(2025, 1, 1, 9, tzinfo=timezone.utc)

    def test_to_utc_converts_offsets(self):
        assert to_utc("2025-01-01T10:00:00+01:00") == datetime(2025, 1, 1, 9, tzinfo=timezone.utc)

    def test_to_utc_rejects_other_types(self):
        with pytest.raises(TypeError):
            to_utc(12345)

    def test_elapsed_ms_mixed_naive_and_aware(self):
        aware = datetime(2025, 1, 1, 9, tzinfo=timezone.utc)
        naive = datetime(2025, 1, 1, 9, 0, 2)
        assert elapsed_ms(aware, naive) == 2000

    def test_sort_ties_keep_input_order_for_non_int_ids(self):
        t = datetime(2025, 1, 1, tzinfo=timezone.utc)
        entries = [{"id": "b", "created_at": t}, {"id": "a", "created_at": t}]
        assert [e["id"] for e in sort_chronologically(entries)] == ["b", "a"]


class TestCharDiffs:

    def test_diffs_oldest_first(self):
        t0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
        entries = [
            {"id": 3, "created_at": t0 + timedelta(minutes=2), "char_count": 4},
            {"id": 1, "created_at": t0, "char_count": 10},
            {"id": 2, "created_at": t0 + timedelta(minutes=1), "char_count": 25},
        ]
        diffs = compute_char_diffs(entries)
        assert [d.entry["id"] for d in diffs] == [1, 2, 3]
        assert [d.char_diff for d in diffs] == [0, 15, -21]

    def test_empty(self):
        assert compute_char_diffs([]) == []
