"""Tests for pdf_sheets.fragments — text-layer record normalization."""

from __future__ import annotations

from pdf_sheets.fragments import TextFragment, extract_fragments, round_half_up

from _builders import item


class TestExtractFragments:
    """extract_fragments() turns raw records into TextFragment."""

    def test_translation_components_become_position(self) -> None:
        records = [{"str": "Total", "transform": (9, 0, 0, 9, 72.4, 691.6), "width": 21.7, "height": 9.2,
                    "fontName": "g_d0_f1"}]
        assert extract_fragments(records) == [
            TextFragment(text="Total", x=72, y=692, width=22, height=9, font="g_d0_f1"),
        ]

    def test_whitespace_only_records_dropped(self) -> None:
        records = [item("  ", 10, 10), item("A", 20, 10), item("\t\n", 30, 10), item("", 40, 10)]
        assert [f.text for f in extract_fragments(records)] == ["A"]

    def test_text_trimmed(self) -> None:
        assert extract_fragments([item("  Net income ", 10, 10)])[0].text == "Net income"

    def test_source_order_kept(self) -> None:
        """Output is not sorted by position."""
        records = [item("low", 10, 100), item("high", 10, 700), item("left", 5, 400)]
        assert [f.text for f in extract_fragments(records)] == ["low", "high", "left"]

    def test_missing_height_and_font_defaults(self) -> None:
        records = [{"str": "x", "transform": (1, 0, 0, 1, 3, 4), "width": 2, "height": 0, "fontName": ""}]
        fragment = extract_fragments(records)[0]
        assert fragment.height == 12
        assert fragment.font == "unknown"

    def test_text_key_accepted(self) -> None:
        records = [{"text": "Qty", "transform": (1, 0, 0, 1, 3, 4)}]
        assert extract_fragments(records)[0].text == "Qty"

    def test_empty_input(self) -> None:
        assert extract_fragments([]) == []
        assert extract_fragments(None) == []


class TestRoundHalfUp:
    """round_half_up() sends .5 ties upward, negatives included."""

    def test_ties_go_up(self) -> None:
        assert round_half_up(10.5) == 11
        assert round_half_up(11.5) == 12
        assert round_half_up(-0.5) == 0

    def test_regular_rounding(self) -> None:
        assert round_half_up(10.49) == 10
        assert round_half_up(10.51) == 11
