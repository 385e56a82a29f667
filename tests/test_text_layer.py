"""Tests for pdf_sheets.text_layer against PDFs built in memory with PyMuPDF."""

from __future__ import annotations

import fitz  # PyMuPDF
import pytest

from pdf_sheets.convert import pdf_to_sheets
from pdf_sheets.fragments import extract_fragments
from pdf_sheets.text_layer import iter_pdf_text_items, open_pdf, page_text_items

from _builders import PRICE_LIST, build_pdf


def _single_text_pdf(text: str, point: tuple[float, float]) -> bytes:
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_text(point, text, fontname="helv", fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


class TestPageTextItems:
    """page_text_items() records from PyMuPDF text runs."""

    def test_record_shape_and_flipped_y(self) -> None:
        doc = open_pdf(_single_text_pdf("Total", (72, 100)))
        items = page_text_items(doc[0])
        doc.close()

        assert len(items) == 1
        record = items[0]
        assert record["str"] == "Total"
        assert len(record["transform"]) == 6
        assert record["transform"][4] == pytest.approx(72, abs=0.5)
        # Baseline 100pt below the top of a 792pt page.
        assert record["transform"][5] == pytest.approx(692, abs=0.5)
        assert record["width"] > 0
        assert record["height"] > 0
        assert record["fontName"]

    def test_nearby_runs_in_one_font_stay_apart(self) -> None:
        doc = fitz.open()
        page = doc.new_page(width=612, height=792)
        # "Apples" at 10pt Helvetica ends near x=102.6; "12" starts 0.74em later.
        page.insert_text((72, 100), "Apples", fontname="helv", fontsize=10)
        page.insert_text((110, 100), "12", fontname="helv", fontsize=10)
        items = page_text_items(page)
        doc.close()

        assert [(r["str"], round(r["transform"][4])) for r in items] == [("Apples", 72), ("12", 110)]

    def test_words_of_one_run_stay_together(self) -> None:
        doc = open_pdf(_single_text_pdf("Unit price", (72, 100)))
        items = page_text_items(doc[0])
        doc.close()
        assert [r["str"] for r in items] == ["Unit price"]

    def test_blank_page(self) -> None:
        doc = open_pdf(build_pdf([[]]))
        assert page_text_items(doc[0]) == []
        doc.close()

    def test_rows_read_top_first(self) -> None:
        doc = open_pdf(build_pdf([PRICE_LIST]))
        fragments = extract_fragments(page_text_items(doc[0]))
        doc.close()
        header = [f for f in fragments if f.text == "Item"][0]
        last = [f for f in fragments if f.text == "Pears"][0]
        assert header.y > last.y


class TestIterPdfTextItems:
    """iter_pdf_text_items() page selection and numbering."""

    def test_all_pages_numbered_from_one(self) -> None:
        data = build_pdf([PRICE_LIST, [], PRICE_LIST])
        pages = list(iter_pdf_text_items(data))
        assert [n for n, _ in pages] == [1, 2, 3]
        assert pages[1][1] == []

    def test_selected_pages(self) -> None:
        data = build_pdf([PRICE_LIST, [], PRICE_LIST])
        assert [n for n, _ in iter_pdf_text_items(data, pages=[3, 9, 1])] == [3, 1]

    def test_path_input(self, tmp_path) -> None:
        path = tmp_path / "doc.pdf"
        path.write_bytes(build_pdf([PRICE_LIST]))
        assert len(list(iter_pdf_text_items(str(path)))) == 1


class TestEndToEnd:
    """Tables recovered from real PDF bytes."""

    def test_table_recovered_from_pdf(self, price_list_pdf) -> None:
        result = pdf_to_sheets(price_list_pdf)
        assert len(result.sheets) == 1
        sheet = result.sheets[0]
        assert sheet.sheet_name == "Page 1"
        assert sheet.data == PRICE_LIST
        assert sheet.confidence == 1.0

    def test_one_sheet_per_page(self) -> None:
        data = build_pdf([PRICE_LIST, PRICE_LIST])
        result = pdf_to_sheets(data)
        assert [s.sheet_name for s in result.sheets] == ["Page 1", "Page 2"]
