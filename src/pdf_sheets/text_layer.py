"""PyMuPDF text-layer provider.

Reads the positioned text spans of each PDF page and emits them as
PDF.js-style records (``str``, ``transform``, ``width``, ``height``,
``fontName``) for :func:`pdf_sheets.fragments.extract_fragments`.

PyMuPDF reports coordinates with y growing downward. The records flip y
against the page height so that, as in PDF user space, a larger y means
higher on the page.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import fitz  # PyMuPDF

# No synthetic spaces between distant glyphs; gaps stay visible in the
# per-character positions of "rawdict".
_TEXT_FLAGS = (
    fitz.TEXT_PRESERVE_LIGATURES
    | fitz.TEXT_PRESERVE_WHITESPACE
    | fitz.TEXT_INHIBIT_SPACES
)

# A horizontal gap wider than this fraction of the font size between two
# glyphs of one span starts a new record.
SPLIT_GAP = 0.5


def open_pdf(pdf_input: str | bytes | Path) -> fitz.Document:
    """Open a PDF from various input types.

    Args:
        pdf_input: Path string, Path object, or raw PDF bytes.

    Returns:
        An open fitz.Document.
    """
    if isinstance(pdf_input, bytes):
        return fitz.open(stream=pdf_input, filetype="pdf")
    return fitz.open(pdf_input)


def _split_span(span: dict) -> list[list[dict]]:
    """Split the characters of a span wherever the pen jumps right.

    MuPDF joins text drawn by separate show operators into one span when
    it sits on the same baseline in the same font, so two table cells a few
    points apart can arrive as ``"Apples12"``.
    """
    max_gap = span["size"] * SPLIT_GAP
    runs: list[list[dict]] = []
    previous_end: float | None = None
    for char in span["chars"]:
        if previous_end is None or char["origin"][0] - previous_end > max_gap:
            runs.append([])
        runs[-1].append(char)
        previous_end = char["bbox"][2]
    return runs


def page_text_items(page: fitz.Page) -> list[dict]:
    """Return one text-layer record per non-blank text run on *page*.

    A run is a span, or the part of a span between two wide glyph gaps.
    Runs are returned in content-stream order (block, line, span).
    """
    page_height = page.rect.height
    data = page.get_text("rawdict", flags=_TEXT_FLAGS)
    items: list[dict] = []
    for block in data["blocks"]:
        if block["type"] != 0:
            continue
        for line in block["lines"]:
            for span in line["spans"]:
                _, y0, _, y1 = span["bbox"]
                size = span["size"]
                for chars in _split_span(span):
                    text = "".join(c["c"] for c in chars)
                    if not text.strip():
                        continue
                    origin_x, origin_y = chars[0]["origin"]
                    items.append({
                        "str": text,
                        "transform": (size, 0.0, 0.0, size, origin_x, page_height - origin_y),
                        "width": max(c["bbox"][2] for c in chars) - min(c["bbox"][0] for c in chars),
                        "height": y1 - y0,
                        "fontName": span["font"],
                    })
    return items


def iter_pdf_text_items(
    pdf_input: str | bytes | Path,
    *,
    pages: list[int] | None = None,
) -> Iterator[tuple[int, list[dict]]]:
    """Yield ``(page_number, records)`` for each requested page.

    Args:
        pdf_input: Path to PDF file (str or Path), or raw PDF bytes.
        pages: Optional list of 1-based page numbers. If None, all pages
            are read. Numbers outside the document are skipped.
    """
    doc = open_pdf(pdf_input)
    try:
        page_numbers = pages if pages is not None else range(1, len(doc) + 1)
        for page_number in page_numbers:
            if not 1 <= page_number <= len(doc):
                continue
            yield page_number, page_text_items(doc[page_number - 1])
    finally:
        doc.close()

