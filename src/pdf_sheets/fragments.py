"""Normalize raw text-layer records into positioned text fragments.

A text-layer record is a loosely shaped mapping as produced by
:func:`pdf_sheets.text_layer.page_text_items` (or by any PDF.js-style
provider)::

    {"str": "Revenue", "transform": (10, 0, 0, 10, 72.4, 691.8),
     "width": 38.2, "height": 10.0, "fontName": "Helvetica"}

Only the translation components of the affine transform (indices 4 and 5)
are used; they give the left edge and the baseline of the run.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

DEFAULT_FRAGMENT_HEIGHT = 12
DEFAULT_FONT = "unknown"


@dataclass(frozen=True)
class TextFragment:
    """One positioned run of text on a page.

    Coordinates are page-space with y ascending upward, so a larger ``y``
    means the fragment sits higher on the page.
    """

    text: str
    x: int
    y: int
    width: int = 0
    height: int = DEFAULT_FRAGMENT_HEIGHT
    font: str = DEFAULT_FONT


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 ties going up.

    Python's :func:`round` rounds ties to even, which would move
    fragments at ``x.5`` in the opposite direction to their neighbours.
    """
    return math.floor(value + 0.5)


def _record_text(record: Mapping) -> str:
    text = record.get("str")
    if text is None:
        text = record.get("text", "")
    return str(text).strip()


def extract_fragments(records: Iterable[Mapping] | None) -> list[TextFragment]:
    """Convert one page's raw text-layer records into :class:`TextFragment`.

    Records whose text is empty after trimming are dropped. The output keeps
    the source order; nothing is sorted here.
    """
    if not records:
        return []

    fragments: list[TextFragment] = []
    for record in records:
        text = _record_text(record)
        if not text:
            continue
        transform = record["transform"]
        fragments.append(TextFragment(
            text=text,
            x=round_half_up(transform[4]),
            y=round_half_up(transform[5]),
            width=round_half_up(record.get("width") or 0),
            height=round_half_up(record.get("height") or DEFAULT_FRAGMENT_HEIGHT),
            font=record.get("fontName") or DEFAULT_FONT,
        ))
    return fragments
