"""Shared fixtures: small in-memory PDFs."""

from __future__ import annotations

import pytest

from _builders import PRICE_LIST, build_pdf


@pytest.fixture
def price_list_pdf() -> bytes:
    """One page holding a clean 3x3 table."""
    return build_pdf([PRICE_LIST])


@pytest.fixture
def blank_pdf() -> bytes:
    """Two pages without any text."""
    return build_pdf([[], []])
