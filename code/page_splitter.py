#!/usr/bin/env python3
"""
Page Splitter

Raw extracted text carries one marker line per page:

    === PÁGINA 3 ===

split_pages() turns that text into ordered PageBlocks. The helpers below are
reused by the segmenters to recover page ranges from marker-bearing text.
"""

from __future__ import annotations
import logging
import re
from typing import List, Optional, Sequence, Tuple

from section_models import PageBlock

log = logging.getLogger(__name__)

# ---------- Regex ----------
PAGE_MARKER_RE = re.compile(
    r"^\s*===\s*(?:P[ÁA]GINA|PAGE)\s*(\d+)\s*===\s*$",
    re.IGNORECASE,
)


def page_marker_number(line: str) -> Optional[int]:
    """Page number of a marker line; None for text lines and for page 0."""
    m = PAGE_MARKER_RE.match(line)
    if not m:
        return None
    n = int(m.group(1))
    return n if n > 0 else None


def is_page_marker(line: str) -> bool:
    return page_marker_number(line) is not None


def format_page_marker(page_number: int) -> str:
    return f"=== PÁGINA {page_number} ==="


def split_pages(raw_text: str) -> List[PageBlock]:
    """
    Partition raw text into PageBlocks in marker order.

    Lines before the first marker are dropped. Text without any marker yields
    an empty list; callers treat that as "nothing can be located".
    """
    blocks: List[PageBlock] = []
    if not raw_text:
        return blocks

    current_page: Optional[int] = None
    buf: List[str] = []

    def flush():
        if current_page is not None:
            blocks.append(PageBlock(page_number=current_page, lines=tuple(buf)))
        buf.clear()

    for line in raw_text.splitlines():
        n = page_marker_number(line)
        if n is not None:
            flush()
            current_page = n
            continue
        if PAGE_MARKER_RE.match(line):
            log.warning("[warn] page marker without a positive number kept as text: %r", line.strip())
        if current_page is not None:
            buf.append(line)
    flush()
    return blocks


def line_pages(lines: Sequence[str]) -> List[Optional[int]]:
    """Page in effect for each line; marker lines map to their own number."""
    out: List[Optional[int]] = []
    current: Optional[int] = None
    for line in lines:
        n = page_marker_number(line)
        if n is not None:
            current = n
        out.append(current)
    return out


def page_range(pages: Sequence[Optional[int]], default: Tuple[int, int] = (1, 1)) -> Tuple[int, int]:
    known = [p for p in pages if p is not None]
    if not known:
        return default
    return min(known), max(known)
