#!/usr/bin/env python3
"""
Chapter Locator

Finds where an outline chapter starts and ends across the page blocks and
rebuilds its content with page markers re-inserted, so the segmenters can
recover page numbers afterwards.

The first physical occurrence wins for both boundaries. A title that also
appears earlier (a table of contents, a cross-reference) will pull the
boundary there.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence

from page_splitter import format_page_marker
from section_models import ChapterIndexEntry, PageBlock
from title_matcher import matches_title


@dataclass(frozen=True)
class TextPosition:
    block_index: int
    line_index: int


@dataclass(frozen=True)
class ChapterSpan:
    start: TextPosition
    end: TextPosition  # exclusive
    end_found: bool


def find_title(pages: Sequence[PageBlock], title: str, start: TextPosition = TextPosition(0, 0)) -> Optional[TextPosition]:
    for bi in range(start.block_index, len(pages)):
        first = start.line_index if bi == start.block_index else 0
        lines = pages[bi].lines
        for li in range(first, len(lines)):
            if matches_title(lines[li], title):
                return TextPosition(bi, li)
    return None


def end_of_document(pages: Sequence[PageBlock]) -> TextPosition:
    last = len(pages) - 1
    return TextPosition(last, len(pages[last].lines))


def locate_chapter_span(
    pages: Sequence[PageBlock], current: ChapterIndexEntry, next_entry: Optional[ChapterIndexEntry] = None
) -> Optional[ChapterSpan]:
    if not pages:
        return None
    start = find_title(pages, current.chapter_title)
    if start is None:
        return None

    end = None
    if next_entry is not None:
        end = find_title(pages, next_entry.chapter_title, TextPosition(start.block_index, start.line_index + 1))
    if end is None:
        return ChapterSpan(start=start, end=end_of_document(pages), end_found=False)
    return ChapterSpan(start=start, end=end, end_found=True)


def render_span(pages: Sequence[PageBlock], span: ChapterSpan) -> str:
    out: List[str] = []
    for bi in range(span.start.block_index, span.end.block_index + 1):
        block = pages[bi]
        lo = span.start.line_index if bi == span.start.block_index else 0
        hi = span.end.line_index if bi == span.end.block_index else len(block.lines)
        if bi != span.start.block_index and bi == span.end.block_index and hi <= lo:
            # next chapter opens this page; nothing of ours is on it
            break
        out.append(format_page_marker(block.page_number))
        out.extend(block.lines[lo:hi])
    return "\n".join(out)


def locate_chapter(
    pages: Sequence[PageBlock], current: ChapterIndexEntry, next_entry: Optional[ChapterIndexEntry] = None
) -> str:
    """
    Return the chapter's content with page markers, or "" when its title
    cannot be found on any page.
    """
    span = locate_chapter_span(pages, current, next_entry)
    if span is None:
        return ""
    return render_span(pages, span)
