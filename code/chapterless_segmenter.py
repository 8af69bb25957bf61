#!/usr/bin/env python3
"""
Chapterless Segmenter: a chapter without declared subchapters becomes one
segment titled after the chapter itself.
"""

from __future__ import annotations
from typing import List, Optional

from page_splitter import is_page_marker, line_pages, page_range
from section_models import ChapterIndexEntry, SectionResult, SubChapterSegment
from token_counter import TokenCountFn
from title_matcher import matches_title

# Non-marker lines inspected for the chapter heading
CHAPTER_HEADER_WINDOW = 3


def find_heading_line(lines: List[str], title: str, window: int = CHAPTER_HEADER_WINDOW) -> Optional[int]:
    seen = 0
    for li, line in enumerate(lines):
        if is_page_marker(line):
            continue
        if seen >= window:
            break
        seen += 1
        if matches_title(line, title):
            return li
    return None


def segment_flat_chapter(
    entry: ChapterIndexEntry, content: str, count_tokens: TokenCountFn, window: int = CHAPTER_HEADER_WINDOW
) -> SectionResult:
    lines = content.splitlines()
    pages = line_pages(lines)

    heading = find_heading_line(lines, entry.chapter_title, window)
    body = [i for i in range(len(lines)) if i != heading and not is_page_marker(lines[i])]
    from_page, to_page = page_range([pages[i] for i in body] or pages)
    text = "\n".join(lines[i] for i in body)
    seg = SubChapterSegment(
        chapter_title=entry.chapter_title,
        title=entry.chapter_title,
        text=text,
        token_count=count_tokens(text),
        from_page=from_page,
        to_page=to_page,
    )
    return SectionResult(chapter_title=entry.chapter_title, from_page=from_page, to_page=to_page, subchapter=seg)
