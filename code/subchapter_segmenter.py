#!/usr/bin/env python3
"""
Subchapter Segmenter

Splits one chapter's content at its declared subchapter headings. Each found
heading owns the lines strictly between it and the next found heading; the
last one runs to the end of the chapter. Lines before the first found
heading (the chapter title and any preamble) belong to no segment.

Segments come back in physical order, which may differ from outline order.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from page_splitter import is_page_marker, line_pages, page_range
from section_models import ChapterIndexEntry, SectionResult, SubChapterSegment, chapter_shape, WithSubchapters
from token_counter import TokenCountFn
from title_matcher import matches_subchapter_title

log = logging.getLogger(__name__)


@dataclass
class SubchapterOutcome:
    results: List[SectionResult] = field(default_factory=list)
    declared: int = 0
    missing: List[str] = field(default_factory=list)

    @property
    def found(self) -> int:
        return len(self.results)


def find_subchapter_lines(lines: Sequence[str], titles: Sequence[str]) -> List[Tuple[int, str]]:
    """First matching line index per title, sorted by position."""
    hits: List[Tuple[int, int, str]] = []
    for order, title in enumerate(titles):
        for li, line in enumerate(lines):
            if is_page_marker(line):
                continue
            if matches_subchapter_title(line, title):
                hits.append((li, order, title))
                break
    hits.sort()

    out: List[Tuple[int, str]] = []
    claimed: Dict[int, str] = {}
    for li, _order, title in hits:
        if li in claimed:
            log.debug("subchapter %r shares line %d with %r; keeping the earlier outline entry", title, li, claimed[li])
            continue
        claimed[li] = title
        out.append((li, title))
    return out


def build_segment(
    chapter_title: str, title: str, lines: Sequence[str], pages: Sequence[Optional[int]],
    heading_index: int, end_index: int, count_tokens: TokenCountFn
) -> SubChapterSegment:
    body = [i for i in range(heading_index + 1, end_index) if not is_page_marker(lines[i])]
    # pages come from content lines; an empty segment sits on its heading's page
    from_page, to_page = page_range([pages[i] for i in body] or [pages[heading_index]])
    text = "\n".join(lines[i] for i in body)
    return SubChapterSegment(
        chapter_title=chapter_title,
        title=title,
        text=text,
        token_count=count_tokens(text),
        from_page=from_page,
        to_page=to_page,
    )


def segment_subchapters(entry: ChapterIndexEntry, content: str, count_tokens: TokenCountFn) -> SubchapterOutcome:
    shape = chapter_shape(entry)
    titles = shape.titles if isinstance(shape, WithSubchapters) else ()
    outcome = SubchapterOutcome(declared=len(titles))

    lines = content.splitlines()
    pages = line_pages(lines)
    found = find_subchapter_lines(lines, titles)
    found_titles = {t for _, t in found}
    outcome.missing = [t for t in titles if t not in found_titles]
    for t in outcome.missing:
        log.debug("[miss] subchapter %r not found in chapter %r", t, entry.chapter_title)

    for i, (li, title) in enumerate(found):
        end = found[i + 1][0] if i + 1 < len(found) else len(lines)
        seg = build_segment(entry.chapter_title, title, lines, pages, li, end, count_tokens)
        outcome.results.append(
            SectionResult(
                chapter_title=entry.chapter_title,
                from_page=seg.from_page,
                to_page=seg.to_page,
                subchapter=seg,
            )
        )
    return outcome
