#!/usr/bin/env python3
"""
Section Data Model

Types shared by the extraction pipeline:
- PageBlock: one page of raw text, split on page markers
- ChapterIndexEntry: one outline entry (chapter title + expected subchapter titles)
- SubChapterSegment / SectionResult: extracted output, one per located segment
- WithSubchapters / Flat: chapter shape, decided once per outline entry
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union


@dataclass(frozen=True)
class PageBlock:
    page_number: int
    lines: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ChapterIndexEntry:
    chapter_title: str
    subchapter_titles: Tuple[str, ...] = field(default_factory=tuple)


@dataclass
class SubChapterSegment:
    chapter_title: str
    title: str
    text: str
    token_count: int
    from_page: int
    to_page: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chapterTitle": self.chapter_title,
            "title": self.title,
            "text": self.text,
            "tokenCount": self.token_count,
            "fromPage": self.from_page,
            "toPage": self.to_page,
        }


@dataclass
class SectionResult:
    chapter_title: str
    from_page: int
    to_page: int
    subchapter: SubChapterSegment

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chapterTitle": self.chapter_title,
            "fromPage": self.from_page,
            "toPage": self.to_page,
            "subchapter": self.subchapter.to_dict(),
        }


# ---------- Chapter shape ----------
@dataclass(frozen=True)
class WithSubchapters:
    titles: Tuple[str, ...]


@dataclass(frozen=True)
class Flat:
    pass


ChapterShape = Union[WithSubchapters, Flat]


def chapter_shape(entry: ChapterIndexEntry) -> ChapterShape:
    """Blank subchapter titles are ignored; none left means the chapter is flat."""
    titles = tuple(t for t in entry.subchapter_titles if t and t.strip())
    if titles:
        return WithSubchapters(titles)
    return Flat()
