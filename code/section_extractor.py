#!/usr/bin/env python3
"""
Section Extraction

Drives the per-chapter loop: split pages once, locate each outline chapter,
segment it by subchapters (or as one flat segment), and collect the results
together with an ExtractionReport describing what was and wasn't found.

Nothing in here raises to the caller. Bad input gives an empty list; a
chapter that can't be located is left out and logged.
"""

from __future__ import annotations
import difflib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

from chapter_locator import locate_chapter_span, render_span
from chapterless_segmenter import CHAPTER_HEADER_WINDOW, segment_flat_chapter
from outline_parser import parse_outline
from page_splitter import split_pages
from section_models import ChapterIndexEntry, Flat, PageBlock, SectionResult, WithSubchapters, chapter_shape
from subchapter_segmenter import segment_subchapters
from title_matcher import normalize_title
from token_counter import SafeTokenCounter, TokenCountFn

log = logging.getLogger(__name__)

KEYWORD_MATCH_RATIO = 0.7
MAX_DIAGNOSTIC_LINES = 3


# ---------- Diagnostics ----------
@dataclass
class ExtractionReport:
    declared_chapters: int = 0
    located_chapters: List[str] = field(default_factory=list)
    missing_chapters: List[str] = field(default_factory=list)
    # located chapters whose following outline chapter was not found
    open_ended_chapters: List[str] = field(default_factory=list)
    # (chapter title, found, declared) for chapters with subchapters
    subchapter_counts: List[Tuple[str, int, int]] = field(default_factory=list)
    outline_errors: List[str] = field(default_factory=list)
    token_counter_failures: int = 0
    stopped_early: bool = False

    @property
    def empty_chapters(self) -> List[str]:
        """Located chapters in which none of the declared subchapters was found."""
        return [t for t, found, declared in self.subchapter_counts if declared and not found]

    @property
    def represented_chapters(self) -> List[str]:
        empty = set(self.empty_chapters)
        return [t for t in self.located_chapters if t not in empty]

    @property
    def unrepresented_chapters(self) -> List[str]:
        return self.missing_chapters + self.empty_chapters

    def summary_line(self) -> str:
        line = f"chapters represented: {len(self.represented_chapters)}/{self.declared_chapters}"
        missing = self.unrepresented_chapters
        if missing:
            line += "; missing: " + ", ".join(repr(t) for t in missing)
        if self.open_ended_chapters:
            line += "; open-ended: " + ", ".join(repr(t) for t in self.open_ended_chapters)
        if self.token_counter_failures:
            line += f"; token counter failures: {self.token_counter_failures}"
        if self.stopped_early:
            line += "; stopped early"
        return line


def keyword_candidates(pages: Sequence[PageBlock], title: str, limit: int = MAX_DIAGNOSTIC_LINES) -> List[Tuple[int, str]]:
    """Lines sharing most of the title's words: (page, line) pairs, for logs only."""
    words = normalize_title(title).split()
    if not words:
        return []
    out: List[Tuple[int, str]] = []
    for block in pages:
        for line in block.lines:
            norm = normalize_title(line)
            if not norm:
                continue
            hits = sum(1 for w in words if w in norm)
            if hits / len(words) >= KEYWORD_MATCH_RATIO:
                out.append((block.page_number, line.strip()))
                if len(out) >= limit:
                    return out
    return out


def closest_line(pages: Sequence[PageBlock], title: str) -> Optional[Tuple[int, str, float]]:
    target = normalize_title(title)
    best = None; best_ratio = -1.0
    for block in pages:
        for line in block.lines:
            norm = normalize_title(line)
            if not norm:
                continue
            ratio = difflib.SequenceMatcher(None, target, norm).ratio()
            if ratio > best_ratio:
                best_ratio, best = ratio, (block.page_number, line.strip(), ratio)
    return best


def log_missing_chapter(pages: Sequence[PageBlock], title: str):
    log.warning("[miss] chapter not found: %r", title)
    for page, line in keyword_candidates(pages, title):
        log.warning("[miss]   partial keyword match on page %d: %r", page, line)
    near = closest_line(pages, title)
    if near:
        log.warning("[miss]   closest line on page %d: %r (ratio %.2f)", near[0], near[1], near[2])


# ---------- Extraction ----------
class SectionExtractor:
    def __init__(self, count_tokens: Optional[TokenCountFn] = None, header_window: int = CHAPTER_HEADER_WINDOW):
        """
        Args:
            count_tokens: text -> token count; defaults to tiktoken. Wrapped so
                          a failing counter yields 0 instead of an exception.
            header_window: non-marker lines searched for a flat chapter's heading
        """
        if isinstance(count_tokens, SafeTokenCounter):
            self.count_tokens = count_tokens
        else:
            self.count_tokens = SafeTokenCounter(count_tokens)
        self.header_window = header_window

    def extract(self, raw_text: str, outline: Any, should_stop: Optional[Callable[[], bool]] = None) -> List[SectionResult]:
        return self.extract_with_report(raw_text, outline, should_stop)[0]

    def extract_with_report(
        self, raw_text: str, outline: Any, should_stop: Optional[Callable[[], bool]] = None
    ) -> Tuple[List[SectionResult], ExtractionReport]:
        try:
            return self._run(raw_text, outline, should_stop)
        except Exception:
            log.exception("[error] section extraction failed; returning no sections")
            return [], ExtractionReport()

    def _run(
        self, raw_text: str, outline: Any, should_stop: Optional[Callable[[], bool]]
    ) -> Tuple[List[SectionResult], ExtractionReport]:
        report = ExtractionReport()
        results: List[SectionResult] = []

        if not raw_text or not raw_text.strip():
            log.warning("[skip] empty document text")
            return results, report
        if not outline:
            log.warning("[skip] empty outline")
            return results, report

        entries, errors = parse_outline(outline)
        report.outline_errors = errors
        for err in errors:
            log.warning("[warn] %s", err)
        if not entries:
            log.warning("[skip] outline has no usable chapters")
            return results, report
        report.declared_chapters = len(entries)

        pages = split_pages(raw_text)
        if not pages:
            log.warning("[warn] no page markers found; chapters cannot be located")
        failures_before = self.count_tokens.failures

        for i, entry in enumerate(entries):
            if should_stop is not None and should_stop():
                report.stopped_early = True
                log.info("stop requested after %d/%d chapters", i, len(entries))
                break
            next_entry = entries[i + 1] if i + 1 < len(entries) else None
            results.extend(self._extract_chapter(pages, entry, next_entry, report))

        report.token_counter_failures = self.count_tokens.failures - failures_before
        log.info("[ok] %s", report.summary_line())
        return results, report

    def _extract_chapter(
        self, pages: Sequence[PageBlock], entry: ChapterIndexEntry,
        next_entry: Optional[ChapterIndexEntry], report: ExtractionReport
    ) -> List[SectionResult]:
        span = locate_chapter_span(pages, entry, next_entry)
        if span is None:
            report.missing_chapters.append(entry.chapter_title)
            log_missing_chapter(pages, entry.chapter_title)
            return []
        report.located_chapters.append(entry.chapter_title)
        if next_entry is not None and not span.end_found:
            report.open_ended_chapters.append(entry.chapter_title)
            log.warning("[warn] chapter %r runs to end of document: next chapter %r not found after it",
                        entry.chapter_title, next_entry.chapter_title)
        content = render_span(pages, span)

        shape = chapter_shape(entry)
        if isinstance(shape, WithSubchapters):
            outcome = segment_subchapters(entry, content, self.count_tokens)
            report.subchapter_counts.append((entry.chapter_title, outcome.found, outcome.declared))
            log.info("chapter %r: %d/%d subchapters found", entry.chapter_title, outcome.found, outcome.declared)
            return outcome.results
        if isinstance(shape, Flat):
            result = segment_flat_chapter(entry, content, self.count_tokens, self.header_window)
            log.info("chapter %r: pages %d-%d, %d tokens", entry.chapter_title,
                     result.from_page, result.to_page, result.subchapter.token_count)
            return [result]
        raise TypeError(f"unknown chapter shape: {shape!r}")


def extract_sections_with_report(
    raw_text: str, outline: Any, count_tokens: Optional[TokenCountFn] = None,
    should_stop: Optional[Callable[[], bool]] = None
) -> Tuple[List[SectionResult], ExtractionReport]:
    return SectionExtractor(count_tokens).extract_with_report(raw_text, outline, should_stop)


def extract_sections(raw_text: str, outline: Any, count_tokens: Optional[TokenCountFn] = None) -> List[SectionResult]:
    return SectionExtractor(count_tokens).extract(raw_text, outline)
