#!/usr/bin/env python3
"""
Outline Parsing

The outline usually arrives as JSON from the chaptering step, sometimes
wrapped in ```json fences, either as a bare list or as {"index": [...]}.
These functions turn it into ChapterIndexEntry values and report bad items
instead of guessing at them.
"""

from __future__ import annotations
import json
import re
from typing import Any, Iterable, List, Mapping, Tuple

from section_models import ChapterIndexEntry

JSON_FENCE_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)

TITLE_KEYS = ("chapterTitle", "chapter_title", "ChapterTitle", "titulo", "Titulo", "title")
SUBCHAPTER_KEYS = ("subchapterTitles", "subchapter_titles", "Subchapters", "subchapters")
WRAPPER_KEYS = ("index", "Index", "indice", "chapters")


class OutlineParseError(ValueError):
    pass


def _first_present(item: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for k in keys:
        if k in item:
            return item[k]
    return None


def parse_chapter_entry(item: Any, position: int = 0) -> ChapterIndexEntry:
    """
    Args:
        item: a ChapterIndexEntry or a mapping with a chapter title and an
              optional list of subchapter titles
        position: index of the item in the outline, used in error messages

    Raises:
        OutlineParseError: the item has no usable title or malformed subchapters
    """
    if isinstance(item, ChapterIndexEntry):
        if not item.chapter_title or not item.chapter_title.strip():
            raise OutlineParseError(f"outline item {position}: empty chapter title")
        return item
    if not isinstance(item, Mapping):
        raise OutlineParseError(f"outline item {position}: expected an object, got {type(item).__name__}")

    title = _first_present(item, TITLE_KEYS)
    if not isinstance(title, str) or not title.strip():
        raise OutlineParseError(f"outline item {position}: missing or empty chapter title")

    subs = _first_present(item, SUBCHAPTER_KEYS)
    if subs is None:
        subs = []
    if isinstance(subs, str) or not isinstance(subs, (list, tuple)):
        raise OutlineParseError(f"outline item {position} ({title!r}): subchapters must be a list")

    titles: List[str] = []
    for j, s in enumerate(subs):
        if isinstance(s, Mapping):
            s = _first_present(s, ("title", "Title", "titulo"))
        if not isinstance(s, str):
            raise OutlineParseError(f"outline item {position} ({title!r}): subchapter {j} is not a string")
        if s.strip():
            titles.append(s.strip())
    return ChapterIndexEntry(chapter_title=title.strip(), subchapter_titles=tuple(titles))


def parse_outline(items: Any) -> Tuple[List[ChapterIndexEntry], List[str]]:
    """Parse every item; return (entries, errors). Never raises."""
    if isinstance(items, Mapping):
        wrapped = _first_present(items, WRAPPER_KEYS)
        items = wrapped if wrapped is not None else [items]
    if items is None or isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
        return [], [f"outline must be a list, got {type(items).__name__}"]

    entries: List[ChapterIndexEntry] = []
    errors: List[str] = []
    for i, item in enumerate(items):
        try:
            entries.append(parse_chapter_entry(item, i))
        except OutlineParseError as e:
            errors.append(str(e))
    return entries, errors


def load_outline_text(content: str) -> Any:
    """Decode outline JSON, unwrapping a ```json fenced block if present."""
    m = JSON_FENCE_RE.search(content)
    json_str = m.group(1) if m else content
    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        raise OutlineParseError(f"outline is not valid JSON: {e}") from e
