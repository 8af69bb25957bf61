#!/usr/bin/env python3
"""
Title Matcher

Decides whether a text line is the heading for an outline title. Tiers are
tried in order and the first success wins:

1. exact match (trimmed, case-insensitive)
2. substring containment (case-insensitive)
3. normalized match: punctuation -> space, whitespace collapsed, upper-cased

Subchapter headings get one more chance with a leading enumerator
("1.", "2.3", "IV.", "(a)") stripped from both sides.
"""

from __future__ import annotations
import re
import unicodedata

# ---------- Regex / heuristics ----------
NON_WORD_RE = re.compile(r"[^\w\s]|_")
WS_RE = re.compile(r"\s+")

ENUMERATOR_RE = re.compile(
    r"^\s*("
    r"(?:\d+(?:\.\d+)*\.?)|"      # 1, 1., 1.2, 1.2.
    r"(?:[IVXLCDM]+\.)|"          # I., II., ...
    r"(?:[A-Z]\.)|"               # A., B., ...
    r"(?:\(\d+\))|"               # (1)
    r"(?:\([A-Za-z]\))"           # (a), (A)
    r")\s+"
)


def normalize_title(s: str) -> str:
    s = unicodedata.normalize("NFKC", s or "")
    s = NON_WORD_RE.sub(" ", s)
    s = WS_RE.sub(" ", s).strip()
    return s.upper()


def strip_enumerator(s: str) -> str:
    return ENUMERATOR_RE.sub("", s or "", count=1).strip()


def matches_title(line: str, title: str) -> bool:
    line_s = (line or "").strip()
    title_s = (title or "").strip()
    if not line_s or not title_s:
        return False

    line_cf = line_s.casefold()
    title_cf = title_s.casefold()
    if line_cf == title_cf:
        return True
    if title_cf in line_cf:
        return True

    norm_title = normalize_title(title_s)
    return bool(norm_title) and normalize_title(line_s) == norm_title


def matches_subchapter_title(line: str, title: str) -> bool:
    if matches_title(line, title):
        return True
    bare_line = strip_enumerator(line)
    bare_title = strip_enumerator(title)
    if bare_line == (line or "").strip() and bare_title == (title or "").strip():
        return False
    return matches_title(bare_line, bare_title)
