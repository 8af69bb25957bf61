# extract_sections_cli.py  (v1.0)
# Python 3.9+ | tiktoken for token counts.
# Features:
# - Outline-driven chapter/subchapter extraction from page-marked text
# - sections.json with a stable camelCase schema
# - Optional per-section .txt files with a metadata header
# - Run summary and per-chapter diagnostics through logging

from __future__ import annotations
import argparse, json, logging, os, re, sys, unicodedata
from pathlib import Path
from typing import List, Optional

from chapterless_segmenter import CHAPTER_HEADER_WINDOW
from outline_parser import OutlineParseError, load_outline_text
from section_extractor import SectionExtractor
from section_models import SectionResult
from token_counter import DEFAULT_ENCODING, ApproxTokenCounter, TiktokenCounter

APP_VERSION = "1.0"
SCHEMA_VERSION = "1.0"

DEFAULT_LOG_LEVEL = os.environ.get("SECTION_EXTRACTOR_LOG_LEVEL", "INFO").upper()

log = logging.getLogger("extract_sections")


SLUG_DROP_RE = re.compile(r"[^\w\s.-]+")


def title_slug(title: str, maxlen: int = 80) -> str:
    """File-name-safe form of a section title; "section" when nothing survives."""
    words = SLUG_DROP_RE.sub("", unicodedata.normalize("NFKC", title)).split()
    return "_".join(words)[:maxlen].rstrip("_") or "section"


def section_file_name(index: int, result: SectionResult) -> str:
    return f"{index:03d}_{title_slug(result.subchapter.title)}.txt"


def format_section_file(result: SectionResult) -> str:
    seg = result.subchapter
    pages = f"{seg.from_page}" if seg.from_page == seg.to_page else f"{seg.from_page}-{seg.to_page}"
    meta_lines = [
        f"Chapter: {result.chapter_title}",
        f"Title: {seg.title}",
        f"Pages: {pages}",
        f"Token Count: {seg.token_count}",
        "=" * 50,
        "",
    ]
    return "\n".join(meta_lines) + seg.text + "\n"


def save_sections(results: List[SectionResult], out_path: Path, files_dir: Optional[Path] = None):
    out_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [r.to_dict() for r in results]
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)

    if files_dir is not None:
        files_dir.mkdir(parents=True, exist_ok=True)
        for i, r in enumerate(results, start=1):
            (files_dir / section_file_name(i, r)).write_text(format_section_file(r), encoding="utf-8")
    log.info("Saved %d sections to %s", len(results), out_path)


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Extract chapter/subchapter sections from page-marked text using an outline.")
    ap.add_argument("--text", type=Path, required=True, help="Raw text with '=== PÁGINA N ===' markers")
    ap.add_argument("--outline", type=Path, required=True, help="Outline JSON (list, or object with 'index')")
    ap.add_argument("--out", type=Path, default=Path("sections.json"))
    ap.add_argument("--write-section-files", type=Path, metavar="DIR", help="Write one .txt per section under DIR")
    ap.add_argument("--text-encoding", default="utf-8", help="Encoding of --text and --outline files")
    ap.add_argument("--dry-run", action="store_true")
    ap.add_argument("--log-level", default=DEFAULT_LOG_LEVEL, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    # token counting knobs
    ap.add_argument("--encoding", default=DEFAULT_ENCODING, help="tiktoken encoding name")
    ap.add_argument("--approx-tokens", action="store_true", help="Estimate tokens from length instead of tiktoken")
    ap.add_argument("--chars-per-token", type=float, default=4.0, help="Approx chars per token")
    ap.add_argument("--header-window", type=int, default=CHAPTER_HEADER_WINDOW,
                    help="Lines searched for a flat chapter's heading")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(message)s", stream=sys.stderr)

    if args.chars_per_token <= 0:
        log.error("--chars-per-token must be positive: %s", args.chars_per_token); return 2
    if not args.text.is_file():
        log.error("Text file not found: %s", args.text); return 2
    if not args.outline.is_file():
        log.error("Outline file not found: %s", args.outline); return 2

    raw_text = args.text.read_text(encoding=args.text_encoding, errors="replace")
    try:
        outline = load_outline_text(args.outline.read_text(encoding=args.text_encoding, errors="replace"))
    except OutlineParseError as e:
        log.error("%s", e); return 2

    counter = ApproxTokenCounter(args.chars_per_token) if args.approx_tokens else TiktokenCounter(args.encoding)
    extractor = SectionExtractor(counter, header_window=args.header_window)
    results, report = extractor.extract_with_report(raw_text, outline)

    if not args.dry_run:
        save_sections(results, args.out, args.write_section_files)

    log.info("[ok] %s -> %s: %d sections (v%s, schema %s)", args.text.name, args.out, len(results), APP_VERSION, SCHEMA_VERSION)
    if report.outline_errors:
        log.warning("%d outline items were skipped", len(report.outline_errors))
    return 0 if results else 1


if __name__ == "__main__":
    sys.exit(main())
