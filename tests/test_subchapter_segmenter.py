from section_models import ChapterIndexEntry
from subchapter_segmenter import find_subchapter_lines, segment_subchapters

CONTENT = (
    "=== PÁGINA 4 ===\n"
    "Chapter One\n"
    "preamble\n"
    "1. Overview\n"
    "ov1\n"
    "ov2\n"
    "=== PÁGINA 5 ===\n"
    "ov3\n"
    "2. Details\n"
    "d1\n"
    "=== PÁGINA 6 ===\n"
    "d2"
)


def _entry(*titles):
    return ChapterIndexEntry("Chapter One", tuple(titles))


class TestSegmentSubchapters:
    def test_segments_in_order_with_pages_and_tokens(self, word_counter):
        outcome = segment_subchapters(_entry("1. Overview", "2. Details"), CONTENT, word_counter)
        assert outcome.found == 2 and outcome.declared == 2
        first, second = (r.subchapter for r in outcome.results)

        assert first.title == "1. Overview"
        assert first.text == "ov1\nov2\nov3"
        assert (first.from_page, first.to_page) == (4, 5)
        assert first.token_count == 3

        assert second.title == "2. Details"
        assert second.text == "d1\nd2"
        assert (second.from_page, second.to_page) == (5, 6)
        assert outcome.results[1].from_page == 5
        assert all(r.chapter_title == "Chapter One" for r in outcome.results)

    def test_segments_partition_chapter_lines(self, word_counter):
        outcome = segment_subchapters(_entry("1. Overview", "2. Details"), CONTENT, word_counter)
        joined = "\n".join(r.subchapter.text for r in outcome.results)
        assert joined == "ov1\nov2\nov3\nd1\nd2"

    def test_physical_order_wins_over_outline_order(self, word_counter):
        outcome = segment_subchapters(_entry("2. Details", "1. Overview"), CONTENT, word_counter)
        assert [r.subchapter.title for r in outcome.results] == ["1. Overview", "2. Details"]

    def test_missing_subchapter_is_skipped(self, word_counter):
        outcome = segment_subchapters(_entry("1. Overview", "3. Appendix", "2. Details"), CONTENT, word_counter)
        assert outcome.found == 2
        assert outcome.declared == 3
        assert outcome.missing == ["3. Appendix"]

    def test_bare_heading_matches_numbered_title(self, word_counter):
        content = "=== PÁGINA 1 ===\nGuide\nOverview\ntext here"
        outcome = segment_subchapters(ChapterIndexEntry("Guide", ("1. Overview",)), content, word_counter)
        assert [r.subchapter.text for r in outcome.results] == ["text here"]

    def test_heading_without_body_uses_heading_page(self, word_counter):
        content = "=== PÁGINA 2 ===\nCh\n1. A\na\n=== PÁGINA 3 ===\n2. B"
        outcome = segment_subchapters(ChapterIndexEntry("Ch", ("1. A", "2. B")), content, word_counter)
        last = outcome.results[-1].subchapter
        assert last.text == ""
        assert last.token_count == 0
        assert (last.from_page, last.to_page) == (3, 3)
        # the marker that opens page 3 does not stretch the previous segment
        assert (outcome.results[0].from_page, outcome.results[0].to_page) == (2, 2)

    def test_no_page_markers_defaults_to_page_one(self, word_counter):
        outcome = segment_subchapters(ChapterIndexEntry("Ch", ("1. A",)), "Ch\n1. A\nbody", word_counter)
        assert (outcome.results[0].from_page, outcome.results[0].to_page) == (1, 1)

    def test_no_subchapter_found(self, word_counter):
        outcome = segment_subchapters(_entry("Nowhere"), CONTENT, word_counter)
        assert outcome.results == []
        assert outcome.found == 0 and outcome.declared == 1


def test_two_titles_on_one_line_keep_the_earlier_outline_entry():
    lines = ["Chapter", "1. Overview", "text"]
    assert find_subchapter_lines(lines, ["Overview", "1. Overview"]) == [(1, "Overview")]


def test_partition_keeps_blank_and_indented_lines(word_counter):
    content = "=== PÁGINA 1 ===\nCh\n1. A\n  a1\n\n2. B\n\n    b1\n"
    outcome = segment_subchapters(ChapterIndexEntry("Ch", ("1. A", "2. B")), content, word_counter)
    texts = [r.subchapter.text for r in outcome.results]
    assert texts == ["  a1\n", "\n    b1"]
    assert "\n".join(texts) == "  a1\n\n\n    b1"
