import json

from extract_sections_cli import main, title_slug

TEXT = "=== PÁGINA 1 ===\nIntroduction\nHello world\n=== PÁGINA 2 ===\nConclusion\nBye"
OUTLINE = [{"chapterTitle": "Introduction"}, {"chapterTitle": "Conclusion", "subchapterTitles": []}]


def _write_inputs(tmp_path, outline_text=None):
    text_path = tmp_path / "doc.txt"
    outline_path = tmp_path / "outline.json"
    text_path.write_text(TEXT, encoding="utf-8")
    outline_path.write_text(outline_text if outline_text is not None else json.dumps(OUTLINE), encoding="utf-8")
    return text_path, outline_path


def test_writes_sections_json_and_files(tmp_path):
    text_path, outline_path = _write_inputs(tmp_path)
    out = tmp_path / "out" / "sections.json"
    files = tmp_path / "out" / "sections"

    rc = main([
        "--text", str(text_path), "--outline", str(outline_path), "--out", str(out),
        "--write-section-files", str(files), "--approx-tokens",
    ])

    assert rc == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert [d["chapterTitle"] for d in data] == ["Introduction", "Conclusion"]
    assert data[0]["subchapter"] == {
        "chapterTitle": "Introduction",
        "title": "Introduction",
        "text": "Hello world",
        "tokenCount": 3,
        "fromPage": 1,
        "toPage": 1,
    }
    names = sorted(p.name for p in files.iterdir())
    assert names == ["001_Introduction.txt", "002_Conclusion.txt"]
    body = (files / "002_Conclusion.txt").read_text(encoding="utf-8")
    assert "Pages: 2" in body
    assert body.endswith("Bye\n")


def test_dry_run_writes_nothing(tmp_path):
    text_path, outline_path = _write_inputs(tmp_path)
    out = tmp_path / "sections.json"
    rc = main(["--text", str(text_path), "--outline", str(outline_path), "--out", str(out), "--approx-tokens", "--dry-run"])
    assert rc == 0
    assert not out.exists()


def test_missing_input_file(tmp_path):
    _, outline_path = _write_inputs(tmp_path)
    assert main(["--text", str(tmp_path / "nope.txt"), "--outline", str(outline_path)]) == 2


def test_invalid_outline_json(tmp_path):
    text_path, outline_path = _write_inputs(tmp_path, outline_text="{broken")
    assert main(["--text", str(text_path), "--outline", str(outline_path), "--approx-tokens"]) == 2


def test_no_sections_extracted(tmp_path):
    text_path, outline_path = _write_inputs(tmp_path, outline_text=json.dumps([{"chapterTitle": "Elsewhere"}]))
    out = tmp_path / "sections.json"
    rc = main(["--text", str(text_path), "--outline", str(outline_path), "--out", str(out), "--approx-tokens"])
    assert rc == 1
    assert json.loads(out.read_text(encoding="utf-8")) == []


def test_rejects_non_positive_chars_per_token(tmp_path):
    text_path, outline_path = _write_inputs(tmp_path)
    args = ["--text", str(text_path), "--outline", str(outline_path), "--approx-tokens", "--chars-per-token", "0"]
    assert main(args) == 2


def test_title_slug():
    assert title_slug("1. Overview: Scope & Goals") == "1._Overview_Scope_Goals"
    assert title_slug("***") == "section"
    assert title_slug("a " * 100, maxlen=10) == "a_a_a_a_a"
