"""Tests for batch file parsing and bookkeeping."""

from etl.batch import BatchLog, BatchResult, split_json_blocks, parse_places_blocks, has_downloaded_photos


class TestSplitJsonBlocks:
    """Test top-level JSON object splitting."""

    def test_multiple_blocks(self):
        text = '{ "places": [ {"slug": "a"} ] }\n\n{ "places": [] }'

        assert split_json_blocks(text) == ['{ "places": [ {"slug": "a"} ] }', '{ "places": [] }']

    def test_braces_inside_strings(self):
        text = '{"note": "use {curly} braces", "q": "say \\"}\\" now"}{"b": 1}'

        blocks = split_json_blocks(text)

        assert blocks == ['{"note": "use {curly} braces", "q": "say \\"}\\" now"}', '{"b": 1}']

    def test_text_between_blocks_is_ignored(self):
        assert split_json_blocks('// batch 1\n{"a": 1}\n,\n{"b": 2}') == ['{"a": 1}', '{"b": 2}']

    def test_stray_closing_brace(self):
        assert split_json_blocks('}{"a": 1}') == ['{"a": 1}']


class TestParsePlacesBlocks:
    """Test reading batch files."""

    def test_flattens_places_and_skips_malformed(self, tmp_path, capsys):
        path = tmp_path / "batch.json"
        path.write_text(
            '{"places": [{"slug": "a"}, {"slug": "b"}]}\n'
            '{"places": [oops]}\n'
            '{"places": [{"slug": "c"}]}\n'
            '{"other": 1}\n',
            encoding="utf-8",
        )

        places = parse_places_blocks(str(path))

        assert [p["slug"] for p in places] == ["a", "b", "c"]
        assert "Skipping malformed JSON block" in capsys.readouterr().out

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("  \n", encoding="utf-8")

        assert parse_places_blocks(str(path)) == []


class TestPhotos:
    """Test the downloaded-photo check."""

    def test_has_downloaded_photos(self, tmp_path):
        assert has_downloaded_photos(str(tmp_path)) is False

        (tmp_path / "reviewer_1.jpg").write_bytes(b"")
        assert has_downloaded_photos(str(tmp_path)) is False

        (tmp_path / "photo_3.JPG").write_bytes(b"")
        assert has_downloaded_photos(str(tmp_path)) is True

    def test_missing_folder(self, tmp_path):
        assert has_downloaded_photos(str(tmp_path / "nope")) is False


class TestBatchLog:
    """Test the batch log file."""

    def test_appends_timestamped_lines(self, tmp_path, capsys):
        log = BatchLog(str(tmp_path / "batch_log.txt"))

        log("first")
        log("second")

        lines = (tmp_path / "batch_log.txt").read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("[") and lines[0].endswith("] first")
        assert "second" in capsys.readouterr().out


class TestBatchResult:
    """Test batch result bookkeeping."""

    def test_summary(self):
        result = BatchResult(total=3, success=1)
        result.fail("a", "missing google_place_id")
        result.fail("b", "sync failed (boom)")

        assert result.summary() == "Done! 3 total (1 success, 2 failed)"
        assert result.failures[0] == {"slug": "a", "reason": "missing google_place_id"}
