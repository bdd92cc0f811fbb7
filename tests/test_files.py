"""
Tests for subtitle file import/export helpers.
"""

import re

import pytest

from srtstudio.utils.files import (
    generate_download_filename,
    output_filename,
    read_subtitle_file,
    sanitize_filename,
    validate_file_metadata,
    write_subtitle_file,
)


class TestValidation:
    def test_valid_srt(self):
        assert validate_file_metadata("episode.SRT", 1024) == (True, "")

    def test_no_file(self):
        assert validate_file_metadata("", 0) == (False, "No file selected.")

    def test_wrong_extension(self):
        is_valid, message = validate_file_metadata("meeting.vtt", 10)

        assert not is_valid
        assert "Only .srt" in message

    def test_too_large(self):
        is_valid, message = validate_file_metadata("big.srt", 3 * 1024 * 1024, max_size_mb=2)

        assert not is_valid
        assert "2MB" in message


class TestFilenames:
    def test_workflow_output_names(self):
        assert output_filename("correction") == "corrected.srt"
        assert output_filename("enhancement") == "optimized.srt"
        assert output_filename("style") == "styled.srt"

    def test_unknown_workflow(self):
        with pytest.raises(ValueError):
            output_filename("translation")

    def test_download_filename(self):
        name = generate_download_filename("my episode.srt", "enhancement")

        assert re.fullmatch(r"my_episode_optimized_\d{8}_\d{6}\.srt", name)

    def test_sanitize_filename(self):
        assert sanitize_filename('a<b>:c?.srt') == "abc.srt"
        assert len(sanitize_filename("x" * 100 + ".srt")) == 64


class TestReadWrite:
    def test_write_blocks_and_read_back(self, tmp_path, sample_srt_content):
        from srtstudio.subtitles.services.srt_processor import parse_srt

        path = write_subtitle_file(parse_srt(sample_srt_content), tmp_path, "correction")

        assert path.name == "corrected.srt"
        assert read_subtitle_file(path) == sample_srt_content

    def test_write_text(self, tmp_path):
        path = write_subtitle_file("1\n00:00:00,000 --> 00:00:01,000\nHi\n", tmp_path / "out", "style")

        assert path == tmp_path / "out" / "styled.srt"
        assert path.read_text(encoding="utf-8").startswith("1\n")

    def test_read_strips_bom(self, tmp_path):
        path = tmp_path / "input.srt"
        path.write_bytes("\ufeff1\n00:00:00,000 --> 00:00:01,000\nHi\n".encode("utf-8"))

        assert read_subtitle_file(path).startswith("1\n")

    def test_read_rejects_other_extensions(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")

        with pytest.raises(ValueError):
            read_subtitle_file(path)
