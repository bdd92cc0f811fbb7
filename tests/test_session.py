"""
Tests for workflow session state.
"""

import pytest

from srtstudio.exceptions import SessionBusyError
from srtstudio.subtitles.models import BlockRange, RunStatus
from srtstudio.subtitles.session import CorrectionSession, EnhancementSession, WorkflowSession


class TestWorkflowSession:
    def test_edit_block(self, make_blocks):
        session = WorkflowSession(blocks=make_blocks(3))

        assert session.edit_block(2, "Edited") is True
        assert session.blocks[1].text == "Edited"
        assert session.edit_block(9, "Nope") is False

    def test_renumber(self, make_blocks):
        blocks = make_blocks(3)
        blocks[0].id, blocks[1].id, blocks[2].id = 4, 8, 15
        session = WorkflowSession(blocks=blocks)

        session.renumber()

        assert [b.id for b in session.blocks] == [1, 2, 3]

    def test_clear(self, make_blocks):
        session = WorkflowSession(blocks=make_blocks(2), status=RunStatus.FAILED, error="boom")

        session.clear()

        assert session.blocks == []
        assert session.status is RunStatus.IDLE
        assert session.error is None

    def test_duration_and_export(self, make_blocks):
        session = WorkflowSession(blocks=make_blocks(2))

        assert session.duration() == "00:00:04"
        assert session.to_srt().count("-->") == 2

    @pytest.mark.asyncio
    async def test_exclusive_rejects_second_writer(self):
        session = WorkflowSession()

        async with session.exclusive("first"):
            assert session.busy
            with pytest.raises(SessionBusyError):
                async with session.exclusive("second"):
                    pass

        assert not session.busy


class TestCorrectionSession:
    def test_load_text_sets_default_range(self):
        session = CorrectionSession(max_chars=3, range_window=2)

        session.load_text("aaa\n\nbbb\n\nccc")

        assert len(session.chunks) == 3
        assert session.range == BlockRange(1, 2)

    def test_set_max_chars_resets_range(self):
        session = CorrectionSession(max_chars=3)
        session.load_text("aaa\n\nbbb\n\nccc")
        session.set_range(3, 3)

        session.set_max_chars(5000)

        assert len(session.chunks) == 1
        assert session.range == BlockRange(1, 1)

    def test_input_duration(self):
        session = CorrectionSession()
        session.load_text("a" * 30)

        assert session.input_duration() == "00:00:02"


class TestEnhancementSession:
    def test_load_srt_resets_state(self, sample_srt_content):
        session = EnhancementSession(error_count=4, processed_count=9)

        session.load_srt(sample_srt_content)

        assert [b.id for b in session.blocks] == [1, 2, 3]
        assert session.range == BlockRange(1, 3)
        assert session.error_count == 0
        assert session.processed_count == 0


class TestSessionDefaults:
    def test_defaults_follow_settings(self, monkeypatch):
        from srtstudio.config import Settings
        from srtstudio.subtitles import session as session_module

        monkeypatch.setattr(
            session_module,
            "settings",
            Settings(chunk_max_chars=1200, enhancement_batch_size=5, range_window=3),
        )

        assert CorrectionSession().max_chars == 1200
        assert EnhancementSession().batch_size == 5
        assert WorkflowSession().range_window == 3

    def test_load_uses_configured_window(self, monkeypatch, make_blocks):
        from srtstudio.config import Settings
        from srtstudio.subtitles import session as session_module

        monkeypatch.setattr(session_module, "settings", Settings(range_window=3))
        session = EnhancementSession()

        session.load_blocks(make_blocks(10))

        assert session.range == BlockRange(1, 3)
