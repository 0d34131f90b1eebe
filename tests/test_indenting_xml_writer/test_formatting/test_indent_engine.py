"""Tests for the indentation state machine."""

from unittest.mock import Mock

from indenting_xml_writer.formatting import IndentEngine


class TestIndentEngine:
    """Test newline and level tracking."""

    def test_before_start_writes_newline_then_increments(self) -> None:
        """Test before start writes newline then increments."""
        writer = Mock()
        engine = IndentEngine(writer, "  ")

        engine.before_start()
        engine.before_start()

        assert [c.args[0] for c in writer.write_characters.call_args_list] == ["\n", "\n  "]
        assert engine.level == 2
        assert engine.closing is False

    def test_first_close_after_open_writes_nothing(self) -> None:
        """Test first close after open writes nothing."""
        writer = Mock()
        engine = IndentEngine(writer, "  ")
        engine.before_start()
        writer.reset_mock()

        engine.before_end()

        writer.write_characters.assert_not_called()
        assert engine.level == 0
        assert engine.closing is True

    def test_consecutive_closes_get_own_lines(self) -> None:
        """Test consecutive closes get own lines."""
        writer = Mock()
        engine = IndentEngine(writer, "\t")
        engine.before_start()
        engine.before_start()
        engine.before_end()
        writer.reset_mock()

        engine.before_end()

        writer.write_characters.assert_called_once_with("\n")
        assert engine.level == 0

    def test_comment_uses_current_level(self) -> None:
        """Test comment uses current level."""
        writer = Mock()
        engine = IndentEngine(writer, "  ")
        engine.before_start()
        writer.reset_mock()

        engine.before_comment()

        writer.write_characters.assert_called_once_with("\n  ")

    def test_level_never_goes_negative(self) -> None:
        """Test level never goes negative."""
        engine = IndentEngine(Mock(), "  ")
        engine.before_end()
        assert engine.level == 0

    def test_disabled_engine_is_inert(self) -> None:
        """Test disabled engine is inert."""
        writer = Mock()
        engine = IndentEngine(writer, None)

        engine.before_start()
        engine.before_end()
        engine.before_comment()

        assert not engine.enabled
        assert engine.level == 0
        writer.write_characters.assert_not_called()
