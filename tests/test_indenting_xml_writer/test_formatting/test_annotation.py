"""Tests for hitbox parsing and injection."""

import json
from unittest.mock import Mock

import pytest

from indenting_xml_writer.formatting import (
    AnnotationInjector,
    ElementIdentity,
    Hitbox,
    IndentEngine,
    has_present_hitboxes,
    load_hitboxes,
    parse_hitbox,
    parse_hitboxes,
)
from indenting_xml_writer.shared import AnnotationConfig

OMR_NS = "http://audiveris.org/omr-data"


def write_leaves(writer, contents):
    """Write a root with one leaf per entry; ``None`` leaves stay empty."""
    writer.write_start_element("score-partwise")
    for text in contents:
        writer.write_start_element("note")
        if text is not None:
            writer.write_characters(text)
        writer.write_end_element()
    writer.write_end_element()
    writer.close()


class TestHitboxParsing:
    """Test hitbox construction from JSON values."""

    def test_list_and_mapping_forms(self) -> None:
        """Test list and mapping forms."""
        assert parse_hitbox([1, 2, 3, 4]) == Hitbox(1, 2, 3, 4)
        assert parse_hitbox({"x": 1, "y": 2, "width": 3, "height": 4}) == Hitbox(1, 2, 3, 4)
        assert parse_hitbox(None) is None

    def test_integral_floats_accepted(self) -> None:
        """Test integral floats accepted."""
        assert parse_hitbox([1.0, 2, 3, 4.0]) == Hitbox(1, 2, 3, 4)

    @pytest.mark.parametrize("value,message", [
        ([1, 2, 3], "needs 4 values"),
        ({"x": 1, "y": 2}, "missing width, height"),
        ("1,2,3,4", "Unsupported hitbox value"),
        ([1, 2, "3", 4], "must be a number"),
        ([1, 2, True, 4], "must be a number"),
        ([1, 2, 3.5, 4], "must be an integer"),
    ])
    def test_invalid_values(self, value, message) -> None:
        """Test invalid values."""
        with pytest.raises(ValueError, match=message):
            parse_hitbox(value)

    def test_sequence_reports_index(self) -> None:
        """Test sequence reports index."""
        with pytest.raises(ValueError, match="index 1"):
            parse_hitboxes([None, [1, 2]])

    def test_sequence_must_be_list(self) -> None:
        """Test sequence must be list."""
        with pytest.raises(ValueError, match="must be a list"):
            parse_hitboxes({"x": 1})

    def test_load_from_file(self, tmp_path) -> None:
        """Test load from file."""
        path = tmp_path / "boxes.json"
        path.write_text(json.dumps([[1, 2, 3, 4], None]), encoding="utf-8")

        assert load_hitboxes(path) == [Hitbox(1, 2, 3, 4), None]

    def test_has_present_hitboxes(self) -> None:
        """Test has present hitboxes."""
        assert not has_present_hitboxes(None)
        assert not has_present_hitboxes([])
        assert not has_present_hitboxes([None, None])
        assert has_present_hitboxes([None, Hitbox(0, 0, 1, 1)])


class TestInjection:
    """Test hitbox children written through the formatting writer."""

    def test_nested_leaf_gets_indented_hitbox(self, make_writer, rendered) -> None:
        """Test nested leaf gets indented hitbox."""
        writer = make_writer(
            hitboxes=[Hitbox(1, 2, 3, 4)],
            hitbox_prefix="omr",
            hitbox_namespace="U",
            root_element="S",
            leaf_element="N",
        )
        writer.write_start_element("S")
        writer.write_start_element("P")
        writer.write_start_element("N")
        writer.write_end_element()
        writer.write_end_element()
        writer.write_end_element()
        writer.close()

        assert rendered() == (
            '\n<S xmlns:omr="U">\n  <P>\n    <N>\n'
            '      <omr:hitbox x="1" y="2" width="3" height="4"/>\n'
            '    </N>\n  </P>\n</S>'
        )
        assert writer.statistics.hitboxes_written == 1
        assert writer.statistics.namespace_declared

    def test_absent_slot_skips_leaf(self, make_writer, rendered) -> None:
        """Test absent slot skips leaf."""
        writer = make_writer(
            indent_unit=None,
            hitboxes=[None, Hitbox(5, 6, 7, 8)],
            hitbox_prefix="omr",
            hitbox_namespace=OMR_NS,
        )
        write_leaves(writer, ["a", "b"])

        assert rendered() == (
            f'<score-partwise xmlns:omr="{OMR_NS}">'
            '<note>a</note>'
            '<note><omr:hitbox x="5" y="6" width="7" height="8"/>b</note>'
            '</score-partwise>'
        )
        assert writer.statistics.hitboxes_missing == 1
        assert writer.annotator.cursor == 2

    def test_sequence_shorter_than_leaves(self, make_writer, rendered) -> None:
        """Test sequence shorter than leaves."""
        writer = make_writer(
            indent_unit=None,
            hitboxes=[Hitbox(1, 1, 1, 1)],
            hitbox_prefix="omr",
            hitbox_namespace=OMR_NS,
        )
        write_leaves(writer, ["a", "b"])

        assert rendered().count("omr:hitbox") == 1
        assert rendered().endswith("<note>b</note></score-partwise>")

    def test_empty_leaf_kept_open_for_hitbox(self, make_writer, rendered) -> None:
        """Test empty leaf kept open for hitbox."""
        writer = make_writer(
            indent_unit=None,
            hitboxes=[Hitbox(1, 2, 3, 4)],
            hitbox_prefix="omr",
            hitbox_namespace=OMR_NS,
        )
        write_leaves(writer, [None])

        assert '<note><omr:hitbox x="1" y="2" width="3" height="4"/></note>' in rendered()

    def test_collapsed_leaf_does_not_advance_cursor(self, make_writer, rendered) -> None:
        """Test that an empty leaf collapses without consuming its slot."""
        writer = make_writer(
            indent_unit=None,
            hitboxes=[None, Hitbox(5, 6, 7, 8)],
            hitbox_prefix="omr",
            hitbox_namespace=OMR_NS,
        )
        writer.write_start_element("score-partwise")
        writer.write_start_element("note")
        writer.write_end_element()

        assert writer.annotator.cursor == 0

        writer.write_start_element("note")
        writer.write_characters("b")
        writer.write_end_element()
        writer.write_end_element()
        writer.close()

        assert rendered() == (
            f'<score-partwise xmlns:omr="{OMR_NS}"><note/><note>b</note></score-partwise>'
        )
        assert writer.annotator.cursor == 1
        assert writer.statistics.hitboxes_missing == 1
        assert writer.statistics.hitboxes_written == 0

    def test_cursor_counts_every_real_leaf(self, make_writer) -> None:
        """Test that the cursor keeps advancing past the end of the sequence."""
        writer = make_writer(
            indent_unit=None,
            hitboxes=[Hitbox(1, 1, 1, 1)],
            hitbox_prefix="omr",
            hitbox_namespace=OMR_NS,
        )
        write_leaves(writer, ["a", "b", "c"])

        assert writer.annotator.cursor == 3
        assert writer.statistics.hitboxes_written == 1
        assert writer.statistics.hitboxes_missing == 2

    def test_text_after_hitbox_keeps_end_tag_on_own_line(self, make_writer, rendered) -> None:
        """Test indentation of an annotated leaf that also holds text."""
        writer = make_writer(
            hitboxes=[Hitbox(1, 2, 3, 4)],
            hitbox_prefix="omr",
            hitbox_namespace="U",
            root_element="S",
            leaf_element="N",
        )
        writer.write_start_element("S")
        writer.write_start_element("N")
        writer.write_characters("t")
        writer.write_end_element()
        writer.write_end_element()
        writer.close()

        assert rendered() == (
            '\n<S xmlns:omr="U">\n  <N>\n'
            '    <omr:hitbox x="1" y="2" width="3" height="4"/>t\n'
            '  </N>\n</S>'
        )

    def test_leaf_attributes_follow_injected_hitbox(self, make_writer, rendered) -> None:
        """Test leaf attributes follow injected hitbox."""
        writer = make_writer(
            indent_unit=None,
            hitboxes=[Hitbox(1, 2, 3, 4)],
            hitbox_prefix="omr",
            hitbox_namespace="U",
            root_element="S",
        )
        writer.write_start_element("S")
        writer.write_start_element("note")
        writer.write_attribute("default-x", "5")
        writer.write_characters("x")
        writer.write_end_element()
        writer.write_end_element()
        writer.close()

        assert rendered() == (
            '<S xmlns:omr="U"><note>'
            '<omr:hitbox x="1" y="2" width="3" height="4" default-x="5"/>'
            'x</note></S>'
        )

    def test_no_present_hitboxes_writes_nothing(self, make_writer, rendered) -> None:
        """Test no present hitboxes writes nothing."""
        writer = make_writer(
            indent_unit=None,
            hitboxes=[None],
            hitbox_prefix="omr",
            hitbox_namespace=OMR_NS,
        )
        write_leaves(writer, ["a"])

        assert rendered() == "<score-partwise><note>a</note></score-partwise>"
        assert not writer.annotator.enabled

    def test_missing_namespace_disables_injection(self, make_writer, rendered) -> None:
        """Test missing namespace disables injection."""
        writer = make_writer(indent_unit=None, hitboxes=[Hitbox(1, 2, 3, 4)])
        write_leaves(writer, ["a"])

        assert "hitbox" not in rendered()


class TestAnnotationInjector:
    """Test the injector in isolation."""

    def test_namespace_declared_once(self) -> None:
        """Test namespace declared once."""
        writer = Mock()
        injector = AnnotationInjector(
            writer, IndentEngine(writer, None), [Hitbox(0, 0, 1, 1)], "omr", OMR_NS
        )

        injector.after_start(ElementIdentity("score-partwise"))
        injector.after_start(ElementIdentity("score-partwise"))

        writer.write_namespace.assert_called_once_with("omr", OMR_NS)

    def test_requires_content_only_for_due_leaf(self) -> None:
        """Test requires content only for due leaf."""
        writer = Mock()
        injector = AnnotationInjector(
            writer, IndentEngine(writer, None), [Hitbox(0, 0, 1, 1), None], "omr", OMR_NS
        )

        assert injector.requires_content(ElementIdentity("note"))
        assert not injector.requires_content(ElementIdentity("rest"))

        injector.after_start(ElementIdentity("note"))
        assert not injector.requires_content(ElementIdentity("note"))

    def test_from_config(self) -> None:
        """Test building the injector from an annotation configuration."""
        writer = Mock()
        config = AnnotationConfig(prefix="omr", namespace_uri=OMR_NS, leaf_element="chord")
        injector = AnnotationInjector.from_config(
            writer, IndentEngine(writer, None), [Hitbox(0, 0, 1, 1)], config
        )

        assert injector.enabled
        assert injector.leaf_element == "chord"
        assert injector.peek() == Hitbox(0, 0, 1, 1)
