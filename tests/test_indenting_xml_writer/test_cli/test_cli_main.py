"""Tests for the CLI main module."""

import json
from unittest.mock import patch

import pytest

from indenting_xml_writer.cli.main import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    create_argument_parser,
    load_config,
    main,
)
from indenting_xml_writer.shared import OMR_HITBOX_NAMESPACE, OMR_HITBOX_PREFIX

SCORE = "<score-partwise><part><measure><note><rest/></note></measure></part></score-partwise>"


@pytest.fixture
def score_file(tmp_path):
    path = tmp_path / "score.xml"
    path.write_text(SCORE, encoding="utf-8")
    return path


@pytest.fixture
def hitbox_file(tmp_path):
    path = tmp_path / "hitboxes.json"
    path.write_text(json.dumps([{"x": 10, "y": 20, "width": 30, "height": 40}]), encoding="utf-8")
    return path


class TestLoadConfig:
    """Test effective configuration built from arguments."""

    def parse(self, *argv):
        return create_argument_parser().parse_args(list(argv))

    def test_default_preset(self) -> None:
        """Test that the pretty preset is used by default."""
        config = load_config(self.parse("format", "in.xml"))

        assert config.name == "pretty"
        assert config.indent.indent_unit == "  "

    def test_indent_flags(self) -> None:
        """Test indentation flags."""
        assert load_config(self.parse("format", "in.xml", "--indent", "4")).indent.indent_unit == "    "
        assert load_config(self.parse("format", "in.xml", "--tabs")).indent.indent_unit == "\t"
        assert load_config(self.parse("format", "in.xml", "--no-indent")).indent.indent_unit is None

    def test_hitboxes_default_to_omr_namespace(self) -> None:
        """Test that hitboxes without a namespace use the OMR namespace."""
        config = load_config(self.parse("format", "in.xml", "--hitboxes", "h.json"))

        assert config.annotation.prefix == OMR_HITBOX_PREFIX
        assert config.annotation.namespace_uri == OMR_HITBOX_NAMESPACE

    def test_explicit_namespace_kept(self) -> None:
        """Test explicit namespace kept."""
        config = load_config(self.parse(
            "format", "in.xml", "--hitboxes", "h.json", "--prefix", "hb", "--namespace", "urn:hb"
        ))

        assert config.annotation.prefix == "hb"
        assert config.annotation.namespace_uri == "urn:hb"

    def test_config_file_replaces_preset(self, tmp_path) -> None:
        """Test loading configuration from file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"indent": {"indent_unit": "\t"}, "name": "custom"}))

        config = load_config(self.parse("config", "--preset", "compact", "--config", str(path)))

        assert config.name == "custom"
        assert config.indent.indent_unit == "\t"


class TestFormatCommand:
    """Test the format command."""

    def test_format_to_file(self, score_file, tmp_path) -> None:
        """Test formatting into an output file."""
        target = tmp_path / "out" / "score.xml"

        assert main(["format", str(score_file), "-o", str(target), "--no-indent"]) == EXIT_OK
        assert target.read_bytes() == (
            b'<?xml version="1.0" encoding="UTF-8"?>'
            b"<score-partwise><part><measure><note><rest/></note></measure></part></score-partwise>"
        )

    def test_format_with_hitboxes(self, score_file, hitbox_file, tmp_path) -> None:
        """Test hitbox injection from a JSON file."""
        target = tmp_path / "score.xml"

        code = main([
            "format", str(score_file), "-o", str(target),
            "--hitboxes", str(hitbox_file), "--no-declaration",
        ])

        output = target.read_text(encoding="utf-8")
        assert code == EXIT_OK
        assert f'<score-partwise xmlns:omr="{OMR_HITBOX_NAMESPACE}">' in output
        assert '<omr:hitbox x="10" y="20" width="30" height="40"/>' in output
        assert not output.startswith("<?xml")

    def test_format_to_stdout(self, score_file, capsysbinary) -> None:
        """Test formatting onto standard output."""
        assert main(["format", str(score_file), "--no-indent", "--no-declaration"]) == EXIT_OK
        assert capsysbinary.readouterr().out.startswith(b"<score-partwise><part>")

    def test_stats_printed_to_stderr(self, score_file, tmp_path, capsys) -> None:
        """Test stats printed to stderr."""
        target = tmp_path / "score.xml"

        assert main(["format", str(score_file), "-o", str(target), "--stats"]) == EXIT_OK

        statistics = json.loads(capsys.readouterr().err)
        assert statistics["elements_collapsed"] == 1
        assert statistics["elements_opened"] == 4

    def test_malformed_input(self, tmp_path, capsys) -> None:
        """Test handling of a malformed source document."""
        path = tmp_path / "bad.xml"
        path.write_text("<a><b></a>", encoding="utf-8")

        assert main(["format", str(path)]) == EXIT_FAILURE
        assert "Failed to read" in capsys.readouterr().err

    def test_missing_input(self, tmp_path, capsys) -> None:
        """Test missing input."""
        assert main(["format", str(tmp_path / "missing.xml")]) == EXIT_FAILURE
        assert "I/O error" in capsys.readouterr().err

    def test_invalid_hitboxes(self, score_file, tmp_path, capsys) -> None:
        """Test handling of an invalid hitbox file."""
        path = tmp_path / "hitboxes.json"
        path.write_text(json.dumps([[1, 2, 3]]), encoding="utf-8")

        assert main(["format", str(score_file), "--hitboxes", str(path)]) == EXIT_FAILURE
        assert "Invalid hitbox at index 0" in capsys.readouterr().err

    def test_prefix_without_namespace(self, score_file, capsys) -> None:
        """Test prefix without namespace."""
        assert main(["format", str(score_file), "--prefix", "omr"]) == EXIT_FAILURE
        assert "Invalid configuration" in capsys.readouterr().err


class TestConfigCommand:
    """Test the config command."""

    def test_prints_effective_configuration(self, capsys) -> None:
        """Test printing a preset as JSON."""
        assert main(["config", "--preset", "musicxml_hitboxes"]) == EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data["name"] == "musicxml_hitboxes"
        assert data["annotation"]["namespace_uri"] == OMR_HITBOX_NAMESPACE

    def test_config_file_with_null_component(self, tmp_path, capsys) -> None:
        """Test that a component set to null exits with a failure code."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"indent": None}))

        assert main(["config", "--config", str(path)]) == EXIT_FAILURE
        assert "indent settings must be an object" in capsys.readouterr().err

    def test_invalid_config_file(self, tmp_path, capsys) -> None:
        """Test invalid config file."""
        path = tmp_path / "config.json"
        path.write_text("{not json")

        assert main(["config", "--config", str(path)]) == EXIT_FAILURE
        assert "Invalid configuration" in capsys.readouterr().err


class TestMain:
    """Test the main entry point."""

    def test_no_command(self, capsys) -> None:
        """Test that help is shown without a command."""
        assert main([]) == EXIT_FAILURE
        assert "indenting-xml" in capsys.readouterr().out

    def test_keyboard_interrupt(self, score_file, capsys) -> None:
        """Test interruption handling."""
        with patch("indenting_xml_writer.cli.main.cmd_format", side_effect=KeyboardInterrupt):
            assert main(["format", str(score_file)]) == EXIT_INTERRUPTED

        assert "interrupted" in capsys.readouterr().err

    def test_version(self, capsys) -> None:
        """Test the --version flag."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out
