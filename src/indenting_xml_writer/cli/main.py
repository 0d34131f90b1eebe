"""Main CLI entry point for the indenting-xml command-line tool.

Provides re-serialization of XML files with indentation, self-closing empty
elements and optional hitbox annotation, plus inspection of the effective
configuration.
"""

import argparse
import io
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from indenting_xml_writer import __version__
from indenting_xml_writer.api import SourceDocumentError, export_document, replay
from indenting_xml_writer.formatting import load_hitboxes
from indenting_xml_writer.shared import (
    OMR_HITBOX_NAMESPACE,
    OMR_HITBOX_PREFIX,
    PRESETS,
    ConfigError,
    WriterConfig,
    get_logger,
)
from indenting_xml_writer.stream import XMLStreamError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


def load_config(args: argparse.Namespace) -> WriterConfig:
    """Build the effective configuration: preset, then file, then flags."""
    config = PRESETS[args.preset]()

    if args.config is not None:
        config = WriterConfig.from_json(args.config.read_text(encoding="utf-8"))

    overrides = {}
    if getattr(args, "no_indent", False):
        overrides["indent__indent_unit"] = None
    elif getattr(args, "tabs", False):
        overrides["indent__indent_unit"] = "\t"
    elif getattr(args, "indent", None) is not None:
        overrides["indent__indent_unit"] = " " * args.indent

    for flag, key in (
        ("prefix", "annotation__prefix"),
        ("namespace", "annotation__namespace_uri"),
        ("root_element", "annotation__root_element"),
        ("leaf_element", "annotation__leaf_element"),
        ("hitbox_element", "annotation__hitbox_element"),
        ("encoding", "output__encoding"),
    ):
        value = getattr(args, flag, None)
        if value is not None:
            overrides[key] = value

    if getattr(args, "no_declaration", False):
        overrides["output__write_declaration"] = False

    # Hitboxes without an explicit namespace go to the OMR namespace
    if getattr(args, "hitboxes", None) is not None:
        annotation = config.annotation
        if overrides.get("annotation__prefix", annotation.prefix) is None:
            overrides["annotation__prefix"] = OMR_HITBOX_PREFIX
        if overrides.get("annotation__namespace_uri", annotation.namespace_uri) is None:
            overrides["annotation__namespace_uri"] = OMR_HITBOX_NAMESPACE

    if overrides:
        config = config.override(**overrides)
    return config


def cmd_format(args: argparse.Namespace) -> int:
    """Handle format command."""
    logger = get_logger(__name__, None, "cli_format")

    try:
        config = load_config(args)
        hitboxes = load_hitboxes(args.hitboxes) if args.hitboxes else None
        source = args.input.read_bytes()

        def produce(writer):
            replay(source, writer, prolog_newlines=config.indent.enabled)

        out = io.BytesIO()
        statistics = export_document(out, produce, config, hitboxes)
    except (ConfigError, ValueError) as e:
        print(f"Invalid configuration or hitboxes: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except SourceDocumentError as e:
        print(f"Failed to read {args.input}: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except XMLStreamError as e:
        logger.exception("Failed to write document", extra={"file": str(args.input)})
        print(f"Failed to write document: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    data = out.getvalue()
    try:
        if args.output is not None:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_bytes(data)
        else:
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()
    except OSError as e:
        print(f"Failed to write output: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if args.stats:
        print(json.dumps(statistics.to_dict(), indent=2), file=sys.stderr)
    return EXIT_OK


def cmd_config(args: argparse.Namespace) -> int:
    """Handle config command."""
    try:
        config = load_config(args)
    except (ConfigError, OSError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE

    print(config.to_json())
    return EXIT_OK


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="pretty",
        help="Configuration preset (default: pretty)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file, replaces the preset"
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="indenting-xml",
        description="Re-serialize XML with indentation, self-closing empty elements "
                    "and optional hitbox annotation"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Format command
    format_parser = subparsers.add_parser("format", help="Re-serialize an XML file")
    format_parser.add_argument(
        "input",
        type=Path,
        help="XML file to format"
    )
    format_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    indent_group = format_parser.add_mutually_exclusive_group()
    indent_group.add_argument(
        "--indent", "-i",
        type=int,
        help="Number of spaces per level"
    )
    indent_group.add_argument(
        "--tabs",
        action="store_true",
        help="Indent with one tab per level"
    )
    indent_group.add_argument(
        "--no-indent",
        action="store_true",
        help="Disable indentation, only collapse empty elements"
    )
    format_parser.add_argument(
        "--hitboxes",
        type=Path,
        help="JSON list of hitboxes aligned with leaf elements"
    )
    format_parser.add_argument("--prefix", help="Annotation namespace prefix")
    format_parser.add_argument("--namespace", help="Annotation namespace URI")
    format_parser.add_argument(
        "--root-element",
        help="Element receiving the namespace declaration"
    )
    format_parser.add_argument(
        "--leaf-element",
        help="Element receiving hitbox children"
    )
    format_parser.add_argument(
        "--hitbox-element",
        help="Local name of injected hitbox elements"
    )
    format_parser.add_argument("--encoding", help="Output encoding")
    format_parser.add_argument(
        "--no-declaration",
        action="store_true",
        help="Do not write the XML declaration"
    )
    format_parser.add_argument(
        "--stats",
        action="store_true",
        help="Print write statistics as JSON on stderr"
    )
    _add_config_arguments(format_parser)

    # Config command
    config_parser = subparsers.add_parser(
        "config", help="Print the effective configuration as JSON"
    )
    _add_config_arguments(config_parser)

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILURE

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        if args.command == "format":
            return cmd_format(args)
        elif args.command == "config":
            return cmd_config(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return EXIT_FAILURE

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
