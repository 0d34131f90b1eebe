#!/usr/bin/env python3
"""
Hitbox Annotation Examples

This script shows how to drive the formatting writer by hand, how to
re-serialize an existing MusicXML score and how to attach note hitboxes to it.
"""

import io
import sys
from pathlib import Path

# Add src to path for running examples directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from indenting_xml_writer import (
    FormattingXMLStreamWriter,
    Hitbox,
    WriterConfig,
    XMLStreamWriter,
    export_document,
    reformat,
)

SCORE = b"""<?xml version="1.0" encoding="UTF-8"?>
<score-partwise version="4.0">
  <part id="P1"><measure number="1">
    <note><pitch><step>C</step><octave>4</octave></pitch><duration>4</duration></note>
    <note><rest></rest><duration>4</duration></note>
    <note><pitch><step>E</step><octave>4</octave></pitch><duration>4</duration></note>
  </measure></part>
</score-partwise>"""


def example_manual_writer():
    """Example 1: Driving the writer call by call."""
    print("=== Example 1: Manual Writer ===")

    out = io.BytesIO()
    with FormattingXMLStreamWriter(XMLStreamWriter(out)) as writer:
        writer.write_start_document("1.0", "UTF-8")
        writer.write_start_element("catalog")
        writer.write_start_element("book")
        writer.write_attribute("id", "b1")
        writer.write_end_element()
        writer.write_start_element("book")
        writer.write_attribute("id", "b2")
        writer.write_characters("Second edition")
        writer.write_end_element()
        writer.write_end_element()

    print(out.getvalue().decode("utf-8"))
    print()


def example_reformat():
    """Example 2: Re-serializing an existing document with presets."""
    print("=== Example 2: Reformat ===")

    for preset in (WriterConfig.pretty(), WriterConfig.compact()):
        print(f"-- {preset.name} --")
        print(reformat(SCORE, preset).decode("utf-8"))
    print()


def example_hitboxes():
    """Example 3: Annotating notes with hitboxes; the rest has none."""
    print("=== Example 3: Note Hitboxes ===")

    hitboxes = [Hitbox(120, 340, 18, 14), None, Hitbox(180, 330, 18, 14)]
    config = WriterConfig.musicxml_hitboxes()
    print(reformat(SCORE, config, hitboxes).decode("utf-8"))
    print()


def example_statistics():
    """Example 4: Reading write statistics from a producer run."""
    print("=== Example 4: Statistics ===")

    def produce(writer):
        writer.write_start_element("score-partwise")
        for _ in range(3):
            writer.write_start_element("note")
            writer.write_start_element("rest")
            writer.write_end_element()
            writer.write_end_element()
        writer.write_end_element()

    statistics = export_document(
        io.BytesIO(), produce, WriterConfig.musicxml_hitboxes(), [Hitbox(0, 0, 10, 10)]
    )
    for key, value in statistics.to_dict().items():
        print(f"{key}: {value}")
    print()


def main():
    """Run all examples."""
    example_manual_writer()
    example_reformat()
    example_hitboxes()
    example_statistics()


if __name__ == "__main__":
    main()
