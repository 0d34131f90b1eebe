"""Document export helpers.

These functions own the writer lifecycle for one document: build the plain
writer and its formatting decorator, write the declaration, let a producer
issue the element calls, end the document and always close the writer.
"""

from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from indenting_xml_writer.formatting import FormattingXMLStreamWriter, HitboxSequence
from indenting_xml_writer.shared import WriterConfig, WriteStatistics, get_logger
from indenting_xml_writer.stream import StreamWriter, XMLStreamWriter

# A producer walks some document model and drives the writer
Producer = Callable[[StreamWriter], None]


def create_writer(
    stream: BinaryIO,
    config: Optional[WriterConfig] = None,
    hitboxes: Optional[HitboxSequence] = None,
) -> FormattingXMLStreamWriter:
    """Create a formatting writer over a binary stream.

    Args:
        stream: Binary output owned by the caller
        config: Writer configuration, defaults to ``WriterConfig()``
        hitboxes: Optional rectangles aligned with leaf element occurrences

    Returns:
        FormattingXMLStreamWriter wrapping an ``XMLStreamWriter``
    """
    config = config or WriterConfig()
    base_writer = XMLStreamWriter(stream, config.output.encoding)
    return FormattingXMLStreamWriter.from_config(base_writer, config, hitboxes)


def export_document(
    stream: BinaryIO,
    produce: Producer,
    config: Optional[WriterConfig] = None,
    hitboxes: Optional[HitboxSequence] = None,
) -> WriteStatistics:
    """Write one complete document onto ``stream``.

    The writer is closed whether or not the producer succeeds; the stream
    itself stays open.

    Args:
        stream: Binary output owned by the caller
        produce: Callable issuing the element calls on the writer
        config: Writer configuration, defaults to ``WriterConfig()``
        hitboxes: Optional rectangles aligned with leaf element occurrences

    Returns:
        Statistics collected by the formatting writer

    Examples:
        >>> import io
        >>> def produce(writer):
        ...     writer.write_start_element("greeting")
        ...     writer.write_characters("hello")
        ...     writer.write_end_element()
        >>> out = io.BytesIO()
        >>> stats = export_document(out, produce, WriterConfig.compact())
        >>> out.getvalue()
        b'<?xml version="1.0" encoding="UTF-8"?><greeting>hello</greeting>'
    """
    config = config or WriterConfig()
    logger = get_logger(__name__, config.correlation_id, "export")
    writer = create_writer(stream, config, hitboxes)

    try:
        if config.output.write_declaration:
            writer.write_start_document(
                config.output.xml_version, config.output.encoding.upper()
            )
        produce(writer)
        writer.write_end_document()
    finally:
        writer.close()

    logger.info("Document exported", extra={"statistics": writer.statistics.to_dict()})
    return writer.statistics


def export_file(
    path: Union[str, Path],
    produce: Producer,
    config: Optional[WriterConfig] = None,
    hitboxes: Optional[HitboxSequence] = None,
) -> WriteStatistics:
    """Write one complete document into the file at ``path``."""
    path = Path(path)
    logger = get_logger(__name__, config.correlation_id if config else None, "export")

    with path.open("wb") as f:
        statistics = export_document(f, produce, config, hitboxes)

    logger.info("Document written to file", extra={"path": str(path)})
    return statistics
