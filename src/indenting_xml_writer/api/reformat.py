"""Re-serialize an existing XML document through the formatting writer.

The source document is read with the standard SAX parser and every event is
replayed onto a ``StreamWriter``. Whitespace-only text is dropped since the
formatting writer supplies its own indentation; any other text is kept as is.

Only the name and external identifiers of a DOCTYPE are kept: an internal
subset (``<!DOCTYPE a [ ... ]>``) is not reproduced in the output.
"""

import io
from pathlib import Path
from typing import List, Optional, Tuple, Union
from xml.sax import SAXException, make_parser
from xml.sax.handler import (
    ContentHandler,
    feature_external_ges,
    feature_namespaces,
    property_lexical_handler,
)

from indenting_xml_writer.formatting import HitboxSequence
from indenting_xml_writer.shared import WriterConfig, WriteStatistics, get_logger
from indenting_xml_writer.stream import StreamWriter

from .export import export_document, export_file

SourceType = Union[str, bytes]


class SourceDocumentError(Exception):
    """Raised when the source document cannot be read."""


def split_qname(qname: str) -> Tuple[Optional[str], str]:
    """Split ``prefix:local`` into ``(prefix, local)``; prefix is None when absent."""
    prefix, sep, local_name = qname.partition(":")
    if not sep:
        return None, qname
    return prefix, local_name


def format_doctype(name: str, public_id: Optional[str],
                   system_id: Optional[str]) -> str:
    if public_id:
        return f'<!DOCTYPE {name} PUBLIC "{public_id}" "{system_id or ""}">'
    if system_id:
        return f'<!DOCTYPE {name} SYSTEM "{system_id}">'
    return f"<!DOCTYPE {name}>"


class SAXReplayHandler(ContentHandler):
    """Content and lexical handler replaying SAX events onto a writer.

    Names are handled lexically: ``xmlns`` attributes become namespace
    declarations and prefixed names keep their prefix.

    Args:
        writer: Writer receiving the events
        prolog_newlines: Start the DOCTYPE on its own line
    """

    def __init__(self, writer: StreamWriter, prolog_newlines: bool = True) -> None:
        super().__init__()
        self.writer = writer
        self.prolog_newlines = prolog_newlines
        self._text: List[str] = []
        self._cdata: List[str] = []
        self._in_cdata = False

    def _flush_text(self) -> None:
        text = "".join(self._text)
        self._text = []
        if text.strip():
            self.writer.write_characters(text)

    # ContentHandler

    def endDocument(self) -> None:
        self._flush_text()

    def startElement(self, name, attrs) -> None:
        self._flush_text()
        prefix, local_name = split_qname(name)
        self.writer.write_start_element(local_name, None, prefix)

        for attr_name in attrs.getNames():
            value = attrs.getValue(attr_name)
            if attr_name == "xmlns":
                self.writer.write_default_namespace(value)
            elif attr_name.startswith("xmlns:"):
                self.writer.write_namespace(attr_name[len("xmlns:"):], value)
            else:
                attr_prefix, attr_local = split_qname(attr_name)
                self.writer.write_attribute(attr_local, value, None, attr_prefix)

    def endElement(self, name) -> None:
        self._flush_text()
        self.writer.write_end_element()

    def characters(self, content) -> None:
        if self._in_cdata:
            self._cdata.append(content)
        else:
            self._text.append(content)

    def ignorableWhitespace(self, whitespace) -> None:
        pass

    def processingInstruction(self, target, data) -> None:
        self._flush_text()
        self.writer.write_processing_instruction(target, data or None)

    # LexicalHandler

    def comment(self, content) -> None:
        self._flush_text()
        self.writer.write_comment(content)

    def startCDATA(self) -> None:
        self._flush_text()
        self._in_cdata = True

    def endCDATA(self) -> None:
        self._in_cdata = False
        data = "".join(self._cdata)
        self._cdata = []
        self.writer.write_cdata(data)

    def startDTD(self, name, public_id, system_id) -> None:
        self._flush_text()
        if self.prolog_newlines:
            self.writer.write_characters("\n")
        self.writer.write_dtd(format_doctype(name, public_id, system_id))

    def endDTD(self) -> None:
        pass

    def startEntity(self, name) -> None:
        pass

    def endEntity(self, name) -> None:
        pass


def replay(source: SourceType, writer: StreamWriter, prolog_newlines: bool = True) -> None:
    """Parse ``source`` and replay its events onto ``writer``.

    Raises:
        SourceDocumentError: If the source is not well-formed
    """
    data = source.encode("utf-8") if isinstance(source, str) else source
    handler = SAXReplayHandler(writer, prolog_newlines)

    parser = make_parser()
    parser.setFeature(feature_namespaces, False)
    parser.setFeature(feature_external_ges, False)
    parser.setContentHandler(handler)
    parser.setProperty(property_lexical_handler, handler)

    try:
        parser.parse(io.BytesIO(data))
    except SAXException as e:
        raise SourceDocumentError(f"Cannot read source document: {e}") from e


def _producer(source: SourceType, config: WriterConfig):
    def produce(writer: StreamWriter) -> None:
        replay(source, writer, prolog_newlines=config.indent.enabled)
    return produce


def reformat(
    source: SourceType,
    config: Optional[WriterConfig] = None,
    hitboxes: Optional[HitboxSequence] = None,
) -> bytes:
    """Re-serialize ``source`` with indentation, collapsing and annotation.

    Examples:
        >>> reformat("<a><b></b></a>", WriterConfig.compact())
        b'<?xml version="1.0" encoding="UTF-8"?><a><b/></a>'
    """
    config = config or WriterConfig()
    out = io.BytesIO()
    export_document(out, _producer(source, config), config, hitboxes)
    return out.getvalue()


def reformat_file(
    source_path: Union[str, Path],
    output_path: Union[str, Path],
    config: Optional[WriterConfig] = None,
    hitboxes: Optional[HitboxSequence] = None,
) -> WriteStatistics:
    """Re-serialize the file at ``source_path`` into ``output_path``."""
    config = config or WriterConfig()
    logger = get_logger(__name__, config.correlation_id, "reformat")
    source = Path(source_path).read_bytes()

    statistics = export_file(output_path, _producer(source, config), config, hitboxes)
    logger.info(
        "Document reformatted",
        extra={"source": str(source_path), "output": str(output_path)},
    )
    return statistics
