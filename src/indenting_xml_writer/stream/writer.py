"""Plain streaming XML writer over a binary stream.

``XMLStreamWriter`` writes exactly what it is told: no indentation, no
collapsing of empty elements and no namespace repairing. A start tag is left
open until the next event so that attributes and namespace declarations can
still be appended to it.
"""

import codecs
from typing import Any, BinaryIO, Dict, List, Optional

from .base import StreamWriter, XMLStreamError
from .namespaces import DEFAULT_PREFIX, NamespaceContext

CTRL_CHAR_ENTITY_NAME_MAPPING = (
    ("&", "amp"),
    (">", "gt"),
    ("<", "lt"),
    ('"', "quot"),
)
# parsers normalize literal whitespace in attribute values and CR in text
WHITESPACE_CHAR_REFS = {"\n": "&#10;", "\r": "&#13;", "\t": "&#9;"}

CCE_TABLE_FOR_ATTRIBUTES = str.maketrans({
    **{ord(k): f"&{v};" for k, v in CTRL_CHAR_ENTITY_NAME_MAPPING},
    **{ord(k): v for k, v in WHITESPACE_CHAR_REFS.items()},
})
CCE_TABLE_FOR_TEXT = str.maketrans({
    **{ord(k): f"&{v};" for k, v in CTRL_CHAR_ENTITY_NAME_MAPPING if k != '"'},
    ord("\r"): WHITESPACE_CHAR_REFS["\r"],
})

CDATA_END = "]]>"


def escape_text(text: str) -> str:
    return text.translate(CCE_TABLE_FOR_TEXT)


def escape_attribute(value: str) -> str:
    return value.translate(CCE_TABLE_FOR_ATTRIBUTES)


class XMLStreamWriter(StreamWriter):
    """Non-repairing XML writer encoding its output onto a binary stream.

    The stream belongs to the caller: ``close()`` finishes a start tag left
    open and flushes the stream, but does not close it. Characters the encoding cannot represent are written as numeric
    character references.

    Args:
        stream: Binary output, e.g. an open file or ``io.BytesIO``
        encoding: Output encoding
    """

    def __init__(self, stream: BinaryIO, encoding: str = "utf-8") -> None:
        try:
            self.encoding = codecs.lookup(encoding).name
        except LookupError as e:
            raise XMLStreamError(f"Unknown encoding: {encoding}") from e
        self._stream = stream
        self._namespaces = NamespaceContext()
        self._elements: List[str] = []
        self._start_open = False
        self._start_empty = False
        self._written = False
        self._closed = False
        self._properties: Dict[str, Any] = {
            "encoding": self.encoding,
            "repairing_namespaces": False,
        }

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def depth(self) -> int:
        """Number of elements currently open."""
        return len(self._elements)

    # Output primitives

    def _write(self, text: str) -> None:
        if self._closed:
            raise XMLStreamError("Writer is closed")
        try:
            self._stream.write(text.encode(self.encoding, "xmlcharrefreplace"))
        except (OSError, ValueError) as e:
            raise XMLStreamError(f"Failed to write to output stream: {e}") from e
        self._written = True

    def _close_start_tag(self) -> None:
        if not self._start_open:
            return
        if self._start_empty:
            self._write("/>")
            self._namespaces.pop_scope()
        else:
            self._write(">")
        self._start_open = False
        self._start_empty = False

    def _require_start_tag(self, what: str) -> None:
        if not self._start_open:
            raise XMLStreamError(f"{what} can only be written inside a start tag")

    def _qualify(self, local_name: str, namespace_uri: Optional[str],
                 prefix: Optional[str], attribute: bool = False) -> str:
        if not local_name:
            raise XMLStreamError("Local name cannot be empty")
        if prefix is not None:
            return f"{prefix}:{local_name}" if prefix else local_name
        if namespace_uri is None:
            return local_name

        candidates = self._namespaces.get_prefixes(namespace_uri)
        if attribute:
            # unprefixed attributes are in no namespace
            candidates = [p for p in candidates if p != DEFAULT_PREFIX]
        if not candidates:
            raise XMLStreamError(
                f"Namespace URI '{namespace_uri}' is not bound to a prefix"
            )
        bound = candidates[0]
        return f"{bound}:{local_name}" if bound else local_name

    # Document

    def write_start_document(self, version: str = "1.0",
                             encoding: Optional[str] = None) -> None:
        if self._written:
            raise XMLStreamError("XML declaration must be the first output")
        declaration = f'<?xml version="{version}"'
        if encoding is not None:
            try:
                declared = codecs.lookup(encoding).name
            except LookupError as e:
                raise XMLStreamError(f"Unknown encoding: {encoding}") from e
            if declared != self.encoding:
                raise XMLStreamError(
                    f"Declared encoding '{encoding}' does not match "
                    f"output encoding '{self.encoding}'"
                )
            declaration += f' encoding="{encoding}"'
        self._write(declaration + "?>")

    def write_end_document(self) -> None:
        self._close_start_tag()
        while self._elements:
            self.write_end_element()

    def write_dtd(self, dtd: str) -> None:
        self._close_start_tag()
        self._write(dtd)

    # Elements

    def write_start_element(self, local_name: str,
                            namespace_uri: Optional[str] = None,
                            prefix: Optional[str] = None) -> None:
        self._close_start_tag()
        qname = self._qualify(local_name, namespace_uri, prefix)
        self._write("<" + qname)
        self._namespaces.push_scope()
        self._elements.append(qname)
        self._start_open = True

    def write_empty_element(self, local_name: str,
                            namespace_uri: Optional[str] = None,
                            prefix: Optional[str] = None) -> None:
        self._close_start_tag()
        qname = self._qualify(local_name, namespace_uri, prefix)
        self._write("<" + qname)
        self._namespaces.push_scope()
        self._start_open = True
        self._start_empty = True

    def write_end_element(self) -> None:
        self._close_start_tag()
        if not self._elements:
            raise XMLStreamError("No open element to close")
        qname = self._elements.pop()
        self._write(f"</{qname}>")
        self._namespaces.pop_scope()

    # Attributes and namespaces

    def write_attribute(self, local_name: str, value: str,
                        namespace_uri: Optional[str] = None,
                        prefix: Optional[str] = None) -> None:
        self._require_start_tag("Attributes")
        qname = self._qualify(local_name, namespace_uri, prefix, attribute=True)
        self._write(f' {qname}="{escape_attribute(value)}"')

    def write_namespace(self, prefix: Optional[str], namespace_uri: str) -> None:
        if not prefix or prefix == "xmlns":
            self.write_default_namespace(namespace_uri)
            return
        self._require_start_tag("Namespace declarations")
        self._namespaces.bind(prefix, namespace_uri)
        self._write(f' xmlns:{prefix}="{escape_attribute(namespace_uri)}"')

    def write_default_namespace(self, namespace_uri: str) -> None:
        self._require_start_tag("Namespace declarations")
        self._namespaces.bind(DEFAULT_PREFIX, namespace_uri)
        self._write(f' xmlns="{escape_attribute(namespace_uri)}"')

    def set_prefix(self, prefix: str, namespace_uri: str) -> None:
        self._namespaces.bind(prefix, namespace_uri)

    def set_default_namespace(self, namespace_uri: str) -> None:
        self._namespaces.bind(DEFAULT_PREFIX, namespace_uri)

    def set_namespace_context(self, context: NamespaceContext) -> None:
        if self._elements or self._start_open:
            raise XMLStreamError(
                "Namespace context can only be set before the first element"
            )
        self._namespaces = context

    # Content

    def write_characters(self, text: str) -> None:
        self._close_start_tag()
        self._write(escape_text(text))

    def write_cdata(self, data: str) -> None:
        if CDATA_END in data:
            raise XMLStreamError(f"CDATA section cannot contain '{CDATA_END}'")
        self._close_start_tag()
        self._write(f"<![CDATA[{data}]]>")

    def write_comment(self, data: str) -> None:
        self._close_start_tag()
        self._write(f"<!--{data}-->")

    def write_processing_instruction(self, target: str,
                                     data: Optional[str] = None) -> None:
        self._close_start_tag()
        if data:
            self._write(f"<?{target} {data}?>")
        else:
            self._write(f"<?{target}?>")

    def write_entity_ref(self, name: str) -> None:
        self._close_start_tag()
        self._write(f"&{name};")

    # Lifecycle and accessors

    def flush(self) -> None:
        try:
            self._stream.flush()
        except (OSError, ValueError) as e:
            raise XMLStreamError(f"Failed to flush output stream: {e}") from e

    def close(self) -> None:
        if self._closed:
            return
        try:
            # nothing can be appended to a start tag once the writer is closed
            self._close_start_tag()
            self.flush()
        finally:
            self._closed = True

    def get_namespace_context(self) -> NamespaceContext:
        return self._namespaces

    def get_prefix(self, namespace_uri: str) -> Optional[str]:
        return self._namespaces.get_prefix(namespace_uri)

    def get_property(self, name: str) -> Any:
        if name not in self._properties:
            raise ValueError(f"Property '{name}' is not supported")
        return self._properties[name]
