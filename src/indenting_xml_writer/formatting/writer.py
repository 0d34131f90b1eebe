"""Formatting decorator around a streaming XML writer.

``FormattingXMLStreamWriter`` keeps the full ``StreamWriter`` contract so that
any producer can drive it unchanged, and adds:

* line-oriented indentation at any depth,
* self-closing output for elements that end up with no content,
* optional hitbox annotation of leaf elements.

Example:
    >>> import io
    >>> from indenting_xml_writer.stream import XMLStreamWriter
    >>> out = io.BytesIO()
    >>> writer = FormattingXMLStreamWriter(XMLStreamWriter(out))
    >>> writer.write_start_element("a")
    >>> writer.write_start_element("b")
    >>> writer.write_end_element()
    >>> writer.write_end_element()
    >>> writer.close()
    >>> out.getvalue()
    b'\\n<a>\\n  <b/>\\n</a>'
"""

from typing import Any, Optional

from ..shared.config import (
    DEFAULT_HITBOX_ELEMENT,
    DEFAULT_INDENT_UNIT,
    DEFAULT_LEAF_ELEMENT,
    DEFAULT_ROOT_ELEMENT,
    WriterConfig,
)
from ..shared.logging import get_logger
from ..shared.result import WriteStatistics
from ..stream import NamespaceContext, StreamWriter
from .annotation import AnnotationInjector, HitboxSequence
from .indent import IndentEngine
from .pending import DeferredElementBuffer, DeferredOperation, ElementIdentity


class FormattingXMLStreamWriter(StreamWriter):
    """Streaming writer that indents, collapses empty elements and annotates leaves.

    Args:
        writer: The actual writer, to which any real work is delegated
        indent_unit: Indentation for one level; ``None`` disables indentation
        hitboxes: Optional rectangles aligned with leaf element occurrences
        hitbox_prefix: Prefix of the annotation namespace
        hitbox_namespace: URI of the annotation namespace
        root_element: Element receiving the annotation namespace declaration
        leaf_element: Element receiving hitbox children
        hitbox_element: Local name of the injected hitbox elements
        correlation_id: Optional ID of the document-write session for logging
    """

    def __init__(
        self,
        writer: StreamWriter,
        indent_unit: Optional[str] = DEFAULT_INDENT_UNIT,
        hitboxes: Optional[HitboxSequence] = None,
        hitbox_prefix: Optional[str] = None,
        hitbox_namespace: Optional[str] = None,
        root_element: str = DEFAULT_ROOT_ELEMENT,
        leaf_element: str = DEFAULT_LEAF_ELEMENT,
        hitbox_element: str = DEFAULT_HITBOX_ELEMENT,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.writer = writer
        self.logger = get_logger(__name__, correlation_id, "formatting_writer")
        self.statistics = WriteStatistics()

        self.indent = IndentEngine(writer, indent_unit)
        self.annotator = AnnotationInjector(
            writer,
            self.indent,
            hitboxes,
            prefix=hitbox_prefix,
            namespace_uri=hitbox_namespace,
            root_element=root_element,
            leaf_element=leaf_element,
            hitbox_element=hitbox_element,
            statistics=self.statistics,
            logger=get_logger(__name__, correlation_id, "annotation_injector"),
        )
        self.buffer = DeferredElementBuffer(
            writer, self.indent, self.annotator, self.statistics
        )

    @classmethod
    def from_config(
        cls,
        writer: StreamWriter,
        config: WriterConfig,
        hitboxes: Optional[HitboxSequence] = None,
    ) -> "FormattingXMLStreamWriter":
        """Create a formatting writer from a ``WriterConfig``."""
        annotation = config.annotation
        return cls(
            writer,
            indent_unit=config.indent.indent_unit,
            hitboxes=hitboxes,
            hitbox_prefix=annotation.prefix,
            hitbox_namespace=annotation.namespace_uri,
            root_element=annotation.root_element,
            leaf_element=annotation.leaf_element,
            hitbox_element=annotation.hitbox_element,
            correlation_id=config.correlation_id,
        )

    @property
    def level(self) -> int:
        """Current nesting level as tracked by the indentation engine."""
        return self.indent.level

    # Document

    def write_start_document(self, version: str = "1.0",
                             encoding: Optional[str] = None) -> None:
        self.writer.write_start_document(version, encoding)

    def write_end_document(self) -> None:
        self.buffer.resolve_pending()
        self.writer.write_end_document()

    def write_dtd(self, dtd: str) -> None:
        self.buffer.resolve_pending()
        self.writer.write_dtd(dtd)

    # Elements

    def write_start_element(self, local_name: str,
                            namespace_uri: Optional[str] = None,
                            prefix: Optional[str] = None) -> None:
        self.buffer.start(ElementIdentity(local_name, namespace_uri, prefix))

    def write_empty_element(self, local_name: str,
                            namespace_uri: Optional[str] = None,
                            prefix: Optional[str] = None) -> None:
        self.buffer.resolve_pending()
        self.indent.before_start()
        self.writer.write_empty_element(local_name, namespace_uri, prefix)
        self.indent.before_end()
        self.statistics.elements_collapsed += 1

    def write_end_element(self) -> None:
        self.buffer.end()

    # Attributes and namespaces

    def write_attribute(self, local_name: str, value: str,
                        namespace_uri: Optional[str] = None,
                        prefix: Optional[str] = None) -> None:
        self.buffer.submit(
            DeferredOperation.attribute(local_name, value, namespace_uri, prefix)
        )

    def write_namespace(self, prefix: Optional[str], namespace_uri: str) -> None:
        if not prefix or prefix == "xmlns":
            self.write_default_namespace(namespace_uri)
            return
        self.buffer.submit(DeferredOperation.namespace(prefix, namespace_uri))

    def write_default_namespace(self, namespace_uri: str) -> None:
        self.buffer.submit(DeferredOperation.namespace(None, namespace_uri))

    def set_prefix(self, prefix: str, namespace_uri: str) -> None:
        self.buffer.submit(DeferredOperation.prefix_binding(prefix, namespace_uri))

    def set_default_namespace(self, namespace_uri: str) -> None:
        self.buffer.submit(DeferredOperation.default_namespace_binding(namespace_uri))

    def set_namespace_context(self, context: NamespaceContext) -> None:
        self.writer.set_namespace_context(context)

    # Content

    def write_characters(self, text: str) -> None:
        # empty text is not content and leaves a pending element collapsible
        if text:
            self.buffer.resolve_pending()
            self.writer.write_characters(text)

    def write_cdata(self, data: str) -> None:
        if data:
            self.buffer.resolve_pending()
            self.writer.write_cdata(data)

    def write_comment(self, data: str) -> None:
        self.buffer.resolve_pending()
        self.indent.before_comment()
        self.writer.write_comment(data)

    def write_processing_instruction(self, target: str,
                                     data: Optional[str] = None) -> None:
        self.buffer.resolve_pending()
        self.writer.write_processing_instruction(target, data)

    def write_entity_ref(self, name: str) -> None:
        self.buffer.resolve_pending()
        self.writer.write_entity_ref(name)

    # Lifecycle and accessors

    def flush(self) -> None:
        """Flush the underlying writer unless an element is still pending.

        A pending element is left undecided: flushing must not change its shape.
        """
        if not self.buffer.has_pending:
            self.writer.flush()

    def close(self) -> None:
        """Resolve any pending element, then close the underlying writer.

        The underlying writer is closed even when resolving fails; the
        resolution error is still raised.
        """
        try:
            self.buffer.resolve_pending()
        finally:
            self.writer.close()
        self.logger.info(
            "Formatting writer closed", extra={"statistics": self.statistics.to_dict()}
        )

    def get_namespace_context(self) -> NamespaceContext:
        return self.writer.get_namespace_context()

    def get_prefix(self, namespace_uri: str) -> Optional[str]:
        return self.writer.get_prefix(namespace_uri)

    def get_property(self, name: str) -> Any:
        return self.writer.get_property(name)
