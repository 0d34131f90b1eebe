"""Abstract streaming markup writer interface.

``StreamWriter`` is the operation set shared by the plain byte-level writer and
by every decorator layered on top of it. Producers only ever talk to this
interface, so a decorator can be inserted without changing the calling code.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from .namespaces import NamespaceContext


class XMLStreamError(Exception):
    """Raised when a streaming write cannot be performed.

    The original cause, if any, is chained through ``__cause__``.
    """


class StreamWriter(ABC):
    """Streaming XML writer operations.

    Element and attribute names come in three addressing forms selected by the
    optional arguments: local name only, namespace URI plus local name (the
    prefix is looked up in the namespace context), or explicit prefix.
    """

    # Document

    @abstractmethod
    def write_start_document(self, version: str = "1.0",
                             encoding: Optional[str] = None) -> None:
        """Write the XML declaration."""

    @abstractmethod
    def write_end_document(self) -> None:
        """Close every element still open."""

    @abstractmethod
    def write_dtd(self, dtd: str) -> None:
        """Write a document type declaration verbatim."""

    # Elements

    @abstractmethod
    def write_start_element(self, local_name: str,
                            namespace_uri: Optional[str] = None,
                            prefix: Optional[str] = None) -> None:
        """Open an element whose content follows."""

    @abstractmethod
    def write_empty_element(self, local_name: str,
                            namespace_uri: Optional[str] = None,
                            prefix: Optional[str] = None) -> None:
        """Write a self-closing element; attributes may follow."""

    @abstractmethod
    def write_end_element(self) -> None:
        """Close the innermost open element."""

    # Attributes and namespaces

    @abstractmethod
    def write_attribute(self, local_name: str, value: str,
                        namespace_uri: Optional[str] = None,
                        prefix: Optional[str] = None) -> None:
        """Add an attribute to the current start tag."""

    @abstractmethod
    def write_namespace(self, prefix: Optional[str], namespace_uri: str) -> None:
        """Declare a prefixed namespace on the current start tag."""

    @abstractmethod
    def write_default_namespace(self, namespace_uri: str) -> None:
        """Declare the default namespace on the current start tag."""

    @abstractmethod
    def set_prefix(self, prefix: str, namespace_uri: str) -> None:
        """Bind a prefix in the current scope without writing anything."""

    @abstractmethod
    def set_default_namespace(self, namespace_uri: str) -> None:
        """Bind the default namespace in the current scope without writing anything."""

    @abstractmethod
    def set_namespace_context(self, context: NamespaceContext) -> None:
        """Replace the namespace context used for prefix lookups."""

    # Content

    @abstractmethod
    def write_characters(self, text: str) -> None:
        """Write escaped character data."""

    @abstractmethod
    def write_cdata(self, data: str) -> None:
        """Write a CDATA section."""

    @abstractmethod
    def write_comment(self, data: str) -> None:
        """Write a comment."""

    @abstractmethod
    def write_processing_instruction(self, target: str,
                                     data: Optional[str] = None) -> None:
        """Write a processing instruction."""

    @abstractmethod
    def write_entity_ref(self, name: str) -> None:
        """Write an entity reference."""

    # Lifecycle and accessors

    @abstractmethod
    def flush(self) -> None:
        """Flush buffered output to the underlying stream."""

    @abstractmethod
    def close(self) -> None:
        """Release the writer."""

    @abstractmethod
    def get_namespace_context(self) -> NamespaceContext:
        """Return the namespace context."""

    @abstractmethod
    def get_prefix(self, namespace_uri: str) -> Optional[str]:
        """Return the prefix bound to ``namespace_uri``, if any."""

    @abstractmethod
    def get_property(self, name: str) -> Any:
        """Return a writer property; unknown names raise ``ValueError``."""

    def __enter__(self) -> "StreamWriter":
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.close()
