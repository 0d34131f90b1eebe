"""Streaming XML writer layer.

Key Components:
    StreamWriter: Abstract operation set shared by writers and decorators
    XMLStreamWriter: Plain writer encoding markup onto a binary stream
    NamespaceContext: Scoped prefix bindings used for name lookups
    XMLStreamError: Error raised by every streaming write failure
"""

from .base import StreamWriter, XMLStreamError
from .namespaces import XML_NAMESPACE, XMLNS_NAMESPACE, NamespaceContext
from .writer import XMLStreamWriter, escape_attribute, escape_text

__all__ = [
    "XML_NAMESPACE",
    "XMLNS_NAMESPACE",
    "NamespaceContext",
    "StreamWriter",
    "XMLStreamError",
    "XMLStreamWriter",
    "escape_attribute",
    "escape_text",
]
