"""High-level API for producing formatted XML documents.

Key Components:
    create_writer: Build a formatting writer over a binary stream
    export_document / export_file: Run a producer through a full writer lifecycle
    reformat / reformat_file: Re-serialize an existing document
"""

from .export import Producer, create_writer, export_document, export_file
from .reformat import (
    SAXReplayHandler,
    SourceDocumentError,
    reformat,
    reformat_file,
    replay,
)

__all__ = [
    "Producer",
    "SAXReplayHandler",
    "SourceDocumentError",
    "create_writer",
    "export_document",
    "export_file",
    "reformat",
    "reformat_file",
    "replay",
]
