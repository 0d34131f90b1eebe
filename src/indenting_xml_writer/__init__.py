"""Indenting XML Writer.

A streaming XML writer decorator that indents output at any depth, writes
elements without content in self-closing form and can annotate recurring leaf
elements (MusicXML notes) with hitbox rectangles.

Progressive API Disclosure:
- Level 1: Simple functions - reformat(), export_document(), export_file()
- Level 2: Configured writer - FormattingXMLStreamWriter with WriterConfig
- Level 3: Building blocks - IndentEngine, DeferredElementBuffer, AnnotationInjector
"""

__version__ = "0.1.0"
__author__ = "Indenting XML Writer Team"

from .api import create_writer, export_document, export_file, reformat, reformat_file
from .formatting import FormattingXMLStreamWriter, Hitbox, PendingElementError
from .shared.config import AnnotationConfig, IndentConfig, OutputConfig, WriterConfig
from .shared.result import WriteStatistics
from .stream import StreamWriter, XMLStreamError, XMLStreamWriter

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "create_writer",
    "export_document",
    "export_file",
    "reformat",
    "reformat_file",

    # Level 2: Writers
    "FormattingXMLStreamWriter",
    "StreamWriter",
    "XMLStreamWriter",

    # Data and results
    "Hitbox",
    "WriteStatistics",

    # Configuration
    "AnnotationConfig",
    "IndentConfig",
    "OutputConfig",
    "WriterConfig",

    # Errors
    "PendingElementError",
    "XMLStreamError",
]
