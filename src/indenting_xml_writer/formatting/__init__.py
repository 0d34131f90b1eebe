"""Formatting layer decorating a streaming XML writer.

Key Components:
    FormattingXMLStreamWriter: Decorator adding indentation, collapsing and annotation
    IndentEngine: Newline and indentation state machine
    DeferredElementBuffer: Holds a pending start tag until its shape is known
    AnnotationInjector: Writes hitbox children into leaf elements
    Hitbox: Rectangle attached to one leaf element occurrence
"""

from .annotation import (
    AnnotationInjector,
    Hitbox,
    HitboxSequence,
    has_present_hitboxes,
    load_hitboxes,
    parse_hitbox,
    parse_hitboxes,
)
from .indent import IndentEngine
from .pending import (
    DeferredElementBuffer,
    DeferredOperation,
    ElementIdentity,
    OperationKind,
    PendingElement,
    PendingElementError,
    Resolution,
    StartElementListener,
)
from .writer import FormattingXMLStreamWriter

__all__ = [
    "AnnotationInjector",
    "DeferredElementBuffer",
    "DeferredOperation",
    "ElementIdentity",
    "FormattingXMLStreamWriter",
    "Hitbox",
    "HitboxSequence",
    "IndentEngine",
    "OperationKind",
    "PendingElement",
    "PendingElementError",
    "Resolution",
    "StartElementListener",
    "has_present_hitboxes",
    "load_hitboxes",
    "parse_hitbox",
    "parse_hitboxes",
]
