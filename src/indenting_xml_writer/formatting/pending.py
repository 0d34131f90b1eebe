"""Deferred emission of start tags.

When a start tag is requested, the writer cannot yet know whether the element
will have content. The start is therefore held as a ``PendingElement``
together with every attribute and namespace operation addressed to it. The
next event decides the shape:

* an end tag with nothing in between resolves it as ``Resolution.EMPTY`` and
  the element is written in self-closing form;
* any content (text, comment, child element, ...) resolves it as
  ``Resolution.START`` and a regular start tag is written.

Either way the buffered operations are replayed in arrival order right after
the tag itself.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, List, NamedTuple, Optional, Tuple

from ..shared.result import WriteStatistics
from ..stream import StreamWriter, XMLStreamError
from .indent import IndentEngine


class ElementIdentity(NamedTuple):
    """Name of an element in one of the three addressing forms."""

    local_name: str
    namespace_uri: Optional[str] = None
    prefix: Optional[str] = None

    def __str__(self) -> str:
        if self.prefix:
            return f"{self.prefix}:{self.local_name}"
        if self.namespace_uri:
            return f"{{{self.namespace_uri}}}{self.local_name}"
        return self.local_name


class OperationKind(Enum):
    """Kinds of operations that can be deferred until a start tag is written."""

    ATTRIBUTE = auto()
    NAMESPACE = auto()
    SET_PREFIX = auto()
    SET_DEFAULT_NAMESPACE = auto()


@dataclass(frozen=True)
class DeferredOperation:
    """One buffered writer call with its original arguments."""

    kind: OperationKind
    args: Tuple[Any, ...]

    @classmethod
    def attribute(cls, local_name: str, value: str,
                  namespace_uri: Optional[str] = None,
                  prefix: Optional[str] = None) -> "DeferredOperation":
        return cls(OperationKind.ATTRIBUTE, (local_name, value, namespace_uri, prefix))

    @classmethod
    def namespace(cls, prefix: Optional[str], namespace_uri: str) -> "DeferredOperation":
        """Namespace declaration; a ``None`` prefix declares the default namespace."""
        return cls(OperationKind.NAMESPACE, (prefix, namespace_uri))

    @classmethod
    def prefix_binding(cls, prefix: str, namespace_uri: str) -> "DeferredOperation":
        return cls(OperationKind.SET_PREFIX, (prefix, namespace_uri))

    @classmethod
    def default_namespace_binding(cls, namespace_uri: str) -> "DeferredOperation":
        return cls(OperationKind.SET_DEFAULT_NAMESPACE, (namespace_uri,))

    def apply(self, writer: StreamWriter) -> None:
        """Perform the operation on ``writer``."""
        if self.kind is OperationKind.ATTRIBUTE:
            writer.write_attribute(*self.args)
        elif self.kind is OperationKind.NAMESPACE:
            prefix, namespace_uri = self.args
            if prefix is None:
                writer.write_default_namespace(namespace_uri)
            else:
                writer.write_namespace(prefix, namespace_uri)
        elif self.kind is OperationKind.SET_PREFIX:
            writer.set_prefix(*self.args)
        else:
            writer.set_default_namespace(*self.args)


class Resolution(Enum):
    """Shape chosen for a pending element."""

    EMPTY = auto()   # self-closing tag, no end tag follows
    START = auto()   # start tag, content and end tag follow


@dataclass
class PendingElement:
    """A start tag whose shape has not been decided yet."""

    identity: ElementIdentity
    operations: List[DeferredOperation] = field(default_factory=list)


class PendingElementError(XMLStreamError):
    """Raised when writing a pending element or replaying its operations fails.

    Operations following the failing one are not replayed.
    """

    def __init__(self, message: str, identity: ElementIdentity,
                 resolution: Resolution) -> None:
        super().__init__(message)
        self.identity = identity
        self.resolution = resolution


class StartElementListener:
    """Hook notified when a pending element is written as a real start tag."""

    def after_start(self, identity: ElementIdentity) -> None:
        """Called right after the start tag, before replayed operations."""

    def requires_content(self, identity: ElementIdentity) -> bool:
        """Whether an element about to be collapsed must be kept open instead."""
        return False


class DeferredElementBuffer:
    """Holds at most one pending element and resolves its shape.

    Args:
        writer: Underlying writer receiving the resolved calls
        indent: Indentation engine sharing the same writer
        listener: Hook fired when an element resolves as a start tag
        statistics: Counters updated on every resolution
    """

    def __init__(
        self,
        writer: StreamWriter,
        indent: IndentEngine,
        listener: Optional[StartElementListener] = None,
        statistics: Optional[WriteStatistics] = None,
    ) -> None:
        self._writer = writer
        self._indent = indent
        self._listener = listener or StartElementListener()
        self._pending: Optional[PendingElement] = None
        self.statistics = statistics if statistics is not None else WriteStatistics()

    @property
    def pending(self) -> Optional[PendingElement]:
        return self._pending

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def start(self, identity: ElementIdentity) -> None:
        """Begin a new element; a pending parent is now known to have content."""
        self.resolve_pending()
        self._indent.before_start()
        self._pending = PendingElement(identity)

    def submit(self, operation: DeferredOperation) -> None:
        """Buffer ``operation`` for the pending element, or apply it right away."""
        if self._pending is not None:
            self._pending.operations.append(operation)
        else:
            operation.apply(self._writer)

    def resolve_pending(self) -> None:
        """Write the pending element, if any, as a regular start tag."""
        if self._pending is not None:
            self._resolve(Resolution.START)

    def end(self) -> None:
        """Close the current element, collapsing it when nothing was written inside."""
        pending = self._pending
        if pending is not None and not self._listener.requires_content(pending.identity):
            self._resolve(Resolution.EMPTY)
            self._indent.before_end()
            return

        self.resolve_pending()
        self._indent.before_end()
        self._writer.write_end_element()

    def _resolve(self, resolution: Resolution) -> None:
        pending = self._pending
        if pending is None:
            return
        self._pending = None
        identity = pending.identity

        try:
            if resolution is Resolution.EMPTY:
                self._writer.write_empty_element(*identity)
            else:
                self._writer.write_start_element(*identity)
                self._listener.after_start(identity)

            for operation in pending.operations:
                operation.apply(self._writer)
        except Exception as e:
            raise PendingElementError(
                f"Failed to write pending element <{identity}>: {e}",
                identity,
                resolution,
            ) from e

        if resolution is Resolution.EMPTY:
            self.statistics.elements_collapsed += 1
        else:
            self.statistics.elements_opened += 1
