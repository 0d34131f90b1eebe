"""Hitbox annotation of leaf elements.

A hitbox sequence is supplied once, in document order, with one slot per
occurrence of the leaf element (``note`` in a MusicXML score). Every time a
leaf element is written as a real start tag, the slot under the cursor is
read and, when present, a self-closing ``<prefix:hitbox>`` child is written
inside it. The annotation namespace is declared once, on the first start tag
of the root element.
"""

import json
from pathlib import Path
from typing import Any, List, NamedTuple, Optional, Sequence, Union

from ..shared.config import (
    DEFAULT_HITBOX_ELEMENT,
    DEFAULT_LEAF_ELEMENT,
    DEFAULT_ROOT_ELEMENT,
    AnnotationConfig,
)
from ..shared.logging import CorrelationLogger, get_logger
from ..shared.result import WriteStatistics
from ..stream import StreamWriter
from .indent import IndentEngine
from .pending import ElementIdentity, StartElementListener

HITBOX_FIELDS = ("x", "y", "width", "height")


class Hitbox(NamedTuple):
    """Rectangle in image pixel coordinates."""

    x: int
    y: int
    width: int
    height: int


HitboxSequence = Sequence[Optional[Hitbox]]


def parse_hitbox(value: Any) -> Optional[Hitbox]:
    """Build a hitbox from ``None``, a 4-item list or a mapping.

    Raises:
        ValueError: If the value has another shape or non-integer coordinates
    """
    if value is None:
        return None
    if isinstance(value, dict):
        missing = [name for name in HITBOX_FIELDS if name not in value]
        if missing:
            raise ValueError(f"Hitbox is missing {', '.join(missing)}")
        items = [value[name] for name in HITBOX_FIELDS]
    elif isinstance(value, (list, tuple)):
        if len(value) != len(HITBOX_FIELDS):
            raise ValueError(f"Hitbox needs 4 values, got {len(value)}")
        items = list(value)
    else:
        raise ValueError(f"Unsupported hitbox value: {value!r}")

    coordinates = []
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise ValueError(f"Hitbox coordinate must be a number, got {item!r}")
        if isinstance(item, float) and not item.is_integer():
            raise ValueError(f"Hitbox coordinate must be an integer, got {item!r}")
        coordinates.append(int(item))
    return Hitbox(*coordinates)


def parse_hitboxes(data: Any) -> List[Optional[Hitbox]]:
    """Build a hitbox sequence from decoded JSON data."""
    if not isinstance(data, list):
        raise ValueError("Hitbox data must be a list")
    boxes = []
    for index, value in enumerate(data):
        try:
            boxes.append(parse_hitbox(value))
        except ValueError as e:
            raise ValueError(f"Invalid hitbox at index {index}: {e}") from e
    return boxes


def load_hitboxes(path: Union[str, Path]) -> List[Optional[Hitbox]]:
    """Read a hitbox sequence from a JSON file."""
    with Path(path).open(encoding="utf-8") as f:
        return parse_hitboxes(json.load(f))


def has_present_hitboxes(hitboxes: Optional[HitboxSequence]) -> bool:
    """Whether the sequence holds at least one rectangle."""
    if hitboxes is None:
        return False
    return any(box is not None for box in hitboxes)


class AnnotationInjector(StartElementListener):
    """Writes hitbox children into leaf elements as their start tags are written.

    The injector is inert unless the sequence holds at least one rectangle and
    both prefix and namespace URI are given.

    Args:
        writer: Underlying writer, not the formatting decorator
        indent: Indentation engine of the formatting writer
        hitboxes: Optional rectangles aligned with leaf occurrences
        prefix: Prefix of the annotation namespace
        namespace_uri: URI of the annotation namespace
        root_element: Local name receiving the namespace declaration
        leaf_element: Local name receiving hitbox children
        hitbox_element: Local name of the injected element
        statistics: Counters shared with the formatting writer
        logger: Logger used for injection events
    """

    def __init__(
        self,
        writer: StreamWriter,
        indent: IndentEngine,
        hitboxes: Optional[HitboxSequence] = None,
        prefix: Optional[str] = None,
        namespace_uri: Optional[str] = None,
        root_element: str = DEFAULT_ROOT_ELEMENT,
        leaf_element: str = DEFAULT_LEAF_ELEMENT,
        hitbox_element: str = DEFAULT_HITBOX_ELEMENT,
        statistics: Optional[WriteStatistics] = None,
        logger: Optional[CorrelationLogger] = None,
    ) -> None:
        self._writer = writer
        self._indent = indent
        self.hitboxes: HitboxSequence = tuple(hitboxes) if hitboxes is not None else ()
        self.prefix = prefix
        self.namespace_uri = namespace_uri
        self.root_element = root_element
        self.leaf_element = leaf_element
        self.hitbox_element = hitbox_element
        self.statistics = statistics if statistics is not None else WriteStatistics()
        self.logger = logger or get_logger(__name__, None, "annotation_injector")

        self.enabled = (
            has_present_hitboxes(self.hitboxes)
            and prefix is not None
            and namespace_uri is not None
        )
        self.cursor = 0
        self.namespace_declared = False

    @classmethod
    def from_config(
        cls,
        writer: StreamWriter,
        indent: IndentEngine,
        hitboxes: Optional[HitboxSequence],
        config: AnnotationConfig,
        statistics: Optional[WriteStatistics] = None,
        logger: Optional[CorrelationLogger] = None,
    ) -> "AnnotationInjector":
        return cls(
            writer,
            indent,
            hitboxes,
            prefix=config.prefix,
            namespace_uri=config.namespace_uri,
            root_element=config.root_element,
            leaf_element=config.leaf_element,
            hitbox_element=config.hitbox_element,
            statistics=statistics,
            logger=logger,
        )

    def peek(self) -> Optional[Hitbox]:
        """Return the rectangle under the cursor without consuming it."""
        if self.cursor < len(self.hitboxes):
            return self.hitboxes[self.cursor]
        return None

    def requires_content(self, identity: ElementIdentity) -> bool:
        # A leaf due for a hitbox cannot collapse: the hitbox becomes its child.
        return (
            self.enabled
            and identity.local_name == self.leaf_element
            and self.peek() is not None
        )

    def after_start(self, identity: ElementIdentity) -> None:
        if not self.enabled:
            return

        if not self.namespace_declared and identity.local_name == self.root_element:
            self._writer.write_namespace(self.prefix, self.namespace_uri)
            self.namespace_declared = True
            self.statistics.namespace_declared = True
            self.logger.debug(
                "Declared annotation namespace",
                extra={"prefix": self.prefix, "namespace_uri": self.namespace_uri},
            )

        if identity.local_name != self.leaf_element:
            return

        hitbox = self.peek()
        index = self.cursor
        self.cursor += 1

        if hitbox is None:
            self.statistics.hitboxes_missing += 1
            return

        self._write_hitbox(hitbox)
        self.statistics.hitboxes_written += 1
        self.logger.debug("Injected hitbox", extra={"index": index})

    def _write_hitbox(self, hitbox: Hitbox) -> None:
        self._indent.before_start()
        self._writer.write_empty_element(
            self.hitbox_element, self.namespace_uri, self.prefix
        )
        for name, value in zip(HITBOX_FIELDS, hitbox):
            self._writer.write_attribute(name, str(int(value)))
        self._indent.before_end()
