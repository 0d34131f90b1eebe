"""Result objects describing a finished document-write session."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class WriteStatistics:
    """Counters collected by a formatting writer during one session."""

    elements_opened: int = 0
    elements_collapsed: int = 0
    hitboxes_written: int = 0
    hitboxes_missing: int = 0
    namespace_declared: bool = False

    @property
    def elements_total(self) -> int:
        """Number of elements whose shape has been resolved."""
        return self.elements_opened + self.elements_collapsed

    @property
    def collapse_rate(self) -> float:
        """Share of resolved elements written in self-closing form."""
        if self.elements_total == 0:
            return 0.0
        return self.elements_collapsed / self.elements_total

    @property
    def leaf_occurrences(self) -> int:
        """Number of real leaf occurrences seen by the annotation cursor."""
        return self.hitboxes_written + self.hitboxes_missing

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to a JSON-friendly dictionary."""
        return {
            "elements_opened": self.elements_opened,
            "elements_collapsed": self.elements_collapsed,
            "elements_total": self.elements_total,
            "collapse_rate": round(self.collapse_rate, 4),
            "hitboxes_written": self.hitboxes_written,
            "hitboxes_missing": self.hitboxes_missing,
            "namespace_declared": self.namespace_declared,
        }
