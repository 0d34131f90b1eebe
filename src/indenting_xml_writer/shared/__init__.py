"""Shared utilities for the indenting XML writer.

This module provides configuration objects, result types and logging helpers
used by the stream, formatting, API and CLI layers.
"""

from .config import (
    OMR_HITBOX_NAMESPACE,
    OMR_HITBOX_PREFIX,
    PRESETS,
    AnnotationConfig,
    ConfigError,
    ConfigValidationError,
    IndentConfig,
    OutputConfig,
    WriterConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import WriteStatistics

__all__ = [
    "OMR_HITBOX_NAMESPACE",
    "OMR_HITBOX_PREFIX",
    "PRESETS",
    "AnnotationConfig",
    "ConfigError",
    "ConfigValidationError",
    "IndentConfig",
    "OutputConfig",
    "WriterConfig",
    "CorrelationLogger",
    "get_logger",
    "WriteStatistics",
]
