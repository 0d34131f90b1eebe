"""Configuration classes for the indenting XML writer.

This module provides configuration objects for indentation, hitbox annotation
and document output, grouped under an immutable ``WriterConfig``.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

DEFAULT_INDENT_UNIT = "  "

# Element names used by MusicXML partwise scores
DEFAULT_ROOT_ELEMENT = "score-partwise"
DEFAULT_LEAF_ELEMENT = "note"
DEFAULT_HITBOX_ELEMENT = "hitbox"

OMR_HITBOX_PREFIX = "omr"
OMR_HITBOX_NAMESPACE = "http://audiveris.org/omr-data"

RESERVED_PREFIXES = frozenset({"xml", "xmlns"})

COMPONENTS = ("indent", "annotation", "output")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class IndentConfig:
    """Configuration for line-oriented indentation.

    A ``None`` indent unit disables indentation entirely, in which case the
    writer only collapses empty elements.
    """

    indent_unit: Optional[str] = DEFAULT_INDENT_UNIT

    def __post_init__(self) -> None:
        """Validate indentation configuration."""
        if self.indent_unit is not None and self.indent_unit.strip(" \t"):
            raise ValueError("indent_unit must contain only spaces or tabs")

    @property
    def enabled(self) -> bool:
        return self.indent_unit is not None


@dataclass
class AnnotationConfig:
    """Configuration for hitbox annotation of leaf elements."""

    prefix: Optional[str] = None
    namespace_uri: Optional[str] = None
    root_element: str = DEFAULT_ROOT_ELEMENT
    leaf_element: str = DEFAULT_LEAF_ELEMENT
    hitbox_element: str = DEFAULT_HITBOX_ELEMENT

    def __post_init__(self) -> None:
        """Validate annotation configuration."""
        if not self.root_element:
            raise ValueError("root_element cannot be empty")
        if not self.leaf_element:
            raise ValueError("leaf_element cannot be empty")
        if not self.hitbox_element:
            raise ValueError("hitbox_element cannot be empty")
        if self.prefix is not None:
            if not self.prefix or ":" in self.prefix:
                raise ValueError("prefix must be a non-empty name without ':'")
            if self.prefix.lower() in RESERVED_PREFIXES:
                raise ValueError(f"prefix '{self.prefix}' is reserved")
        if self.namespace_uri is not None and not self.namespace_uri:
            raise ValueError("namespace_uri cannot be empty")

    @property
    def is_configured(self) -> bool:
        """Whether both prefix and namespace URI are available."""
        return self.prefix is not None and self.namespace_uri is not None


@dataclass
class OutputConfig:
    """Configuration for the produced byte stream."""

    encoding: str = "utf-8"
    xml_version: str = "1.0"
    write_declaration: bool = True

    def __post_init__(self) -> None:
        """Validate output configuration."""
        if not self.encoding:
            raise ValueError("encoding cannot be empty")
        if self.xml_version not in ("1.0", "1.1"):
            raise ValueError("xml_version must be '1.0' or '1.1'")


@dataclass(frozen=True)
class WriterConfig:
    """Complete configuration of a formatting writer session."""

    indent: IndentConfig = field(default_factory=IndentConfig)
    annotation: AnnotationConfig = field(default_factory=AnnotationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    correlation_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete writer configuration."""
        try:
            self.indent.__post_init__()
            self.annotation.__post_init__()
            self.output.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if (self.annotation.prefix is None) != (self.annotation.namespace_uri is None):
            missing = "namespace_uri" if self.annotation.prefix else "prefix"
            raise ConfigValidationError(
                "Annotation prefix and namespace URI must be given together",
                field_name=f"annotation.{missing}",
                suggestions=[
                    f"Set annotation.{missing}",
                    "Leave both unset to disable annotation",
                ],
            )

    def override(self, **kwargs: Any) -> "WriterConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override,
                ``component__field`` for nested fields

        Returns:
            New WriterConfig instance with overrides applied

        Example:
            >>> config = WriterConfig()
            >>> config.override(output__write_declaration=False).output.write_declaration
            False
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(COMPONENTS),
                    )
                known = getattr(self, component).__dataclass_fields__
                if field_name not in known:
                    raise ConfigValidationError(
                        f"Unknown {component} setting: {field_name}",
                        field_name=key,
                        suggestions=sorted(known),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            elif key in self.__dataclass_fields__:
                top_level[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}",
                    field_name=key,
                    suggestions=sorted(self.__dataclass_fields__),
                )

        new_fields: Dict[str, Any] = {}
        try:
            for component, overrides in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **overrides)
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e
        new_fields.update(top_level)

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WriterConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files do not
        silently fall back to defaults.

        Args:
            data: Dictionary containing configuration data

        Returns:
            WriterConfig instance created from dictionary
        """
        components = {
            "indent": IndentConfig,
            "annotation": AnnotationConfig,
            "output": OutputConfig,
        }
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in components:
                target_class = components[key]
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"{key} settings must be an object", field_name=key
                    )
                unknown = set(value) - set(target_class.__dataclass_fields__)
                if unknown:
                    raise ConfigValidationError(
                        f"Unknown {key} settings: {', '.join(sorted(unknown))}",
                        field_name=key,
                    )
                try:
                    field_values[key] = target_class(**value)
                except ValueError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in cls.__dataclass_fields__:
                field_values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "WriterConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def pretty(cls) -> "WriterConfig":
        """Two-space indentation, no annotation."""
        return cls(name="pretty", description="Two-space indented output")

    @classmethod
    def compact(cls) -> "WriterConfig":
        """No indentation; empty elements are still collapsed."""
        return cls(
            indent=IndentConfig(indent_unit=None),
            name="compact",
            description="Unindented output with self-closing empty elements",
        )

    @classmethod
    def musicxml_hitboxes(cls) -> "WriterConfig":
        """Indented MusicXML output carrying note hitboxes in the OMR namespace."""
        return cls(
            annotation=AnnotationConfig(
                prefix=OMR_HITBOX_PREFIX,
                namespace_uri=OMR_HITBOX_NAMESPACE,
            ),
            name="musicxml_hitboxes",
            description="MusicXML partwise score with note hitbox annotations",
        )


PRESETS = {
    "pretty": WriterConfig.pretty,
    "compact": WriterConfig.compact,
    "musicxml_hitboxes": WriterConfig.musicxml_hitboxes,
}
