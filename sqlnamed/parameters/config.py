"""Named statement configuration."""

from typing import Any, Callable, Optional, Union

from sqlnamed.exceptions import ImproperConfigurationError
from sqlnamed.parameters.types import PositionalStyle

__all__ = ("NamedStatementConfig",)


class NamedStatementConfig:
    """Declarative configuration for resolving and binding named statements."""

    __slots__ = ("backslash_escapes", "enable_cache", "positional_style", "require_all_fields", "type_coercion_map")

    def __init__(
        self,
        positional_style: Union[PositionalStyle, str] = PositionalStyle.QMARK,
        require_all_fields: bool = False,
        enable_cache: bool = True,
        type_coercion_map: Optional[dict[type, Callable[[Any], Any]]] = None,
        backslash_escapes: bool = False,
    ) -> None:
        """Initialize named statement configuration.

        Args:
            positional_style: Marker style the underlying driver expects
            require_all_fields: Reject field names that the SQL never references
            enable_cache: Memoise resolution results per SQL text and field names
            type_coercion_map: Mapping of value types to coercion functions, applied by executors
            backslash_escapes: Treat ``\\`` inside quoted text as an escape character (MySQL default
                mode). Standard SQL only escapes a quote by doubling it.
        """
        try:
            self.positional_style = PositionalStyle(positional_style)
        except ValueError as e:
            msg = f"Unsupported positional style: {positional_style!r}"
            raise ImproperConfigurationError(msg) from e
        self.require_all_fields = require_all_fields
        self.enable_cache = enable_cache
        self.type_coercion_map = type_coercion_map or {}
        self.backslash_escapes = backslash_escapes

    def replace(self, **kwargs: Any) -> "NamedStatementConfig":
        """Return a copy with the given attributes replaced."""
        values = {name: getattr(self, name) for name in self.__slots__}
        unknown = set(kwargs) - set(values)
        if unknown:
            msg = f"Unknown configuration options: {', '.join(sorted(unknown))}"
            raise ImproperConfigurationError(msg)
        values.update(kwargs)
        return type(self)(**values)

    def hash(self) -> int:
        """Deterministic hash of the settings that affect resolution."""
        return hash(
            (
                self.positional_style.value,
                self.require_all_fields,
                self.enable_cache,
                self.backslash_escapes,
                tuple(sorted(str(k) for k in self.type_coercion_map)) if self.type_coercion_map else (),
            )
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(positional_style={self.positional_style!r}, "
            f"require_all_fields={self.require_all_fields!r}, enable_cache={self.enable_cache!r}, "
            f"backslash_escapes={self.backslash_escapes!r})"
        )
