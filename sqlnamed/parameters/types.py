"""Core parameter types used by the placeholder resolver."""

from enum import Enum
from typing import Optional

from typing_extensions import TypeAlias

__all__ = ("IndexMap", "PlaceholderInfo", "PositionalStyle", "ResolvedStatement")

IndexMap: TypeAlias = "tuple[tuple[int, ...], ...]"
"""Field index -> ordered 1-based positional slots."""


class PositionalStyle(str, Enum):
    """Positional marker emitted in place of each named placeholder."""

    QMARK = "qmark"
    NUMERIC = "numeric"
    POSITIONAL_COLON = "positional_colon"
    POSITIONAL_PYFORMAT = "pyformat_positional"

    def __str__(self) -> str:
        return self.value

    def marker(self, slot: int) -> str:
        """Render the marker for a 1-based slot."""
        if self is PositionalStyle.QMARK:
            return "?"
        if self is PositionalStyle.NUMERIC:
            return f"${slot}"
        if self is PositionalStyle.POSITIONAL_COLON:
            return f":{slot}"
        return "%s"


class PlaceholderInfo:
    """Immutable information about one named placeholder occurrence."""

    __slots__ = ("name", "ordinal", "placeholder_text", "position", "slot")

    def __init__(self, name: str, position: int, ordinal: int, slot: int, placeholder_text: str) -> None:
        self.name = name
        self.position = position
        self.ordinal = ordinal
        self.slot = slot
        self.placeholder_text = placeholder_text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self.name == other.name and self.position == other.position and self.slot == other.slot

    def __hash__(self) -> int:
        return hash((self.name, self.position, self.slot))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, ordinal={self.ordinal!r}, "
            f"placeholder_text={self.placeholder_text!r}, position={self.position!r}, slot={self.slot!r})"
        )


class ResolvedStatement:
    """Result of resolving named placeholders against a field name list.

    Attributes:
        original_sql: SQL text as supplied by the caller.
        sql: SQL text with every named placeholder replaced by a positional marker.
        field_names: The caller's field names; their order defines field indices.
        index_map: For each field index, the 1-based slots it binds, in scan order.
        placeholders: Every placeholder occurrence, in scan order.
        positional_style: The marker style used in ``sql``.
    """

    __slots__ = ("field_names", "index_map", "original_sql", "placeholders", "positional_style", "sql")

    def __init__(
        self,
        original_sql: str,
        sql: str,
        field_names: "tuple[str, ...]",
        index_map: IndexMap,
        placeholders: "tuple[PlaceholderInfo, ...]",
        positional_style: PositionalStyle = PositionalStyle.QMARK,
    ) -> None:
        self.original_sql = original_sql
        self.sql = sql
        self.field_names = field_names
        self.index_map = index_map
        self.placeholders = placeholders
        self.positional_style = positional_style

    @property
    def field_count(self) -> int:
        return len(self.field_names)

    @property
    def parameter_count(self) -> int:
        """Total number of positional markers in the rewritten SQL."""
        return len(self.placeholders)

    def slots_for(self, field_index: int) -> "tuple[int, ...]":
        return self.index_map[field_index]

    def unreferenced_fields(self) -> "list[str]":
        """Field names that no placeholder refers to."""
        return [name for name, slots in zip(self.field_names, self.index_map) if not slots]

    def field_index(self, name: str) -> Optional[int]:
        """First field index declared with ``name``, or None."""
        try:
            return self.field_names.index(name)
        except ValueError:
            return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return (
            self.sql == other.sql
            and self.original_sql == other.original_sql
            and self.field_names == other.field_names
            and self.index_map == other.index_map
        )

    def __hash__(self) -> int:
        return hash((self.original_sql, self.sql, self.field_names, self.index_map))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sql={self.sql!r}, field_names={self.field_names!r}, index_map={self.index_map!r})"
