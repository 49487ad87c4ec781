"""Named placeholder resolution for sqlnamed."""

from sqlnamed.parameters.config import NamedStatementConfig
from sqlnamed.parameters.resolver import PlaceholderResolver, count_positional_markers, resolve_named_placeholders
from sqlnamed.parameters.types import IndexMap, PlaceholderInfo, PositionalStyle, ResolvedStatement

__all__ = (
    "IndexMap",
    "NamedStatementConfig",
    "PlaceholderInfo",
    "PlaceholderResolver",
    "PositionalStyle",
    "ResolvedStatement",
    "count_positional_markers",
    "resolve_named_placeholders",
)
