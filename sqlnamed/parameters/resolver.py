"""Named placeholder resolution.

Finds ``:name`` placeholders in SQL text, rewrites each occurrence into the
driver's positional marker and records which positional slots every field
index fans out to.
"""

import logging
import re
from collections.abc import Sequence
from functools import lru_cache
from typing import Final, Optional, Union

from mypy_extensions import mypyc_attr

from sqlnamed.exceptions import (
    ImproperConfigurationError,
    ParameterStyleMismatchError,
    UnknownFieldError,
    UnreferencedFieldError,
)
from sqlnamed.parameters.config import NamedStatementConfig
from sqlnamed.parameters.types import PlaceholderInfo, PositionalStyle, ResolvedStatement
from sqlnamed.utils.logging import get_logger, log_with_context

__all__ = ("PlaceholderResolver", "count_positional_markers", "resolve_named_placeholders")

logger = get_logger("parameters.resolver")

# Standard SQL quoting: a quote character is escaped by doubling it.
_STANDARD_QUOTES: Final = r"""
    (?P<dquote>"(?:[^"]|"")*") |                                # Double-quoted identifiers
    (?P<squote>'(?:[^']|'')*') |                                # Single-quoted strings
"""

# MySQL-style quoting: backslash escapes are honoured as well as doubling.
_BACKSLASH_QUOTES: Final = r"""
    (?P<dquote>"(?:[^"\\]|\\.|"")*") |                          # Double-quoted identifiers
    (?P<squote>'(?:[^'\\]|\\.|'')*') |                          # Single-quoted strings
"""

# Remaining regions that are copied verbatim and never scanned for placeholders.
_OTHER_SKIPPED_REGIONS: Final = r"""
    # Dollar-quoted strings ($tag$...$tag$ or $$...$$)
    (?P<dollar_quoted_string>\$(?P<dollar_tag>(?:[A-Za-z_]\w*)?)\$[\s\S]*?\$(?P=dollar_tag)\$) |
    (?P<line_comment>--[^\r\n]*) |                             # Line comments
    (?P<block_comment>/\*(?:[^*]|\*(?!/))*\*/) |               # Block comments
    (?P<pg_cast>::\w*)                                         # PostgreSQL ::type casting
"""

_NAMED_PLACEHOLDERS: Final = r"""
    | (?P<named_colon>:(?P<colon_name>[A-Za-z_][A-Za-z0-9_]*))  # :name
    | (?P<colon_number>:\d+)                                    # :1 already in the text
    | (?P<dollar_number>\$\d+)                                  # $1 already in the text
    | (?P<qmark>\?\?|\?\||\?&|\?)                               # PostgreSQL JSON operators or bare ?
"""

_POSITIONAL_MARKERS: Final = {
    PositionalStyle.QMARK: r"| (?P<marker>\?)",
    PositionalStyle.NUMERIC: r"| (?P<marker>\$(?P<number>\d+))",
    PositionalStyle.POSITIONAL_COLON: r"| (?P<marker>:(?P<number>\d+))",
}

_FLAGS: Final = re.VERBOSE | re.MULTILINE


def _skipped_regions(backslash_escapes: bool) -> str:
    return (_BACKSLASH_QUOTES if backslash_escapes else _STANDARD_QUOTES) + _OTHER_SKIPPED_REGIONS


_NAMED_PLACEHOLDER_REGEX: Final = {
    escapes: re.compile(_skipped_regions(escapes) + _NAMED_PLACEHOLDERS, _FLAGS) for escapes in (False, True)
}

_POSITIONAL_MARKER_REGEX: Final = {
    (style, escapes): re.compile(_skipped_regions(escapes) + marker, _FLAGS)
    for style, marker in _POSITIONAL_MARKERS.items()
    for escapes in (False, True)
}

# Format-style drivers see every % as a directive, so nothing is skipped.
_PYFORMAT_MARKER_REGEX: Final = re.compile(r"(?P<escaped>%%) | (?P<marker>%s)", _FLAGS)

_SKIPPED_GROUPS: Final = (
    "dquote",
    "squote",
    "dollar_quoted_string",
    "line_comment",
    "block_comment",
    "pg_cast",
)

# Markers of the target style already in the text would collide with generated slots.
_CONFLICTING_GROUP: Final = {
    PositionalStyle.QMARK: "qmark",
    PositionalStyle.NUMERIC: "dollar_number",
    PositionalStyle.POSITIONAL_COLON: "colon_number",
}

_POSITIONAL_GROUPS: Final = ("qmark", "colon_number", "dollar_number")


def _escape_literal(text: str, style: PositionalStyle) -> str:
    if style is PositionalStyle.POSITIONAL_PYFORMAT:
        return text.replace("%", "%%")
    return text


def _normalize_field_names(field_names: "Sequence[str]") -> "tuple[str, ...]":
    if isinstance(field_names, (str, bytes)):
        msg = "field_names must be a sequence of names, not a single string"
        raise ImproperConfigurationError(msg)
    names = tuple(field_names)
    for name in names:
        if not isinstance(name, str):
            msg = f"field names must be strings, got {type(name).__name__}"
            raise ImproperConfigurationError(msg)
    return names


def _resolve(
    sql: str,
    field_names: "tuple[str, ...]",
    style: PositionalStyle,
    require_all_fields: bool,
    backslash_escapes: bool,
) -> ResolvedStatement:
    indices_by_name: dict[str, list[int]] = {}
    for field_index, name in enumerate(field_names):
        indices_by_name.setdefault(name, []).append(field_index)

    slots: list[list[int]] = [[] for _ in field_names]
    placeholders: list[PlaceholderInfo] = []
    pieces: list[str] = []
    last_end = 0
    conflicting_group = _CONFLICTING_GROUP.get(style)

    for match in _NAMED_PLACEHOLDER_REGEX[backslash_escapes].finditer(sql):
        if any(match.group(group) for group in _SKIPPED_GROUPS):
            continue

        positional_group = next((group for group in _POSITIONAL_GROUPS if match.group(group)), None)
        if positional_group is not None:
            if positional_group == conflicting_group:
                msg = (
                    f"{match.group(positional_group)!r} at position {match.start()} would be read as a "
                    f"{style} marker and cannot be mixed with named placeholders"
                )
                raise ParameterStyleMismatchError(msg, sql)
            continue

        name = match.group("colon_name")
        start, end = match.span("named_colon")
        field_indices = indices_by_name.get(name)
        if field_indices is None:
            raise UnknownFieldError(name, start, sql)

        slot = len(placeholders) + 1
        for field_index in field_indices:
            slots[field_index].append(slot)
        placeholders.append(
            PlaceholderInfo(
                name=name, position=start, ordinal=slot - 1, slot=slot, placeholder_text=match.group("named_colon")
            )
        )
        pieces.append(_escape_literal(sql[last_end:start], style))
        pieces.append(style.marker(slot))
        last_end = end

    pieces.append(_escape_literal(sql[last_end:], style))

    if require_all_fields:
        for field_index, name in enumerate(field_names):
            if not slots[field_index]:
                raise UnreferencedFieldError(name, field_index, sql)

    return ResolvedStatement(
        original_sql=sql,
        sql="".join(pieces),
        field_names=field_names,
        index_map=tuple(tuple(field_slots) for field_slots in slots),
        placeholders=tuple(placeholders),
        positional_style=style,
    )


_resolve_cached = lru_cache(maxsize=512)(_resolve)


@mypyc_attr(allow_interpreted_subclasses=True)
class PlaceholderResolver:
    """Resolves named placeholders into positional markers and a field index map."""

    __slots__ = ("config",)

    def __init__(self, config: Optional[NamedStatementConfig] = None) -> None:
        self.config = config or NamedStatementConfig()

    def resolve(self, sql: str, field_names: "Sequence[str]") -> ResolvedStatement:
        """Resolve ``sql`` against ``field_names``.

        Args:
            sql: SQL text using ``:name`` placeholders
            field_names: Ordered field names; position in this list is the field index

        Raises:
            UnknownFieldError: A placeholder names a field that was not declared
            UnreferencedFieldError: ``require_all_fields`` is set and a field is never referenced
            ParameterStyleMismatchError: The text already holds markers of the target positional style

        Returns:
            The rewritten SQL and its index map
        """
        names = _normalize_field_names(field_names)
        config = self.config
        resolve = _resolve_cached if config.enable_cache else _resolve
        resolved = resolve(
            sql, names, config.positional_style, config.require_all_fields, config.backslash_escapes
        )
        log_with_context(
            logger,
            logging.DEBUG,
            "Resolved named placeholders",
            parameter_count=resolved.parameter_count,
            field_count=resolved.field_count,
            unreferenced_fields=resolved.unreferenced_fields(),
            positional_style=str(resolved.positional_style),
        )
        return resolved

    @staticmethod
    def clear_cache() -> None:
        _resolve_cached.cache_clear()


def resolve_named_placeholders(
    sql: str,
    field_names: "Sequence[str]",
    positional_style: Union[PositionalStyle, str] = PositionalStyle.QMARK,
    require_all_fields: bool = False,
    backslash_escapes: bool = False,
) -> ResolvedStatement:
    """Resolve named placeholders without keeping a resolver around."""
    config = NamedStatementConfig(
        positional_style=positional_style,
        require_all_fields=require_all_fields,
        backslash_escapes=backslash_escapes,
    )
    return PlaceholderResolver(config).resolve(sql, field_names)


def count_positional_markers(
    sql: str, style: Union[PositionalStyle, str] = PositionalStyle.QMARK, backslash_escapes: bool = False
) -> int:
    """Count the positional slots in SQL already written in ``style``.

    Numbered styles report the highest slot number, so a slot repeated in the
    text is counted once.
    """
    style = PositionalStyle(style)
    if style is PositionalStyle.POSITIONAL_PYFORMAT:
        regex = _PYFORMAT_MARKER_REGEX
    else:
        regex = _POSITIONAL_MARKER_REGEX[style, backslash_escapes]
    count = 0
    for match in regex.finditer(sql):
        if not match.group("marker"):
            continue
        if style in {PositionalStyle.NUMERIC, PositionalStyle.POSITIONAL_COLON}:
            count = max(count, int(match.group("number")))
        else:
            count += 1
    return count
