"""Unit tests for sqlnamed.parameters.resolver."""

import pytest

from sqlnamed.exceptions import (
    ImproperConfigurationError,
    ParameterStyleMismatchError,
    UnknownFieldError,
    UnreferencedFieldError,
)
from sqlnamed.parameters import (
    NamedStatementConfig,
    PlaceholderInfo,
    PlaceholderResolver,
    PositionalStyle,
    count_positional_markers,
    resolve_named_placeholders,
)


def test_resolve_repeated_placeholder() -> None:
    """A name used twice fans out to both slots, in scan order."""
    resolved = resolve_named_placeholders("select * from t where a=:x or b=:x or c=:y", ["x", "y"])

    assert resolved.sql == "select * from t where a=? or b=? or c=?"
    assert resolved.index_map == ((1, 2), (3,))
    assert resolved.parameter_count == 3
    assert resolved.slots_for(0) == (1, 2)
    assert resolved.slots_for(1) == (3,)


def test_resolve_records_placeholder_occurrences() -> None:
    sql = "update t set a = :a where id = :id"
    resolved = resolve_named_placeholders(sql, ["id", "a"])

    assert resolved.placeholders == (
        PlaceholderInfo(name="a", position=sql.index(":a"), ordinal=0, slot=1, placeholder_text=":a"),
        PlaceholderInfo(name="id", position=sql.index(":id"), ordinal=1, slot=2, placeholder_text=":id"),
    )
    assert resolved.index_map == ((2,), (1,))


@pytest.mark.parametrize(
    "sql,field_names,expected_markers",
    [
        ("select :a", ["a"], 1),
        ("select :a, :b, :a, :c, :b", ["a", "b", "c"], 5),
        ("insert into t values (:id, :name, :id)", ["id", "name"], 3),
        ("select 1", [], 0),
    ],
    ids=["single", "mixed_repeats", "insert_repeat", "no_placeholders"],
)
def test_marker_count_matches_occurrences(sql: str, field_names: "list[str]", expected_markers: int) -> None:
    """Slot sets cover every occurrence exactly once without overlap."""
    resolved = resolve_named_placeholders(sql, field_names)

    assert resolved.sql.count("?") == expected_markers
    all_slots = [slot for slots in resolved.index_map for slot in slots]
    assert sorted(all_slots) == list(range(1, expected_markers + 1))
    assert len(set(all_slots)) == len(all_slots)


def test_unreferenced_field_gets_empty_slot_set() -> None:
    resolved = resolve_named_placeholders("select * from t where a = :a", ["a", "unused"])

    assert resolved.index_map == ((1,), ())
    assert resolved.unreferenced_fields() == ["unused"]
    assert resolved.sql == "select * from t where a = ?"


def test_duplicate_field_names_share_slots() -> None:
    resolved = resolve_named_placeholders("select :x, :y", ["x", "y", "x"])

    assert resolved.index_map == ((1,), (2,), (1,))


def test_unknown_field_raises_with_name_and_position() -> None:
    sql = "select * from t where a = :a and b = :missing"

    with pytest.raises(UnknownFieldError) as exc_info:
        resolve_named_placeholders(sql, ["a"])

    assert exc_info.value.name == "missing"
    assert exc_info.value.position == sql.index(":missing")
    assert "missing" in str(exc_info.value)
    assert exc_info.value.sql == sql


@pytest.mark.parametrize(
    "sql",
    [
        "select ':skipped' as s, :a",
        'select "col:skipped", :a',
        "select :a -- trailing :skipped comment",
        "select /* :skipped\n still :skipped */ :a",
        "select $$ body :skipped $$, :a",
        "select $fn$ body :skipped $fn$, :a",
        "select 'it''s :skipped', :a",
        'select "a""b:skipped", :a',
    ],
    ids=[
        "single_quote",
        "double_quote",
        "line_comment",
        "block_comment",
        "dollar_quote",
        "tagged_dollar",
        "doubled_quote",
        "doubled_identifier_quote",
    ],
)
def test_literals_and_comments_are_not_scanned(sql: str) -> None:
    resolved = resolve_named_placeholders(sql, ["a"])

    assert resolved.index_map == ((1,),)
    assert resolved.sql == sql.replace(":a", "?")
    assert resolved.parameter_count == 1


def test_backslash_is_not_an_escape_by_default() -> None:
    """Standard SQL closes 'C:\\' at the second quote, so the placeholder after it is seen."""
    resolved = resolve_named_placeholders(r"select 'C:\' || :a || 'x'", ["a"])

    assert resolved.sql == r"select 'C:\' || ? || 'x'"
    assert resolved.index_map == ((1,),)


def test_backslash_escapes_opt_in() -> None:
    sql = r"select 'it\'s :skipped', :a"

    resolved = resolve_named_placeholders(sql, ["a"], backslash_escapes=True)

    assert resolved.sql == r"select 'it\'s :skipped', ?"
    assert resolved.index_map == ((1,),)
    with pytest.raises(UnknownFieldError) as exc_info:
        resolve_named_placeholders(sql, ["a"])
    assert exc_info.value.name == "skipped"


def test_backslash_escapes_are_part_of_the_cache_key() -> None:
    sql = r"select 'a\' || :a || 'b', :b"
    standard = PlaceholderResolver(NamedStatementConfig()).resolve(sql, ["a", "b"])
    escaped = PlaceholderResolver(NamedStatementConfig(backslash_escapes=True)).resolve(sql, ["a", "b"])

    assert standard.index_map == ((1,), (2,))
    assert escaped.index_map == ((), (1,))


@pytest.mark.parametrize(
    "sql",
    ["select a::text from t where b = :a", "select '12:30'::time, :a", "select x :: int, :a"],
    ids=["cast", "cast_after_literal", "spaced_cast"],
)
def test_postgres_casts_are_not_placeholders(sql: str) -> None:
    resolved = resolve_named_placeholders(sql, ["a"])

    assert resolved.parameter_count == 1
    assert "::" in resolved.sql


@pytest.mark.parametrize(
    "sql",
    ["select :1, :a", "select a : b, :a", "select ':', :a", "select :=, :a"],
    ids=["digit", "spaced", "literal", "assignment"],
)
def test_colon_without_identifier_is_literal(sql: str) -> None:
    resolved = resolve_named_placeholders(sql, ["a"])

    assert resolved.parameter_count == 1
    assert resolved.sql == sql.replace(":a", "?")


def test_identifier_stops_at_non_identifier_character() -> None:
    resolved = resolve_named_placeholders("select :name_1||'x', :_private", ["name_1", "_private"])

    assert resolved.sql == "select ?||'x', ?"
    assert resolved.index_map == ((1,), (2,))


@pytest.mark.parametrize(
    "style,expected",
    [
        (PositionalStyle.QMARK, "select ?, ?, ?"),
        (PositionalStyle.NUMERIC, "select $1, $2, $3"),
        (PositionalStyle.POSITIONAL_COLON, "select :1, :2, :3"),
        (PositionalStyle.POSITIONAL_PYFORMAT, "select %s, %s, %s"),
    ],
)
def test_positional_styles(style: PositionalStyle, expected: str) -> None:
    resolved = resolve_named_placeholders("select :a, :b, :a", ["a", "b"], positional_style=style)

    assert resolved.sql == expected
    assert resolved.index_map == ((1, 3), (2,))
    assert resolved.positional_style is style


def test_pyformat_doubles_literal_percent() -> None:
    resolved = resolve_named_placeholders(
        "select * from t where name like 'a%' and id = :id", ["id"], positional_style="pyformat_positional"
    )

    assert resolved.sql == "select * from t where name like 'a%%' and id = %s"


def test_bare_qmark_conflicts_with_qmark_output() -> None:
    with pytest.raises(ParameterStyleMismatchError):
        resolve_named_placeholders("select ?, :a", ["a"])


@pytest.mark.parametrize(
    "sql,style",
    [
        ("select :1, :a", PositionalStyle.POSITIONAL_COLON),
        ("select * from t where x = $1 and y = :a", PositionalStyle.NUMERIC),
    ],
    ids=["colon_number", "dollar_number"],
)
def test_existing_numbered_markers_conflict_with_same_style(sql: str, style: PositionalStyle) -> None:
    """A literal :1 or $1 would be bound to slot 1 together with the first named placeholder."""
    with pytest.raises(ParameterStyleMismatchError) as exc_info:
        resolve_named_placeholders(sql, ["a"], positional_style=style)

    assert exc_info.value.sql == sql


@pytest.mark.parametrize(
    "sql,style,expected",
    [
        ("select :1, :a", PositionalStyle.NUMERIC, "select :1, $1"),
        ("select $1, :a", PositionalStyle.POSITIONAL_COLON, "select $1, :1"),
        ("select ':1', :a", PositionalStyle.POSITIONAL_COLON, "select ':1', :1"),
        ("select '$1', :a", PositionalStyle.NUMERIC, "select '$1', $1"),
    ],
    ids=["colon_under_numeric", "dollar_under_colon", "colon_in_literal", "dollar_in_literal"],
)
def test_numbered_markers_of_other_styles_are_left_alone(sql: str, style: PositionalStyle, expected: str) -> None:
    resolved = resolve_named_placeholders(sql, ["a"], positional_style=style)

    assert resolved.sql == expected
    assert resolved.index_map == ((1,),)


def test_bare_qmark_inside_literal_is_allowed() -> None:
    resolved = resolve_named_placeholders("select 'what?', :a", ["a"])

    assert resolved.sql == "select 'what?', ?"


def test_json_operators_allowed_for_non_qmark_styles() -> None:
    resolved = resolve_named_placeholders(
        "select data ?| array['a'] from t where id = :id", ["id"], positional_style=PositionalStyle.NUMERIC
    )

    assert resolved.sql == "select data ?| array['a'] from t where id = $1"


def test_require_all_fields() -> None:
    resolver = PlaceholderResolver(NamedStatementConfig(require_all_fields=True))

    with pytest.raises(UnreferencedFieldError) as exc_info:
        resolver.resolve("select :a", ["a", "b"])

    assert exc_info.value.name == "b"
    assert exc_info.value.field_index == 1


def test_field_names_must_be_a_sequence_of_strings() -> None:
    with pytest.raises(ImproperConfigurationError):
        resolve_named_placeholders("select :a", "a")
    with pytest.raises(ImproperConfigurationError):
        resolve_named_placeholders("select :a", ["a", 1])  # type: ignore[list-item]


def test_resolution_is_repeatable() -> None:
    sql = "select :a, :b"

    first = resolve_named_placeholders(sql, ["a", "b"])
    second = resolve_named_placeholders(sql, ("a", "b"))
    uncached = PlaceholderResolver(NamedStatementConfig(enable_cache=False)).resolve(sql, ["a", "b"])

    assert first == second == uncached
    assert hash(first) == hash(uncached)


def test_resolved_statement_field_index_lookup() -> None:
    resolved = resolve_named_placeholders("select :b", ["a", "b"])

    assert resolved.field_index("b") == 1
    assert resolved.field_index("c") is None
    assert resolved.field_count == 2


@pytest.mark.parametrize(
    "sql,style,expected",
    [
        ("select ?, ?", PositionalStyle.QMARK, 2),
        ("select '?', ? -- ?", PositionalStyle.QMARK, 1),
        ("select $1, $2, $1", PositionalStyle.NUMERIC, 2),
        ("select :1, :3", PositionalStyle.POSITIONAL_COLON, 3),
        ("select a::int, :1", PositionalStyle.POSITIONAL_COLON, 1),
        ("select '%%', %s, %s", PositionalStyle.POSITIONAL_PYFORMAT, 2),
        ("select 1", PositionalStyle.QMARK, 0),
    ],
)
def test_count_positional_markers(sql: str, style: PositionalStyle, expected: int) -> None:
    assert count_positional_markers(sql, style) == expected


def test_count_positional_markers_honours_backslash_escapes() -> None:
    sql = r"select 'a\'?', ?"

    assert count_positional_markers(sql, PositionalStyle.QMARK) == 2
    assert count_positional_markers(sql, PositionalStyle.QMARK, backslash_escapes=True) == 1


def test_resolve_logs_structured_summary(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("DEBUG", logger="sqlnamed"):
        resolve_named_placeholders("select :a, :a", ["a", "b"], positional_style=PositionalStyle.NUMERIC)

    record = next(r for r in caplog.records if r.getMessage() == "Resolved named placeholders")
    assert record.extra_fields == {  # type: ignore[attr-defined]
        "parameter_count": 2,
        "field_count": 2,
        "unreferenced_fields": ["b"],
        "positional_style": "numeric",
    }
    assert record.funcName == "resolve"
