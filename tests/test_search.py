from __future__ import annotations

import re

from quirks.search import (
    LineRange,
    SearchDirection,
    SearchEngine,
    parse_substitute_command,
    substitute,
)
from quirks.search.substitute import expand_replacement, split_by_delimiter


def make_engine(pattern: str, **options: bool) -> SearchEngine:
    engine = SearchEngine(**options)
    engine.set_pattern(pattern)
    return engine


def test_ignore_case_finds_every_spelling_and_wraps() -> None:
    engine = make_engine("hello", ignore_case=True)

    first = engine.execute(["Hello HELLO hello"], 0, 0)

    assert len(engine.matches) == 3
    assert first is not None and first.start_col == 0
    assert engine.match_info() == "1/3"
    assert engine.next_match().start_col == 6
    assert engine.next_match().start_col == 12
    assert engine.next_match().start_col == 0
    assert engine.prev_match().start_col == 12


def test_smart_case_turns_sensitive_with_uppercase() -> None:
    engine = make_engine("Hello", ignore_case=True, smart_case=True)

    engine.execute(["Hello HELLO hello"], 0, 0)

    assert [match.start_col for match in engine.matches] == [0]


def test_forward_search_starts_at_or_after_cursor() -> None:
    engine = make_engine("ab")

    found = engine.execute(["ab ab", "ab"], 0, 1)

    assert found is not None
    assert (found.line, found.start_col) == (0, 3)


def test_backward_search_picks_previous_match() -> None:
    engine = SearchEngine()
    engine.start(SearchDirection.BACKWARD)
    engine.set_pattern("o")

    found = engine.execute(["foo boo"], 0, 5)

    assert found is not None and found.start_col == 2
    assert engine.prev_match().start_col == 1


def test_invalid_regex_falls_back_to_literal() -> None:
    engine = make_engine("a(")

    found = engine.execute(["x a( y"], 0, 0)

    assert found is not None
    assert (found.start_col, found.end_col) == (2, 4)


def test_columns_count_graphemes() -> None:
    engine = make_engine("x")

    found = engine.execute(["éx"], 0, 0)

    assert found is not None
    assert (found.start_col, found.end_col) == (1, 2)


def test_no_match_reports_and_keeps_highlight_off() -> None:
    engine = make_engine("zzz")

    assert engine.execute(["abc"], 0, 0) is None
    assert engine.match_info() == "No matches"
    assert engine.highlights() == ()
    assert engine.next_match() is None


def test_highlights_follow_matches_until_cleared() -> None:
    engine = make_engine("a")
    engine.execute(["a a"], 0, 0)

    assert engine.highlights() == ((0, 0, 1), (0, 2, 3))

    engine.clear_highlight()
    assert engine.highlights() == ()


def test_pattern_editing() -> None:
    engine = SearchEngine()
    engine.start(SearchDirection.FORWARD)

    engine.push_char("a")
    engine.push_char("b")
    assert engine.pattern == "ab"
    assert engine.pop_char()
    assert engine.pop_char()
    assert engine.pop_char() is False
    assert engine.is_empty()


def test_parse_whole_file_global() -> None:
    command = parse_substitute_command("%s/foo/bar/g")

    assert command is not None
    assert (command.pattern, command.replacement) == ("foo", "bar")
    assert command.range == LineRange.whole()
    assert command.flags.replace_all


def test_parse_explicit_range_and_delimiter() -> None:
    command = parse_substitute_command("2,$s#a\\#b#c#i")

    assert command is not None
    assert command.pattern == "a#b"
    assert command.range == LineRange(2, "$")
    assert command.flags.ignore_case
    assert not command.flags.replace_all


def test_parse_rejects_other_commands() -> None:
    assert parse_substitute_command("set nu") is None
    assert parse_substitute_command("s") is None
    assert parse_substitute_command("s/only") is None


def test_split_keeps_regex_escapes() -> None:
    assert split_by_delimiter("a\\/b/\\d/", "/") == ["a/b", "\\d", ""]


def test_substitute_first_per_line() -> None:
    lines = ["foo foo", "bar", "foo"]
    command = parse_substitute_command("%s/foo/x/")

    result = substitute(lines, command)

    assert lines == ["x foo", "bar", "x"]
    assert result.changed == [0, 2]
    assert result.describe() == "2 substitutions on 2 lines"


def test_substitute_global_on_current_line() -> None:
    lines = ["foo", "foo foo"]
    command = parse_substitute_command("s/foo/x/g")

    result = substitute(lines, command, current_line=1)

    assert lines == ["foo", "x x"]
    assert result.describe() == "2 substitutions on 1 line"


def test_substitute_reports_missing_and_invalid_patterns() -> None:
    lines = ["abc"]

    missing = substitute(lines, parse_substitute_command("s/zzz/y/"))
    invalid = substitute(lines, parse_substitute_command("s/(/y/"))

    assert missing.describe() == "Pattern not found"
    assert invalid.describe().startswith("Invalid pattern")
    assert lines == ["abc"]


def test_expand_replacement_groups_and_ampersand() -> None:
    found = re.search(r"(\w+)@(\w+)", "me@host")
    assert found is not None

    assert expand_replacement(r"\2 at \1 (&)", found) == "host at me (me@host)"
    assert expand_replacement(r"\&\9", found) == "&"
