"""Tests for the matcher library."""

from dataclasses import dataclass

import pytest

from policy_nucleus import matcher
from policy_nucleus.exceptions import InputException, PatternSyntaxError


@dataclass
class Named:
    name: str
    namespace: str | None = None


@pytest.mark.parametrize(
    ("name", "include", "exclude", "expected"),
    [
        ("foo", None, None, True),
        ("foo", [], [], True),
        ("foo", ["*"], None, True),
        ("foo", ["foo"], None, True),
        ("foo", ["goo"], None, False),
        ("fake", ["fa?e"], None, True),
        ("faze", ["fa?e"], None, True),
        ("fame-x", ["fa?e"], None, False),
        ("kube-one", ["*"], ["kube-*"], False),
        ("foo", ["*"], ["kube-*", "extension-*"], True),
        ("foo", None, ["f*"], False),
        ("goo", ["[fg]oo"], None, True),
        ("hoo", ["[fg]oo"], None, False),
        ("goo", ["[^f]oo"], None, True),
        ("foo", ["[^f]oo"], None, False),
        ("f3", ["f[0-9]"], None, True),
        ("fa", ["f[0-9]"], None, False),
        ("*", ["\\*"], None, True),
        ("a", ["\\*"], None, False),
        ("a/b", ["*"], None, False),
        ("a/b", ["a?b"], None, False),
        ("a/b", ["a/*"], None, True),
    ],
)
def test_match(
    name: str, include: list[str] | None, exclude: list[str] | None, expected: bool
) -> None:
    """Test matching a name against include and exclude patterns."""
    assert matcher.match(name, include, exclude) == expected


@pytest.mark.parametrize(
    ("pattern"),
    [
        "kube-[system",
        "[",
        "[a",
        "[a-",
        "[]a]",
        "[-a]",
        "[a-]",
        "[^]",
        "abc\\",
        "[a\\",
    ],
)
def test_malformed_include(pattern: str) -> None:
    """Test that a malformed include pattern is an error."""
    with pytest.raises(PatternSyntaxError, match="syntax error in pattern") as exc:
        matcher.match("foo", include=[pattern])
    assert exc.value.pattern == pattern
    assert exc.value.side == "include"
    assert isinstance(exc.value, InputException)


def test_malformed_include_message() -> None:
    """Test the error message names the side and pattern."""
    with pytest.raises(PatternSyntaxError) as exc:
        matcher.match("foo", include=["kube-[system"])
    assert str(exc.value) == (
        "error parsing 'include' pattern 'kube-[system': syntax error in pattern"
    )


def test_malformed_exclude() -> None:
    """Test that a malformed exclude pattern is an error once a name is included."""
    with pytest.raises(
        PatternSyntaxError,
        match="error parsing 'exclude' pattern 'kube-\\[system'",
    ) as exc:
        matcher.match("foo", include=["*"], exclude=["kube-[system"])
    assert exc.value.side == "exclude"


def test_patterns_checked_lazily() -> None:
    """Test that patterns after the deciding one are never parsed."""
    assert matcher.match("foo", include=["foo", "["])
    assert not matcher.match("foo", include=["bar"], exclude=["["])


def test_inverted_range() -> None:
    """Test that an inverted range is valid but never matches."""
    assert not matcher.match("b", include=["[c-a]"])
    assert matcher.match("b", include=["[c-ab]"])


def test_match_names_deduplicates() -> None:
    """Test that matching names returns each name once."""
    names = ["foo", "goo", "foo", "kube-one"]
    assert matcher.match_names(names, include=["*"], exclude=["kube-*"]) == {
        "foo",
        "goo",
    }


def test_match_objects_keeps_order_and_duplicates() -> None:
    """Test that matching objects preserves input order and repeats."""
    objs = [Named("goo"), Named("foo"), Named("kube-one"), Named("goo")]
    matched = matcher.match_objects(objs, exclude=["kube-*"])
    assert [obj.name for obj in matched] == ["goo", "foo", "goo"]


def test_match_objects_error() -> None:
    """Test that a malformed pattern aborts matching objects."""
    with pytest.raises(PatternSyntaxError):
        matcher.match_objects([Named("foo")], include=["[]"])


def test_compiled_patterns_bounded() -> None:
    """Test the compiled pattern cache has a size limit."""
    assert matcher._compile.cache_info().maxsize == 256
