"""Tests for statement splitting."""

import pytest

from sqlgate.tokenizer import simple_split, split


def test_splits_in_order():
    assert split("SELECT 1; SELECT 2;") == ["SELECT 1", "SELECT 2"]


def test_surrounding_whitespace_is_insignificant():
    plain = "CREATE TABLE t (id INT);INSERT INTO t VALUES (1);SELECT * FROM t;"
    padded = "  CREATE TABLE t (id INT) ;\n\n\tINSERT INTO t VALUES (1)\n;   SELECT * FROM t  ;  \n"
    assert split(padded) == split(plain)
    assert split(plain) == ["CREATE TABLE t (id INT)", "INSERT INTO t VALUES (1)", "SELECT * FROM t"]


@pytest.mark.parametrize(
    "script",
    [
        "INSERT INTO t VALUES ('a;b');",
        'INSERT INTO t VALUES ("a;b");',
    ],
)
def test_quoted_terminator_does_not_split(script):
    assert split(script) == [script[:-1]]


def test_doubled_single_quote_kept_verbatim():
    (stmt,) = split("INSERT INTO t VALUES ('it''s ok');")
    assert stmt == "INSERT INTO t VALUES ('it''s ok')"
    assert "''" in stmt


def test_escaped_quote_followed_by_terminator_inside_literal():
    assert split("SELECT 'a'';b'; SELECT 2;") == ["SELECT 'a'';b'", "SELECT 2"]


def test_double_quote_inside_single_quoted_literal_is_literal():
    # the " would toggle double-quote mode if it were not inside '...'
    assert split("""SELECT 'say "hi;'; SELECT 2;""") == ["""SELECT 'say "hi;'""", "SELECT 2"]


def test_single_quote_inside_double_quoted_identifier_is_literal():
    assert split('SELECT "o\'brien;x" FROM t; SELECT 2;') == ['SELECT "o\'brien;x" FROM t', "SELECT 2"]


def test_empty_segments_are_dropped():
    assert split(";; SELECT 1 ;;  ; SELECT 2;;") == ["SELECT 1", "SELECT 2"]


@pytest.mark.parametrize("script", ["", "   ", ";", " ; ;\n;"])
def test_nothing_to_split(script):
    assert split(script) == []


def test_missing_final_terminator_is_tolerated():
    assert split("SELECT 1; SELECT 2") == ["SELECT 1", "SELECT 2"]


def test_unterminated_quote_swallows_rest_without_failing():
    assert split("SELECT 'oops; SELECT 2;") == ["SELECT 'oops; SELECT 2;"]


def test_simple_split_ignores_quotes():
    assert simple_split("a;b;") == ["a", "b"]
    assert simple_split("SELECT 'x;y';") == ["SELECT 'x", "y'"]
