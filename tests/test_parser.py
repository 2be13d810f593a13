import pytest
from datetime import datetime, UTC

from asset_search.exceptions import QueryError
from asset_search.models import Asset, Location
from asset_search.query.constraints import (
    AndConstraint,
    EmptyConstraint,
    LocationConstraint,
    LocationField,
    NotConstraint,
    OrConstraint,
    TagConstraint,
)
from asset_search.query.lexer import Token, TokenType, lex
from asset_search.query.parser import QueryParser, parse


def tagged(*tags):
    return Asset(key="k", filename="f.jpg", media_type="image/jpeg", tags=list(tags))


# --- Tree Shape ---

def test_empty_query_is_empty_constraint():
    assert parse("") == EmptyConstraint()
    assert parse("   ") == EmptyConstraint()


def test_juxtaposition_is_and():
    assert parse("tag:a tag:b") == AndConstraint(TagConstraint("a"), TagConstraint("b"))


def test_and_binds_tighter_than_or():
    expected = OrConstraint(TagConstraint("cat"), AndConstraint(TagConstraint("dog"), TagConstraint("puppy")))
    assert parse("tag:cat or tag:dog and tag:puppy") == expected


def test_and_before_or():
    expected = OrConstraint(AndConstraint(TagConstraint("a"), TagConstraint("b")), TagConstraint("c"))
    assert parse("tag:a tag:b or tag:c") == expected


def test_chained_or():
    expected = OrConstraint(OrConstraint(TagConstraint("a"), TagConstraint("b")), TagConstraint("c"))
    assert parse("tag:a or tag:b or tag:c") == expected


def test_group_overrides_precedence():
    expected = AndConstraint(OrConstraint(TagConstraint("a"), TagConstraint("b")), TagConstraint("c"))
    assert parse("(tag:a or tag:b) and tag:c") == expected


def test_negation_cancels_in_pairs():
    assert parse("- -tag:cat") == TagConstraint("cat")
    assert parse("---tag:cat") == NotConstraint(TagConstraint("cat"))


def test_negated_group():
    expected = NotConstraint(OrConstraint(TagConstraint("a"), TagConstraint("b")))
    assert parse("-(tag:a or tag:b)") == expected


def test_trailing_colon_is_empty_argument():
    assert parse("loc:label:") == LocationConstraint(LocationField.LABEL, "")


def test_quoted_argument_is_one_token():
    assert parse('tag:"multi word"') == TagConstraint("multi word")


# --- Matching ---

def test_match_by_tag(kitten):
    assert parse("tag:kitten").matches(kitten)
    assert parse("tag:kitten tag:puppy").matches(kitten)
    assert parse("tag:kitten or tag:fluffy").matches(kitten)
    assert parse("-tag:fluffy").matches(kitten)
    assert not parse("-tag:kitten").matches(kitten)
    assert not parse("tag:kitten tag:fluffy").matches(kitten)
    assert not parse("tag:fluffy").matches(kitten)
    assert not parse("tag:fluffy or tag:furry").matches(kitten)


def test_match_by_type_and_subtype(kitten):
    assert parse("is:image").matches(kitten)
    assert not parse("is:video").matches(kitten)
    assert parse("format:jpeg").matches(kitten)
    assert not parse("format:png").matches(kitten)


def test_match_by_filename(kitten):
    assert parse("filename:img_1234.jpg").matches(kitten)
    assert parse("filename:IMG_1234.JPG").matches(kitten)
    assert not parse("filename:IMG_4321.JPG").matches(kitten)


def test_match_by_location(kitten):
    assert parse("loc:paris").matches(kitten)
    assert parse("loc:france").matches(kitten)
    assert parse("loc:label:museum").matches(kitten)
    assert parse("loc:any:museum").matches(kitten)
    assert parse("loc:city:paris").matches(kitten)
    assert parse("loc:region:france").matches(kitten)
    assert parse("loc:city:paris loc:region:france").matches(kitten)
    assert parse("loc:beach or loc:city:paris").matches(kitten)
    assert not parse("loc:beach").matches(kitten)
    assert not parse("loc:city:france").matches(kitten)


def test_match_empty_location(kitten):
    kitten.location = Location.parse("Paris, France")
    assert parse("loc:label:").matches(kitten)
    assert parse("loc:any:").matches(kitten)
    assert parse("loc:label: loc:city:paris").matches(kitten)
    assert not parse("loc:city:").matches(kitten)


def test_match_groups(kitten):
    assert parse("(tag:kitten or tag:fluffy) and is:image").matches(kitten)
    assert parse("tag:kitten or (tag:fluffy and is:image)").matches(kitten)
    assert not parse("(tag:kitten or tag:fluffy) and is:video").matches(kitten)


def test_precedence_excludes_partial_and():
    query = parse("tag:cat or tag:dog and tag:puppy")
    assert query.matches(tagged("cat"))
    assert query.matches(tagged("dog", "puppy"))
    assert not query.matches(tagged("dog"))


def test_match_dates(kitten):
    # import date is 2018-05-31T21:10:11Z
    assert parse("after:2018-05-31").matches(kitten)
    assert parse('after:"2018-05-31T21:10:11"').matches(kitten)
    assert not parse("after:2018-06-01").matches(kitten)
    assert parse("before:2018-06-01").matches(kitten)
    assert not parse('before:"2018-05-31T21:10:11"').matches(kitten)
    assert parse('after:"2018-01-01" before:"2019-01-01"').matches(kitten)


def test_user_date_wins_for_dates(kitten):
    kitten.user_date = datetime(2001, 1, 1, tzinfo=UTC)
    assert parse("before:2002-01-01").matches(kitten)


def test_perkeep_example(kitten):
    query = parse('-(after:"2010-01-01" before:"2010-03-02T12:33:44") or loc:"Amsterdam"')
    assert query.matches(kitten)


# --- Errors ---

@pytest.mark.parametrize("query, message", [
    ("(tag:cat", "no matching ) for ("),
    ("bogus:1", "unsupported predicate: bogus"),
    ("tag:cat)", "found ) without ("),
    (") tag:cat", "found ) without ("),
    ("tag:cat and", "expected operand"),
    ("tag:cat or", "expected operand"),
    ("-", "expected operand"),
    ("kitten", "bare literals unsupported"),
    ("tag:a kitten", "bare literals unsupported"),
    ('tag:"open', "unclosed quoted string"),
    ("loc:a:b:c", "loc: requires 1 or 2 arguments"),
    ("loc:country:france", "field must be"),
    ("after:yesterday", "invalid date"),
    ("tag:a:b", "tag: requires 1 argument"),
])
def test_parse_errors(query, message):
    with pytest.raises(QueryError, match=message.replace("(", r"\(").replace(")", r"\)")):
        parse(query)


class RecordingTokens:
    """Wraps the lexer to record how far the parser read."""

    def __init__(self, query):
        self.inner = lex(query)
        self.seen = []
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        token = next(self.inner)
        self.seen.append(token)
        return token

    def close(self):
        self.closed = True
        self.inner.close()


def test_drain_reads_to_eof_after_error():
    tokens = RecordingTokens("bogus:1 tag:a tag:b tag:c")
    parser = QueryParser(tokens)
    with pytest.raises(QueryError):
        parser.parse_query()
    parser.drain()
    assert tokens.seen[-1] == Token(TokenType.EOF, "")
    assert tokens.closed


def test_drain_stops_at_lexer_error():
    tokens = RecordingTokens("(tag:a oops")
    parser = QueryParser(tokens)
    with pytest.raises(QueryError, match="bare literals"):
        parser.parse_query()
    parser.drain()
    assert tokens.seen[-1].type == TokenType.ERROR
    assert tokens.closed
