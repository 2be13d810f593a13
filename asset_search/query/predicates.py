import re
from datetime import datetime, UTC
from typing import List

from ..exceptions import QueryError
from .constraints import (
    AfterConstraint,
    BeforeConstraint,
    Constraint,
    FilenameConstraint,
    LocationConstraint,
    LocationField,
    MediaSubtypeConstraint,
    MediaTypeConstraint,
    TagConstraint,
)

# a year, or a year and month, such as "2020" or "2020-05"
_PARTIAL_DATE = re.compile(r"^\d{4}(-\d{2})?$")


def build_predicate(keyword: str, args: List[str]) -> Constraint:
    """
    Converts a predicate keyword and its arguments into a constraint.

    Raises:
        QueryError: unknown keyword, bad argument count or bad argument value.
    """
    if keyword == 'loc':
        if len(args) == 1:
            return LocationConstraint(LocationField.ANY, args[0])
        if len(args) == 2:
            return LocationConstraint(parse_location_field(args[0]), args[1])
        raise QueryError("loc: requires 1 or 2 arguments")

    single = {
        'after': lambda v: AfterConstraint(parse_date(v)),
        'before': lambda v: BeforeConstraint(parse_date(v)),
        'is': MediaTypeConstraint,
        'format': MediaSubtypeConstraint,
        'filename': FilenameConstraint,
        'tag': TagConstraint,
    }
    if keyword not in single:
        raise QueryError(f"unsupported predicate: {keyword}")
    if len(args) != 1:
        raise QueryError(f"{keyword}: requires 1 argument")
    return single[keyword](args[0])


def parse_location_field(name: str) -> LocationField:
    try:
        return LocationField(name)
    except ValueError:
        raise QueryError("field must be 'any', 'label', 'city', or 'region'") from None


def parse_date(value: str) -> datetime:
    """
    ISO 8601 date or date-time; a value without an offset is UTC. A bare
    year or year-month means the first day of that period.
    """
    text = value
    if _PARTIAL_DATE.match(text):
        text += "-01" if "-" in text else "-01-01"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise QueryError(f"invalid date: {value!r}") from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt
