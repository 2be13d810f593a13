import pytest
import csv
from datetime import datetime, UTC

from asset_search.models import AttributeCount, Location, SearchResult
from asset_search.reporting import HEADERS, SearchReport


@pytest.fixture
def results():
    return [
        SearchResult("k1", "a.jpg", "image/jpeg", datetime(2020, 1, 1, tzinfo=UTC),
                     Location("museum", "Paris", "France")),
        SearchResult("k2", "b.mov", "video/quicktime", datetime(2021, 6, 1, tzinfo=UTC)),
    ]


def test_write_csv(tmp_path, results):
    out = tmp_path / "results.csv"
    SearchReport().write_csv(results, out)

    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))

    assert rows[0] == HEADERS
    assert rows[1] == ["k1", "a.jpg", "image/jpeg", "2020-01-01T00:00:00+00:00", "museum; Paris, France"]
    assert rows[2] == ["k2", "b.mov", "video/quicktime", "2021-06-01T00:00:00+00:00", ""]


def test_print_table(capsys, results):
    SearchReport().print_table(results)
    out = capsys.readouterr().out
    assert "Asset ID" in out
    assert "museum; Paris, France" in out
    assert "2 matching assets" in out


def test_print_table_when_empty(capsys):
    SearchReport().print_table([])
    assert capsys.readouterr().out.strip() == "No matching assets."


def test_print_counts(capsys):
    SearchReport().print_counts([AttributeCount("cat", 12), AttributeCount("kitten", 3)])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("cat    |")
    assert lines[0].endswith("12")
    assert lines[1].startswith("kitten |")
