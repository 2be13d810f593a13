import pytest
import sqlite3
from datetime import datetime, UTC

from asset_search.database.schema import init_schema
from asset_search.database.ops import DBOperations
from asset_search.models import Asset, Location

@pytest.fixture
def conn():
    """Returns an in-memory SQLite connection with the schema initialized."""
    c = sqlite3.connect(":memory:")
    init_schema(c)
    try:
        yield c
    finally:
        c.close()

@pytest.fixture
def db_ops(conn):
    """Returns a DBOperations instance attached to the in-memory DB."""
    return DBOperations(conn)

@pytest.fixture
def kitten():
    """The asset most query tests run against."""
    return Asset(
        key="monday1",
        checksum="sha256-cafebabe",
        filename="img_1234.jpg",
        byte_length=1024,
        media_type="image/jpeg",
        tags=["kitten", "puppy"],
        import_date=datetime(2018, 5, 31, 21, 10, 11, tzinfo=UTC),
        location=Location.parse("museum; Paris, France"),
    )

class FakeRepository:
    """Serves assets in fixed-size pages and records every call."""

    def __init__(self, assets, page_size=None):
        self.assets = list(assets)
        self.page_size = page_size
        self.calls = []

    def fetch_assets(self, cursor, limit):
        self.calls.append((cursor, limit))
        start = cursor or 0
        size = min(limit, self.page_size or limit)
        batch = self.assets[start:start + size]
        return batch, start + len(batch)

@pytest.fixture
def make_repo():
    return FakeRepository
