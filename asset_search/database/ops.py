import sqlite3
import logging
from datetime import datetime, UTC
from typing import Any, Iterable, List, Optional, Tuple

from ..exceptions import DatabaseError
from ..models import Asset, AttributeCount, Location

_ASSET_COLUMNS = """
    key, checksum, filename, byte_length, media_type, caption,
    loc_label, loc_city, loc_region, import_date, user_date, original_date
"""


def _format_dt(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    dt = datetime.fromisoformat(value)
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


class DBOperations:
    """
    SQLite backed record repository.

    Writes are not committed here; callers decide when to commit.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def count_assets(self) -> int:
        cur = self.conn.cursor()
        cur.execute("SELECT COUNT(*) FROM assets")
        return cur.fetchone()[0]

    def get_asset_by_id(self, key: str) -> Optional[Asset]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {_ASSET_COLUMNS} FROM assets WHERE key = ?", (key,))
        row = cur.fetchone()
        if row is None:
            return None
        return self._asset_from_row(row, self._tags_for(key))

    def get_asset_by_digest(self, checksum: str) -> Optional[Asset]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {_ASSET_COLUMNS} FROM assets WHERE checksum = ?", (checksum,))
        row = cur.fetchone()
        if row is None:
            return None
        return self._asset_from_row(row, self._tags_for(row[0]))

    def put_asset(self, asset: Asset):
        """Inserts the asset, or replaces the record with the same key."""
        loc = asset.location or Location()
        try:
            self.conn.execute(f"""
                INSERT INTO assets ({_ASSET_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    checksum = excluded.checksum,
                    filename = excluded.filename,
                    byte_length = excluded.byte_length,
                    media_type = excluded.media_type,
                    caption = excluded.caption,
                    loc_label = excluded.loc_label,
                    loc_city = excluded.loc_city,
                    loc_region = excluded.loc_region,
                    user_date = excluded.user_date,
                    original_date = excluded.original_date
            """, (
                asset.key, asset.checksum or None, asset.filename, asset.byte_length,
                asset.media_type, asset.caption,
                # empty parts are stored as missing
                loc.label or None, loc.city or None, loc.region or None,
                _format_dt(asset.import_date), _format_dt(asset.user_date),
                _format_dt(asset.original_date),
            ))
            self.conn.execute("DELETE FROM asset_tags WHERE asset_key = ?", (asset.key,))
            self.conn.executemany(
                "INSERT OR IGNORE INTO asset_tags (asset_key, tag) VALUES (?, ?)",
                [(asset.key, tag) for tag in asset.tags],
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to store asset {asset.key}: {e}") from e

    def store_assets(self, assets: Iterable[Asset]):
        for asset in assets:
            self.put_asset(asset)

    def delete_asset(self, key: str):
        # foreign keys may be off for this connection, remove tags explicitly
        self.conn.execute("DELETE FROM asset_tags WHERE asset_key = ?", (key,))
        self.conn.execute("DELETE FROM assets WHERE key = ?", (key,))

    def fetch_assets(self, cursor: Optional[str], limit: int) -> Tuple[List[Asset], Optional[str]]:
        """
        Returns up to `limit` assets ordered by key, starting after `cursor`
        (None for the beginning), along with the cursor for the next call.
        An empty list means the scan is complete.
        """
        try:
            cur = self.conn.cursor()
            if cursor is None:
                cur.execute(f"SELECT {_ASSET_COLUMNS} FROM assets ORDER BY key LIMIT ?", (limit,))
            else:
                cur.execute(
                    f"SELECT {_ASSET_COLUMNS} FROM assets WHERE key > ? ORDER BY key LIMIT ?",
                    (cursor, limit),
                )
            rows = cur.fetchall()
            if not rows:
                return [], cursor

            # Pull the tags for the whole batch with one key range query
            first_key, last_key = rows[0][0], rows[-1][0]
            cur.execute("""
                SELECT asset_key, tag FROM asset_tags
                WHERE asset_key >= ? AND asset_key <= ?
                ORDER BY asset_key, tag
            """, (first_key, last_key))
            tags: dict[str, List[str]] = {}
            for key, tag in cur.fetchall():
                tags.setdefault(key, []).append(tag)
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to fetch assets after {cursor!r}: {e}") from e

        assets = [self._asset_from_row(row, tags.get(row[0], [])) for row in rows]
        logging.debug(f"Fetched {len(assets)} assets after cursor {cursor!r}")
        return assets, last_key

    # --- Attribute Counts ---

    def all_tags(self) -> List[AttributeCount]:
        return self._counts("""
            SELECT LOWER(tag) AS label, COUNT(*) FROM asset_tags
            GROUP BY label ORDER BY label
        """)

    def all_locations(self) -> List[AttributeCount]:
        """Counts each location part (label, city, region) separately."""
        return self._counts("""
            SELECT value, COUNT(*) FROM (
                SELECT LOWER(loc_label) AS value FROM assets WHERE loc_label IS NOT NULL AND loc_label != ''
                UNION ALL
                SELECT LOWER(loc_city) FROM assets WHERE loc_city IS NOT NULL AND loc_city != ''
                UNION ALL
                SELECT LOWER(loc_region) FROM assets WHERE loc_region IS NOT NULL AND loc_region != ''
            )
            GROUP BY value ORDER BY value
        """)

    def all_years(self) -> List[AttributeCount]:
        """Counts assets by the year of their best date."""
        return self._counts("""
            SELECT SUBSTR(COALESCE(user_date, original_date, import_date), 1, 4) AS year, COUNT(*)
            FROM assets GROUP BY year ORDER BY year
        """)

    def all_media_types(self) -> List[AttributeCount]:
        return self._counts("""
            SELECT LOWER(media_type) AS label, COUNT(*) FROM assets
            GROUP BY label ORDER BY label
        """)

    # --- Internal Helpers ---

    def _counts(self, sql: str) -> List[AttributeCount]:
        cur = self.conn.cursor()
        cur.execute(sql)
        return [AttributeCount(label, count) for label, count in cur.fetchall()]

    def _tags_for(self, key: str) -> List[str]:
        cur = self.conn.cursor()
        cur.execute("SELECT tag FROM asset_tags WHERE asset_key = ? ORDER BY tag", (key,))
        return [row[0] for row in cur.fetchall()]

    def _asset_from_row(self, row: Tuple[Any, ...], tags: List[str]) -> Asset:
        (key, checksum, filename, byte_length, media_type, caption,
         label, city, region, import_date, user_date, original_date) = row
        location = None
        if label is not None or city is not None or region is not None:
            location = Location(label, city, region)
        return Asset(
            key=key,
            checksum=checksum or '',
            filename=filename,
            byte_length=byte_length,
            media_type=media_type,
            tags=tags,
            import_date=_parse_dt(import_date),
            caption=caption,
            location=location,
            user_date=_parse_dt(user_date),
            original_date=_parse_dt(original_date),
        )
