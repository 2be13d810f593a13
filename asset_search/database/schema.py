"""
Database schema definitions.
"""
import sqlite3
import logging

CURRENT_SCHEMA_VERSION = 1

def init_schema(conn: sqlite3.Connection):
    """
    Applies the catalog schema to the database.
    Idempotent: safe to run on every startup.
    """
    with conn:
        # 1. Version Tracking (For future migrations)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            );
        """)

        cur = conn.cursor()
        cur.execute("SELECT version FROM schema_version")
        if not cur.fetchone():
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (CURRENT_SCHEMA_VERSION,))

        # 2. Asset Records
        # Dates are ISO 8601 strings in UTC, so they sort and substr() cleanly
        conn.execute("""
        CREATE TABLE IF NOT EXISTS assets (
            key             TEXT PRIMARY KEY,
            checksum        TEXT UNIQUE,          -- sha256-<hex>
            filename        TEXT NOT NULL,
            byte_length     INTEGER NOT NULL DEFAULT 0,
            media_type      TEXT NOT NULL,
            caption         TEXT,
            loc_label       TEXT,
            loc_city        TEXT,
            loc_region      TEXT,
            import_date     TEXT NOT NULL,
            user_date       TEXT,
            original_date   TEXT
        );
        """)

        # 3. Tags (one row per asset/tag pair)
        conn.execute("""
        CREATE TABLE IF NOT EXISTS asset_tags (
            asset_key       TEXT NOT NULL,
            tag             TEXT NOT NULL,
            PRIMARY KEY (asset_key, tag),
            FOREIGN KEY(asset_key) REFERENCES assets(key) ON DELETE CASCADE
        );
        """)

        # 4. Indices for Performance
        conn.execute("CREATE INDEX IF NOT EXISTS idx_assets_best_date ON assets(COALESCE(user_date, original_date, import_date));")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_asset_tags_tag ON asset_tags(tag);")

    logging.debug("Database schema initialized.")
