import logging
from pathlib import Path
from typing import List, Optional, Set

from tqdm import tqdm

from .database.db import DBManager
from .database.ops import DBOperations
from .models import Asset, AttributeCount, SearchResult, SortField, SortOrder
from .scanning.filesystem import DiskScanner
from .search.scanner import AssetScanner
from . import config

class AssetSearchApp:
    """Ties the catalog database to the importer and the query engine."""

    STATS = ('tags', 'locations', 'years', 'types')

    def __init__(self, db_path: Path):
        self.db_manager = DBManager(db_path)

    def import_tree(self, src_root: Path, skip_dirs: Optional[Set[Path]] = None) -> int:
        """
        Records every new file under src_root in the catalog. Files whose
        checksum is already known are skipped. Returns the number imported.
        """
        with self.db_manager as conn:
            db_ops = DBOperations(conn)
            scanner = DiskScanner()

            logging.info(f"Importing from {src_root}...")
            imported = 0
            skipped = 0
            for asset in tqdm(scanner.scan(src_root, skip_dirs), desc="Importing", unit="file"):
                if db_ops.get_asset_by_digest(asset.checksum):
                    logging.debug(f"Already cataloged: {asset.filename}")
                    skipped += 1
                    continue
                db_ops.put_asset(asset)
                imported += 1
                if imported % 1000 == 0:
                    conn.commit()

            conn.commit()
            logging.info(f"Import complete. {imported} new assets, {skipped} duplicates skipped.")
            return imported

    def search(self,
               query: str,
               sort_field: Optional[SortField] = None,
               sort_order: Optional[SortOrder] = None,
               progress: bool = False) -> List[SearchResult]:
        with self.db_manager as conn:
            scanner = AssetScanner(DBOperations(conn), batch_size=config.SCAN_BATCH_SIZE)
            return scanner.scan(query, sort_field, sort_order, progress=progress)

    def stats(self, kind: str) -> List[AttributeCount]:
        with self.db_manager as conn:
            db_ops = DBOperations(conn)
            if kind == 'tags':
                return db_ops.all_tags()
            if kind == 'locations':
                return db_ops.all_locations()
            if kind == 'years':
                return db_ops.all_years()
            if kind == 'types':
                return db_ops.all_media_types()
            raise ValueError(f"unknown statistic: {kind}")

    def get_asset(self, key: str) -> Optional[Asset]:
        with self.db_manager as conn:
            return DBOperations(conn).get_asset_by_id(key)
