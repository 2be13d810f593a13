import logging
from typing import Any, List, Optional

from tqdm import tqdm

from .. import config
from ..models import SearchResult, SortField, SortOrder
from ..query.parser import parse
from .sorting import sort_search_results


class AssetScanner:
    """
    Evaluates a query against every asset in a record repository.

    The repository only needs to provide `fetch_assets(cursor, limit)`,
    returning `(assets, next_cursor)`. A cursor of None starts from the
    beginning and an empty batch marks the end; the cursor itself is never
    inspected here.
    """

    def __init__(self, repository: Any, batch_size: int = config.SCAN_BATCH_SIZE):
        self.repository = repository
        self.batch_size = batch_size

    def scan(self,
             query: str,
             sort_field: Optional[SortField] = None,
             sort_order: Optional[SortOrder] = None,
             progress: bool = False) -> List[SearchResult]:
        """
        Returns the search results for every asset matching the query.

        Parse errors and repository errors propagate; there are no partial
        results. Batches are fetched one at a time, in order.
        """
        if not query:
            return []

        constraint = parse(query)

        results: List[SearchResult] = []
        cursor = None
        batches = 0
        examined = 0
        with tqdm(desc="Scanning", unit="asset", disable=not progress) as bar:
            while True:
                assets, next_cursor = self.repository.fetch_assets(cursor, self.batch_size)
                if not assets:
                    break
                batches += 1
                examined += len(assets)
                for asset in assets:
                    if constraint.matches(asset):
                        results.append(SearchResult.from_asset(asset))
                bar.update(len(assets))
                cursor = next_cursor

        logging.debug(f"Examined {examined} assets in {batches} batches")
        logging.info(f"Query {query!r} matched {len(results)} assets")

        sort_search_results(results, sort_field, sort_order)
        return results
