from typing import List, Optional

from ..models import SearchResult, SortField, SortOrder, as_utc

_SORT_KEYS = {
    SortField.DATE: lambda r: as_utc(r.datetime),
    SortField.IDENTIFIER: lambda r: r.asset_id,
    SortField.FILENAME: lambda r: r.filename,
    SortField.MEDIA_TYPE: lambda r: r.media_type,
}


def sort_search_results(results: List[SearchResult],
                        field: Optional[SortField],
                        order: Optional[SortOrder] = None):
    """
    Sorts the results in place on the given field, ascending unless told
    otherwise. Without a field the results keep their discovery order.
    """
    if field is None:
        return
    if order is None:
        order = SortOrder.ASCENDING
    results.sort(key=_SORT_KEYS[field], reverse=(order == SortOrder.DESCENDING))
