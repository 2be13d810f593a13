import csv
import logging
from pathlib import Path
from typing import List, Sequence

from .models import AttributeCount, SearchResult

HEADERS = ["Asset ID", "Filename", "Media Type", "Date", "Location"]


class SearchReport:
    """Renders search results and attribute counts for people to read."""

    def write_csv(self, results: Sequence[SearchResult], output_csv: Path):
        """Writes one row per result, in the order given."""
        logging.info(f"Writing {len(results)} results to {output_csv}")
        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(HEADERS)
            for row in self._rows(results):
                writer.writerow(row)

    def print_table(self, results: Sequence[SearchResult]):
        if not results:
            print("No matching assets.")
            return

        rows = self._rows(results)
        widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(HEADERS)]
        print(" | ".join(h.ljust(w) for h, w in zip(HEADERS, widths)))
        print("-+-".join("-" * w for w in widths))
        for row in rows:
            print(" | ".join(col.ljust(w) for col, w in zip(row, widths)))
        print(f"\n{len(results)} matching assets")

    def print_counts(self, counts: Sequence[AttributeCount]):
        if not counts:
            print("(none)")
            return
        width = max(len(c.label) for c in counts)
        for c in counts:
            print(f"{c.label.ljust(width)} | {str(c.count).rjust(6)}")

    def _rows(self, results: Sequence[SearchResult]) -> List[List[str]]:
        return [
            [
                r.asset_id,
                r.filename,
                r.media_type,
                r.datetime.isoformat(),
                str(r.location) if r.location else "",
            ]
            for r in results
        ]
