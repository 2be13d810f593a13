import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .core import AssetSearchApp
from .exceptions import QueryError
from .models import SortField, SortOrder
from .reporting import SearchReport
from . import config

def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Asset Search: boolean queries over a media catalog")

    p.add_argument("--db", type=Path, default=Path(config.DEFAULT_DB_NAME),
                   help=f"Path to the SQLite catalog (default: ./{config.DEFAULT_DB_NAME})")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")

    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Add the files under a directory to the catalog")
    imp.add_argument("src", type=Path, help="Source directory to scan")
    imp.add_argument("--skip-dirs-file", type=Path, default=None, help="File containing paths to ignore")

    search = sub.add_parser("search", help="Find assets matching a query",
                            epilog="example: tag:cat and (loc:paris or loc:tokyo) -is:video")
    search.add_argument("query", help="Query string")
    search.add_argument("--sort", choices=[f.value for f in SortField], default=None,
                        help="Field on which to sort the results")
    search.add_argument("--order", choices=[o.value for o in SortOrder], default=None,
                        help="Sort order (default: asc)")
    search.add_argument("--csv", type=Path, default=None, help="Write the results to this CSV file")
    search.add_argument("--progress", action="store_true", help="Show a progress bar while scanning")

    stats = sub.add_parser("stats", help="Count assets by tag, location, year or media type")
    stats.add_argument("kind", choices=AssetSearchApp.STATS)

    show = sub.add_parser("show", help="Print one asset record")
    show.add_argument("asset_id")

    return p.parse_args(argv)

def load_skip_dirs(skip_file: Optional[Path]) -> set[Path]:
    if not skip_file or not skip_file.exists():
        return set()

    skips = set()
    with skip_file.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                skips.add(Path(line))
    return skips

def run(args) -> int:
    app = AssetSearchApp(args.db.resolve())
    report = SearchReport()

    if args.command == "import":
        app.import_tree(args.src.resolve(), load_skip_dirs(args.skip_dirs_file))
    elif args.command == "search":
        sort_field = SortField(args.sort) if args.sort else None
        sort_order = SortOrder(args.order) if args.order else None
        results = app.search(args.query, sort_field, sort_order, progress=args.progress)
        if args.csv:
            report.write_csv(results, args.csv)
        else:
            report.print_table(results)
    elif args.command == "stats":
        report.print_counts(app.stats(args.kind))
    elif args.command == "show":
        asset = app.get_asset(args.asset_id)
        if asset is None:
            print(f"No asset with id={args.asset_id}")
            return 1
        print(f"  id:            {asset.key}")
        print(f"  filename:      {asset.filename}")
        print(f"  media_type:    {asset.media_type}")
        print(f"  size_bytes:    {asset.byte_length}")
        print(f"  checksum:      {asset.checksum}")
        print(f"  best_date:     {asset.best_date().isoformat()}")
        print(f"  tags:          {', '.join(asset.tags)}")
        print(f"  location:      {asset.location or ''}")
        print(f"  caption:       {asset.caption or ''}")
    return 0

def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        sys.exit(run(args))
    except QueryError as e:
        logging.error(f"Invalid query: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)
    except Exception:
        logging.exception("Fatal error.")
        sys.exit(1)

if __name__ == "__main__":
    main()
