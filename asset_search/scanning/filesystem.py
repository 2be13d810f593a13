import os
import base64
import logging
import mimetypes
import uuid
from datetime import datetime, UTC
from pathlib import Path
from typing import Iterator, Optional, Set

from .. import config
from ..exceptions import FileHashError
from ..models import Asset
from ..metadata.extract import MetadataExtractor
from .hasher import FileHasher


def infer_media_type(path: Path) -> str:
    """Guesses the media type from the file extension."""
    ext = path.suffix.lower()
    if ext in config.EXTRA_MEDIA_TYPES:
        return config.EXTRA_MEDIA_TYPES[ext]
    guess, _ = mimetypes.guess_type(path.name, strict=False)
    return guess or config.DEFAULT_MEDIA_TYPE


def new_asset_key(import_date: datetime, media_type: str, fallback_ext: str = '') -> str:
    """
    Builds a unique asset key: the base64 encoding of a relative path made
    from the import time and a random name. The time is rounded down to the
    quarter hour so that keys spread over a modest number of directories.
    """
    minute = import_date.minute - import_date.minute % config.KEY_MINUTE_BUCKET
    datepath = config.KEY_PATH_PATTERN.format(
        year=import_date.year, month=import_date.month, day=import_date.day,
        hour=import_date.hour, minute=minute,
    )
    ext = mimetypes.guess_extension(media_type, strict=False) or fallback_ext
    name = f"{uuid.uuid4().hex}{ext}"
    relpath = f"{datepath}/{name}".lower()
    return base64.b64encode(relpath.encode('utf-8')).decode('ascii')


class DiskScanner:
    def __init__(self):
        self.hasher = FileHasher()
        self.metadata = MetadataExtractor()

    def scan(self, root: Path, skip_dirs: Optional[Set[Path]] = None) -> Iterator[Asset]:
        """
        Generator that yields a new Asset for every readable file in root.
        Files that cannot be hashed are logged and skipped.
        """
        skip_dirs = skip_dirs or set()
        for path in self._iter_files(root, skip_dirs):
            asset = self._process_single_file(path)
            if asset:
                yield asset

    def _process_single_file(self, path: Path) -> Optional[Asset]:
        # AppleDouble resource forks are not media
        if path.name.startswith("._"):
            return None

        try:
            checksum = self.hasher.checksum(path)
            size_bytes = path.stat().st_size
        except (FileHashError, OSError) as e:
            logging.error(f"Failed to scan {path}: {e}")
            return None

        media_type = infer_media_type(path)
        import_date = datetime.now(UTC)
        return Asset(
            key=new_asset_key(import_date, media_type, path.suffix.lower()),
            checksum=checksum,
            filename=path.name,
            byte_length=size_bytes,
            media_type=media_type,
            import_date=import_date,
            original_date=self.metadata.get_original_date(media_type, path),
        )

    def _iter_files(self, root: Path, skip_dirs: Set[Path]) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()
            if skip_dirs and any(sd == current or sd in current.parents for sd in skip_dirs):
                continue

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except (OSError, PermissionError):
                logging.warning(f"Permission denied: {current}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file(follow_symlinks=False):
                    files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f
