import logging
from pathlib import Path
from datetime import datetime, UTC
from typing import Optional

import exifread

from .. import config


class MetadataExtractor:
    """
    Reads the original capture date from image files using 'exifread'.
    """

    def get_original_date(self, media_type: str, path: Path) -> Optional[datetime]:
        """
        Returns the EXIF original date of an image, or None when the file is
        not an image, carries no date, or cannot be read. EXIF dates have no
        time zone; they are taken as UTC.
        """
        if not media_type.startswith('image/'):
            return None

        try:
            with path.open('rb') as f:
                # details=False speeds up processing significantly
                tags = exifread.process_file(f, details=False)
        except Exception as e:
            logging.warning(f"ExifRead failed for {path}: {e}")
            return None

        return self._parse_exif_date(tags)

    def _parse_exif_date(self, tags) -> Optional[datetime]:
        """Helper to parse standard EXIF date strings from exifread."""
        for tag in config.DATE_TAGS:
            if tag in tags:
                try:
                    # EXIF format is usually "YYYY:MM:DD HH:MM:SS"
                    dt_str = str(tags[tag]).replace(':', '-', 2)
                    return datetime.strptime(dt_str, "%Y-%m-%d %H:%M:%S").replace(tzinfo=UTC)
                except ValueError:
                    continue
        return None
