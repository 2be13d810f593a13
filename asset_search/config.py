"""
Configuration constants for the asset search engine.
"""

# --- Search ---
# Number of asset records requested from the repository per round trip.
SCAN_BATCH_SIZE = 1024

# --- Catalog ---
DEFAULT_DB_NAME = "asset_catalog.db"

# --- Media Types ---
# Extensions the standard mimetypes table does not know (or gets wrong).
EXTRA_MEDIA_TYPES = {
    '.aae': 'text/xml',
    '.heic': 'image/heic',
    '.heif': 'image/heif',
    '.dng': 'image/x-adobe-dng',
    '.cr2': 'image/x-canon-cr2',
    '.cr3': 'image/x-canon-cr3',
    '.nef': 'image/x-nikon-nef',
    '.arw': 'image/x-sony-arw',
    '.orf': 'image/x-olympus-orf',
    '.rw2': 'image/x-panasonic-rw2',
    '.mts': 'video/mp2t',
    '.m2ts': 'video/mp2t',
}
DEFAULT_MEDIA_TYPE = 'application/octet-stream'

# --- Metadata Parsing ---
DATE_TAGS = [
    'EXIF DateTimeOriginal',
    'EXIF DateTimeDigitized',
    'Image DateTime',
]

# --- Hashing ---
HASH_ALGORITHM = 'sha256'
HASH_CHUNK_SIZE = 64 * 1024  # 64 KB chunks for reading

# --- Asset Keys ---
# Import times are rounded down to this many minutes when building the
# relative path encoded in an asset key.
KEY_MINUTE_BUCKET = 15
KEY_PATH_PATTERN = "{year:04d}/{month:02d}/{day:02d}/{hour:02d}{minute:02d}"
