from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import Enum
from typing import List, Optional


def as_utc(dt: datetime) -> datetime:
    # naive values are taken to be UTC
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


@dataclass
class Location:
    """
    Where an asset was captured. Any of the parts may be missing.
    """
    label: Optional[str] = None     # user-defined, e.g. "museum"
    city: Optional[str] = None
    region: Optional[str] = None    # state, province or country

    @classmethod
    def from_parts(cls, label: str, city: str, region: str) -> "Location":
        """Builds a Location where empty parts become None."""
        return cls(label or None, city or None, region or None)

    @classmethod
    def parse(cls, text: str) -> "Location":
        """
        Parses user input into a Location.

        Accepted forms:
            label
            label; city
            label; city, region
            city, region

        Anything with too many separators is treated as a label.
        """
        if not text:
            return cls()

        if ';' in text:
            label_tail = text.split(';')
            if len(label_tail) == 2:
                label, tail = label_tail
                if ',' in tail:
                    city_region = tail.split(',')
                    if len(city_region) == 2:
                        return cls.from_parts(label.strip(), city_region[0].strip(), city_region[1].strip())
                else:
                    return cls.from_parts(label.strip(), tail.strip(), '')
        elif ',' in text:
            city_region = text.split(',')
            if len(city_region) == 2:
                return cls.from_parts('', city_region[0].strip(), city_region[1].strip())

        return cls(label=text)

    def has_values(self) -> bool:
        return self.label is not None or self.city is not None or self.region is not None

    def partial_match(self, query: str) -> bool:
        """
        True if the (already lowercased) query appears within any part.
        """
        for part in (self.label, self.city, self.region):
            if part and query in part.lower():
                return True
        return False

    def __str__(self) -> str:
        if self.label and self.city and self.region:
            return f"{self.label}; {self.city}, {self.region}"
        if self.city and self.region:
            return f"{self.city}, {self.region}"
        if self.label and (self.city or self.region):
            return f"{self.label}; {self.city or self.region}"
        return self.label or self.city or self.region or ''


@dataclass
class Asset:
    """
    An image, video or other file recorded in the catalog.
    """
    key: str
    checksum: str = ''
    filename: str = ''
    byte_length: int = 0
    media_type: str = ''
    tags: List[str] = field(default_factory=list)
    import_date: datetime = field(default_factory=lambda: datetime.now(UTC))
    caption: Optional[str] = None
    location: Optional[Location] = None

    # User supplied date wins over the one read from the file itself
    user_date: Optional[datetime] = None
    original_date: Optional[datetime] = None

    def best_date(self) -> datetime:
        """User date, then the original (EXIF) date, then the import date."""
        if self.user_date is not None:
            return self.user_date
        if self.original_date is not None:
            return self.original_date
        return self.import_date


@dataclass
class SearchResult:
    asset_id: str
    filename: str
    media_type: str
    datetime: datetime
    location: Optional[Location] = None

    @classmethod
    def from_asset(cls, asset: Asset) -> "SearchResult":
        return cls(
            asset_id=asset.key,
            filename=asset.filename,
            media_type=asset.media_type,
            datetime=asset.best_date(),
            location=asset.location,
        )


@dataclass
class AttributeCount:
    """A tag, location part, year or media type and how many assets have it."""
    label: str
    count: int


class SortField(Enum):
    DATE = 'date'
    IDENTIFIER = 'identifier'
    FILENAME = 'filename'
    MEDIA_TYPE = 'media-type'


class SortOrder(Enum):
    ASCENDING = 'asc'
    DESCENDING = 'desc'
