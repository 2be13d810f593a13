"""
Constraint tree nodes produced by the query parser.

Every node is immutable and only reads the asset handed to matches(), so a
single tree can be evaluated against any number of assets, from any thread.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from ..models import Asset, as_utc


class Constraint(ABC):
    """Determines if an asset matches certain criteria."""

    @abstractmethod
    def matches(self, asset: Asset) -> bool:
        ...


@dataclass(frozen=True)
class AndConstraint(Constraint):
    lhs: Constraint
    rhs: Constraint

    def matches(self, asset: Asset) -> bool:
        return self.lhs.matches(asset) and self.rhs.matches(asset)


@dataclass(frozen=True)
class OrConstraint(Constraint):
    lhs: Constraint
    rhs: Constraint

    def matches(self, asset: Asset) -> bool:
        return self.lhs.matches(asset) or self.rhs.matches(asset)


@dataclass(frozen=True)
class NotConstraint(Constraint):
    rhs: Constraint

    def matches(self, asset: Asset) -> bool:
        return not self.rhs.matches(asset)


@dataclass(frozen=True)
class FilenameConstraint(Constraint):
    name: str

    def __post_init__(self):
        object.__setattr__(self, 'name', self.name.lower())

    def matches(self, asset: Asset) -> bool:
        return self.name == asset.filename.lower()


# mime-type = type "/" [tree "."] subtype ["+" suffix] *[";" parameter]
def split_media_type(media_type: str) -> Optional[Tuple[str, str]]:
    """
    Returns the lowercased (type, subtype) of a media type, with any suffix
    and parameters removed, or None if it is not of the form type/subtype.
    """
    essence = media_type.split(';', 1)[0].strip().lower()
    if '/' not in essence:
        return None
    mtype, subtype = essence.split('/', 1)
    subtype = subtype.split('+', 1)[0]
    if not mtype or not subtype:
        return None
    return mtype, subtype


@dataclass(frozen=True)
class MediaTypeConstraint(Constraint):
    type: str

    def __post_init__(self):
        object.__setattr__(self, 'type', self.type.lower())

    def matches(self, asset: Asset) -> bool:
        parts = split_media_type(asset.media_type)
        return parts is not None and parts[0] == self.type


@dataclass(frozen=True)
class MediaSubtypeConstraint(Constraint):
    subtype: str

    def __post_init__(self):
        object.__setattr__(self, 'subtype', self.subtype.lower())

    def matches(self, asset: Asset) -> bool:
        parts = split_media_type(asset.media_type)
        return parts is not None and parts[1] == self.subtype


@dataclass(frozen=True)
class TagConstraint(Constraint):
    tag: str

    def __post_init__(self):
        object.__setattr__(self, 'tag', self.tag.lower())

    def matches(self, asset: Asset) -> bool:
        return any(t.lower() == self.tag for t in asset.tags)


class LocationField(Enum):
    ANY = 'any'
    LABEL = 'label'
    CITY = 'city'
    REGION = 'region'


@dataclass(frozen=True)
class LocationConstraint(Constraint):
    """
    With a value, the field (or for ANY, some part) must match it. With an
    empty value, the field (or for ANY, some part) must be missing.
    """
    field: LocationField
    value: str

    def __post_init__(self):
        object.__setattr__(self, 'value', self.value.lower())

    def matches(self, asset: Asset) -> bool:
        loc = asset.location
        label = loc.label if loc else None
        city = loc.city if loc else None
        region = loc.region if loc else None

        if not self.value:
            if self.field == LocationField.ANY:
                return label is None or city is None or region is None
            return self._part(label, city, region) is None

        if self.field == LocationField.ANY:
            return loc is not None and loc.partial_match(self.value)
        part = self._part(label, city, region)
        return part is not None and part.lower() == self.value

    def _part(self, label: Optional[str], city: Optional[str], region: Optional[str]) -> Optional[str]:
        if self.field == LocationField.LABEL:
            return label
        if self.field == LocationField.CITY:
            return city
        return region


@dataclass(frozen=True)
class AfterConstraint(Constraint):
    """Best date on or after the one given."""
    after: datetime

    def matches(self, asset: Asset) -> bool:
        return as_utc(asset.best_date()) >= as_utc(self.after)


@dataclass(frozen=True)
class BeforeConstraint(Constraint):
    """Best date strictly before the one given."""
    before: datetime

    def matches(self, asset: Asset) -> bool:
        return as_utc(asset.best_date()) < as_utc(self.before)


@dataclass(frozen=True)
class EmptyConstraint(Constraint):
    """Stands in for an empty query and matches nothing."""

    def matches(self, asset: Asset) -> bool:
        return False
