from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from .normalize import clean_value
from .scorer import planar_distance

Point = Tuple[float, float]

# Modelled attribute -> map tag key.
TAG_KEYS: Dict[str, str] = {
    "ref_id": "ref:ruian",
    "country": "addr:country",
    "city": "addr:city",
    "postcode": "addr:postcode",
    "street": "addr:street",
    "house_number": "addr:housenumber",
    "street_number": "addr:streetnumber",
    "conscription_number": "addr:conscriptionnumber",
    "provisional_number": "addr:provisionalnumber",
    "is_in": "is_in",
    "source_addr": "source:addr",
    "source_loc": "source:loc",
}


@dataclass(eq=False)
class AddressRecord:
    """One address point from either the registry or the map feed.

    Records compare by identity so the same object can be tracked through
    match pools and candidate buckets even when two records carry equal
    attributes.
    """

    ref_id: Optional[str] = None
    point: Optional[Point] = None
    country: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    street: Optional[str] = None
    house_number: Optional[str] = None
    street_number: Optional[str] = None
    conscription_number: Optional[str] = None
    provisional_number: Optional[str] = None
    is_in: Optional[str] = None
    source_addr: Optional[str] = None
    source_loc: Optional[str] = None
    deleted: bool = False
    node_id: Optional[int] = None
    version: Optional[int] = None
    tags: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_tags(
        cls,
        tags: Mapping[str, str],
        point: Optional[Point] = None,
        node_id: Optional[int] = None,
        version: Optional[int] = None,
    ) -> "AddressRecord":
        known = {tag: attr for attr, tag in TAG_KEYS.items()}
        values: Dict[str, Optional[str]] = {}
        extra: Dict[str, str] = {}
        for key, value in tags.items():
            attr = known.get(key)
            if attr is None:
                extra[key] = value
            else:
                values[attr] = clean_value(value)
        return cls(point=point, node_id=node_id, version=version, tags=extra, **values)

    def as_tags(self) -> Dict[str, str]:
        rendered = dict(self.tags)
        for attr, key in TAG_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                rendered.pop(key, None)
            else:
                rendered[key] = value
        return rendered

    def address_info(self) -> str:
        street = self.street or self.city or "?"
        text = f"{street} {self.house_number or '?'}"
        if self.city and self.street:
            text += f", {self.city}"
        if self.ref_id:
            text += f" [ref {self.ref_id}]"
        if self.node_id is not None:
            text += f" [node {self.node_id}]"
        return text


@dataclass(frozen=True)
class MatchedPair:
    """A registry record and a map record judged to be the same point.

    Either side may be missing for records left unmatched, never both.
    """

    registry: Optional[AddressRecord] = None
    map: Optional[AddressRecord] = None

    def __post_init__(self) -> None:
        if self.registry is None and self.map is None:
            raise ValueError("a pair needs at least one record")

    @property
    def is_matched(self) -> bool:
        return self.registry is not None and self.map is not None

    @property
    def map_only(self) -> bool:
        return self.registry is None

    @property
    def distance(self) -> Optional[float]:
        if not self.is_matched:
            return None
        if self.registry.point is None or self.map.point is None:
            return None
        return planar_distance(self.registry.point, self.map.point)
