from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Union

from lxml import etree

from .components import AddressRecord
from .exceptions import FeedFormatError

_IGNORED_ELEMENTS = {"note", "meta", "bounds"}


@dataclass(frozen=True)
class BoundingBox:
    """Longitude/latitude box in EPSG:4326."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def __post_init__(self) -> None:
        if self.min_lon >= self.max_lon or self.min_lat >= self.max_lat:
            raise ValueError(f"bounding box {self} is empty or inverted")

    def tiles(self, size: float = 1.0) -> Iterator["BoundingBox"]:
        """Split the box into tiles of at most ``size`` degrees a side.

        Tiles are produced column by column, south to north within each
        column, matching the order the map feed is queried in.
        """
        if size <= 0:
            raise ValueError("tile size must be positive")
        columns = math.ceil((self.max_lon - self.min_lon) / size)
        rows = math.ceil((self.max_lat - self.min_lat) / size)
        for x in range(columns):
            for y in range(rows):
                yield BoundingBox(
                    self.min_lon + x * size,
                    self.min_lat + y * size,
                    min(self.min_lon + (x + 1) * size, self.max_lon),
                    min(self.min_lat + (y + 1) * size, self.max_lat),
                )

    def as_overpass(self) -> str:
        return f"{self.min_lat},{self.min_lon},{self.max_lat},{self.max_lon}"

    def __str__(self) -> str:
        return f"BOX({self.min_lon} {self.min_lat},{self.max_lon} {self.max_lat})"


def parse_bbox(text: str) -> BoundingBox:
    """Parse ``"minlon,minlat,maxlon,maxlat"``."""
    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 4:
        raise ValueError(f"bounding box needs four comma separated numbers, got {text!r}")
    try:
        values = [float(part) for part in parts]
    except ValueError as exc:
        raise ValueError(f"bounding box {text!r} contains a non-numeric value") from exc
    return BoundingBox(*values)


def _parse_node(element: etree._Element) -> AddressRecord:
    try:
        node_id = int(element.get("id"))
        point = (float(element.get("lon")), float(element.get("lat")))
        version = element.get("version")
    except (TypeError, ValueError) as exc:
        raise FeedFormatError(f"node {element.get('id')!r} has invalid attributes") from exc

    tags: Dict[str, str] = {}
    for child in element:
        if child.tag != "tag":
            raise FeedFormatError(f"Unsupported element '{child.tag}' in node {node_id}")
        tags[child.get("k")] = child.get("v")

    return AddressRecord.from_tags(
        tags,
        point=point,
        node_id=node_id,
        version=int(version) if version else None,
    )


def parse_osm_xml(content: Union[bytes, str]) -> List[AddressRecord]:
    """Parse an OSM XML document into address records.

    Only nodes carrying a house number are returned.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    try:
        root = etree.fromstring(content)
    except etree.XMLSyntaxError as exc:
        raise FeedFormatError("Failed to read XML stream") from exc

    if root.tag != "osm":
        raise FeedFormatError(f"Unsupported element '{root.tag}'")

    records: List[AddressRecord] = []
    for element in root:
        if not isinstance(element.tag, str) or element.tag in _IGNORED_ELEMENTS:
            continue
        if element.tag != "node":
            raise FeedFormatError(f"Unsupported element '{element.tag}'")
        record = _parse_node(element)
        if record.house_number:
            records.append(record)
    return records
