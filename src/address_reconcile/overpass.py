from __future__ import annotations

import logging
from typing import List, Optional, Set

import requests

from .components import AddressRecord
from .exceptions import LoaderError
from .parser import BoundingBox, parse_osm_xml

logger = logging.getLogger(__name__)

DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"

QUERY_TEMPLATE = """[out:xml][timeout:{timeout}];
node["addr:housenumber"]["addr:country"="{country}"]({bbox});
out meta;
"""


class OverpassLoader:
    """Download address nodes from the Overpass API one tile at a time."""

    def __init__(
        self,
        url: str = DEFAULT_OVERPASS_URL,
        country: str = "CZ",
        tile_size: float = 1.0,
        timeout: int = 300,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.country = country
        self.tile_size = tile_size
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_query(self, tile: BoundingBox) -> str:
        return QUERY_TEMPLATE.format(
            timeout=self.timeout, country=self.country, bbox=tile.as_overpass()
        )

    def fetch_tile(self, tile: BoundingBox) -> List[AddressRecord]:
        try:
            response = self.session.post(
                self.url,
                data=self.build_query(tile).encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise LoaderError(f"Failed to download data for tile {tile}") from exc
        return parse_osm_xml(response.content)

    def load(self, bbox: BoundingBox) -> List[AddressRecord]:
        records: List[AddressRecord] = []
        loaded_ids: Set[int] = set()
        for tile in bbox.tiles(self.tile_size):
            logger.info("Loading map nodes from bounding box %s", tile)
            for record in self.fetch_tile(tile):
                # Nodes on a tile edge are returned by both neighbours.
                if record.node_id in loaded_ids:
                    continue
                loaded_ids.add(record.node_id)
                records.append(record)
            logger.info("Loaded %d map nodes", len(records))
        return records
