from __future__ import annotations

import logging
from typing import Any, List

import psycopg2
from psycopg2.extras import RealDictCursor

from .components import AddressRecord
from .exceptions import LoaderError
from .normalize import (
    BUILDING_TYPE_CONSCRIPTION,
    BUILDING_TYPE_PROVISIONAL,
    build_is_in,
    clean_value,
    compose_house_number,
    compose_street_number,
)
from .parser import BoundingBox

logger = logging.getLogger(__name__)

REGISTRY_SOURCE = "ruian"
REGISTRY_COUNTRY = "CZ"

ADDRESS_POINTS_SQL = """
SELECT am.kod AS ref_id,
       am.adrp_psc AS postcode,
       am.cislo_domovni AS building_number,
       am.cislo_orientacni_hodnota AS street_number_value,
       am.cislo_orientacni_pismeno AS street_number_letter,
       ST_X(ST_Transform(am.definicni_bod, 4326)) AS lon,
       ST_Y(ST_Transform(am.definicni_bod, 4326)) AS lat,
       am.deleted AS deleted,
       u.nazev AS street,
       ob.nazev AS city,
       so.typ_kod AS building_type,
       vusc.nazev AS region
FROM rn_adresni_misto am
LEFT JOIN rn_ulice u ON am.ulice_kod = u.kod
LEFT JOIN rn_stavebni_objekt so ON am.stavobj_kod = so.kod
LEFT JOIN rn_cast_obce co ON so.cobce_kod = co.kod
LEFT JOIN rn_obec ob ON co.obec_kod = ob.kod
LEFT JOIN rn_okres ok ON ob.okres_kod = ok.kod
LEFT JOIN rn_vusc vusc ON ok.vusc_kod = vusc.kod
WHERE am.definicni_bod IS NOT NULL
  AND so.typ_kod IN (%(conscription)s, %(provisional)s)
  AND ST_Contains(
        ST_MakeEnvelope(%(min_lon)s, %(min_lat)s, %(max_lon)s, %(max_lat)s, 4326),
        ST_Transform(am.definicni_bod, 4326))
ORDER BY am.kod
"""

COUNTRY_EXTENT_SQL = """
SELECT ST_XMin(extent) AS min_lon, ST_YMin(extent) AS min_lat,
       ST_XMax(extent) AS max_lon, ST_YMax(extent) AS max_lat
FROM (
    SELECT ST_Extent(ST_Transform(hranice, 4326)) AS extent
    FROM rn_stat WHERE nuts_lau = %(country)s
) AS country
"""


def connect(dsn: str):
    logger.info("Initializing database connection...")
    try:
        return psycopg2.connect(dsn)
    except psycopg2.Error as exc:
        raise LoaderError("Cannot create database connection. Is the DSN valid?") from exc


def record_from_row(row: dict[str, Any]) -> AddressRecord:
    """Turn one registry row into an address record."""
    street_number = compose_street_number(row["street_number_value"], row["street_number_letter"])
    building_type = row["building_type"]
    building_number = clean_value(row["building_number"])
    city = clean_value(row["city"])

    record = AddressRecord(
        ref_id=clean_value(row["ref_id"]),
        point=(float(row["lon"]), float(row["lat"])),
        country=REGISTRY_COUNTRY,
        city=city,
        postcode=clean_value(row["postcode"]),
        street=clean_value(row["street"]),
        street_number=street_number,
        house_number=compose_house_number(building_number, street_number, building_type),
        is_in=build_is_in(city, row["region"], REGISTRY_COUNTRY),
        source_addr=REGISTRY_SOURCE,
        source_loc=REGISTRY_SOURCE,
        deleted=bool(row["deleted"]),
    )
    if building_type == BUILDING_TYPE_CONSCRIPTION:
        record.conscription_number = building_number
    elif building_type == BUILDING_TYPE_PROVISIONAL:
        record.provisional_number = building_number
    return record


class RegistryLoader:
    """Load registry address points from a PostGIS database."""

    def __init__(self, connection) -> None:
        self.connection = connection

    def country_bbox(self, country: str = REGISTRY_COUNTRY) -> BoundingBox:
        try:
            with self.connection.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(COUNTRY_EXTENT_SQL, {"country": country})
                row = cur.fetchone()
        except psycopg2.Error as exc:
            raise LoaderError("Failed to get country bounding box") from exc
        if not row or row["min_lon"] is None:
            raise LoaderError(
                f"Table rn_stat does not contain borders for {country}. Cannot determine bounding box."
            )
        return BoundingBox(row["min_lon"], row["min_lat"], row["max_lon"], row["max_lat"])

    def load(self, bbox: BoundingBox) -> List[AddressRecord]:
        logger.info("Loading registry nodes from bounding box %s", bbox)
        params = {
            "conscription": BUILDING_TYPE_CONSCRIPTION,
            "provisional": BUILDING_TYPE_PROVISIONAL,
            "min_lon": bbox.min_lon,
            "min_lat": bbox.min_lat,
            "max_lon": bbox.max_lon,
            "max_lat": bbox.max_lat,
        }
        records: List[AddressRecord] = []
        try:
            with self.connection.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(ADDRESS_POINTS_SQL, params)
                for row in cur:
                    if clean_value(row["building_number"]) is None:
                        logger.warning("Skipping registry address %s without a building number", row["ref_id"])
                        continue
                    records.append(record_from_row(row))
        except psycopg2.Error as exc:
            raise LoaderError("Failed to load registry data from database") from exc
        logger.info("Loaded %d registry nodes", len(records))
        return records
