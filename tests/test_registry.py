import psycopg2
import pytest

from address_reconcile.exceptions import LoaderError
from address_reconcile.parser import BoundingBox
from address_reconcile.registry import RegistryLoader, record_from_row


def row(**overrides):
    values = {
        "ref_id": 21733741,
        "postcode": "60200",
        "building_number": 427,
        "street_number_value": 31,
        "street_number_letter": None,
        "lon": 16.6068,
        "lat": 49.195,
        "deleted": False,
        "street": "Masarykova",
        "city": "Brno",
        "building_type": 1,
        "region": "Jihomoravsky kraj",
    }
    values.update(overrides)
    return values


class FakeCursor:
    def __init__(self, rows, error=None):
        self.rows = rows
        self.error = error
        self.executed = []

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def execute(self, sql, params):
        if self.error:
            raise self.error
        self.executed.append((sql, params))

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def __iter__(self):
        return iter(self.rows)


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self, cursor_factory=None):
        return self._cursor


def test_record_from_conscription_row():
    record = record_from_row(row())

    assert record.ref_id == "21733741"
    assert record.point == (16.6068, 49.195)
    assert record.house_number == "427/31"
    assert record.conscription_number == "427"
    assert record.provisional_number is None
    assert record.street_number == "31"
    assert record.is_in == "Brno, Jihomoravsky kraj, CZ"
    assert record.source_addr == record.source_loc == "ruian"
    assert record.country == "CZ"


def test_record_from_provisional_row():
    record = record_from_row(row(building_type=2, building_number=12, street_number_value=None, deleted=True))

    assert record.house_number == "ev.12"
    assert record.provisional_number == "12"
    assert record.conscription_number is None
    assert record.street_number is None
    assert record.deleted is True


def test_load_skips_rows_without_building_number():
    cursor = FakeCursor([row(), row(ref_id=2, building_number=None)])
    loader = RegistryLoader(FakeConnection(cursor))

    records = loader.load(BoundingBox(16.0, 49.0, 17.0, 50.0))

    assert [r.ref_id for r in records] == ["21733741"]
    _, params = cursor.executed[0]
    assert params["min_lon"] == 16.0 and params["max_lat"] == 50.0


def test_load_wraps_database_errors():
    loader = RegistryLoader(FakeConnection(FakeCursor([], error=psycopg2.OperationalError("gone"))))

    with pytest.raises(LoaderError):
        loader.load(BoundingBox(16.0, 49.0, 17.0, 50.0))


def test_country_bbox():
    cursor = FakeCursor([{"min_lon": 12.09, "min_lat": 48.55, "max_lon": 18.86, "max_lat": 51.06}])
    assert RegistryLoader(FakeConnection(cursor)).country_bbox() == BoundingBox(12.09, 48.55, 18.86, 51.06)

    with pytest.raises(LoaderError):
        RegistryLoader(FakeConnection(FakeCursor([]))).country_bbox()
