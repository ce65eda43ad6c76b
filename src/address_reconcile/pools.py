from __future__ import annotations

from typing import Dict, Iterable, Iterator, List

from .components import AddressRecord


class RecordPool:
    """Unclaimed records of one source, kept in input order.

    Each record is keyed by its position in the input so claiming
    is O(1) and iteration order never depends on what was removed.
    """

    def __init__(self, records: Iterable[AddressRecord]) -> None:
        self._records: Dict[int, AddressRecord] = {}
        self._positions: Dict[int, int] = {}
        for position, record in enumerate(records):
            self._records[position] = record
            self._positions[id(record)] = position

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AddressRecord]:
        return iter(self.snapshot())

    def __contains__(self, record: object) -> bool:
        position = self._positions.get(id(record))
        return position is not None and self._records.get(position) is record

    def position(self, record: AddressRecord) -> int:
        return self._positions[id(record)]

    def snapshot(self) -> List[AddressRecord]:
        return list(self._records.values())

    def claim(self, record: AddressRecord) -> None:
        position = self._positions.get(id(record))
        if position is None or self._records.get(position) is not record:
            raise KeyError(f"record {record.address_info()} is not in the pool")
        del self._records[position]


class MatchPools:
    """The registry and map pools shared by every matching phase."""

    def __init__(
        self,
        registry_records: Iterable[AddressRecord],
        map_records: Iterable[AddressRecord],
    ) -> None:
        self.registry = RecordPool(registry_records)
        self.map = RecordPool(map_records)

    def claim(self, registry_record: AddressRecord, map_record: AddressRecord) -> None:
        self.registry.claim(registry_record)
        self.map.claim(map_record)
