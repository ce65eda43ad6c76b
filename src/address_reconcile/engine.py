from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .components import AddressRecord, MatchedPair
from .exceptions import InvalidRecordError
from .pools import MatchPools
from .strategies import DEFAULT_STRATEGIES, MatchingStrategy

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.005


@dataclass
class EngineConfig:
    strategies: Sequence[MatchingStrategy] = DEFAULT_STRATEGIES
    tolerance: float = DEFAULT_TOLERANCE


def _validate(side: str, records: Sequence[AddressRecord]) -> None:
    seen = set()
    for index, record in enumerate(records):
        if id(record) in seen:
            raise InvalidRecordError(side, index, "appears more than once")
        seen.add(id(record))
        if not record.house_number:
            raise InvalidRecordError(side, index, "has no house number")
        if record.point is None:
            raise InvalidRecordError(side, index, "has no location")


class MatchEngine:
    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def match_nodes(
        self,
        registry_records: Sequence[AddressRecord],
        map_records: Sequence[AddressRecord],
        tolerance: Optional[float] = None,
    ) -> List[MatchedPair]:
        """Pair registry records with map records describing the same point.

        Every input record ends up in exactly one returned pair: matched
        pairs come first in phase order, followed by unmatched registry
        records and then unmatched map records, each in input order.
        """
        if tolerance is None:
            tolerance = self.config.tolerance
        if tolerance < 0:
            raise ValueError(f"tolerance must not be negative, got {tolerance}")

        _validate("registry", registry_records)
        _validate("map", map_records)

        logger.info("Maximum allowed distance for matching two nodes is %.7f", tolerance)

        pools = MatchPools(registry_records, map_records)
        result: List[MatchedPair] = []
        for strategy in self.config.strategies:
            result.extend(strategy.run(pools, tolerance))

        logger.info("Total matched nodes: %d", len(result))
        logger.info(
            "Total unmatched nodes - registry: %d, map: %d",
            len(pools.registry),
            len(pools.map),
        )

        result.extend(MatchedPair(registry=record) for record in pools.registry)
        result.extend(MatchedPair(map=record) for record in pools.map)
        return result


def match_nodes(
    registry_records: Sequence[AddressRecord],
    map_records: Sequence[AddressRecord],
    tolerance: float = DEFAULT_TOLERANCE,
) -> List[MatchedPair]:
    return MatchEngine().match_nodes(registry_records, map_records, tolerance)
