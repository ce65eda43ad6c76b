from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from .components import AddressRecord, MatchedPair
from .pools import MatchPools
from .scorer import nearest_record, numbers_match, select_nearest

logger = logging.getLogger(__name__)

Bucket = List[AddressRecord]


def build_reference_index(records: List[AddressRecord]) -> Dict[str, Bucket]:
    index: Dict[str, Bucket] = {}
    for record in records:
        if record.ref_id:
            index.setdefault(record.ref_id, []).append(record)
    return index


def build_city_street_index(
    records: List[AddressRecord],
) -> Dict[str, Dict[Optional[str], Bucket]]:
    index: Dict[str, Dict[Optional[str], Bucket]] = {}
    for record in records:
        if not record.city:
            continue
        index.setdefault(record.city, {}).setdefault(record.street, []).append(record)
    return index


def build_street_index(records: List[AddressRecord]) -> Dict[Optional[str], Bucket]:
    index: Dict[Optional[str], Bucket] = {}
    for record in records:
        index.setdefault(record.street, []).append(record)
    return index


def _discard(index: Dict, key, record: AddressRecord) -> None:
    bucket = index[key]
    bucket.remove(record)
    if not bucket:
        del index[key]


class MatchingStrategy(ABC):
    """One phase of the matching cascade.

    Anchors are the unclaimed registry records, candidates the unclaimed map
    records. Both are visited in input order so ties resolve to the record
    seen first.
    """

    name: str
    description: str

    def run(self, pools: MatchPools, tolerance: float) -> List[MatchedPair]:
        logger.info("Matching nodes by %s...", self.description)
        pairs = self.match(pools, tolerance)
        logger.info("%d nodes matched", len(pairs))
        return pairs

    @abstractmethod
    def match(self, pools: MatchPools, tolerance: float) -> List[MatchedPair]:
        raise NotImplementedError

    def _pick(
        self,
        anchor: AddressRecord,
        candidates: Bucket,
        pools: MatchPools,
        tolerance: float,
        rivals: Optional[Bucket] = None,
    ) -> Optional[AddressRecord]:
        if not candidates:
            return None
        selection = select_nearest(anchor, candidates, tolerance)
        if not selection.accepted:
            return None
        if rivals is not None and not self._closest_claimant(anchor, selection.candidate, rivals, pools):
            return None
        pools.claim(anchor, selection.candidate)
        logger.debug(
            "%s: %s <-> %s (distance %.7f)",
            self.name,
            anchor.address_info(),
            selection.candidate.address_info(),
            selection.distance,
        )
        return selection.candidate

    def _closest_claimant(
        self,
        anchor: AddressRecord,
        chosen: AddressRecord,
        rivals: Bucket,
        pools: MatchPools,
    ) -> bool:
        """Check that no registry record still waiting its turn is nearer to ``chosen``.

        Rivals visited before ``anchor`` in this phase already had their
        turn and are not considered; on equal distance the anchor wins.
        """
        start = pools.registry.position(anchor)
        claimants = [anchor]
        for rival in rivals:
            if rival is anchor or rival not in pools.registry:
                continue
            if pools.registry.position(rival) > start and numbers_match(rival, chosen):
                claimants.append(rival)
        nearest, distance = nearest_record(chosen, claimants)
        if nearest is anchor:
            return True
        logger.debug(
            "%s: %s leaves %s to the nearer %s (distance %.7f)",
            self.name,
            anchor.address_info(),
            chosen.address_info(),
            nearest.address_info(),
            distance,
        )
        return False


class ReferenceIdStrategy(MatchingStrategy):
    name = "reference_id"
    description = "reference id"

    def match(self, pools: MatchPools, tolerance: float) -> List[MatchedPair]:
        index = build_reference_index(pools.map.snapshot())
        pairs: List[MatchedPair] = []
        for anchor in pools.registry.snapshot():
            if not anchor.ref_id or anchor.ref_id not in index:
                continue
            # Rejected anchors stay in the pool for the weaker phases.
            matched = self._pick(anchor, index[anchor.ref_id], pools, tolerance)
            if matched is None:
                continue
            _discard(index, anchor.ref_id, matched)
            pairs.append(MatchedPair(registry=anchor, map=matched))
        return pairs


class FullAddressStrategy(MatchingStrategy):
    name = "full_address"
    description = "full address"

    def match(self, pools: MatchPools, tolerance: float) -> List[MatchedPair]:
        index = build_city_street_index(pools.map.snapshot())
        anchors = [record for record in pools.registry.snapshot() if record.ref_id]
        groups = build_city_street_index(anchors)
        pairs: List[MatchedPair] = []
        for anchor in anchors:
            streets = index.get(anchor.city)
            if streets is None or anchor.street not in streets:
                continue
            candidates = [c for c in streets[anchor.street] if numbers_match(anchor, c)]
            rivals = groups[anchor.city][anchor.street]
            matched = self._pick(anchor, candidates, pools, tolerance, rivals)
            if matched is None:
                continue
            _discard(streets, anchor.street, matched)
            if not streets:
                del index[anchor.city]
            pairs.append(MatchedPair(registry=anchor, map=matched))
        return pairs


class StreetStrategy(MatchingStrategy):
    name = "street"
    description = "street"

    def match(self, pools: MatchPools, tolerance: float) -> List[MatchedPair]:
        index = build_street_index(pools.map.snapshot())
        anchors = pools.registry.snapshot()
        groups = build_street_index(anchors)
        pairs: List[MatchedPair] = []
        for anchor in anchors:
            if anchor.street not in index:
                continue
            candidates = [c for c in index[anchor.street] if numbers_match(anchor, c)]
            matched = self._pick(anchor, candidates, pools, tolerance, groups[anchor.street])
            if matched is None:
                continue
            _discard(index, anchor.street, matched)
            pairs.append(MatchedPair(registry=anchor, map=matched))
        return pairs


class NumberStrategy(MatchingStrategy):
    name = "number"
    description = "conscription/provisional number"

    def match(self, pools: MatchPools, tolerance: float) -> List[MatchedPair]:
        anchors = pools.registry.snapshot()
        pairs: List[MatchedPair] = []
        for anchor in anchors:
            candidates = [c for c in pools.map.snapshot() if numbers_match(anchor, c)]
            matched = self._pick(anchor, candidates, pools, tolerance, anchors)
            if matched is not None:
                pairs.append(MatchedPair(registry=anchor, map=matched))
        return pairs


DEFAULT_STRATEGIES: Tuple[MatchingStrategy, ...] = (
    ReferenceIdStrategy(),
    FullAddressStrategy(),
    StreetStrategy(),
    NumberStrategy(),
)
