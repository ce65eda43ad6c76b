from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from rapidfuzz import fuzz

from .components import AddressRecord, MatchedPair
from .normalize import fold

HISTOGRAM_STEP = 0.00001


@dataclass(frozen=True)
class StreetDifference:
    pair: MatchedPair
    similarity: float


@dataclass
class MatchReport:
    """Aggregated statistics over the pairs returned by the engine."""

    total: int = 0
    matched: int = 0
    matched_deleted: int = 0
    unmatched_map: int = 0
    unmatched_registry: int = 0
    unmatched_registry_deleted: int = 0
    total_distance: float = 0.0
    min_pair: Optional[MatchedPair] = None
    max_pair: Optional[MatchedPair] = None
    histogram: List[int] = field(default_factory=list)
    matched_pairs: List[MatchedPair] = field(default_factory=list)
    unmatched_registry_records: List[AddressRecord] = field(default_factory=list)
    unmatched_map_records: List[AddressRecord] = field(default_factory=list)
    changed_city: List[MatchedPair] = field(default_factory=list)
    changed_street: List[StreetDifference] = field(default_factory=list)

    @property
    def average_distance(self) -> Optional[float]:
        if not self.matched:
            return None
        return self.total_distance / self.matched


def _record_key(record: Optional[AddressRecord]) -> Tuple:
    # Absent values sort before present ones.
    if record is None:
        return ((0, ""),) * 3
    return tuple(
        (1, fold(value)) if value is not None else (0, "")
        for value in (record.city, record.street, record.house_number)
    )


def _street_differs(pair: MatchedPair) -> bool:
    left, right = pair.registry.street, pair.map.street
    if left is None:
        return right is not None
    return right is None or fold(left) != fold(right)


def build_report(pairs: Sequence[MatchedPair]) -> MatchReport:
    report = MatchReport(total=len(pairs))

    for pair in pairs:
        if pair.is_matched:
            report.matched += 1
            report.matched_pairs.append(pair)
            if pair.registry.deleted:
                report.matched_deleted += 1

            distance = pair.distance
            report.total_distance += distance
            if report.min_pair is None or distance < report.min_pair.distance:
                report.min_pair = pair
            if report.max_pair is None or distance > report.max_pair.distance:
                report.max_pair = pair

            bucket = math.ceil(round(distance / HISTOGRAM_STEP, 6))
            if len(report.histogram) <= bucket:
                report.histogram.extend([0] * (bucket + 1 - len(report.histogram)))
            report.histogram[bucket] += 1

            if pair.map.city is not None and pair.registry.city != pair.map.city:
                report.changed_city.append(pair)
            if _street_differs(pair):
                similarity = fuzz.ratio(fold(pair.registry.street), fold(pair.map.street))
                report.changed_street.append(StreetDifference(pair, similarity))
        elif pair.map_only:
            report.unmatched_map += 1
            report.unmatched_map_records.append(pair.map)
        else:
            report.unmatched_registry += 1
            report.unmatched_registry_records.append(pair.registry)
            if pair.registry.deleted:
                report.unmatched_registry_deleted += 1

    report.unmatched_registry_records.sort(key=_record_key)
    report.unmatched_map_records.sort(key=_record_key)
    report.matched_pairs.sort(key=lambda p: _record_key(p.registry))
    report.changed_city.sort(key=lambda p: _record_key(p.registry))
    report.changed_street.sort(key=lambda d: _record_key(d.pair.registry))
    return report


def _pair_line(pair: MatchedPair) -> str:
    return (
        f"registry: {pair.registry.address_info()} map: {pair.map.address_info()} "
        f"(distance: {pair.distance:.7f})"
    )


def render_report(report: MatchReport) -> List[str]:
    lines = [
        f"Total nodes: {report.total}",
        f"Total matched nodes: {report.matched} "
        f"({report.matched_deleted} of registry nodes are marked as deleted)",
        f"Total unmatched map nodes: {report.unmatched_map}",
        f"Total unmatched registry nodes: {report.unmatched_registry} "
        f"({report.unmatched_registry_deleted} of these are marked as deleted)",
    ]

    if report.matched:
        lines.append(f"Average matched node distance: {report.average_distance:.7f}")
        for label, pair in (("Minimum", report.min_pair), ("Maximum", report.max_pair)):
            lines.append(
                f"{label} matched node distance: {pair.distance:.7f} "
                f"(registry: {pair.registry.address_info()} map: {pair.map.address_info()})"
            )
        lines.append("Histogram of distances between matched registry and map nodes:")
        for index, count in enumerate(report.histogram):
            lines.append(
                f"{index * HISTOGRAM_STEP:.5f} - {(index + 1) * HISTOGRAM_STEP:.5f}: {count}"
            )

    lines.append("Not matched registry addresses:")
    lines.extend(record.address_info() for record in report.unmatched_registry_records)
    lines.append("Not matched map addresses:")
    lines.extend(record.address_info() for record in report.unmatched_map_records)
    lines.append("Matched addresses:")
    lines.extend(_pair_line(pair) for pair in report.matched_pairs)
    lines.append("Addresses where city differs (excluding cases where map node city is not set):")
    lines.extend(_pair_line(pair) for pair in report.changed_city)
    lines.append("Addresses where street differs (comparison is case insensitive):")
    lines.extend(
        f"{_pair_line(diff.pair)} similarity {diff.similarity:.0f}" for diff in report.changed_street
    )
    return lines


def log_report(report: MatchReport, logger: Optional[logging.Logger] = None) -> None:
    logger = logger or logging.getLogger(__name__)
    logger.info("Generating statistics...")
    for line in render_report(report):
        logger.info("%s", line)
