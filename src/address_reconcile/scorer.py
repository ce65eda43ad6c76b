from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .components import AddressRecord

logger = logging.getLogger(__name__)

DISTANCE_PRECISION = 7


@dataclass(frozen=True)
class Selection:
    """Outcome of picking the nearest candidate for an anchor record."""

    candidate: Optional["AddressRecord"]
    distance: float

    @property
    def accepted(self) -> bool:
        return self.candidate is not None


def planar_distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Straight-line distance in coordinate units, rounded to 7 places."""
    return round(math.hypot(a[0] - b[0], a[1] - b[1]), DISTANCE_PRECISION)


def numbers_match(a: "AddressRecord", b: "AddressRecord") -> bool:
    """Return True when the two records agree on any of their numbers.

    Values are compared as exact strings: ``"10"`` and ``"10.0"`` differ.
    """
    if a.house_number == b.house_number:
        return True
    if a.conscription_number is not None and a.conscription_number == b.conscription_number:
        return True
    if a.provisional_number is not None and a.provisional_number == b.provisional_number:
        return True
    return False


def nearest_record(
    origin: "AddressRecord",
    records: Sequence["AddressRecord"],
) -> Tuple["AddressRecord", float]:
    """Return the record closest to ``origin``; the first one wins ties."""
    nearest = records[0]
    min_distance = planar_distance(origin.point, nearest.point)
    for record in records[1:]:
        distance = planar_distance(origin.point, record.point)
        if distance < min_distance:
            nearest = record
            min_distance = distance
    return nearest, min_distance


def select_nearest(
    anchor: "AddressRecord",
    candidates: Sequence["AddressRecord"],
    tolerance: float,
) -> Selection:
    """Pick the candidate closest to ``anchor``.

    The first candidate wins when distances are equal. When even the
    nearest one is farther than ``tolerance`` the selection is rejected and
    a diagnostic line is logged so the threshold can be tuned.
    """
    if not candidates:
        raise ValueError("select_nearest needs at least one candidate")

    nearest, min_distance = nearest_record(anchor, candidates)

    if min_distance > tolerance:
        logger.info(
            "Matched registry node %s and map node %s but their distance %.7f is over the limit %.7f",
            anchor.address_info(),
            nearest.address_info(),
            min_distance,
            tolerance,
        )
        return Selection(candidate=None, distance=min_distance)

    return Selection(candidate=nearest, distance=min_distance)
