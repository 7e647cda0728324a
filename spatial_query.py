# spatial_query.py
from typing import Callable, List, Optional

import numpy as np

from solarsystem import Body, FeatureKind
from ships import Ship


def filter_bodies(bodies: List[Body], kind: FeatureKind) -> List[int]:
    """Indices of all bodies whose feature is of `kind`. Only the kind is
    compared, so a station matches whatever its stock."""
    return [index for index, body in enumerate(bodies) if body.feature_kind is kind]


def nearest_bodies(bodies: List[Body], kind: FeatureKind, position) -> List[int]:
    """Indices of bodies with a feature of `kind`, sorted by squared distance to
    `position`. The sort is stable, so ties keep index order."""
    indices = filter_bodies(bodies, kind)
    if not indices:
        return []
    positions = np.array([bodies[i].position for i in indices], dtype=np.float64)
    offsets = positions - np.asarray(position, dtype=np.float64)
    distances_sq = np.einsum('ij,ij->i', offsets, offsets)
    order = np.argsort(distances_sq, kind='stable')
    return [indices[i] for i in order]


def nearest_body(bodies: List[Body], kind: FeatureKind, position) -> Optional[int]:
    ranked = nearest_bodies(bodies, kind, position)
    return ranked[0] if ranked else None


def ships_in_range(ships: List[Ship], position, max_range: float,
                   predicate: Callable[[Ship], bool] = None) -> List[int]:
    """Indices of ships within `max_range` of `position` (inclusive) that satisfy `predicate`."""
    center = np.asarray(position, dtype=np.float64)
    max_range_sq = max_range * max_range
    found = []
    for index, ship in enumerate(ships):
        if predicate is not None and not predicate(ship):
            continue
        offset = ship.position - center
        if float(np.dot(offset, offset)) <= max_range_sq:
            found.append(index)
    return found
