# solarsystem.py
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Union

import numpy as np

from config import config as default_config
from geometry import as_point, polar_offset, safe_divide, wrap_angle

SUN_INDEX = 0


class FeatureError(Exception):
    """Raised when a body is used as if it had a feature it does not carry,
    e.g. reading the stock of a body without a `Station`."""
    pass


class FeatureKind(Enum):
    STATION = 'station'
    ORE = 'ore'


@dataclass
class Station:
    """A body that accumulates stock and launches traders once it has enough."""
    stock: int = 0
    kind: ClassVar[FeatureKind] = FeatureKind.STATION


@dataclass
class Ore:
    """A harvestable resource source. Carries no state."""
    kind: ClassVar[FeatureKind] = FeatureKind.ORE


Feature = Union[Station, Ore]


def make_feature(kind: FeatureKind, stock: int = 0) -> Feature:
    if kind is FeatureKind.STATION:
        return Station(stock=stock)
    return Ore()


@dataclass
class Orbit:
    parent_index: int
    distance: float
    angle: float = 0.0  # radians, kept in [0, 2π)
    speed: float = 1.0
    counterclockwise: bool = False

    @classmethod
    def random(cls, parent_index: int, distance: float, rng: np.random.Generator, speed_multipliers) -> 'Orbit':
        """Orbit with a random starting phase, speed multiplier and direction."""
        return cls(
            parent_index=parent_index,
            distance=distance,
            angle=float(rng.uniform(0.0, 2.0 * np.pi)),
            speed=float(rng.choice(speed_multipliers)),
            counterclockwise=bool(rng.random() < 0.5),
        )


@dataclass(eq=False)
class Body:
    radius: float
    position: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0], dtype=np.float64))
    orbit: Optional[Orbit] = None
    feature: Optional[Feature] = None
    moon_indices: List[int] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.position, np.ndarray) or self.position.dtype != np.float64:
            self.position = as_point(self.position)

    @property
    def feature_kind(self) -> Optional[FeatureKind]:
        return self.feature.kind if self.feature is not None else None

    def has_feature(self, kind: FeatureKind) -> bool:
        return self.feature_kind is kind

    @property
    def stock(self) -> int:
        """Stock of this body's station.

        Raises:
            FeatureError: If the body carries no `Station`.
        """
        if not isinstance(self.feature, Station):
            raise FeatureError(f"Body has feature {self.feature_kind}, expected a station.")
        return self.feature.stock

    def add_stock(self, amount: int = 1):
        """Adds (or, with a negative amount, removes) station stock. Stock never drops below zero."""
        current = self.stock
        if current + amount < 0:
            raise FeatureError(f"Station stock {current} cannot be reduced by {-amount}.")
        self.feature.stock = current + amount


def total_radius(bodies: List[Body], index: int) -> float:
    """Radius occupied by the subsystem rooted at `index`: its own radius, or the
    farthest point reached by any moon's orbit plus that moon's own subsystem."""
    radius = bodies[index].radius
    for moon_index in bodies[index].moon_indices:
        moon = bodies[moon_index]
        radius = max(radius, moon.orbit.distance + total_radius(bodies, moon_index))
    return radius


class OrbitalMechanics:
    """Kinematic orbit integrator.

    Orbits are not force based: each tick an orbiting body advances its angle by
    a fixed base increment scaled by the orbit's speed multiplier and by the
    ratio of sun radius to parent radius, so moons of small planets stay visibly
    active. Planets orbiting the sun are additionally scaled by
    `sqrt(R - d) / R` (R the system radius, d the distance from the origin), a
    simplified Keplerian "nearer is faster".
    """

    def __init__(self, sim_config=None):
        sim_config = sim_config or default_config
        self.base_angular_step = sim_config.Orbit.BASE_ANGULAR_STEP_RAD

    def angular_step(self, bodies: List[Body], index: int, system_radius: float) -> float:
        """Signed angle the body at `index` advances during the next tick."""
        orbit = bodies[index].orbit
        parent = bodies[orbit.parent_index]

        step = self.base_angular_step * orbit.speed
        step *= safe_divide(bodies[SUN_INDEX].radius, parent.radius, default_on_zero_denom=1.0)
        if orbit.counterclockwise:
            step = -step

        if orbit.parent_index == SUN_INDEX:
            tentative_angle = wrap_angle(orbit.angle + step)
            tentative_position = polar_offset(parent.position, orbit.distance, tentative_angle)
            distance_from_origin = float(np.linalg.norm(tentative_position))
            slack = max(0.0, system_radius - distance_from_origin)
            step *= safe_divide(np.sqrt(slack), system_radius)

        return step

    def update_body(self, bodies: List[Body], index: int, system_radius: float):
        """Moves the body at `index` along its orbit, then recurses into its moons.
        A body without an orbit (the sun) never moves."""
        body = bodies[index]
        if body.orbit is not None:
            orbit = body.orbit
            orbit.angle = wrap_angle(orbit.angle + self.angular_step(bodies, index, system_radius))
            body.position = polar_offset(bodies[orbit.parent_index].position, orbit.distance, orbit.angle)

        for moon_index in body.moon_indices:
            self.update_body(bodies, moon_index, system_radius)

    def propagate(self, bodies: List[Body], system_radius: float):
        """Advances the whole tree by one tick, top-down from the sun."""
        if not bodies:
            logging.warning("propagate called with an empty body list.")
            return
        self.update_body(bodies, SUN_INDEX, system_radius)
