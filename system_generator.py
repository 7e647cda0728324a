# system_generator.py
import logging
from typing import List, Tuple

import numpy as np

from config import config as default_config
from solarsystem import SUN_INDEX, Body, FeatureKind, Orbit, make_feature, total_radius


class GenerationError(Exception):
    """Raised when a generated system cannot satisfy the body-graph invariants,
    i.e. fewer bodies than the guaranteed stations and ore sources (plus the sun)
    fit inside the configured system radius. Recovery (retrying with another
    seed) is left to the caller."""
    pass


class SystemGenerator:
    """Builds the body tree of a star system from `config.System` settings.

    Planet subsystems (a planet plus its moons) are appended one at a time on
    orbits just outside everything placed so far. The first subsystem that does
    not fit inside `System.RADIUS` is discarded and generation stops. Features
    are placed afterwards: the guaranteed stations and ore sources first, then a
    random feature for each remaining body with `System.FEATURE_PROBABILITY`.

    Attributes:
        sim_config (SimulationConfig): Configuration supplying the `System` and `Orbit` sections.
        rng (np.random.Generator): Shared random source, advanced by every draw.
    """

    def __init__(self, sim_config=None, rng: np.random.Generator = None):
        self.sim_config = sim_config or default_config
        self.rng = rng if rng is not None else np.random.default_rng(self.sim_config.System.SEED)

    @property
    def minimum_bodies(self) -> int:
        system = self.sim_config.System
        return 1 + system.GUARANTEED_STATIONS + system.GUARANTEED_ORE

    def generate(self) -> Tuple[List[Body], float]:
        """Generates the system.

        Returns:
            Tuple[List[Body], float]: The bodies (sun at index 0) and the true
            occupied radius of the tree, which is at most `System.RADIUS`.

        Raises:
            GenerationError: If fewer than `minimum_bodies` bodies were produced.
        """
        system = self.sim_config.System
        bodies: List[Body] = [Body(radius=system.SUN_RADIUS)]

        while True:
            planet_index = self._add_planet_subsystem(bodies)

            system_radius = total_radius(bodies, SUN_INDEX)
            orbit_distance = system_radius + self._padded_radius(bodies, planet_index, bodies[planet_index].radius,
                                                                 system.PLANET_PADDING_FACTOR)
            outer_edge = orbit_distance + total_radius(bodies, planet_index)
            if outer_edge > system.RADIUS:
                del bodies[planet_index:]
                break

            bodies[SUN_INDEX].moon_indices.append(planet_index)
            bodies[planet_index].orbit = Orbit.random(SUN_INDEX, orbit_distance, self.rng,
                                                      self.sim_config.Orbit.SPEED_MULTIPLIERS)

        if len(bodies) < self.minimum_bodies:
            raise GenerationError(
                f"Only {len(bodies)} bodies fit inside a system radius of {system.RADIUS}; "
                f"at least {self.minimum_bodies} are required."
            )

        self._place_features(bodies)

        occupied_radius = total_radius(bodies, SUN_INDEX)
        logging.info(f"Generated system with {len(bodies)} bodies "
                     f"({len(bodies[SUN_INDEX].moon_indices)} planets), occupied radius {occupied_radius:.4f}.")
        return bodies, occupied_radius

    def _padded_radius(self, bodies: List[Body], index: int, radius: float, padding_factor: float) -> float:
        # Occupied radius of the subsystem at `index`, plus clearance for a new orbit of size `radius`
        return total_radius(bodies, index) + bodies[index].radius + radius * padding_factor

    def _add_planet_subsystem(self, bodies: List[Body]) -> int:
        """Appends a planet (without an orbit) and its moons. Returns the planet's index."""
        system = self.sim_config.System
        low, high = system.SIZE_MULTIPLIER_RANGE

        planet_index = len(bodies)
        planet_radius = system.SUN_RADIUS * float(self.rng.uniform(low, high))
        bodies.append(Body(radius=planet_radius))

        while (total_radius(bodies, planet_index) < planet_radius * system.MOON_FOOTPRINT_FACTOR
               and self.rng.random() < system.MOON_PROBABILITY):
            moon_radius = planet_radius * float(self.rng.uniform(low, high))
            moon_index = len(bodies)
            distance = self._padded_radius(bodies, planet_index, moon_radius, system.MOON_PADDING_FACTOR)

            bodies[planet_index].moon_indices.append(moon_index)
            bodies.append(Body(
                radius=moon_radius,
                orbit=Orbit.random(planet_index, distance, self.rng, self.sim_config.Orbit.SPEED_MULTIPLIERS),
            ))

        return planet_index

    def _place_features(self, bodies: List[Body]):
        system = self.sim_config.System
        candidates = np.arange(1, len(bodies))

        guaranteed = self.rng.choice(candidates, size=system.GUARANTEED_STATIONS + system.GUARANTEED_ORE, replace=False)
        for position, index in enumerate(guaranteed):
            kind = FeatureKind.STATION if position < system.GUARANTEED_STATIONS else FeatureKind.ORE
            bodies[int(index)].feature = make_feature(kind, stock=system.INITIAL_STATION_STOCK)

        kinds = [FeatureKind(name) for name in sorted(system.RANDOM_FEATURE_WEIGHTS)]
        weights = np.array([system.RANDOM_FEATURE_WEIGHTS[kind.value] for kind in kinds], dtype=np.float64)
        weights /= weights.sum()

        for index in candidates:
            body = bodies[int(index)]
            if body.feature is None and self.rng.random() < system.FEATURE_PROBABILITY:
                kind = kinds[int(self.rng.choice(len(kinds), p=weights))]
                body.feature = make_feature(kind, stock=system.INITIAL_STATION_STOCK)
