# environment.py
import bisect
import logging
from collections import Counter
from typing import Dict, List, Optional

import numpy as np

from config import config, ConfigurationError
from economy import calculate_total_economy_units, spawn_traders
from geometry import distance
from ship_behavior import GoalStateMachine, StateMachineError
from ships import Hunt, Miner, Pirate, Ship, Visit, Wander
from solarsystem import SUN_INDEX, Body, FeatureError, FeatureKind, OrbitalMechanics, total_radius
from spatial_query import filter_bodies
from system_generator import GenerationError, SystemGenerator


class StarSystemEnvironment:
    """Owns the complete simulation state and advances it tick by tick.

    A tick (`update()`) runs in a fixed order:
    1.  Propagate all orbits, top-down from the sun.
    2.  Launch traders from stations with enough stock.
    3.  Step every ship in registry order through the `GoalStateMachine`
        (traders launched this tick included).
    4.  Apply the deferred kills collected during step 3, then patch every
        remaining `Hunt.prey` index so it still names the same ship.

    Ships are referred to by their index in `self.ships`, which is why raids
    never remove ships directly: they append to `self.kill_list` and removal
    happens once all ships have moved.

    Attributes:
        sim_config (SimulationConfig): Configuration for this environment.
        rng (np.random.Generator): The single random source of the simulation.
            Seeded from `System.SEED` unless one is passed in.
        bodies (List[Body]): Body tree, sun at index 0.
        system_radius (float): True occupied radius of the body tree; used by the
            integrator's Keplerian scaling.
        ships (List[Ship]): Ship registry.
        kill_list (List[int]): Ship indices scheduled for removal this tick, unique.
        step_count (int): Ticks completed.
        orbital_mechanics (OrbitalMechanics): Orbit integrator.
        state_machine (GoalStateMachine): Per-ship behavior.

    Raises:
        GenerationError: If no valid system could be generated for this random
            source. The caller may retry with another seed.
        ConfigurationError: If the configuration is invalid.
    """

    def __init__(self, sim_config=None, rng: np.random.Generator = None,
                 bodies: Optional[List[Body]] = None, populate: bool = True):
        """Builds the system and, unless `populate` is False, its initial ships.

        Args:
            sim_config (SimulationConfig, optional): Defaults to the module-level `config`.
            rng (np.random.Generator, optional): Shared random source.
            bodies (List[Body], optional): A hand-built body tree to use instead
                of generating one. Its `system_radius` is its true occupied radius.
            populate (bool): Spawn `Ship.INITIAL_MINERS` miners and `Pirate.COUNT` pirates.
        """
        try:
            self.sim_config = sim_config or config
            self.rng = rng if rng is not None else np.random.default_rng(self.sim_config.System.SEED)
            self.orbital_mechanics = OrbitalMechanics(self.sim_config)

            if bodies is None:
                self.bodies, self.system_radius = SystemGenerator(self.sim_config, self.rng).generate()
            else:
                self.bodies = bodies
                self.system_radius = total_radius(bodies, SUN_INDEX)

            self.ships: List[Ship] = []
            self.kill_list: List[int] = []
            self.step_count = 0
            self.state_machine = GoalStateMachine(self)

            # Place every body on its orbit before any ship reads a position
            self.orbital_mechanics.propagate(self.bodies, self.system_radius)

            if populate:
                self._populate_ships()

            logging.info(f"StarSystemEnvironment initialized with {len(self.bodies)} bodies, "
                         f"{len(self.ships)} ships, system radius {self.system_radius:.4f}.")

        except GenerationError as e_gen:
            logging.error(f"StarSystemEnvironment initialization failed: {e_gen}")
            raise
        except ConfigurationError as e_config:
            logging.critical(f"StarSystemEnvironment initialization failed due to ConfigurationError: {e_config}", exc_info=True)
            raise
        except Exception as e_unexpected:
            logging.critical(f"Unexpected error during StarSystemEnvironment initialization: {e_unexpected}", exc_info=True)
            raise

    def _populate_ships(self):
        """Spawns the initial miners at random ore bodies and pirates at random stations."""
        ore_indices = filter_bodies(self.bodies, FeatureKind.ORE)
        station_indices = filter_bodies(self.bodies, FeatureKind.STATION)

        miner_count = self.sim_config.Ship.INITIAL_MINERS
        if miner_count and not ore_indices:
            logging.warning(f"No ore bodies in the system; skipping {miner_count} initial miners.")
        else:
            for _ in range(miner_count):
                ore_index = ore_indices[int(self.rng.integers(len(ore_indices)))]
                self.add_ship(Ship.with_random_speed(
                    job=Miner(),
                    goal=Visit(target=ore_index),
                    position=self.bodies[ore_index].position.copy(),
                    sim_config=self.sim_config,
                    rng=self.rng,
                ))

        pirate_count = self.sim_config.Pirate.COUNT
        if pirate_count and not station_indices:
            logging.warning(f"No stations in the system; skipping {pirate_count} pirates.")
        else:
            for _ in range(pirate_count):
                station_index = station_indices[int(self.rng.integers(len(station_indices)))]
                home = self.bodies[station_index].position.copy()
                self.add_ship(Ship.with_random_speed(
                    job=Pirate(home_position=home),
                    goal=Wander(),
                    position=home,
                    sim_config=self.sim_config,
                    rng=self.rng,
                ))

    def add_ship(self, ship: Ship) -> int:
        """Appends `ship` to the registry and returns its index."""
        self.ships.append(ship)
        return len(self.ships) - 1

    def schedule_kill(self, index: int):
        """Schedules the ship at `index` for removal at the end of the tick. Duplicates are ignored."""
        if index not in self.kill_list:
            self.kill_list.append(index)

    def apply_kills(self) -> List[int]:
        """Removes every scheduled ship and keeps all `Hunt.prey` references valid.

        A pirate whose prey was removed falls back to `Wander`; any other prey
        index is decremented once per removed index below it.

        Returns:
            List[int]: The removed indices, ascending.
        """
        if not self.kill_list:
            return []

        killed = sorted(set(self.kill_list))
        self.kill_list.clear()
        for index in reversed(killed):
            del self.ships[index]

        killed_set = set(killed)
        for ship in self.ships:
            if isinstance(ship.goal, Hunt):
                if ship.goal.prey in killed_set:
                    ship.goal = Wander()
                else:
                    ship.goal.prey -= bisect.bisect_left(killed, ship.goal.prey)

        logging.debug(f"Step {self.step_count}: removed ships {killed}.")
        return killed

    def update(self):
        """Advances the simulation by one tick.

        Raises:
            StateMachineError: If a ship reached an invalid (job, goal) pair.
            FeatureError: If a ship used a body as a station or ore source that is neither.
        """
        try:
            self.orbital_mechanics.propagate(self.bodies, self.system_radius)
            spawn_traders(self.bodies, self.ships, self.sim_config, self.rng)

            for index in range(len(self.ships)):
                self.state_machine.step_ship(index)

            self.apply_kills()
            self.step_count += 1

            debug_cfg = self.sim_config.Debug
            if debug_cfg.MONITOR_ECONOMY and self.step_count % debug_cfg.ECONOMY_CHECK_INTERVAL_STEPS == 0:
                logging.info(f"ECONOMY CHECK (Step {self.step_count}): total units {self.calculate_total_economy_units()}, "
                             f"ships {self.count_ships_by_job()}")

        except (StateMachineError, FeatureError) as e_logic:
            logging.critical(f"Ship logic error in StarSystemEnvironment.update at step {self.step_count}: {e_logic}", exc_info=True)
            raise
        except Exception as e_update:
            logging.critical(f"Unexpected error in StarSystemEnvironment.update at step {self.step_count}: {e_update}", exc_info=True)
            raise

    def calculate_total_economy_units(self) -> int:
        return calculate_total_economy_units(self.bodies, self.ships)

    def count_ships_by_job(self) -> Dict[str, int]:
        counts = Counter(ship.job.kind.value for ship in self.ships)
        return dict(sorted(counts.items()))

    def station_stock(self) -> Dict[int, int]:
        """Stock of every station, keyed by body index."""
        return {index: self.bodies[index].stock for index in filter_bodies(self.bodies, FeatureKind.STATION)}

    def get_celestial_bodies_data_for_render(self) -> List[Dict]:
        """Read-only snapshot of all bodies.

        Body Data Format:
        -   `index` (int): Body index; the sun is 0.
        -   `position` (List[float]): Current [x, y] position.
        -   `radius` (float): Body radius.
        -   `has_orbit` (bool): False only for the sun.
        -   `parent_index` (Optional[int]): Index of the body it orbits.
        -   `orbit_distance` (Optional[float]): Orbit radius around the parent.
        -   `feature` (Optional[str]): 'station', 'ore' or None.
        -   `stock` (Optional[int]): Station stock, None for non-stations.
        """
        snapshot = []
        for index, body in enumerate(self.bodies):
            snapshot.append({
                'index': index,
                'position': body.position.tolist(),
                'radius': float(body.radius),
                'has_orbit': body.orbit is not None,
                'parent_index': body.orbit.parent_index if body.orbit is not None else None,
                'orbit_distance': float(body.orbit.distance) if body.orbit is not None else None,
                'feature': body.feature_kind.value if body.feature is not None else None,
                'stock': body.stock if body.has_feature(FeatureKind.STATION) else None,
            })
        return snapshot

    def get_ships_data_for_render(self) -> List[Dict]:
        """Read-only snapshot of all ships.

        Ship Data Format:
        -   `index` (int): Registry index.
        -   `position` (List[float]): Current [x, y] position.
        -   `heading` (float): Heading angle.
        -   `job` (str): 'miner', 'trader' or 'pirate'.
        -   `carrying_cargo` (bool): True for a trader with cargo.
        -   `goal` (str): Goal kind name.
        -   `target` (Optional[int]): Body index for Visit/Wait goals.
        -   `prey` (Optional[int]): Ship index for Hunt goals.
        -   `in_raid_range` (bool): True for a hunting pirate within `Pirate.RAID_RANGE` of its prey.
        """
        raid_range = self.sim_config.Pirate.RAID_RANGE
        snapshot = []
        for index, ship in enumerate(self.ships):
            goal = ship.goal
            prey = goal.prey if isinstance(goal, Hunt) else None
            in_raid_range = prey is not None and distance(ship.position, self.ships[prey].position) <= raid_range
            snapshot.append({
                'index': index,
                'position': ship.position.tolist(),
                'heading': float(ship.heading),
                'job': ship.job.kind.value,
                'carrying_cargo': ship.carrying_cargo,
                'goal': goal.kind.value,
                'target': getattr(goal, 'target', None),
                'prey': prey,
                'in_raid_range': in_raid_range,
            })
        return snapshot
