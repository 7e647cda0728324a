# ship_behavior.py
import logging

import numpy as np

from arrival import has_arrived
from geometry import distance, heading_between, heading_vector, wrap_angle
from solarsystem import FeatureError, FeatureKind
from ships import GoalKind, Hunt, JobKind, Scan, Ship, Trader, Visit, Wait, Wander
from spatial_query import filter_bodies, nearest_body, ships_in_range

# Every (job, goal) pair a ship can legitimately be in
VALID_COMBINATIONS = frozenset({
    (JobKind.MINER, GoalKind.VISIT),
    (JobKind.MINER, GoalKind.WAIT),
    (JobKind.TRADER, GoalKind.VISIT),
    (JobKind.PIRATE, GoalKind.WANDER),
    (JobKind.PIRATE, GoalKind.SCAN),
    (JobKind.PIRATE, GoalKind.HUNT),
})


class StateMachineError(Exception):
    """Raised when a ship reaches a (job, goal) pair outside `VALID_COMBINATIONS`,
    or a goal refers to a ship index that no longer exists. Either one means an
    earlier logic defect, so it is surfaced instead of ignored."""
    pass


class GoalStateMachine:
    """Per-ship behavior: a movement phase every tick, then a transition when
    the movement reports the current goal as complete.

    The machine reads and mutates the environment's shared state: body
    positions and station stock, the ship registry, the random generator and
    the deferred kill list.

    Movement by goal:
        Visit  - travel toward the target body, accelerating; completes on arrival.
        Wait   - stay docked at the target body; completes after the harvest duration.
        Wander - pirate patrol around its home; always completes.
        Scan   - pirate looks for cargo-carrying traders in range; always completes.
        Hunt   - pirate chases and raids its prey; completes when the raid commits.

    Transitions are looked up by (job kind, goal kind) in `self._transitions`.
    """

    def __init__(self, environment):
        self.environment = environment
        self._movement = {
            GoalKind.VISIT: self._move_visit,
            GoalKind.WAIT: self._move_wait,
            GoalKind.WANDER: self._move_wander,
            GoalKind.SCAN: self._move_scan,
            GoalKind.HUNT: self._move_hunt,
        }
        self._transitions = {
            (JobKind.TRADER, GoalKind.VISIT): self._trader_visit_complete,
            (JobKind.MINER, GoalKind.VISIT): self._miner_visit_complete,
            (JobKind.MINER, GoalKind.WAIT): self._miner_wait_complete,
            (JobKind.PIRATE, GoalKind.WANDER): self._pirate_wander_complete,
            (JobKind.PIRATE, GoalKind.SCAN): self._pirate_scan_complete,
            (JobKind.PIRATE, GoalKind.HUNT): self._pirate_hunt_complete,
        }

    @property
    def bodies(self):
        return self.environment.bodies

    @property
    def ships(self):
        return self.environment.ships

    @property
    def rng(self) -> np.random.Generator:
        return self.environment.rng

    @property
    def sim_config(self):
        return self.environment.sim_config

    def step_ship(self, index: int):
        """Moves the ship at `index` and, if its goal completed, applies the transition."""
        ship = self.ships[index]
        self._check_combination(index, ship)
        if self._movement[ship.goal.kind](index, ship):
            self.transition(index)

    def transition(self, index: int):
        ship = self.ships[index]
        self._check_combination(index, ship)
        previous_goal = ship.goal
        ship.goal = self._transitions[(ship.job.kind, previous_goal.kind)](index, ship)
        if self.sim_config.Debug.LOG_SHIP_TRANSITIONS:
            logging.debug(f"Ship {index} ({ship.job.kind.value}): {previous_goal} -> {ship.goal}")

    def _check_combination(self, index: int, ship: Ship):
        if (ship.job.kind, ship.goal.kind) not in VALID_COMBINATIONS:
            raise StateMachineError(
                f"Ship {index} has invalid job/goal combination ({ship.job.kind.value}, {ship.goal.kind.value})."
            )

    def _jittered_start(self, variance_range) -> int:
        # Counters start below zero so the goal lasts the extra ticks
        low, high = variance_range
        return -int(self.rng.integers(low, high + 1))

    def _advance_toward(self, ship: Ship, destination) -> np.ndarray:
        """Moves `ship` a `speed` fraction of the way to `destination`, updates its
        heading and accelerates it. Returns the position before the move."""
        old_position = ship.position.copy()
        delta = np.asarray(destination, dtype=np.float64) - old_position
        ship.position = old_position + delta * ship.speed
        if np.any(delta):
            ship.heading = heading_between(old_position, destination)
        ship.speed = min(ship.speed * self.sim_config.Ship.ACCELERATION, self.sim_config.Ship.MAX_SPEED)
        return old_position

    def _prey(self, index: int, prey_index: int) -> Ship:
        if not 0 <= prey_index < len(self.ships):
            raise StateMachineError(f"Ship {index} refers to missing prey {prey_index}.")
        return self.ships[prey_index]

    # --- Movement ---

    def _move_visit(self, index: int, ship: Ship) -> bool:
        target = self.bodies[ship.goal.target]
        old_position = self._advance_toward(ship, target.position)
        if has_arrived(old_position, ship.position, target.position, target.radius):
            ship.speed = ship.initial_speed
            return True
        return False

    def _move_wait(self, index: int, ship: Ship) -> bool:
        goal = ship.goal
        ship.position = self.bodies[goal.target].position.copy()
        goal.progress += 1
        return goal.progress >= self.sim_config.Miner.HARVEST_DURATION_STEPS

    def _move_wander(self, index: int, ship: Ship) -> bool:
        pirate_cfg = self.sim_config.Pirate
        home = ship.job.home_position

        jitter = pirate_cfg.WANDER_TURN_JITTER_RAD
        ship.heading = wrap_angle(ship.heading + float(self.rng.uniform(-jitter, jitter)))
        if distance(ship.position, home) > pirate_cfg.TERRITORY_RADIUS:
            ship.heading = wrap_angle(heading_between(ship.position, home))

        ship.position = ship.position + heading_vector(ship.heading) * pirate_cfg.WANDER_SPEED
        return True

    def _move_scan(self, index: int, ship: Ship) -> bool:
        candidates = ships_in_range(self.ships, ship.position, self.sim_config.Pirate.DETECTION_RANGE,
                                    predicate=lambda other: other.carrying_cargo)
        ship.goal.prey = int(candidates[self.rng.integers(len(candidates))]) if candidates else None
        return True

    def _move_hunt(self, index: int, ship: Ship) -> bool:
        pirate_cfg = self.sim_config.Pirate
        goal = ship.goal
        prey = self._prey(index, goal.prey)

        if not prey.carrying_cargo:
            ship.goal = Wander()
            return False

        self._advance_toward(ship, prey.position)

        if distance(ship.position, prey.position) <= pirate_cfg.RAID_RANGE:
            prey.speed = prey.initial_speed
            goal.progress += 1
            goal.raiding = True
            if goal.progress > pirate_cfg.RAID_DURATION_STEPS:
                prey.job.carrying_cargo = False
                if self.rng.random() < pirate_cfg.KILL_PROBABILITY:
                    self.environment.schedule_kill(goal.prey)
                return True
        elif goal.raiding:
            logging.debug(f"Ship {goal.prey} escaped pirate {index}.")
            ship.goal = Wander()
        return False

    # --- Transitions ---

    def _trader_visit_complete(self, index: int, ship: Ship):
        job = ship.job
        target = ship.goal.target
        station = self.bodies[target]

        if job.carrying_cargo:
            station.add_stock(1)
            job.carrying_cargo = False

        destinations = [i for i in filter_bodies(self.bodies, FeatureKind.STATION) if i != target]
        if not destinations:
            return Visit(target=target)
        destination = destinations[int(self.rng.integers(len(destinations)))]

        if station.stock > self.bodies[destination].stock and not job.carrying_cargo:
            station.add_stock(-1)
            job.carrying_cargo = True

        return Visit(target=destination)

    def _miner_visit_complete(self, index: int, ship: Ship):
        target = ship.goal.target
        body = self.bodies[target]

        if body.has_feature(FeatureKind.STATION):
            body.add_stock(1)
            return Visit(target=self._nearest_or_fail(FeatureKind.ORE, ship))
        if body.has_feature(FeatureKind.ORE):
            return Wait(target=target, progress=self._jittered_start(self.sim_config.Miner.HARVEST_VARIANCE_RANGE))
        raise FeatureError(f"Miner {index} arrived at body {target}, which has no station or ore.")

    def _miner_wait_complete(self, index: int, ship: Ship):
        return Visit(target=self._nearest_or_fail(FeatureKind.STATION, ship))

    def _pirate_wander_complete(self, index: int, ship: Ship):
        return Scan()

    def _pirate_scan_complete(self, index: int, ship: Ship):
        prey = ship.goal.prey
        if prey is None:
            return Wander()
        ship.speed = ship.initial_speed
        return Hunt(prey=prey, progress=self._jittered_start(self.sim_config.Pirate.RAID_VARIANCE_RANGE))

    def _pirate_hunt_complete(self, index: int, ship: Ship):
        prey = self._prey(index, ship.goal.prey)
        if isinstance(prey.job, Trader):
            prey.job.carrying_cargo = False
        return Wander()

    def _nearest_or_fail(self, kind: FeatureKind, ship: Ship) -> int:
        found = nearest_body(self.bodies, kind, ship.position)
        if found is None:
            raise FeatureError(f"No body with a {kind.value} feature exists.")
        return found
