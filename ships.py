# ships.py
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Union

import numpy as np

from geometry import as_point


class JobKind(Enum):
    MINER = 'miner'
    TRADER = 'trader'
    PIRATE = 'pirate'


class GoalKind(Enum):
    VISIT = 'visit'
    WAIT = 'wait'
    WANDER = 'wander'
    SCAN = 'scan'
    HUNT = 'hunt'


# --- Jobs ---

@dataclass
class Miner:
    kind: ClassVar[JobKind] = JobKind.MINER


@dataclass
class Trader:
    carrying_cargo: bool = False
    kind: ClassVar[JobKind] = JobKind.TRADER


@dataclass
class Pirate:
    home_position: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0], dtype=np.float64), compare=False)
    kind: ClassVar[JobKind] = JobKind.PIRATE

    def __post_init__(self):
        self.home_position = as_point(self.home_position)


Job = Union[Miner, Trader, Pirate]


# --- Goals ---

@dataclass
class Visit:
    target: int  # body index
    kind: ClassVar[GoalKind] = GoalKind.VISIT


@dataclass
class Wait:
    target: int  # body index
    progress: int = 0  # counts up; starts negative when jittered
    kind: ClassVar[GoalKind] = GoalKind.WAIT


@dataclass
class Wander:
    kind: ClassVar[GoalKind] = GoalKind.WANDER


@dataclass
class Scan:
    prey: Optional[int] = None  # ship index found by the last scan
    kind: ClassVar[GoalKind] = GoalKind.SCAN


@dataclass
class Hunt:
    prey: int  # ship index
    progress: int = 0
    raiding: bool = False  # set once the prey has been within raid range
    kind: ClassVar[GoalKind] = GoalKind.HUNT


Goal = Union[Visit, Wait, Wander, Scan, Hunt]


@dataclass(eq=False)
class Ship:
    """An autonomous agent.

    Speeds are fractions of the remaining distance to the destination covered
    per tick. `speed` starts at `initial_speed`, grows while travelling and is
    reset on arrival.

    Attributes:
        position (np.ndarray): Current [x, y] position.
        initial_speed (float): Speed restored on arrival; fixed per ship.
        job (Job): Behavioral role.
        goal (Goal): Current state of the goal state machine.
        speed (float): Current speed. Defaults to `initial_speed`.
        heading (float): Heading angle, `atan2(dx, dy)` of the last travel vector.
    """
    position: np.ndarray
    initial_speed: float
    job: Job
    goal: Goal
    speed: Optional[float] = None
    heading: float = 0.0

    def __post_init__(self):
        self.position = as_point(self.position)
        if self.speed is None:
            self.speed = self.initial_speed

    @classmethod
    def with_random_speed(cls, job: Job, goal: Goal, position, sim_config, rng: np.random.Generator) -> 'Ship':
        low, high = sim_config.Ship.INITIAL_SPEED_RANGE
        return cls(
            position=position,
            initial_speed=sim_config.Ship.BASE_SPEED * float(rng.uniform(low, high)),
            job=job,
            goal=goal,
        )

    @property
    def carrying_cargo(self) -> bool:
        return isinstance(self.job, Trader) and self.job.carrying_cargo
