# config.py
import copy
import logging

import numpy as np

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(module)s - %(message)s')

# Full turn in radians, shared by the orbit integrator and the heading helpers
TAU = 2.0 * np.pi


class ConfigurationError(Exception):
    """Custom exception for simulation configuration errors.

    Raised by `SimulationConfig.validate()` and `SimulationConfig.override()`
    when settings are invalid, inconsistent, or refer to unknown sections or
    fields, which would prevent the simulation from running correctly.

    Attributes:
        message (str): A human-readable explanation of the configuration error.
                       This is the first argument passed to the exception constructor.
    """
    pass


class SimulationConfig:
    """Centralized, hierarchical configuration for the star-system trade simulation.

    Parameters are grouped in nested section classes (e.g., `SimulationConfig.System`,
    `SimulationConfig.Ship`, `SimulationConfig.Pirate`). Every `SimulationConfig`
    instance receives its own copy of each section, so tuning one environment's
    configuration never leaks into another. A default instance, named `config`,
    is created at the end of this module and is used by components that are not
    handed an explicit configuration.

    The `__init__` method copies the sections, applies the optional seed and
    invokes `validate()`, which raises a `ConfigurationError` for inconsistent
    settings before any generation work starts.

    Example Usage:
        >>> from config import SimulationConfig
        >>> cfg = SimulationConfig(seed=7).override('Pirate', COUNT=0)
        >>> print(f"System radius: {cfg.System.RADIUS}")
        >>> print(f"Trader cost: {cfg.Economy.TRADER_COST}")
    """

    SECTION_NAMES = ('System', 'Orbit', 'Ship', 'Economy', 'Miner', 'Pirate', 'Run', 'Monitoring', 'Debug')

    # --- System Generation Configuration ---
    class System:
        """Configuration for procedural star-system generation.

        Attributes:
            RADIUS (float): Target radius of the system. Planet subsystems whose
                            outer edge would exceed it are discarded and generation stops.
            SEED (Optional[int]): Seed for the simulation's `np.random.Generator`.
                                  `None` draws fresh entropy.
            SUN_RADIUS (float): Radius of the sun (body 0).
            SIZE_MULTIPLIER_RANGE (Tuple[float, float]): Range of the multiplier applied
                                  to a parent's radius to size a planet (relative to the
                                  sun) or a moon (relative to its planet).
            MOON_PROBABILITY (float): Chance of each additional moon being attached.
            MOON_FOOTPRINT_FACTOR (float): A planet stops gaining moons once its occupied
                                           radius reaches this multiple of its own radius.
            MOON_PADDING_FACTOR (float): Gap between moon orbits, as a multiple of the moon radius.
            PLANET_PADDING_FACTOR (float): Gap between planet subsystems, as a multiple
                                           of the planet radius.
            FEATURE_PROBABILITY (float): Chance that a featureless body receives a random feature.
            RANDOM_FEATURE_WEIGHTS (Dict[str, float]): Relative weights of the feature kinds
                                   used for random assignment, keyed by feature kind value.
            GUARANTEED_STATIONS (int): Number of stations always placed.
            GUARANTEED_ORE (int): Number of ore bodies always placed.
            INITIAL_STATION_STOCK (int): Stock held by a station at creation.
        """
        RADIUS = 2.0
        SEED = None
        SUN_RADIUS = 0.1
        SIZE_MULTIPLIER_RANGE = (0.1, 0.3)
        MOON_PROBABILITY = 0.5
        MOON_FOOTPRINT_FACTOR = 5.0
        MOON_PADDING_FACTOR = 3.0
        PLANET_PADDING_FACTOR = 3.0
        FEATURE_PROBABILITY = 0.5
        RANDOM_FEATURE_WEIGHTS = {'station': 0.0, 'ore': 1.0}
        GUARANTEED_STATIONS = 2
        GUARANTEED_ORE = 1
        INITIAL_STATION_STOCK = 0

    # --- Orbit Configuration ---
    class Orbit:
        """Configuration for the kinematic orbit integrator.

        Attributes:
            BASE_ANGULAR_STEP_RAD (float): Angular increment per tick before scaling
                                           (roughly one degree).
            SPEED_MULTIPLIERS (Tuple[float, ...]): Per-orbit speed multipliers; one is
                                                   drawn uniformly when the orbit is created.
        """
        BASE_ANGULAR_STEP_RAD = 0.0174
        SPEED_MULTIPLIERS = (0.5, 1.0, 1.5)

    # --- Ship Configuration ---
    class Ship:
        """Configuration shared by all ships.

        Attributes:
            BASE_SPEED (float): Reference speed. Speeds are fractions of the remaining
                                distance covered per tick while travelling.
            INITIAL_SPEED_RANGE (Tuple[float, float]): Range of the multiplier applied to
                                `BASE_SPEED` to draw a ship's initial speed.
            ACCELERATION (float): Factor applied to the current speed after every
                                  travelling tick.
            MAX_SPEED (float): Ceiling for the current speed. Values above 1.0 let ships
                               overshoot their target within one tick.
            INITIAL_MINERS (int): Number of miners created at simulation start.
        """
        BASE_SPEED = 0.01
        INITIAL_SPEED_RANGE = (0.25, 1.0)
        ACCELERATION = 1.05
        MAX_SPEED = 1.5
        INITIAL_MINERS = 10

    # --- Economy Configuration ---
    class Economy:
        """Configuration for station stock and trader spawning.

        Attributes:
            TRADER_COST (int): Stock a station spends to launch a trader. A station
                               launches one when its stock exceeds this value.
        """
        TRADER_COST = 10

    # --- Miner Configuration ---
    class Miner:
        """Configuration for mining behavior.

        Attributes:
            HARVEST_DURATION_STEPS (int): Ticks a miner waits at an ore body.
            HARVEST_VARIANCE_RANGE (Tuple[int, int]): Inclusive range of extra ticks
                                   drawn once each time a miner starts harvesting.
        """
        HARVEST_DURATION_STEPS = 100
        HARVEST_VARIANCE_RANGE = (0, 50)

    # --- Pirate Configuration ---
    class Pirate:
        """Configuration for pirate patrol and raid behavior.

        Attributes:
            COUNT (int): Number of pirates created at simulation start.
            TERRITORY_RADIUS (float): Distance from home beyond which a wandering
                                      pirate turns back.
            DETECTION_RANGE (float): Range within which a scanning pirate sees
                                     cargo-carrying traders.
            RAID_RANGE (float): Distance at which a hunting pirate raids its prey.
            RAID_DURATION_STEPS (int): Ticks of sustained raiding before the raid commits.
            RAID_VARIANCE_RANGE (Tuple[int, int]): Inclusive range of extra raid ticks
                                drawn once per hunt.
            KILL_PROBABILITY (float): Chance a committed raid destroys the prey.
            WANDER_SPEED (float): Distance covered per tick while wandering.
            WANDER_TURN_JITTER_RAD (float): Maximum heading change per wandering tick.
        """
        COUNT = 3
        TERRITORY_RADIUS = 0.6
        DETECTION_RANGE = 0.5
        RAID_RANGE = 0.05
        RAID_DURATION_STEPS = 60
        RAID_VARIANCE_RANGE = (0, 30)
        KILL_PROBABILITY = 0.5
        WANDER_SPEED = 0.005
        WANDER_TURN_JITTER_RAD = 0.2

    # --- Run Configuration ---
    class Run:
        """Configuration for the headless runner in `main.py`.

        Attributes:
            DEFAULT_STEPS (int): Ticks executed when no step count is given.
            MAX_GENERATION_ATTEMPTS (int): Generation retries before giving up.
            SUMMARY_INTERVAL_STEPS (int): Frequency (ticks) of population summaries.
        """
        DEFAULT_STEPS = 10000
        MAX_GENERATION_ATTEMPTS = 10
        SUMMARY_INTERVAL_STEPS = 1000

    # --- Monitoring Configuration ---
    class Monitoring:
        """Configuration for system resource monitoring.

        Attributes:
            MEMORY_USAGE_WARN_MB (int): Memory usage threshold in Megabytes. If exceeded,
                                        a warning is logged.
            MEMORY_CHECK_INTERVAL_STEPS (int): Frequency (in simulation steps) at which
                                               memory usage is checked.
        """
        MEMORY_USAGE_WARN_MB = 512
        MEMORY_CHECK_INTERVAL_STEPS = 500

    # --- Debug Configuration ---
    class Debug:
        """Configuration for debugging features and logging verbosity.

        Attributes:
            MONITOR_ECONOMY (bool): If True, periodically logs the total stock plus
                                    cargo in flight.
            ECONOMY_CHECK_INTERVAL_STEPS (int): Frequency (ticks) for economy checks.
            LOG_SHIP_TRANSITIONS (bool): If True, every goal transition is logged at
                                         DEBUG level.
        """
        MONITOR_ECONOMY = True
        ECONOMY_CHECK_INTERVAL_STEPS = 100
        LOG_SHIP_TRANSITIONS = False

    def __init__(self, seed=None):
        """Initializes the `SimulationConfig` instance and performs setup.

        1.  Replaces every section class with a per-instance copy, so that
            `override()` and direct attribute assignment only affect this instance.
        2.  Stores `seed` in `System.SEED` when given.
        3.  Calls `self.validate()`.

        Raises:
            ConfigurationError: If the default values (or the seed) are invalid.
        """
        for name in self.SECTION_NAMES:
            section_cls = getattr(type(self), name)
            section = section_cls()
            for field_name, value in vars(section_cls).items():
                if field_name.isupper():
                    setattr(section, field_name, copy.deepcopy(value))
            setattr(self, name, section)

        if seed is not None:
            self.System.SEED = seed

        self.validate()

    def override(self, section_name, **values):
        """Sets fields of one section on this instance and re-validates.

        Returns:
            SimulationConfig: `self`, so calls can be chained.

        Raises:
            ConfigurationError: For an unknown section or field, or if the
                                resulting configuration is invalid.
        """
        if section_name not in self.SECTION_NAMES:
            raise ConfigurationError(f"Unknown configuration section '{section_name}'.")
        section = getattr(self, section_name)
        for field_name, value in values.items():
            if not hasattr(section, field_name):
                raise ConfigurationError(f"Unknown field '{section_name}.{field_name}'.")
            setattr(section, field_name, value)
        self.validate()
        return self

    def validate(self):
        """Performs validation of all simulation configuration settings.

        -   **System**: positive radii, ordered size range, probabilities within
            [0, 1], non-negative guaranteed feature counts, at least one positive
            random feature weight with known kinds, integer or `None` seed.
        -   **Orbit**: positive base step and speed multipliers.
        -   **Ship**: positive speeds, acceleration of at least 1.0, non-negative miners.
        -   **Economy**: positive trader cost.
        -   **Miner** / **Pirate**: positive durations, ordered variance ranges,
            positive ranges, kill probability within [0, 1].
        -   **Run** / **Monitoring** / **Debug**: positive intervals.

        Raises:
            ConfigurationError: If any configuration setting is found to be invalid.
        """
        # System validation
        if self.System.RADIUS <= 0:
            raise ConfigurationError("System.RADIUS must be positive.")
        if self.System.SUN_RADIUS <= 0:
            raise ConfigurationError("System.SUN_RADIUS must be positive.")
        if self.System.SUN_RADIUS >= self.System.RADIUS:
            raise ConfigurationError(
                f"System.SUN_RADIUS ({self.System.SUN_RADIUS}) must be smaller than System.RADIUS ({self.System.RADIUS})."
            )
        low, high = self.System.SIZE_MULTIPLIER_RANGE
        if not (0 < low <= high):
            raise ConfigurationError(
                f"System.SIZE_MULTIPLIER_RANGE ({self.System.SIZE_MULTIPLIER_RANGE}) must be positive and ordered."
            )
        for name in ('MOON_PROBABILITY', 'FEATURE_PROBABILITY'):
            probability = getattr(self.System, name)
            if not (0.0 <= probability <= 1.0):
                raise ConfigurationError(f"System.{name} ({probability}) must be between 0.0 and 1.0.")
        for name in ('MOON_FOOTPRINT_FACTOR', 'MOON_PADDING_FACTOR', 'PLANET_PADDING_FACTOR'):
            if getattr(self.System, name) < 0:
                raise ConfigurationError(f"System.{name} cannot be negative.")
        if self.System.GUARANTEED_STATIONS < 0 or self.System.GUARANTEED_ORE < 0:
            raise ConfigurationError("System.GUARANTEED_STATIONS and System.GUARANTEED_ORE cannot be negative.")
        if self.System.INITIAL_STATION_STOCK < 0:
            raise ConfigurationError("System.INITIAL_STATION_STOCK cannot be negative.")
        weights = self.System.RANDOM_FEATURE_WEIGHTS
        unknown_kinds = set(weights) - {'station', 'ore'}
        if unknown_kinds:
            raise ConfigurationError(f"System.RANDOM_FEATURE_WEIGHTS has unknown feature kinds: {sorted(unknown_kinds)}.")
        if any(w < 0 for w in weights.values()) or sum(weights.values()) <= 0:
            raise ConfigurationError("System.RANDOM_FEATURE_WEIGHTS must be non-negative with a positive total.")
        if self.System.SEED is not None and not isinstance(self.System.SEED, (int, np.integer)):
            raise ConfigurationError(f"System.SEED ({self.System.SEED!r}) must be an integer or None.")

        # Orbit validation
        if self.Orbit.BASE_ANGULAR_STEP_RAD <= 0:
            raise ConfigurationError("Orbit.BASE_ANGULAR_STEP_RAD must be positive.")
        if not self.Orbit.SPEED_MULTIPLIERS or not all(m > 0 for m in self.Orbit.SPEED_MULTIPLIERS):
            raise ConfigurationError("Orbit.SPEED_MULTIPLIERS must be a non-empty sequence of positive values.")

        # Ship validation
        if self.Ship.BASE_SPEED <= 0:
            raise ConfigurationError("Ship.BASE_SPEED must be positive.")
        low, high = self.Ship.INITIAL_SPEED_RANGE
        if not (0 < low <= high):
            raise ConfigurationError(f"Ship.INITIAL_SPEED_RANGE ({self.Ship.INITIAL_SPEED_RANGE}) must be positive and ordered.")
        if self.Ship.ACCELERATION < 1.0:
            raise ConfigurationError("Ship.ACCELERATION must be at least 1.0.")
        if self.Ship.MAX_SPEED < self.Ship.BASE_SPEED * high:
            raise ConfigurationError(
                f"Ship.MAX_SPEED ({self.Ship.MAX_SPEED}) must not be below the largest initial speed "
                f"({self.Ship.BASE_SPEED * high})."
            )
        if self.Ship.INITIAL_MINERS < 0:
            raise ConfigurationError("Ship.INITIAL_MINERS cannot be negative.")

        # Economy validation
        if self.Economy.TRADER_COST <= 0:
            raise ConfigurationError("Economy.TRADER_COST must be positive.")

        # Miner validation
        if self.Miner.HARVEST_DURATION_STEPS <= 0:
            raise ConfigurationError("Miner.HARVEST_DURATION_STEPS must be positive.")
        low, high = self.Miner.HARVEST_VARIANCE_RANGE
        if not (0 <= low <= high):
            raise ConfigurationError(f"Miner.HARVEST_VARIANCE_RANGE ({self.Miner.HARVEST_VARIANCE_RANGE}) must be non-negative and ordered.")

        # Pirate validation
        if self.Pirate.COUNT < 0:
            raise ConfigurationError("Pirate.COUNT cannot be negative.")
        for name in ('TERRITORY_RADIUS', 'DETECTION_RANGE', 'RAID_RANGE', 'WANDER_SPEED'):
            if getattr(self.Pirate, name) <= 0:
                raise ConfigurationError(f"Pirate.{name} must be positive.")
        if self.Pirate.WANDER_TURN_JITTER_RAD < 0:
            raise ConfigurationError("Pirate.WANDER_TURN_JITTER_RAD cannot be negative.")
        if self.Pirate.RAID_DURATION_STEPS <= 0:
            raise ConfigurationError("Pirate.RAID_DURATION_STEPS must be positive.")
        low, high = self.Pirate.RAID_VARIANCE_RANGE
        if not (0 <= low <= high):
            raise ConfigurationError(f"Pirate.RAID_VARIANCE_RANGE ({self.Pirate.RAID_VARIANCE_RANGE}) must be non-negative and ordered.")
        if not (0.0 <= self.Pirate.KILL_PROBABILITY <= 1.0):
            raise ConfigurationError(f"Pirate.KILL_PROBABILITY ({self.Pirate.KILL_PROBABILITY}) must be between 0.0 and 1.0.")

        # Run, Monitoring and Debug
        if self.Run.DEFAULT_STEPS <= 0 or self.Run.MAX_GENERATION_ATTEMPTS <= 0 or self.Run.SUMMARY_INTERVAL_STEPS <= 0:
            raise ConfigurationError("Run.DEFAULT_STEPS, Run.MAX_GENERATION_ATTEMPTS and Run.SUMMARY_INTERVAL_STEPS must be positive.")
        if self.Monitoring.MEMORY_USAGE_WARN_MB <= 0 or self.Monitoring.MEMORY_CHECK_INTERVAL_STEPS <= 0:
            raise ConfigurationError("Monitoring thresholds and intervals must be positive.")
        if self.Debug.ECONOMY_CHECK_INTERVAL_STEPS <= 0:
            raise ConfigurationError("Debug.ECONOMY_CHECK_INTERVAL_STEPS must be positive.")

        logging.debug("Configuration validated successfully.")


# --- Instantiate the configuration ---
# This makes the config object available for import and runs validation.
# e.g., from config import config
try:
    config = SimulationConfig()
except ConfigurationError as e:
    logging.error(f"FATAL CONFIGURATION ERROR: {e}", exc_info=True)
    raise
