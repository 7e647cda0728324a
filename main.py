# main.py
import argparse  # For command line arguments (steps, seed, profiling)
import cProfile
import logging
import os
import time

import numpy as np
import psutil  # For memory monitoring

from config import config, ConfigurationError, SimulationConfig
from environment import StarSystemEnvironment
from system_generator import GenerationError


class StarSystemSimulation:
    """Manages a headless run of the star-system simulation.

    Creates the `StarSystemEnvironment` (retrying generation with a new seed when
    a system does not fit the guaranteed features), advances it tick by tick and
    periodically logs a population summary and the process memory usage.

    Attributes:
        sim_config (SimulationConfig): Configuration shared with the environment.
        environment (StarSystemEnvironment): The simulated system.
        generation_attempts (int): Attempts needed to generate a valid system.
        process (psutil.Process): Current process, used for memory monitoring.
    """

    def __init__(self, sim_config=None):
        """Initializes the simulation.

        Raises:
            GenerationError: If no attempt out of `Run.MAX_GENERATION_ATTEMPTS`
                produced a valid system.
            ConfigurationError: If the configuration is invalid.
        """
        self.sim_config = sim_config or config
        self.generation_attempts = 0
        self.environment = self._create_environment()
        self.process = psutil.Process(os.getpid())
        logging.info("StarSystemSimulation initialized successfully.")

    def _create_environment(self) -> StarSystemEnvironment:
        seed = self.sim_config.System.SEED
        max_attempts = self.sim_config.Run.MAX_GENERATION_ATTEMPTS

        for attempt in range(max_attempts):
            self.generation_attempts = attempt + 1
            # Attempts with an explicit seed stay reproducible
            rng = np.random.default_rng(None if seed is None else seed + attempt)
            try:
                return StarSystemEnvironment(self.sim_config, rng=rng)
            except GenerationError as e_gen:
                logging.warning(f"Generation attempt {attempt + 1}/{max_attempts} failed: {e_gen}")

        raise GenerationError(f"No valid system generated after {max_attempts} attempts.")

    def run(self, max_steps: int = None) -> int:
        """Runs `max_steps` ticks (default `Run.DEFAULT_STEPS`).

        Returns:
            int: Total ticks completed by the environment.
        """
        effective_max_steps = max_steps if max_steps is not None else self.sim_config.Run.DEFAULT_STEPS
        summary_interval = self.sim_config.Run.SUMMARY_INTERVAL_STEPS
        memory_interval = self.sim_config.Monitoring.MEMORY_CHECK_INTERVAL_STEPS
        logging.info(f"Starting run of {effective_max_steps} steps.")

        start_time = time.time()
        for _ in range(effective_max_steps):
            self.environment.update()
            step = self.environment.step_count
            if step % summary_interval == 0:
                self.log_summary()
            if step % memory_interval == 0:
                self.check_memory()

        elapsed = time.time() - start_time
        logging.info(f"Run finished after {effective_max_steps} steps in {elapsed:.2f}s.")
        self.log_summary()
        return self.environment.step_count

    def log_summary(self):
        env = self.environment
        logging.info(f"Step {env.step_count}: ships {env.count_ships_by_job()}, "
                     f"station stock {env.station_stock()}, "
                     f"total economy units {env.calculate_total_economy_units()}")

    def check_memory(self):
        try:
            memory_mb = self.process.memory_info().rss / (1024 * 1024)
            if memory_mb > self.sim_config.Monitoring.MEMORY_USAGE_WARN_MB:
                logging.warning(f"High memory usage: {memory_mb:.2f} MB at step {self.environment.step_count}")
            else:
                logging.debug(f"Memory usage: {memory_mb:.2f} MB at step {self.environment.step_count}")
        except psutil.Error as e_psutil:
            logging.error(f"Could not retrieve memory usage: {e_psutil}", exc_info=True)


if __name__ == "__main__":
    """Main entry point for a headless run.

    -   `--steps`: Number of ticks to simulate (default `Run.DEFAULT_STEPS`).
    -   `--seed`: Seed for the random generator; omitted means fresh entropy.
    -   `--profile`: Enables `cProfile`, saving statistics to `simulation_profile.prof`.
    """
    parser = argparse.ArgumentParser(description="Run the star-system trade simulation headless.")
    parser.add_argument("--steps", type=int, default=None, help="Number of ticks to simulate.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs.")
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable profiling for the simulation. Statistics will be saved to 'simulation_profile.prof'."
    )
    args = parser.parse_args()

    profiler = None
    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        logging.info("cProfile profiling enabled. Output will be saved to simulation_profile.prof upon completion.")

    try:
        run_config = SimulationConfig(seed=args.seed) if args.seed is not None else config
        simulation_instance = StarSystemSimulation(run_config)
        simulation_instance.run(args.steps)
    except ConfigurationError as e_config_main:
        logging.critical(f"Simulation could not be initialized or run due to a ConfigurationError: {e_config_main}", exc_info=True)
        print(f"FATAL CONFIGURATION ERROR: {e_config_main}. Simulation cannot start. Check logs for details.")
    except GenerationError as e_gen_main:
        logging.critical(f"Simulation could not generate a star system: {e_gen_main}", exc_info=True)
        print(f"FATAL GENERATION ERROR: {e_gen_main}. Try another seed or a larger System.RADIUS.")
    except Exception as e_main:
        logging.critical(f"An unexpected critical error occurred in the main simulation execution block: {e_main}", exc_info=True)
        print(f"FATAL UNEXPECTED ERROR: {e_main}. Simulation terminated. Check logs for details.")
    finally:
        if profiler:
            profiler.disable()
            stats_file = "simulation_profile.prof"
            try:
                profiler.dump_stats(stats_file)
                logging.info(f"Profiling data successfully saved to {stats_file}")
            except Exception as e_profile_dump:
                logging.error(f"Failed to save or process profiling data from {stats_file}: {e_profile_dump}", exc_info=True)
