import unittest
from config import SimulationConfig
from main import StarSystemSimulation
from system_generator import GenerationError

class TestStarSystemSimulation(unittest.TestCase):

    def test_run_advances_environment(self):
        sim_config = SimulationConfig(seed=5).override('Run', SUMMARY_INTERVAL_STEPS=10)
        sim_config.override('Monitoring', MEMORY_CHECK_INTERVAL_STEPS=10)
        simulation = StarSystemSimulation(sim_config)
        self.assertGreaterEqual(simulation.generation_attempts, 1)
        self.assertEqual(simulation.run(25), 25)
        self.assertEqual(simulation.run(5), 30)

    def test_generation_failure_after_retries(self):
        sim_config = SimulationConfig(seed=1).override('System', RADIUS=0.11)
        sim_config.override('Run', MAX_GENERATION_ATTEMPTS=3)
        with self.assertRaises(GenerationError):
            StarSystemSimulation(sim_config)

    def test_memory_check_warns_above_threshold(self):
        sim_config = SimulationConfig(seed=5).override('Monitoring', MEMORY_USAGE_WARN_MB=1)
        simulation = StarSystemSimulation(sim_config)
        with self.assertLogs(level='WARNING') as captured:
            simulation.check_memory()
        self.assertTrue(any('High memory usage' in line for line in captured.output))

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
