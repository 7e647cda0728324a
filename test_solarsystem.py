import unittest
import numpy as np
from config import SimulationConfig, TAU
from solarsystem import (Body, Orbit, Ore, Station, OrbitalMechanics, FeatureError, FeatureKind,
                         make_feature, total_radius)

def build_bodies():
    """Sun, two planets at 0.5 and 1.0, and one moon around the inner planet."""
    bodies = [
        Body(radius=0.1, moon_indices=[1, 2]),
        Body(radius=0.02, orbit=Orbit(parent_index=0, distance=0.5, angle=0.0), moon_indices=[3]),
        Body(radius=0.03, orbit=Orbit(parent_index=0, distance=1.0, angle=1.0, counterclockwise=True)),
        Body(radius=0.005, orbit=Orbit(parent_index=1, distance=0.05, angle=2.0, speed=1.5)),
    ]
    return bodies

class TestTotalRadius(unittest.TestCase):

    def test_leaf_is_own_radius(self):
        bodies = build_bodies()
        self.assertAlmostEqual(total_radius(bodies, 3), 0.005)
        self.assertAlmostEqual(total_radius(bodies, 2), 0.03)

    def test_nested_subsystems(self):
        bodies = build_bodies()
        self.assertAlmostEqual(total_radius(bodies, 1), 0.055)
        self.assertAlmostEqual(total_radius(bodies, 0), 1.03)

class TestOrbitalMechanics(unittest.TestCase):

    def setUp(self):
        self.sim_config = SimulationConfig()
        self.mechanics = OrbitalMechanics(self.sim_config)
        self.bodies = build_bodies()
        self.system_radius = total_radius(self.bodies, 0)

    def test_sun_never_moves(self):
        for _ in range(500):
            self.mechanics.propagate(self.bodies, self.system_radius)
            np.testing.assert_array_almost_equal(self.bodies[0].position, np.array([0.0, 0.0]))

    def test_angles_stay_in_range(self):
        for _ in range(2000):
            self.mechanics.propagate(self.bodies, self.system_radius)
            for body in self.bodies[1:]:
                self.assertGreaterEqual(body.orbit.angle, 0.0)
                self.assertLess(body.orbit.angle, TAU)

    def test_positions_follow_parents(self):
        for _ in range(10):
            self.mechanics.propagate(self.bodies, self.system_radius)
        planet, moon = self.bodies[1], self.bodies[3]
        expected = planet.position + 0.05 * np.array([np.cos(moon.orbit.angle), np.sin(moon.orbit.angle)])
        np.testing.assert_array_almost_equal(moon.position, expected)
        self.assertAlmostEqual(np.linalg.norm(planet.position), 0.5)

    def test_occupied_radius_unchanged(self):
        before = total_radius(self.bodies, 0)
        for _ in range(300):
            self.mechanics.propagate(self.bodies, self.system_radius)
        self.assertAlmostEqual(total_radius(self.bodies, 0), before)

    def test_nearer_planet_is_faster(self):
        bodies = [
            Body(radius=0.1, moon_indices=[1, 2]),
            Body(radius=0.02, orbit=Orbit(parent_index=0, distance=0.3)),
            Body(radius=0.02, orbit=Orbit(parent_index=0, distance=1.0)),
        ]
        radius = total_radius(bodies, 0)
        inner = self.mechanics.angular_step(bodies, 1, radius)
        outer = self.mechanics.angular_step(bodies, 2, radius)
        self.assertGreater(inner, outer)
        self.assertGreater(outer, 0.0)

    def test_counterclockwise_step_is_negative(self):
        self.assertLess(self.mechanics.angular_step(self.bodies, 2, self.system_radius), 0.0)

    def test_moon_step_scaled_by_parent_size(self):
        step = self.mechanics.angular_step(self.bodies, 3, self.system_radius)
        expected = self.sim_config.Orbit.BASE_ANGULAR_STEP_RAD * 1.5 * (0.1 / 0.02)
        self.assertAlmostEqual(step, expected)

    def test_propagate_empty_list_is_noop(self):
        self.mechanics.propagate([], 1.0)

class TestOrbitRandom(unittest.TestCase):

    def test_random_orbit_fields(self):
        rng = np.random.default_rng(3)
        for _ in range(50):
            orbit = Orbit.random(0, 0.7, rng, (0.5, 1.0, 1.5))
            self.assertEqual(orbit.parent_index, 0)
            self.assertEqual(orbit.distance, 0.7)
            self.assertIn(orbit.speed, (0.5, 1.0, 1.5))
            self.assertGreaterEqual(orbit.angle, 0.0)
            self.assertLess(orbit.angle, TAU)

class TestFeatures(unittest.TestCase):

    def test_make_feature(self):
        self.assertIsInstance(make_feature(FeatureKind.STATION, stock=4), Station)
        self.assertEqual(make_feature(FeatureKind.STATION, stock=4).stock, 4)
        self.assertIsInstance(make_feature(FeatureKind.ORE), Ore)

    def test_station_stock(self):
        body = Body(radius=0.01, feature=Station(stock=2))
        body.add_stock(3)
        self.assertEqual(body.stock, 5)
        body.add_stock(-5)
        self.assertEqual(body.stock, 0)
        self.assertTrue(body.has_feature(FeatureKind.STATION))

    def test_stock_cannot_go_negative(self):
        body = Body(radius=0.01, feature=Station(stock=1))
        with self.assertRaises(FeatureError):
            body.add_stock(-2)
        self.assertEqual(body.stock, 1)

    def test_stock_on_non_station_raises(self):
        with self.assertRaises(FeatureError):
            Body(radius=0.01, feature=Ore()).stock
        with self.assertRaises(FeatureError):
            Body(radius=0.01).add_stock(1)

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
