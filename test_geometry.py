import unittest
import numpy as np
from config import TAU
from geometry import (as_point, safe_divide, distance, distance_squared, wrap_angle,
                      heading_between, heading_vector, polar_offset)

class TestSafeDivide(unittest.TestCase):

    def test_typical_division_scalar(self):
        self.assertAlmostEqual(safe_divide(10, 2), 5.0)
        self.assertAlmostEqual(safe_divide(7, 3), 7/3)
        self.assertAlmostEqual(safe_divide(-10, 2), -5.0)
        self.assertAlmostEqual(safe_divide(0, 5), 0.0)

    def test_division_by_zero_scalar_default_zero(self):
        self.assertAlmostEqual(safe_divide(5, 0), 0.0)
        self.assertAlmostEqual(safe_divide(5, 1e-13), 0.0) # Denominator smaller than default epsilon
        self.assertAlmostEqual(safe_divide(0, 0), 0.0)

    def test_division_by_zero_scalar_custom_default(self):
        self.assertAlmostEqual(safe_divide(5, 0, default_on_zero_denom=1.0), 1.0)
        self.assertAlmostEqual(safe_divide(5, 1e-3, epsilon=1e-2, default_on_zero_denom=99.0), 99.0)

class TestDistances(unittest.TestCase):

    def test_distance(self):
        self.assertAlmostEqual(distance([0.0, 0.0], [3.0, 4.0]), 5.0)
        self.assertAlmostEqual(distance_squared([1.0, 1.0], [4.0, 5.0]), 25.0)
        self.assertAlmostEqual(distance([2.0, -1.0], [2.0, -1.0]), 0.0)

    def test_as_point_copies_input(self):
        source = np.array([1.0, 2.0])
        point = as_point(source)
        point[0] = 10.0
        self.assertEqual(source[0], 1.0)
        self.assertEqual(point.dtype, np.float64)
        np.testing.assert_array_almost_equal(as_point((3, 4)), np.array([3.0, 4.0]))

class TestAngles(unittest.TestCase):

    def test_wrap_angle_stays_in_range(self):
        for angle in [0.0, 1.0, TAU, TAU + 0.5, -0.5, -TAU, 10 * TAU + 0.25, -1e-20]:
            wrapped = wrap_angle(angle)
            self.assertGreaterEqual(wrapped, 0.0)
            self.assertLess(wrapped, TAU)

    def test_wrap_angle_values(self):
        self.assertAlmostEqual(wrap_angle(TAU + 0.5), 0.5)
        self.assertAlmostEqual(wrap_angle(-0.5), TAU - 0.5)
        self.assertEqual(wrap_angle(TAU), 0.0)

    def test_heading_between_axes(self):
        # Heading 0 points along +y, pi/2 along +x
        self.assertAlmostEqual(heading_between([0, 0], [0, 1]), 0.0)
        self.assertAlmostEqual(heading_between([0, 0], [1, 0]), np.pi / 2)
        self.assertAlmostEqual(heading_between([1, 1], [1, 0]), np.pi)

    def test_heading_vector_matches_heading(self):
        origin = np.array([0.5, -0.25])
        destination = np.array([-1.0, 2.0])
        direction = destination - origin
        expected = direction / np.linalg.norm(direction)
        np.testing.assert_array_almost_equal(heading_vector(heading_between(origin, destination)), expected)

    def test_polar_offset(self):
        np.testing.assert_array_almost_equal(polar_offset([1.0, 1.0], 2.0, 0.0), np.array([3.0, 1.0]))
        np.testing.assert_array_almost_equal(polar_offset([0.0, 0.0], 1.0, np.pi / 2), np.array([0.0, 1.0]))

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
