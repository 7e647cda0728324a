import unittest
import numpy as np
from arrival import segment_crosses_circle, point_in_circle, has_arrived
from geometry import GeometryError

class TestSegmentCrossesCircle(unittest.TestCase):

    def test_segment_entering_disc(self):
        self.assertTrue(segment_crosses_circle([-2.0, 0.0], [0.0, 0.0], [0.0, 0.0], 1.0))

    def test_segment_leaving_disc(self):
        self.assertTrue(segment_crosses_circle([0.0, 0.0], [2.0, 0.0], [0.0, 0.0], 1.0))

    def test_overshoot_through_disc(self):
        # Both endpoints outside, but the step jumps clean over the target
        self.assertTrue(segment_crosses_circle([-3.0, 0.1], [3.0, 0.1], [0.0, 0.0], 0.5))

    def test_segment_entirely_outside(self):
        self.assertFalse(segment_crosses_circle([-3.0, 2.0], [3.0, 2.0], [0.0, 0.0], 1.0))
        self.assertFalse(segment_crosses_circle([2.0, 0.0], [3.0, 0.0], [0.0, 0.0], 1.0))

    def test_segment_entirely_inside(self):
        self.assertFalse(segment_crosses_circle([-0.2, 0.0], [0.2, 0.1], [0.0, 0.0], 1.0))

    def test_tangent_segment(self):
        self.assertFalse(segment_crosses_circle([-2.0, 1.0], [2.0, 1.0], [0.0, 0.0], 1.0))

    def test_zero_length_segment(self):
        self.assertFalse(segment_crosses_circle([0.5, 0.5], [0.5, 0.5], [0.0, 0.0], 1.0))

    def test_offset_center(self):
        center = np.array([10.0, -5.0])
        self.assertTrue(segment_crosses_circle(center + [-1.0, 0.0], center, center, 0.1))
        self.assertFalse(segment_crosses_circle(center + [-1.0, 0.0], center + [-0.5, 0.0], center, 0.1))

    def test_negative_radius_raises(self):
        with self.assertRaises(GeometryError):
            segment_crosses_circle([0.0, 0.0], [1.0, 0.0], [0.0, 0.0], -0.1)

class TestHasArrived(unittest.TestCase):

    def test_point_in_circle_boundary_inclusive(self):
        self.assertTrue(point_in_circle([1.0, 0.0], [0.0, 0.0], 1.0))
        self.assertFalse(point_in_circle([1.0001, 0.0], [0.0, 0.0], 1.0))

    def test_arrival_by_crossing(self):
        self.assertTrue(has_arrived([-2.0, 0.0], [-0.5, 0.0], [0.0, 0.0], 1.0))

    def test_arrival_when_starting_inside(self):
        # A ship launched from inside its target counts as arrived
        self.assertTrue(has_arrived([0.1, 0.0], [0.05, 0.0], [0.0, 0.0], 1.0))

    def test_no_arrival_short_of_target(self):
        self.assertFalse(has_arrived([-3.0, 0.0], [-2.0, 0.0], [0.0, 0.0], 1.0))

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
