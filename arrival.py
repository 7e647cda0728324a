# arrival.py
import numpy as np

from geometry import GeometryError


def segment_crosses_circle(old_position, new_position, center, radius) -> bool:
    """
    Swept test: does the segment from `old_position` to `new_position` cross the
    boundary of the disc (`center`, `radius`) during this step?

    A fast ship can skip over a small target within a single tick, so checking
    only the end point is not enough. The segment is parametrized as
    `old + t * (new - old)` for t in [0, 1] and substituted into the circle
    equation `x^2 + y^2 = r^2` in the target's frame, which gives a quadratic in t.

    Args:
        old_position: Ship position before the movement step.
        new_position: Ship position after the movement step.
        center: Center of the target disc.
        radius (float): Radius of the target disc.

    Returns:
        bool: True if either root of the quadratic lies in the open interval (0, 1).
              A zero-length segment, a tangent segment (discriminant of zero), a
              segment that misses the disc and a segment lying entirely inside
              the disc all return False.

    Raises:
        GeometryError: If `radius` is negative.
    """
    if radius < 0:
        raise GeometryError(f"Target radius must be non-negative, got {radius}.")

    center = np.asarray(center, dtype=np.float64)
    start = np.asarray(old_position, dtype=np.float64) - center
    delta = np.asarray(new_position, dtype=np.float64) - np.asarray(old_position, dtype=np.float64)

    a = float(np.dot(delta, delta))
    if a == 0.0:
        return False
    b = 2.0 * float(np.dot(start, delta))
    c = float(np.dot(start, start)) - radius * radius

    discriminant = b * b - 4.0 * a * c
    if discriminant <= 0.0:
        return False

    root = np.sqrt(discriminant)
    t1 = (-b - root) / (2.0 * a)
    t2 = (-b + root) / (2.0 * a)
    return (0.0 < t1 < 1.0) or (0.0 < t2 < 1.0)


def point_in_circle(position, center, radius) -> bool:
    delta = np.asarray(position, dtype=np.float64) - np.asarray(center, dtype=np.float64)
    return float(np.dot(delta, delta)) <= radius * radius


def has_arrived(old_position, new_position, center, radius) -> bool:
    """
    Arrival used by the goal state machine: the movement segment crossed the
    target's boundary, or the ship ended the step inside the disc.

    The second clause covers ships that start inside their target (a trader
    spawned at its own station), which the crossing test alone reports as no arrival.
    """
    if segment_crosses_circle(old_position, new_position, center, radius):
        return True
    return point_in_circle(new_position, center, radius)
