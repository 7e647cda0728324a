# geometry.py

import numpy as np

from config import TAU


class GeometryError(Exception):
    """Custom exception for geometry-related errors, such as a disc with a negative radius."""
    pass


def as_point(position):
    """Returns `position` as a float64 numpy array of shape (2,), copying the input."""
    return np.array(position, dtype=np.float64).reshape(2)


def safe_divide(numerator, denominator, epsilon=1e-12, default_on_zero_denom=0.0):
    """
    Safely divides two numbers, handling potential division by zero.

    Args:
        numerator (float): The number to be divided.
        denominator (float): The number to divide by.
        epsilon (float): Threshold below which the denominator is considered zero.
        default_on_zero_denom (float): Value to return if denominator is effectively zero.

    Returns:
        float: The result of the division, or default_on_zero_denom if denominator is near zero.
    """
    if abs(denominator) < epsilon:
        return default_on_zero_denom
    return numerator / denominator


def distance_squared(pos1, pos2):
    delta = np.asarray(pos2, dtype=np.float64) - np.asarray(pos1, dtype=np.float64)
    return float(np.dot(delta, delta))


def distance(pos1, pos2):
    return float(np.sqrt(distance_squared(pos1, pos2)))


def wrap_angle(angle):
    """
    Wraps an angle into the half-open interval [0, 2π).

    Python's modulo already maps negative angles into range, but a tiny negative
    input can round up to exactly 2π, which is folded back to 0.0.
    """
    wrapped = angle % TAU
    if wrapped >= TAU:
        return 0.0
    return wrapped


def heading_between(origin, destination):
    """
    Heading angle of the vector from `origin` to `destination`.

    Headings are measured with `atan2(dx, dy)`, so a heading of 0 points along +y
    and the matching forward vector is `(sin(heading), cos(heading))`.
    """
    delta = np.asarray(destination, dtype=np.float64) - np.asarray(origin, dtype=np.float64)
    return float(np.arctan2(delta[0], delta[1]))


def heading_vector(heading):
    """Unit forward vector for a heading angle (see `heading_between`)."""
    return np.array([np.sin(heading), np.cos(heading)], dtype=np.float64)


def polar_offset(center, radius, angle):
    """Point at `radius` from `center` in the direction of the orbital `angle` (measured from +x)."""
    center = np.asarray(center, dtype=np.float64)
    return np.array([center[0] + radius * np.cos(angle), center[1] + radius * np.sin(angle)], dtype=np.float64)
