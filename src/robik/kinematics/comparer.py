"""
Deterministic ranking of joint positions by ABB quadrant coding.

Each joint position is reduced to the quadrants of axis 1, 4 and 6, which are
compared lexicographically. Quadrants order as Q3 < Q4 < Q1 < Q2 and axis 1
outranks axis 4, which outranks axis 6. Axis 2, 3 and 5 do not take part, so
ties are expected: sort with a stable algorithm to keep their input order.
"""

import functools
import math
from typing import Any, Callable, Sequence

from robik.core.exceptions import InvalidAngleDomainError

#: Axes (zero-based) whose quadrants make up the sort key, most significant first.
KEY_AXES = (0, 3, 5)


def quadrant(angle: float) -> int:
    """
    Classify an angle in degrees by ABB quadrant code.

    Args:
        angle: Angle in degrees, within (-180, 180]

    Returns:
        0 for [0, 90), 1 for [90, 180], -2 for (-180, -90), -1 for [-90, 0)

    Raises:
        InvalidAngleDomainError: If the angle lies outside (-180, 180]
    """
    if math.isnan(angle) or not (-180.0 < angle <= 180.0):
        raise InvalidAngleDomainError(
            f"Angle {angle} is outside the quadrant domain (-180, 180]",
            angle=angle,
        )
    if angle >= 90.0:
        return 1
    if angle >= 0.0:
        return 0
    if angle >= -90.0:
        return -1
    return -2


def configuration_key(position: Sequence[float]) -> tuple[int, int, int]:
    """
    Get the sort key of a joint position in degrees.

    Args:
        position: Six axis values in degrees

    Returns:
        Quadrants of axis 1, 4 and 6
    """
    return tuple(quadrant(position[axis]) for axis in KEY_AXES)


class ConfigurationComparer:
    """
    Comparer imposing the quadrant ranking on joint positions.

    Example:
        >>> comparer = ConfigurationComparer()
        >>> positions.sort(key=comparer.key)
    """

    def compare(self, a: Sequence[float], b: Sequence[float]) -> int:
        """
        Compare two joint positions.

        Args:
            a: First joint position in degrees
            b: Second joint position in degrees

        Returns:
            -1 if ``a`` ranks first, 1 if ``b`` ranks first, 0 on a tie
        """
        key_a = configuration_key(a)
        key_b = configuration_key(b)
        return (key_a > key_b) - (key_a < key_b)

    @property
    def key(self) -> Callable[[Sequence[float]], Any]:
        """Key function for ``sorted`` and ``list.sort``."""
        return functools.cmp_to_key(self.compare)

    def sort(self, positions: list) -> None:
        """Stable in-place sort of a list of joint positions."""
        positions.sort(key=self.key)
