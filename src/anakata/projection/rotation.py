"""
Rotation state in 4-space.

A rotation of 4-space is tracked as six angles, one per coordinate plane.
The angles are applied as successive Givens rotations in the fixed order
xy, xz, xw, yz, yw, zw. 4D rotations do not commute, so that order is part of
the visual contract and never changes.

The state has a single writer (the host's animation driver, once per frame)
and many readers (every projection of that frame).
"""

import logging
from dataclasses import dataclass, fields
from typing import Dict, Mapping, Tuple

from ..config import TWO_PI
from ..errors import ConfigError

logger = logging.getLogger(__name__)


# Application order of the plane rotations
PLANES: Tuple[str, ...] = ("xy", "xz", "xw", "yz", "yw", "zw")

# Coordinate indices mixed by each plane rotation
PLANE_AXES: Dict[str, Tuple[int, int]] = {
    "xy": (0, 1),
    "xz": (0, 2),
    "xw": (0, 3),
    "yz": (1, 2),
    "yw": (1, 3),
    "zw": (2, 3),
}


@dataclass
class RotationState:
    """Six rotation angles in radians, each kept in [0, 2π)."""
    xy: float = 0.0
    xz: float = 0.0
    xw: float = 0.0
    yz: float = 0.0
    yw: float = 0.0
    zw: float = 0.0

    def __post_init__(self):
        for plane in PLANES:
            setattr(self, plane, float(getattr(self, plane)) % TWO_PI)

    @classmethod
    def from_mapping(cls, angles: Mapping[str, float]) -> "RotationState":
        """Build a state from a plane -> angle mapping; missing planes are zero."""
        _check_planes(angles)
        return cls(**{plane: angles.get(plane, 0.0) for plane in PLANES})

    def angles(self) -> Tuple[float, ...]:
        """Angles in application order."""
        return tuple(getattr(self, plane) for plane in PLANES)

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def copy(self) -> "RotationState":
        return RotationState(*self.angles())

    def rotate(self, deltas: Mapping[str, float], elapsed_ms: float = 1.0) -> "RotationState":
        """Advance every angle by ``delta * elapsed_ms`` in place.

        Args:
            deltas: Plane -> angular speed in radians per millisecond.
                Planes without an entry do not move.
            elapsed_ms: Time since the previous frame

        Returns:
            self, for chaining
        """
        _check_planes(deltas)
        for plane in PLANES:
            delta = deltas.get(plane, 0.0)
            if delta:
                setattr(self, plane, (getattr(self, plane) + delta * elapsed_ms) % TWO_PI)
        return self


def _check_planes(mapping: Mapping[str, float]):
    unknown = set(mapping) - set(PLANES)
    if unknown:
        raise ConfigError(
            f"Unknown rotation plane(s): {', '.join(sorted(unknown))} "
            f"(expected {', '.join(PLANES)})"
        )


def rotate(state: RotationState, deltas: Mapping[str, float], elapsed_ms: float = 1.0) -> RotationState:
    """Functional spelling of ``RotationState.rotate``; mutates ``state``."""
    return state.rotate(deltas, elapsed_ms)
