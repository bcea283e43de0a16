"""Rotation and 4D to 3D projection."""

from .rotation import (
    PLANES,
    PLANE_AXES,
    RotationState,
    rotate
)

from .projector import (
    PlaneTrig,
    Projector,
    plane_trig,
    safe_zoom,
    rotate_point,
    project_point,
    rotate_points,
    project_points
)

__all__ = [
    'PLANES',
    'PLANE_AXES',
    'RotationState',
    'rotate',
    'PlaneTrig',
    'Projector',
    'plane_trig',
    'safe_zoom',
    'rotate_point',
    'project_point',
    'rotate_points',
    'project_points'
]
