"""Accelerometer orientation to display rotation and input transform."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class Rotation(str, Enum):
    """Display rotations, valued as xrandr ``--rotate`` arguments."""
    NORMAL = "normal"
    LEFT = "left"
    RIGHT = "right"
    INVERTED = "inverted"


@dataclass(frozen=True)
class TransformMatrix:
    """3x3 coordinate transformation matrix stored row-major."""

    values: Tuple[float, ...]

    def __post_init__(self):
        if len(self.values) != 9:
            raise ValueError(f"TransformMatrix needs 9 values, got {len(self.values)}")

    def format(self) -> str:
        """Space separated values, as accepted by ``xinput set-prop``."""
        return " ".join(f"{value:g}" for value in self.values)

    def as_args(self) -> list:
        return [f"{value:g}" for value in self.values]


IDENTITY = TransformMatrix((1, 0, 0, 0, 1, 0, 0, 0, 1))
LEFT_UP = TransformMatrix((0, -1, 1, 1, 0, 0, 0, 0, 1))
RIGHT_UP = TransformMatrix((0, 1, 0, -1, 0, 1, 0, 0, 1))
BOTTOM_UP = TransformMatrix((-1, 0, 1, 0, -1, 1, 0, 0, 1))


@dataclass(frozen=True)
class OrientationAction:
    """Display rotation plus the matrix every target device should get."""

    rotation: Rotation
    matrix: TransformMatrix


ORIENTATION_MAP: Dict[str, OrientationAction] = {
    "normal": OrientationAction(Rotation.NORMAL, IDENTITY),
    "left-up": OrientationAction(Rotation.LEFT, LEFT_UP),
    "right-up": OrientationAction(Rotation.RIGHT, RIGHT_UP),
    "bottom-up": OrientationAction(Rotation.INVERTED, BOTTOM_UP),
}


def map_orientation(name: str) -> Optional[OrientationAction]:
    """Return the action for an orientation name, or None if unknown."""
    return ORIENTATION_MAP.get(name)
