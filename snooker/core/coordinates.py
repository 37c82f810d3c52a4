"""Table-plane coordinates for the snooker rules engine.

Positions are expressed in the same units as the table geometry supplied by
the physics/rendering collaborator (typically canvas pixels). The rules
engine never integrates motion; it only reads positions reported to it and
writes respot/placement positions back.
"""

import math
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Vector2D:
    """Immutable 2D point/vector in table coordinates.

    Attributes:
        x: Horizontal coordinate (grows towards the top cushion)
        y: Vertical coordinate (grows towards the bottom side cushion)

    Example:
        >>> a = Vector2D(0.0, 0.0)
        >>> b = Vector2D(3.0, 4.0)
        >>> a.distance_to(b)
        5.0
    """

    x: float
    y: float

    # =========================================================================
    # Geometric Operations
    # =========================================================================

    def magnitude(self) -> float:
        """Calculate the length of the vector."""
        return math.sqrt(self.x**2 + self.y**2)

    def magnitude_squared(self) -> float:
        """Calculate the squared magnitude (avoids sqrt for comparisons)."""
        return self.x**2 + self.y**2

    def distance_to(self, other: "Vector2D") -> float:
        """Calculate the Euclidean distance to another point.

        Args:
            other: Point to measure distance to

        Returns:
            Distance between points
        """
        dx = self.x - other.x
        dy = self.y - other.y
        return math.sqrt(dx * dx + dy * dy)

    def angle_to(self, other: "Vector2D") -> float:
        """Angle in radians of the direction from this point to ``other``."""
        return math.atan2(other.y - self.y, other.x - self.x)

    def __add__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2D":
        return Vector2D(self.x * scalar, self.y * scalar)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_tuple(self) -> tuple[float, float]:
        """Return the point as an ``(x, y)`` tuple."""
        return (self.x, self.y)

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Vector2D":
        """Create from a ``{"x": .., "y": ..}`` dictionary."""
        return cls(float(data["x"]), float(data["y"]))

    @classmethod
    def coerce(
        cls, value: Union["Vector2D", tuple[float, float], list, dict[str, Any]]
    ) -> "Vector2D":
        """Accept a Vector2D, an ``(x, y)`` pair or a dict and return a Vector2D.

        Raises:
            TypeError: If the value cannot be interpreted as a point
        """
        if isinstance(value, Vector2D):
            return value
        if isinstance(value, dict):
            return cls.from_dict(value)
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(float(value[0]), float(value[1]))
        raise TypeError(f"Cannot interpret {value!r} as a table position")

    @classmethod
    def zero(cls) -> "Vector2D":
        """Create a zero vector."""
        return cls(0.0, 0.0)
