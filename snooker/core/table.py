"""Table geometry, opening layout and pocket detection.

The geometry is static configuration: it is derived once from
``TableConfig`` and shared by the respot logic, cue-ball placement and the
opening rack. Coordinates follow the physics collaborator's convention of a
playing area whose long axis runs along x with the baulk end on the left.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from ..config.models.schemas import TableConfig
from .coordinates import Vector2D
from .models import OBJECT_COLORS, Ball, BallColor, PocketEvent

logger = logging.getLogger(__name__)


@dataclass
class TableGeometry:
    """Derived geometry of the playing area.

    Attributes:
        min_x, min_y, max_x, max_y: Playing-area bounds inside the cushions
        baulk_line_x: X coordinate of the baulk line
        d_center: Centre of the D (baulk line / centreline intersection)
        d_radius: Radius of the D
        spots: Canonical spot for each of the six colours
        pockets: Centres of the six pockets
        pocket_radius: Capture radius of a pocket
        ball_radius: Radius of every ball
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float
    baulk_line_x: float
    d_center: Vector2D
    d_radius: float
    spots: dict[BallColor, Vector2D]
    pockets: list[Vector2D]
    pocket_radius: float
    ball_radius: float
    _pocket_array: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        missing = [c.value for c in OBJECT_COLORS if c not in self.spots]
        if missing:
            raise ValueError(f"Table geometry is missing spots for: {missing}")
        self._pocket_array = np.array(
            [p.to_tuple() for p in self.pockets], dtype=float
        ).reshape(-1, 2)

    @classmethod
    def from_config(cls, config: Optional[TableConfig] = None) -> "TableGeometry":
        """Build the geometry from table configuration.

        Args:
            config: Table configuration (defaults used if None)

        Returns:
            TableGeometry for the configured playing area
        """
        config = config or TableConfig()
        min_x, min_y = config.origin_x, config.origin_y
        max_x, max_y = min_x + config.width, min_y + config.height
        center_y = min_y + config.height / 2
        center_x = min_x + config.width / 2

        baulk_line_x = min_x + config.width * config.baulk_fraction
        d_radius = config.height * config.d_radius_fraction

        spots = {
            BallColor.YELLOW: Vector2D(baulk_line_x, center_y + d_radius),
            BallColor.GREEN: Vector2D(baulk_line_x, center_y - d_radius),
            BallColor.BROWN: Vector2D(baulk_line_x, center_y),
            BallColor.BLUE: Vector2D(center_x, center_y),
            BallColor.PINK: Vector2D(
                max_x - config.width * config.pink_fraction, center_y
            ),
            BallColor.BLACK: Vector2D(
                max_x - config.width * config.black_fraction, center_y
            ),
        }

        pockets = [
            Vector2D(min_x, min_y),
            Vector2D(center_x, min_y),
            Vector2D(max_x, min_y),
            Vector2D(min_x, max_y),
            Vector2D(center_x, max_y),
            Vector2D(max_x, max_y),
        ]

        return cls(
            min_x=min_x,
            min_y=min_y,
            max_x=max_x,
            max_y=max_y,
            baulk_line_x=baulk_line_x,
            d_center=Vector2D(baulk_line_x, center_y),
            d_radius=d_radius,
            spots=spots,
            pockets=pockets,
            pocket_radius=config.pocket_radius,
            ball_radius=config.ball_radius,
        )

    @property
    def center(self) -> Vector2D:
        return Vector2D((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def spot_for(self, color: BallColor) -> Vector2D:
        """Canonical spot of a colour ball.

        Raises:
            KeyError: If ``color`` is not one of the six colours
        """
        return self.spots[color]

    def contains(self, position: Vector2D, margin: float = 0.0) -> bool:
        """Whether a point lies inside the playing area, shrunk by ``margin``."""
        return (
            self.min_x + margin <= position.x <= self.max_x - margin
            and self.min_y + margin <= position.y <= self.max_y - margin
        )

    def in_d(self, position: Vector2D) -> bool:
        """Whether a point lies inside the D semicircle behind the baulk line."""
        if position.x > self.baulk_line_x:
            return False
        return position.distance_to(self.d_center) <= self.d_radius

    def pocket_index_for(self, position: Vector2D) -> Optional[int]:
        """Index of the pocket capturing ``position``, or None."""
        distances = np.linalg.norm(
            self._pocket_array - np.array(position.to_tuple()), axis=1
        )
        index = int(np.argmin(distances))
        if distances[index] < self.pocket_radius:
            return index
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "bounds": [self.min_x, self.min_y, self.max_x, self.max_y],
            "baulk_line_x": self.baulk_line_x,
            "d_center": self.d_center.to_dict(),
            "d_radius": self.d_radius,
            "spots": {c.value: p.to_dict() for c, p in self.spots.items()},
            "pockets": [p.to_dict() for p in self.pockets],
            "pocket_radius": self.pocket_radius,
            "ball_radius": self.ball_radius,
        }


def rack_frame(geometry: TableGeometry, reds: int = 15) -> list[Ball]:
    """Build the opening layout of a frame.

    The cue ball sits inside the D, the six colours on their spots and the
    reds in a triangle whose apex is just behind the pink.

    Args:
        geometry: Table geometry
        reds: Number of reds to rack (at most 15)

    Returns:
        Balls in rack order: cue ball, colours, reds
    """
    if not 0 < reds <= 15:
        raise ValueError(f"Cannot rack {reds} reds; at most 15 reds exist")

    r = geometry.ball_radius
    balls = [
        Ball.cue(
            Vector2D(
                geometry.baulk_line_x - geometry.d_radius / 3,
                geometry.d_center.y + geometry.d_radius / 3,
            ),
            radius=r,
        )
    ]
    for color in OBJECT_COLORS:
        balls.append(Ball.colored(color, geometry.spot_for(color), radius=r))

    pink = geometry.spot_for(BallColor.PINK)
    apex_x = pink.x + 2 * r + 1.0
    count = 0
    row = 0
    while count < reds:
        x = apex_x + row * r * math.sqrt(3)
        y0 = pink.y - r * row
        for i in range(row + 1):
            if count >= reds:
                break
            count += 1
            balls.append(Ball.red(count, Vector2D(x, y0 + i * 2 * r), radius=r))
        row += 1

    logger.debug(f"Racked frame with {reds} reds ({len(balls)} balls)")
    return balls


def find_pocketed(
    balls: Iterable[Ball], geometry: TableGeometry
) -> list[PocketEvent]:
    """Report balls whose centre lies inside a pocket.

    For physics collaborators that report positions but have no pocket
    sensor of their own.
    """
    balls = list(balls)
    if not balls:
        return []

    positions = np.array([b.position.to_tuple() for b in balls], dtype=float)
    pockets = np.array([p.to_tuple() for p in geometry.pockets], dtype=float)
    # (n_balls, n_pockets) distance matrix
    distances = np.linalg.norm(positions[:, None, :] - pockets[None, :, :], axis=2)

    events = []
    for ball, row in zip(balls, distances):
        index = int(np.argmin(row))
        if row[index] < geometry.pocket_radius:
            events.append(PocketEvent(ball.id, index))
    return events
