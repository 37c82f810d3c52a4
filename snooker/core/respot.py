"""Respotting colours and re-admitting the cue ball.

A potted colour returns to its own spot. When that spot is covered it goes
to the highest-value free spot; when every spot is covered it goes back to
its own spot anyway, possibly touching the ball that covers it. That last
resort is logged as a configuration gap rather than treated as an error.

After the cue ball is potted the incoming player places it inside the D,
clear of every other ball. Placement is polled: validity is recomputed for
each proposed position and only a confirmed valid position admits the ball.
"""

import logging
from typing import Iterable, Optional

import numpy as np

from .coordinates import Vector2D
from .models import Ball, BallColor
from .registry import BallRegistry
from .table import TableGeometry

logger = logging.getLogger(__name__)

RESPOT_PRIORITY: tuple[BallColor, ...] = (
    BallColor.BLACK,
    BallColor.PINK,
    BallColor.BLUE,
    BallColor.BROWN,
    BallColor.GREEN,
    BallColor.YELLOW,
)


class RespotManager:
    """Computes replacement positions for potted colours and the cue ball."""

    def __init__(self, geometry: TableGeometry):
        self.geometry = geometry

    @property
    def ball_radius(self) -> float:
        return self.geometry.ball_radius

    def is_occupied(
        self,
        position: Vector2D,
        registry: BallRegistry,
        exclude: Optional[str] = None,
    ) -> bool:
        """Whether any ball in play lies within two radii of ``position``."""
        centres = registry.positions(exclude=exclude)
        if len(centres) == 0:
            return False
        distances = np.linalg.norm(centres - np.array(position.to_tuple()), axis=1)
        return bool(np.any(distances < 2 * self.ball_radius))

    def find_available_spot(
        self, color: BallColor, registry: BallRegistry
    ) -> Vector2D:
        """Choose where a potted colour goes back on the table.

        Args:
            color: Colour being respotted
            registry: Balls currently in play

        Returns:
            The colour's own spot if free, else the first free spot in
            descending value order, else the colour's own spot regardless
        """
        own_spot = self.geometry.spot_for(color)
        if not self.is_occupied(own_spot, registry, exclude=color.value):
            return own_spot

        for other in RESPOT_PRIORITY:
            if other is color:
                continue
            spot = self.geometry.spot_for(other)
            if not self.is_occupied(spot, registry, exclude=color.value):
                logger.debug(
                    f"{color.value} spot covered; using {other.value} spot instead"
                )
                return spot

        logger.warning(
            f"No free spot for {color.value}; respotting on its own covered spot"
        )
        return own_spot

    def respot_colors(
        self, potted: Iterable[Ball], registry: BallRegistry
    ) -> dict[str, Vector2D]:
        """Return potted colours to the table, highest value first.

        Args:
            potted: Balls potted this shot (non-colours are ignored)
            registry: Registry the colours are re-admitted to

        Returns:
            Mapping of ball id to the spot it was placed on
        """
        colors = sorted(
            (b for b in potted if b.is_color),
            key=lambda b: b.point_value,
            reverse=True,
        )
        placed: dict[str, Vector2D] = {}
        for ball in colors:
            spot = self.find_available_spot(ball.color, registry)
            registry.add(ball.moved_to(spot))
            placed[ball.id] = spot
            logger.debug(f"Respotted {ball.label} at ({spot.x:.1f}, {spot.y:.1f})")
        return placed

    def is_valid_cue_placement(
        self, position: Vector2D, registry: BallRegistry
    ) -> bool:
        """Whether the cue ball may be placed at ``position``.

        The position must lie inside the D and at least one ball diameter
        from every ball in play.
        """
        if not self.geometry.in_d(position):
            return False
        if not self.geometry.contains(position, margin=self.ball_radius):
            return False
        return not self.is_occupied(position, registry, exclude="cue")

    def place_cue_ball(
        self, position: Vector2D, registry: BallRegistry
    ) -> Optional[Ball]:
        """Admit the cue ball at ``position`` if the placement is valid.

        Returns:
            The placed cue ball, or None if the position was rejected
        """
        if not self.is_valid_cue_placement(position, registry):
            return None
        ball = Ball.cue(position, radius=self.ball_radius)
        registry.add(ball)
        return ball
