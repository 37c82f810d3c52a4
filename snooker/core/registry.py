"""Registry of the balls currently in play.

The physics collaborator owns ball bodies and motion. The registry mirrors
what it reports (existence and last known position) so the rules engine can
count reds, find the cue ball and test spot occupancy without touching the
physics world. Balls leave the registry the moment they are judged potted
and come back only through respotting or cue-ball placement.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, Iterator, Optional, Union

import numpy as np

from .coordinates import Vector2D
from .models import Ball, BallColor, BallKind
from .validation import PreconditionViolation

logger = logging.getLogger(__name__)

DEFAULT_STATIONARY_THRESHOLD = 0.15

VelocitySnapshot = Union[Mapping[str, Any], Iterable[Any], np.ndarray, None]


def balls_stationary(
    velocities: VelocitySnapshot, threshold: float = DEFAULT_STATIONARY_THRESHOLD
) -> bool:
    """Check whether every ball has come to rest.

    A pure predicate over a velocity snapshot; the host loop evaluates it
    against live physics state every tick.

    Args:
        velocities: Mapping of ball id to velocity, a sequence of velocities,
            or an ``(n, 2)`` array. Velocities may be ``Vector2D`` instances,
            ``(vx, vy)`` pairs or ``{"x": .., "y": ..}`` dicts.
        threshold: Absolute velocity component below which a ball is at rest

    Returns:
        True if every velocity component is below the threshold
    """
    if velocities is None:
        return True
    if isinstance(velocities, Mapping):
        velocities = list(velocities.values())
    if not isinstance(velocities, np.ndarray):
        velocities = [Vector2D.coerce(v).to_tuple() for v in velocities]
    array = np.asarray(velocities, dtype=float)
    if array.size == 0:
        return True
    return bool(np.all(np.abs(array) < threshold))


class BallRegistry:
    """Ordered view of the balls in play, keyed by ball id."""

    def __init__(self, balls: Optional[Iterable[Ball]] = None):
        self._balls: dict[str, Ball] = {}
        if balls is not None:
            self.load(balls)

    def load(self, balls: Iterable[Ball]) -> None:
        """Replace the registry contents (frame setup)."""
        self._balls = {}
        for ball in balls:
            self.add(ball)

    # =========================================================================
    # Queries
    # =========================================================================

    def __contains__(self, ball_id: object) -> bool:
        return ball_id in self._balls

    def __iter__(self) -> Iterator[Ball]:
        return iter(list(self._balls.values()))

    def __len__(self) -> int:
        return len(self._balls)

    def get(self, ball_id: str) -> Optional[Ball]:
        return self._balls.get(ball_id)

    def require(self, ball_id: str) -> Ball:
        """Return a ball that must be in play.

        Raises:
            PreconditionViolation: If the ball is not in play
        """
        ball = self._balls.get(ball_id)
        if ball is None:
            raise PreconditionViolation(f"Ball {ball_id!r} is not in play")
        return ball

    @property
    def balls(self) -> list[Ball]:
        return list(self._balls.values())

    @property
    def reds(self) -> list[Ball]:
        return [b for b in self._balls.values() if b.kind is BallKind.RED]

    @property
    def colors(self) -> list[Ball]:
        return [b for b in self._balls.values() if b.kind is BallKind.COLOR]

    @property
    def reds_remaining(self) -> int:
        return len(self.reds)

    @property
    def cue_ball(self) -> Optional[Ball]:
        for ball in self._balls.values():
            if ball.kind is BallKind.CUE:
                return ball
        return None

    def color_ball(self, color: BallColor) -> Optional[Ball]:
        for ball in self._balls.values():
            if ball.kind is BallKind.COLOR and ball.color is color:
                return ball
        return None

    def positions(self, exclude: Optional[str] = None) -> np.ndarray:
        """Centres of the balls in play as an ``(n, 2)`` array."""
        points = [
            b.position.to_tuple() for b in self._balls.values() if b.id != exclude
        ]
        return np.array(points, dtype=float).reshape(-1, 2)

    # =========================================================================
    # Mutation (collaborator sync, pots, respots)
    # =========================================================================

    def add(self, ball: Ball) -> None:
        """Admit a ball to play.

        Raises:
            PreconditionViolation: If a ball with the same id is already in play
        """
        if ball.id in self._balls:
            raise PreconditionViolation(f"Ball {ball.id!r} is already in play")
        self._balls[ball.id] = ball

    def remove(self, ball_id: str) -> Ball:
        """Take a ball out of play and return it.

        Raises:
            PreconditionViolation: If the ball is not in play
        """
        ball = self.require(ball_id)
        del self._balls[ball_id]
        return ball

    def update_position(self, ball_id: str, position: Vector2D) -> Ball:
        """Record the collaborator's latest position for a ball."""
        ball = self.require(ball_id).moved_to(position)
        self._balls[ball_id] = ball
        return ball

    def update_positions(self, positions: Mapping[str, Any]) -> int:
        """Record many positions at once.

        Positions for balls that are no longer in play are skipped; the
        collaborator may report a ball for a tick after it was potted.

        Returns:
            Number of balls updated
        """
        updated = 0
        for ball_id, position in positions.items():
            if ball_id not in self._balls:
                logger.debug(f"Ignoring position for ball not in play: {ball_id}")
                continue
            self.update_position(ball_id, Vector2D.coerce(position))
            updated += 1
        return updated

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize the balls in play."""
        return [b.to_dict() for b in self._balls.values()]
