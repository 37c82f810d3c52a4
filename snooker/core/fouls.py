"""First-contact and cue-ball foul detection."""

import logging

from .models import BallOn, ShotContext
from .validation import PreconditionViolation

logger = logging.getLogger(__name__)

FOUL_MINIMUM = 4


class FoulDetector:
    """Decides whether the way a shot started was a foul.

    Checks, in order: the cue ball struck nothing; the first ball struck was
    not the ball on; the cue ball went into a pocket. Fouls are committed on
    the shot context, which keeps the highest penalty found for the shot.
    """

    def __init__(self, foul_minimum: int = FOUL_MINIMUM):
        self.foul_minimum = foul_minimum

    def evaluate(
        self, ctx: ShotContext, ball_on: BallOn, endgame_active: bool
    ) -> bool:
        """Evaluate the shot's contact rules.

        Args:
            ctx: Shot being judged
            ball_on: Ball on when the shot was played
            endgame_active: Whether the colours are being cleared in sequence

        Returns:
            True if the shot context now holds a foul

        Raises:
            PreconditionViolation: If the ball on does not fit the frame phase
        """
        if endgame_active != ball_on.is_sequence:
            raise PreconditionViolation(
                f"Ball on {ball_on} does not match endgame state "
                f"(active={endgame_active})"
            )

        contact = ctx.first_contact
        if contact is None:
            self._commit(ctx, self.foul_minimum, "no contact")
        elif not ball_on.allows(contact):
            points = max(self.foul_minimum, contact.point_value)
            self._commit(
                ctx, points, f"wrong ball first: hit {contact.label} with {ball_on} on"
            )

        if ctx.cue_ball_potted:
            self._commit(ctx, self.foul_minimum, "cue ball potted")

        return ctx.foul_committed

    def _commit(self, ctx: ShotContext, points: int, reason: str) -> None:
        if ctx.commit_foul(points, reason):
            logger.debug(f"Shot {ctx.shot_number}: foul ({reason}), {points} points")
        else:
            logger.debug(
                f"Shot {ctx.shot_number}: foul ({reason}) does not exceed "
                f"{ctx.foul_reason} ({ctx.foul_points} points)"
            )
