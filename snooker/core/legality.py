"""Pot legality and ball-on progression.

Given what went down during a shot, decides whether a legal pot was made
and moves the ball on forward:

* red on: potting reds is legal and puts a colour on (to be nominated);
  potting a colour is a foul worth that colour.
* colour on: potting the nominated colour is legal and puts a red back on;
  potting a red is a foul worth the minimum, as is potting another colour.
* endgame: only the colour required by the sequence may be potted; each
  success advances the sequence and the last one (black) ends the frame.
* more than one colour in a single shot is always a foul worth the highest
  colour potted.

Pots are judged even on a shot that has already fouled, so the foul takes
the highest penalty found; a fouled shot never makes a legal pot and never
moves the ball on.
"""

import logging

from .fouls import FOUL_MINIMUM
from .match_state import MatchState
from .models import BallOn, ShotContext

logger = logging.getLogger(__name__)


class PotLegality:
    """Judges the balls potted in a shot against the ball on."""

    def __init__(self, foul_minimum: int = FOUL_MINIMUM):
        self.foul_minimum = foul_minimum

    def evaluate(self, ctx: ShotContext, state: MatchState) -> bool:
        """Judge the pots of a shot, updating ``state.ball_on`` on success.

        Args:
            ctx: Shot being judged (fouls are committed on it)
            state: Frame state holding the ball on and the endgame sequencer

        Returns:
            True if a legal pot was made
        """
        object_balls = [b for b in ctx.potted if not b.is_cue]
        if not object_balls:
            return False

        colors = ctx.potted_colors
        reds = ctx.potted_reds

        if len(colors) > 1:
            highest = max(b.point_value for b in colors)
            names = ", ".join(b.label for b in colors)
            self._foul(ctx, highest, f"more than one colour potted ({names})")
            return False

        if state.endgame.active:
            return self._evaluate_endgame(ctx, state, object_balls)

        ball_on = state.ball_on
        if ball_on.is_red:
            if colors:
                color = colors[0]
                self._foul(ctx, color.point_value, f"{color.label} potted with red on")
                return False
            if ctx.foul_committed:
                return False
            state.ball_on = BallOn.any_color()
            logger.debug(f"Shot {ctx.shot_number}: {len(reds)} red(s) potted")
            return True

        if ball_on.is_color:
            if reds:
                self._foul(ctx, self.foul_minimum, f"red potted with {ball_on} on")
                return False
            color = colors[0]
            if not ball_on.allows(color):
                self._foul(
                    ctx, self.foul_minimum, f"{color.label} potted with {ball_on} on"
                )
                return False
            if ctx.foul_committed:
                return False
            state.ball_on = BallOn.red()
            logger.debug(f"Shot {ctx.shot_number}: nominated {color.label} potted")
            return True

        raise ValueError(f"Ball on {ball_on} is not valid outside the endgame")

    def _evaluate_endgame(self, ctx: ShotContext, state: MatchState, object_balls):
        required = state.endgame.required_color
        wrong = [b for b in object_balls if b.color is not required]
        if wrong:
            points = max([self.foul_minimum] + [b.point_value for b in wrong])
            names = ", ".join(b.label for b in wrong)
            self._foul(ctx, points, f"{names} potted with {required.value} on")
            return False
        if ctx.foul_committed:
            return False

        finished = state.endgame.advance()
        if not finished:
            state.ball_on = state.endgame.ball_on
        logger.debug(
            f"Shot {ctx.shot_number}: {required.value} cleared"
            + (" - last colour" if finished else "")
        )
        return True

    def _foul(self, ctx: ShotContext, points: int, reason: str) -> None:
        if ctx.commit_foul(points, reason):
            logger.debug(f"Shot {ctx.shot_number}: foul ({reason}), {points} points")
