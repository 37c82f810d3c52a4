"""Score keeping for a frame.

Legal pots score for the striker and build the current break; fouls award
points to the opponent. A fouled turn scores nothing from the balls it
potted.
"""

import logging
from typing import Iterable, Optional

from .models import Ball, FoulRecord, PotRecord
from .registry import BallRegistry

logger = logging.getLogger(__name__)

# Each remaining red is worth itself plus a black; the six colours add 27.
POINTS_PER_RED_WITH_BLACK = 8
POINTS_FOR_ALL_COLORS = 27


class ScoreLedger:
    """Per-player scores, break tracking and foul/pot history."""

    def __init__(self, num_players: int = 2):
        self.num_players = num_players
        self.scores: list[int] = [0] * num_players
        self.foul_history: list[FoulRecord] = []
        self.pot_history: list[PotRecord] = []
        self.current_break = 0
        self.highest_breaks: list[int] = [0] * num_players

    def opponent(self, player: int) -> int:
        return (player + 1) % self.num_players

    def get_score(self, player: int) -> int:
        return self.scores[player]

    def add_points(
        self, player: int, points: int, desc: str = "", shot_number: int = 0
    ) -> None:
        """Award legal points to a player.

        Args:
            player: Player index (0 or 1)
            points: Points to award
            desc: Optional note recorded in the pot history (e.g. "red potted")
            shot_number: Shot that scored the points
        """
        self.scores[player] += points
        if desc:
            self.pot_history.append(PotRecord(player, points, desc, shot_number))

    def process_turn(
        self,
        potted_balls: Iterable[Ball],
        player: int,
        foul_committed: bool = False,
        shot_number: int = 0,
    ) -> int:
        """Score the balls potted in a turn.

        Args:
            potted_balls: Balls potted during the shot
            player: Player who played the shot
            foul_committed: Whether the shot was a foul
            shot_number: Shot being scored

        Returns:
            Points awarded to ``player`` (0 for a fouled turn)
        """
        if foul_committed:
            return 0

        total = 0
        for ball in potted_balls:
            if ball.is_cue:
                continue
            self.add_points(
                player, ball.point_value, f"{ball.label} potted", shot_number
            )
            total += ball.point_value

        if total:
            self.current_break += total
            if self.current_break > self.highest_breaks[player]:
                self.highest_breaks[player] = self.current_break
            logger.debug(
                f"Player {player} scores {total}, break now {self.current_break}"
            )
        return total

    def add_foul(
        self, fouling_player: int, points: int, reason: str = "", shot_number: int = 0
    ) -> FoulRecord:
        """Award foul points to the fouling player's opponent.

        Args:
            fouling_player: Index of the player who committed the foul
            points: Points awarded
            reason: Description of the foul
            shot_number: Shot on which the foul occurred

        Returns:
            The recorded foul
        """
        opponent = self.opponent(fouling_player)
        self.scores[opponent] += points
        record = FoulRecord(
            fouling_player=fouling_player,
            awarded_to=opponent,
            points=points,
            reason=reason,
            shot_number=shot_number,
        )
        self.foul_history.append(record)
        logger.info(
            f"Foul by player {fouling_player}: {reason} ({points} to player {opponent})"
        )
        return record

    def end_break(self) -> int:
        """Close the current break; returns the break that just ended."""
        finished = self.current_break
        self.current_break = 0
        return finished

    @property
    def difference(self) -> int:
        return abs(self.scores[0] - self.scores[1])

    def leader(self) -> Optional[int]:
        """Player with the higher score, or None when level."""
        if self.scores[0] == self.scores[1]:
            return None
        return 0 if self.scores[0] > self.scores[1] else 1

    def reset(self) -> None:
        """Reset all scores and histories (for a new frame)."""
        self.scores = [0] * self.num_players
        self.foul_history = []
        self.pot_history = []
        self.current_break = 0
        self.highest_breaks = [0] * self.num_players

    def to_dict(self) -> dict:
        return {
            "scores": list(self.scores),
            "current_break": self.current_break,
            "highest_breaks": list(self.highest_breaks),
            "fouls": [f.to_dict() for f in self.foul_history],
            "pots": [p.to_dict() for p in self.pot_history],
        }


def points_remaining_on_table(registry: BallRegistry) -> int:
    """Maximum points still available from the balls in play.

    While reds remain, each red can be followed by the black and all six
    colours are still to come. Once the reds are gone only the colours left
    on the table count.
    """
    reds = registry.reds_remaining
    if reds:
        return reds * POINTS_PER_RED_WITH_BLACK + POINTS_FOR_ALL_COLORS
    return sum(ball.point_value for ball in registry.colors)


def is_frame_decided(ledger: ScoreLedger, registry: BallRegistry) -> bool:
    """Whether the trailing player can no longer catch up."""
    return ledger.difference > points_remaining_on_table(registry)
