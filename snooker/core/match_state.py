"""Explicit per-frame state shared by every rules-engine component."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .coordinates import Vector2D
from .endgame import EndgameSequencer
from .models import BallOn, ShotContext, TurnState
from .registry import BallRegistry
from .scoring import ScoreLedger
from .table import TableGeometry


@dataclass
class MatchState:
    """Everything the rules engine knows about the frame in progress.

    One instance is owned by the turn state machine and passed to the rule
    components; nothing in the engine keeps module-level state.
    """

    geometry: TableGeometry
    registry: BallRegistry = field(default_factory=BallRegistry)
    ledger: ScoreLedger = field(default_factory=ScoreLedger)
    endgame: EndgameSequencer = field(default_factory=EndgameSequencer)
    ball_on: BallOn = field(default_factory=BallOn.red)
    current_player: int = 0
    turn_state: TurnState = TurnState.AWAITING_SHOT
    shot: Optional[ShotContext] = None
    shot_count: int = 0
    frame_number: int = 0
    winner: Optional[int] = None
    proposed_cue_position: Optional[Vector2D] = None
    proposed_cue_valid: bool = False

    @property
    def opponent(self) -> int:
        return self.ledger.opponent(self.current_player)

    def switch_player(self) -> int:
        """Hand the table to the opponent, closing the current break."""
        self.ledger.end_break()
        self.current_player = self.opponent
        return self.current_player

    def to_dict(self) -> dict[str, Any]:
        """Serialize the frame for display or the HTTP surface."""
        return {
            "frame_number": self.frame_number,
            "state": self.turn_state.value,
            "current_player": self.current_player,
            "ball_on": self.ball_on.label,
            "scores": list(self.ledger.scores),
            "current_break": self.ledger.current_break,
            "highest_breaks": list(self.ledger.highest_breaks),
            "reds_remaining": self.registry.reds_remaining,
            "endgame_active": self.endgame.active,
            "shot_count": self.shot_count,
            "winner": self.winner,
            "balls": self.registry.to_list(),
        }
