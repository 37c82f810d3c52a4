"""Core data models and types for the snooker rules engine.

This module contains the fundamental data structures shared by every part of
the rules engine: ball records, the "ball on" designation, the per-shot
scratch record, score history entries, inbound collaborator events and the
summary produced when a turn is handled.

Balls are a closed tagged variant: ``kind`` says whether a ball is the cue
ball, a red or a colour, and ``color`` carries the point value. Rule code
matches on these enums, never on free-form strings.
"""

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from .coordinates import Vector2D

DEFAULT_BALL_RADIUS = 10.0


class BallKind(Enum):
    """Categories of balls on a snooker table."""

    CUE = "cue"
    RED = "red"
    COLOR = "color"


class BallColor(Enum):
    """Ball colours; each colour fixes the ball's point value."""

    WHITE = "white"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BROWN = "brown"
    BLUE = "blue"
    PINK = "pink"
    BLACK = "black"

    @property
    def point_value(self) -> int:
        """Points scored for potting a ball of this colour."""
        return _POINT_VALUES[self]

    @property
    def is_object_color(self) -> bool:
        """True for the six colours (yellow through black)."""
        return self not in (BallColor.WHITE, BallColor.RED)

    @classmethod
    def parse(cls, name: "str | BallColor") -> "BallColor":
        """Look up a colour by (case-insensitive) name.

        Raises:
            ValueError: If the name is not a known colour
        """
        if isinstance(name, BallColor):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown ball colour: {name!r}") from None


_POINT_VALUES = {
    BallColor.WHITE: 0,
    BallColor.RED: 1,
    BallColor.YELLOW: 2,
    BallColor.GREEN: 3,
    BallColor.BROWN: 4,
    BallColor.BLUE: 5,
    BallColor.PINK: 6,
    BallColor.BLACK: 7,
}

# Colours in ascending value; also the order they must be potted once the
# reds are gone.
OBJECT_COLORS: tuple[BallColor, ...] = (
    BallColor.YELLOW,
    BallColor.GREEN,
    BallColor.BROWN,
    BallColor.BLUE,
    BallColor.PINK,
    BallColor.BLACK,
)


class TurnState(Enum):
    """States of the turn lifecycle."""

    AWAITING_SHOT = "awaiting_shot"
    BALLS_MOVING = "balls_moving"
    HANDLING_TURN_END = "handling_turn_end"
    AWAITING_NOMINATION = "awaiting_nomination"
    BALL_IN_HAND = "ball_in_hand"
    GAME_OVER = "game_over"


@dataclass
class Ball:
    """A ball in play.

    The physics collaborator owns the ball's motion; the rules engine keeps
    the last reported position so it can test spot occupancy and cue-ball
    placement.
    """

    id: str
    kind: BallKind
    color: BallColor
    position: Vector2D
    radius: float = DEFAULT_BALL_RADIUS

    def __post_init__(self) -> None:
        """Validate that kind and colour agree."""
        if self.radius <= 0:
            raise ValueError("Ball radius must be positive")
        if self.kind is BallKind.CUE and self.color is not BallColor.WHITE:
            raise ValueError("The cue ball must be white")
        if self.kind is BallKind.RED and self.color is not BallColor.RED:
            raise ValueError("A red ball must have the red colour")
        if self.kind is BallKind.COLOR and not self.color.is_object_color:
            raise ValueError(f"{self.color.value} is not a colour ball")

    @property
    def point_value(self) -> int:
        return self.color.point_value

    @property
    def is_cue(self) -> bool:
        return self.kind is BallKind.CUE

    @property
    def is_red(self) -> bool:
        return self.kind is BallKind.RED

    @property
    def is_color(self) -> bool:
        return self.kind is BallKind.COLOR

    @property
    def label(self) -> str:
        """Human readable name used in foul and pot descriptions."""
        if self.kind is BallKind.CUE:
            return "cue ball"
        return self.color.value

    def moved_to(self, position: Vector2D) -> "Ball":
        """Return a copy of this ball at another position."""
        return replace(self, position=position)

    def overlaps(self, position: Vector2D, radius: Optional[float] = None) -> bool:
        """Check whether a ball centred at ``position`` would touch this one.

        Two balls overlap when their centres are closer than the sum of their
        radii (one diameter for equal balls).
        """
        other_radius = self.radius if radius is None else radius
        return self.position.distance_to(position) < self.radius + other_radius

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "color": self.color.value,
            "value": self.point_value,
            "position": self.position.to_dict(),
            "radius": self.radius,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ball":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            kind=BallKind(data["kind"]),
            color=BallColor.parse(data["color"]),
            position=Vector2D.from_dict(data["position"]),
            radius=data.get("radius", DEFAULT_BALL_RADIUS),
        )

    @classmethod
    def cue(
        cls, position: Vector2D, radius: float = DEFAULT_BALL_RADIUS
    ) -> "Ball":
        return cls("cue", BallKind.CUE, BallColor.WHITE, position, radius)

    @classmethod
    def red(
        cls, index: int, position: Vector2D, radius: float = DEFAULT_BALL_RADIUS
    ) -> "Ball":
        return cls(f"red_{index}", BallKind.RED, BallColor.RED, position, radius)

    @classmethod
    def colored(
        cls,
        color: BallColor,
        position: Vector2D,
        radius: float = DEFAULT_BALL_RADIUS,
    ) -> "Ball":
        """Create one of the six colour balls; its id is the colour name."""
        return cls(color.value, BallKind.COLOR, color, position, radius)


class BallOnTarget(Enum):
    """What kind of designation the ball on currently is."""

    RED = "red"
    COLOR = "color"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class BallOn:
    """Designation of the ball that is legal to strike first.

    ``RED``: any red. ``COLOR``: a colour after a red; ``color`` is the
    nominated colour, or ``None`` until the player nominates. ``SEQUENCE``:
    the single colour required during the endgame.
    """

    target: BallOnTarget
    color: Optional[BallColor] = None

    @classmethod
    def red(cls) -> "BallOn":
        return cls(BallOnTarget.RED)

    @classmethod
    def any_color(cls) -> "BallOn":
        return cls(BallOnTarget.COLOR)

    @classmethod
    def nominated(cls, color: BallColor) -> "BallOn":
        return cls(BallOnTarget.COLOR, color)

    @classmethod
    def sequence(cls, color: BallColor) -> "BallOn":
        return cls(BallOnTarget.SEQUENCE, color)

    @property
    def is_red(self) -> bool:
        return self.target is BallOnTarget.RED

    @property
    def is_color(self) -> bool:
        return self.target is BallOnTarget.COLOR

    @property
    def is_sequence(self) -> bool:
        return self.target is BallOnTarget.SEQUENCE

    @property
    def awaiting_nomination(self) -> bool:
        return self.target is BallOnTarget.COLOR and self.color is None

    def allows(self, ball: Ball) -> bool:
        """Whether ``ball`` is a legal first contact / pot for this designation."""
        if self.target is BallOnTarget.RED:
            return ball.is_red
        if self.target is BallOnTarget.COLOR:
            if not ball.is_color:
                return False
            return self.color is None or ball.color is self.color
        if self.target is BallOnTarget.SEQUENCE:
            return ball.is_color and ball.color is self.color
        raise ValueError(f"Unhandled ball-on target: {self.target}")

    @property
    def label(self) -> str:
        """``red``, ``color``, ``color/blue`` or the endgame colour name."""
        if self.target is BallOnTarget.RED:
            return "red"
        if self.target is BallOnTarget.COLOR:
            return f"color/{self.color.value}" if self.color else "color"
        return self.color.value

    def __str__(self) -> str:
        return self.label


@dataclass
class FoulRecord:
    """A committed foul and the points it awarded."""

    fouling_player: int
    awarded_to: int
    points: int
    reason: str
    shot_number: int = 0
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fouling_player": self.fouling_player,
            "awarded_to": self.awarded_to,
            "points": self.points,
            "reason": self.reason,
            "shot_number": self.shot_number,
            "timestamp": self.timestamp,
        }


@dataclass
class PotRecord:
    """Points scored by a legal pot."""

    player: int
    points: int
    description: str
    shot_number: int = 0
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.player,
            "points": self.points,
            "description": self.description,
            "shot_number": self.shot_number,
            "timestamp": self.timestamp,
        }


@dataclass
class ShotContext:
    """Scratch record for a single shot.

    Created when the cue is released and discarded once the turn end has
    been handled. A shot carries at most one foul; when several rules are
    broken the foul is worth the highest penalty among them.
    """

    shot_number: int
    player: int
    ball_on: BallOn
    first_contact: Optional[Ball] = None
    potted: list[Ball] = field(default_factory=list)
    foul_committed: bool = False
    foul_reason: Optional[str] = None
    foul_points: int = 0

    def record_contact(self, ball: Ball) -> bool:
        """Record the first object ball struck by the cue ball.

        Returns:
            True if this was the first contact of the shot
        """
        if self.first_contact is not None:
            return False
        self.first_contact = ball
        return True

    def record_pot(self, ball: Ball) -> None:
        if all(b.id != ball.id for b in self.potted):
            self.potted.append(ball)

    def commit_foul(self, points: int, reason: str) -> bool:
        """Record a foul, or raise the recorded one to a higher penalty.

        The shot keeps a single foul. A later trigger only replaces the
        recorded points and reason when it is worth strictly more.

        Returns:
            True if the recorded foul changed, False if ignored
        """
        if self.foul_committed and points <= self.foul_points:
            return False
        self.foul_committed = True
        self.foul_points = points
        self.foul_reason = reason
        return True

    @property
    def potted_reds(self) -> list[Ball]:
        return [b for b in self.potted if b.is_red]

    @property
    def potted_colors(self) -> list[Ball]:
        return [b for b in self.potted if b.is_color]

    @property
    def cue_ball_potted(self) -> bool:
        return any(b.is_cue for b in self.potted)


@dataclass(frozen=True)
class CollisionEvent:
    """Two balls touched; reported by the physics collaborator."""

    ball_a: str
    ball_b: str

    def involves(self, ball_id: str) -> bool:
        return ball_id in (self.ball_a, self.ball_b)

    def other(self, ball_id: str) -> str:
        return self.ball_b if self.ball_a == ball_id else self.ball_a


@dataclass(frozen=True)
class PocketEvent:
    """A ball dropped into a pocket."""

    ball_id: str
    pocket_index: Optional[int] = None


@dataclass
class ShotOutcome:
    """Summary of one handled turn end, returned to the host application."""

    shot_number: int
    player: int
    potted: list[str]
    legal_pot: bool
    points_scored: int
    foul: Optional[FoulRecord]
    respotted: dict[str, Vector2D]
    next_state: TurnState
    next_player: int
    ball_on: str
    current_break: int
    endgame_active: bool
    frame_over: bool = False
    winner: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "shot_number": self.shot_number,
            "player": self.player,
            "potted": list(self.potted),
            "legal_pot": self.legal_pot,
            "points_scored": self.points_scored,
            "foul": self.foul.to_dict() if self.foul else None,
            "respotted": {k: v.to_dict() for k, v in self.respotted.items()},
            "next_state": self.next_state.value,
            "next_player": self.next_player,
            "ball_on": self.ball_on,
            "current_break": self.current_break,
            "endgame_active": self.endgame_active,
            "frame_over": self.frame_over,
            "winner": self.winner,
        }
