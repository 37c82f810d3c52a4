"""Core Module - the snooker turn and scoring rules engine.

This module provides the primary interface for rules functionality including:
- Turn state management (shot lifecycle, ball in hand, nomination)
- Foul detection and pot legality
- Scoring, breaks and frame-over detection
- Colour respotting and the endgame sequence
- Event publication for the physics and rendering collaborators
"""

from .coordinates import Vector2D
from .endgame import COLOR_SEQUENCE, EndgameSequencer
from .events.manager import Event, EventManager, EventType
from .fouls import FOUL_MINIMUM, FoulDetector
from .legality import PotLegality
from .match_state import MatchState
from .models import (
    OBJECT_COLORS,
    Ball,
    BallColor,
    BallKind,
    BallOn,
    BallOnTarget,
    CollisionEvent,
    FoulRecord,
    PocketEvent,
    PotRecord,
    ShotContext,
    ShotOutcome,
    TurnState,
)
from .registry import BallRegistry, balls_stationary
from .respot import RESPOT_PRIORITY, RespotManager
from .scoring import ScoreLedger, is_frame_decided, points_remaining_on_table
from .table import TableGeometry, find_pocketed, rack_frame
from .turn_state import StateTransitionError, TurnStateMachine
from .validation import (
    PreconditionViolation,
    RulesEngineError,
    StateValidator,
    ValidationResult,
)

__all__ = [
    # Engine
    "TurnStateMachine",
    "MatchState",
    # Rules components
    "FoulDetector",
    "PotLegality",
    "ScoreLedger",
    "RespotManager",
    "EndgameSequencer",
    "StateValidator",
    "ValidationResult",
    "BallRegistry",
    "TableGeometry",
    # Models
    "Ball",
    "BallColor",
    "BallKind",
    "BallOn",
    "BallOnTarget",
    "CollisionEvent",
    "FoulRecord",
    "PocketEvent",
    "PotRecord",
    "ShotContext",
    "ShotOutcome",
    "TurnState",
    "Vector2D",
    # Events
    "Event",
    "EventManager",
    "EventType",
    # Helpers and constants
    "balls_stationary",
    "find_pocketed",
    "is_frame_decided",
    "points_remaining_on_table",
    "rack_frame",
    "COLOR_SEQUENCE",
    "FOUL_MINIMUM",
    "OBJECT_COLORS",
    "RESPOT_PRIORITY",
    # Errors
    "RulesEngineError",
    "PreconditionViolation",
    "StateTransitionError",
]
