"""API Response Models."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Base Response Models
# =============================================================================


class BaseResponse(BaseModel):
    """Base class for all API responses."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )


class PositionInfo(BaseResponse):
    x: float
    y: float


class BallInfo(BaseResponse):
    """A ball in play."""

    id: str
    kind: str
    color: str
    value: int
    position: PositionInfo
    radius: float


class FoulInfo(BaseResponse):
    """A committed foul."""

    fouling_player: int
    awarded_to: int
    points: int
    reason: str
    shot_number: int
    timestamp: float


# =============================================================================
# Frame Responses
# =============================================================================


class FrameStateResponse(BaseResponse):
    """Snapshot of the frame."""

    frame_number: int
    state: str = Field(..., description="Turn state")
    current_player: int
    ball_on: str = Field(..., description="red, color, color/<name> or <name>")
    scores: list[int]
    current_break: int
    highest_breaks: list[int]
    reds_remaining: int
    endgame_active: bool
    shot_count: int
    winner: Optional[int]
    balls: list[BallInfo]
    proposed_cue_position: Optional[PositionInfo] = None
    proposed_cue_valid: bool = False


class ShotOutcomeResponse(BaseResponse):
    """Summary of one handled turn end."""

    shot_number: int
    player: int
    potted: list[str]
    legal_pot: bool
    points_scored: int
    foul: Optional[FoulInfo]
    respotted: dict[str, PositionInfo]
    next_state: str
    next_player: int
    ball_on: str
    current_break: int
    endgame_active: bool
    frame_over: bool
    winner: Optional[int]


class ShotReleasedResponse(BaseResponse):
    shot_number: int
    player: int
    ball_on: str


class TickResponse(BaseResponse):
    """Result of a host tick; ``outcome`` is set when the turn ended."""

    outcome: Optional[ShotOutcomeResponse] = None
    state: FrameStateResponse


class PlacementResponse(BaseResponse):
    valid: bool
    state: FrameStateResponse


class EventInfo(BaseResponse):
    id: str
    type: str
    data: dict[str, Any]
    timestamp: float


class HistoryResponse(BaseResponse):
    """Recent engine events (newest first) and the frame's fouls."""

    events: list[EventInfo]
    fouls: list[FoulInfo]
    total_events: int


class HealthResponse(BaseResponse):
    status: str
    version: str
    uptime: float
    frame_number: int
