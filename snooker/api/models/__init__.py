"""API request and response models."""

from .requests import (
    BallSpec,
    InboundEventModel,
    NewFrameRequest,
    NominationRequest,
    PositionModel,
    TickRequest,
)
from .responses import (
    BallInfo,
    EventInfo,
    FoulInfo,
    FrameStateResponse,
    HealthResponse,
    HistoryResponse,
    PlacementResponse,
    ShotOutcomeResponse,
    ShotReleasedResponse,
    TickResponse,
)

__all__ = [
    "BallInfo",
    "BallSpec",
    "EventInfo",
    "FoulInfo",
    "FrameStateResponse",
    "HealthResponse",
    "HistoryResponse",
    "InboundEventModel",
    "NewFrameRequest",
    "NominationRequest",
    "PlacementResponse",
    "PositionModel",
    "ShotOutcomeResponse",
    "ShotReleasedResponse",
    "TickRequest",
]
