"""API Request Models.

Pydantic models validating the bodies posted by the UI shell and the
physics host.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...core.coordinates import Vector2D
from ...core.models import Ball, BallColor, BallKind, CollisionEvent, PocketEvent

# =============================================================================
# Base Request Models
# =============================================================================


class BaseRequest(BaseModel):
    """Base class for all API requests with common validation."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class PositionModel(BaseRequest):
    """A point on the table."""

    x: float = Field(..., description="X coordinate")
    y: float = Field(..., description="Y coordinate")

    def to_vector(self) -> Vector2D:
        return Vector2D(self.x, self.y)


# =============================================================================
# Shot Lifecycle Requests
# =============================================================================


class InboundEventModel(BaseRequest):
    """A collision or pocket event reported by the physics host."""

    type: Literal["collision", "pocket"] = Field(..., description="Event kind")
    ball_a: Optional[str] = Field(default=None, description="First colliding ball")
    ball_b: Optional[str] = Field(default=None, description="Second colliding ball")
    ball_id: Optional[str] = Field(default=None, description="Pocketed ball")
    pocket_index: Optional[int] = Field(
        default=None, ge=0, le=5, description="Pocket the ball dropped into"
    )

    @model_validator(mode="after")
    def validate_fields(self) -> "InboundEventModel":
        if self.type == "collision" and not (self.ball_a and self.ball_b):
            raise ValueError("collision events require ball_a and ball_b")
        if self.type == "pocket" and not self.ball_id:
            raise ValueError("pocket events require ball_id")
        return self

    def to_event(self):
        if self.type == "collision":
            return CollisionEvent(self.ball_a, self.ball_b)
        return PocketEvent(self.ball_id, self.pocket_index)


class TickRequest(BaseRequest):
    """One host tick: queued events, latest positions and velocities."""

    events: list[InboundEventModel] = Field(
        default_factory=list, description="Events in arrival order"
    )
    positions: dict[str, PositionModel] = Field(
        default_factory=dict, description="Latest ball positions by ball id"
    )
    velocities: Optional[list[tuple[float, float]]] = Field(
        default=None,
        description="Velocity snapshot; when given, the stationary check runs",
    )


class NominationRequest(BaseRequest):
    """Colour nomination after a red has been potted."""

    color: str = Field(..., description="Colour to nominate", examples=["blue"])

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        color = BallColor.parse(v)
        if not color.is_object_color:
            raise ValueError(f"{color.value} cannot be nominated")
        return color.value


# =============================================================================
# Frame Setup Requests
# =============================================================================


class BallSpec(BaseRequest):
    """A ball in a custom opening layout."""

    id: str = Field(..., min_length=1)
    kind: Literal["cue", "red", "color"]
    color: str
    position: PositionModel
    radius: Optional[float] = Field(default=None, gt=0)

    def to_ball(self, default_radius: float) -> Ball:
        return Ball(
            id=self.id,
            kind=BallKind(self.kind),
            color=BallColor.parse(self.color),
            position=self.position.to_vector(),
            radius=self.radius or default_radius,
        )


class NewFrameRequest(BaseRequest):
    """Start a new frame, optionally from a custom layout."""

    balls: Optional[list[BallSpec]] = Field(
        default=None, description="Opening layout (standard rack if omitted)"
    )
