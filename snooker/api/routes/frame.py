"""Frame endpoints driving the rules engine.

Provides the host-facing surface of one frame:
- Current frame snapshot and event history
- Shot lifecycle signals (shot released, collision/pocket events, settled)
- Ball-in-hand placement and colour nomination
- New frame setup
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...core.turn_state import TurnStateMachine
from ..dependencies import ApplicationState, get_app_state, get_engine
from ..models.requests import (
    NewFrameRequest,
    NominationRequest,
    PositionModel,
    TickRequest,
)
from ..models.responses import (
    EventInfo,
    FoulInfo,
    FrameStateResponse,
    HistoryResponse,
    PlacementResponse,
    ShotOutcomeResponse,
    ShotReleasedResponse,
    TickResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/frame", tags=["Frame"])


def frame_state(engine: TurnStateMachine) -> FrameStateResponse:
    """Convert the engine snapshot to the API response model."""
    return FrameStateResponse.model_validate(engine.snapshot())


@router.get("/state", response_model=FrameStateResponse)
def get_frame_state(
    engine: TurnStateMachine = Depends(get_engine),
    app_state: ApplicationState = Depends(get_app_state),
) -> FrameStateResponse:
    """Current frame snapshot."""
    with app_state.lock:
        return frame_state(engine)


@router.post("/shot", response_model=ShotReleasedResponse)
def release_shot(
    engine: TurnStateMachine = Depends(get_engine),
    app_state: ApplicationState = Depends(get_app_state),
) -> ShotReleasedResponse:
    """The cue ball has been struck."""
    with app_state.lock:
        ctx = engine.on_shot_released()
        return ShotReleasedResponse(
            shot_number=ctx.shot_number, player=ctx.player, ball_on=ctx.ball_on.label
        )


@router.post("/events", response_model=TickResponse)
def post_events(
    request: TickRequest,
    engine: TurnStateMachine = Depends(get_engine),
    app_state: ApplicationState = Depends(get_app_state),
) -> TickResponse:
    """Deliver one tick of collaborator events.

    Events are applied in order. When a velocity snapshot is included and
    shows the table at rest, the turn end is handled in the same call.
    """
    with app_state.lock:
        for event in request.events:
            engine.submit_event(event.to_event())
        positions = {k: v.to_vector() for k, v in request.positions.items()}
        outcome = engine.tick(velocities=request.velocities, positions=positions)
        return TickResponse(
            outcome=(
                ShotOutcomeResponse.model_validate(outcome.to_dict())
                if outcome
                else None
            ),
            state=frame_state(engine),
        )


@router.post("/settled", response_model=ShotOutcomeResponse)
def balls_settled(
    engine: TurnStateMachine = Depends(get_engine),
    app_state: ApplicationState = Depends(get_app_state),
) -> ShotOutcomeResponse:
    """All balls have stopped: handle the turn end."""
    with app_state.lock:
        outcome = engine.on_balls_stationary()
        logger.info(
            f"Shot {outcome.shot_number} handled: next {outcome.next_state.value}, "
            f"player {outcome.next_player}"
        )
        return ShotOutcomeResponse.model_validate(outcome.to_dict())


@router.post("/cue-ball/validate", response_model=PlacementResponse)
def validate_cue_ball(
    position: PositionModel,
    engine: TurnStateMachine = Depends(get_engine),
    app_state: ApplicationState = Depends(get_app_state),
) -> PlacementResponse:
    """Check a prospective cue-ball position without placing the ball."""
    with app_state.lock:
        valid = engine.propose_cue_ball(position.to_vector())
        return PlacementResponse(valid=valid, state=frame_state(engine))


@router.post("/cue-ball", response_model=PlacementResponse)
def place_cue_ball(
    position: PositionModel,
    engine: TurnStateMachine = Depends(get_engine),
    app_state: ApplicationState = Depends(get_app_state),
) -> PlacementResponse:
    """Place the cue ball; an invalid position leaves the ball in hand."""
    with app_state.lock:
        placed = engine.place_cue_ball(position.to_vector())
        return PlacementResponse(valid=placed, state=frame_state(engine))


@router.post("/nominate", response_model=FrameStateResponse)
def nominate_color(
    request: NominationRequest,
    engine: TurnStateMachine = Depends(get_engine),
    app_state: ApplicationState = Depends(get_app_state),
) -> FrameStateResponse:
    """Nominate the colour to play after a red."""
    with app_state.lock:
        engine.nominate_color(request.color)
        return frame_state(engine)


@router.post("/new", response_model=FrameStateResponse)
def new_frame(
    request: Optional[NewFrameRequest] = None,
    engine: TurnStateMachine = Depends(get_engine),
    app_state: ApplicationState = Depends(get_app_state),
) -> FrameStateResponse:
    """Re-rack and start a new frame."""
    with app_state.lock:
        balls = None
        if request is not None and request.balls is not None:
            radius = engine.geometry.ball_radius
            balls = [spec.to_ball(radius) for spec in request.balls]
        engine.new_frame(balls)
        return frame_state(engine)


@router.get("/history", response_model=HistoryResponse)
def get_history(
    limit: int = Query(default=100, ge=1, le=1000),
    event_type: Optional[str] = Query(default=None, description="Filter by type"),
    engine: TurnStateMachine = Depends(get_engine),
    app_state: ApplicationState = Depends(get_app_state),
) -> HistoryResponse:
    """Recent engine events, newest first, plus the frame's fouls."""
    with app_state.lock:
        events = engine.events.get_event_history(event_type=event_type, limit=limit)
        return HistoryResponse(
            events=[EventInfo.model_validate(e.to_dict()) for e in events],
            fouls=[
                FoulInfo.model_validate(f.to_dict())
                for f in engine.state.ledger.foul_history
            ],
            total_events=len(engine.events.event_history),
        )
