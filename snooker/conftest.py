"""Shared test configuration and fixtures for the snooker trainer."""

from typing import Iterable, Optional

import pytest

from snooker.config.models.schemas import SnookerConfig
from snooker.core.coordinates import Vector2D
from snooker.core.match_state import MatchState
from snooker.core.models import (
    Ball,
    BallColor,
    CollisionEvent,
    PocketEvent,
    ShotContext,
    ShotOutcome,
)
from snooker.core.registry import BallRegistry
from snooker.core.table import TableGeometry, rack_frame
from snooker.core.turn_state import TurnStateMachine


@pytest.fixture()
def config():
    """Default application configuration."""
    return SnookerConfig()


@pytest.fixture()
def geometry(config):
    """Geometry of the default 1000 x 500 table."""
    return TableGeometry.from_config(config.table)


@pytest.fixture()
def racked_registry(geometry):
    """Registry holding a full opening rack."""
    return BallRegistry(rack_frame(geometry))


@pytest.fixture()
def match_state(geometry, racked_registry):
    """Frame state at the start of a frame."""
    return MatchState(geometry=geometry, registry=racked_registry)


@pytest.fixture()
def engine(config):
    """A rules engine with a freshly racked frame."""
    return TurnStateMachine(config=config)


@pytest.fixture()
def layout(geometry):
    """Build a custom layout: a cue ball plus the given colours and reds."""

    def _layout(
        colors: Iterable[BallColor] = (),
        reds: int = 0,
        cue_position: Optional[Vector2D] = None,
    ) -> list[Ball]:
        r = geometry.ball_radius
        cue_position = cue_position or Vector2D(150.0, 250.0)
        balls = [Ball.cue(cue_position, radius=r)]
        for color in colors:
            balls.append(Ball.colored(color, geometry.spot_for(color), radius=r))
        for i in range(reds):
            balls.append(Ball.red(i + 1, Vector2D(600.0 + 3 * r * i, 100.0), radius=r))
        return balls

    return _layout


@pytest.fixture()
def play_shot():
    """Play one shot through the engine and return the turn outcome."""

    def _play(
        engine: TurnStateMachine,
        first_contact: Optional[str] = None,
        potted: Iterable[str] = (),
    ) -> ShotOutcome:
        engine.on_shot_released()
        if first_contact is not None:
            engine.on_collision(CollisionEvent("cue", first_contact))
        for ball_id in potted:
            engine.on_ball_potted(PocketEvent(ball_id))
        return engine.on_balls_stationary()

    return _play


@pytest.fixture()
def shot_context():
    """Build a shot context with a contact and pots already recorded."""

    def _context(
        ball_on,
        first_contact: Optional[Ball] = None,
        potted: Iterable[Ball] = (),
    ) -> ShotContext:
        ctx = ShotContext(shot_number=1, player=0, ball_on=ball_on)
        if first_contact is not None:
            ctx.record_contact(first_contact)
        for ball in potted:
            ctx.record_pot(ball)
        return ctx

    return _context
