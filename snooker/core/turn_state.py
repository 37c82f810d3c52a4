"""Turn state machine: the single entry point of the rules engine.

The surrounding application drives the engine with a handful of signals:

* ``on_shot_released()`` when the player strikes the cue ball,
* ``on_collision()`` / ``on_ball_potted()`` (or ``submit_event()`` + ``tick()``)
  while the balls are moving,
* ``on_balls_stationary()`` once the physics collaborator reports the table
  has settled,
* ``place_cue_ball()`` after the cue ball was potted, and
* ``nominate_color()`` after a red was potted.

Everything else happens synchronously inside ``on_balls_stationary()``:
fouls are detected, pots judged, points awarded, colours respotted, the
endgame started and the next state chosen. The engine never advances time
on its own.
"""

import logging
from collections import deque
from typing import Any, Iterable, Optional, Union

from ..config.models.schemas import SnookerConfig
from .coordinates import Vector2D
from .events.manager import EventManager, EventType
from .fouls import FoulDetector
from .legality import PotLegality
from .match_state import MatchState
from .models import (
    Ball,
    BallColor,
    BallOn,
    CollisionEvent,
    PocketEvent,
    ShotContext,
    ShotOutcome,
    TurnState,
)
from .registry import BallRegistry, VelocitySnapshot, balls_stationary
from .respot import RespotManager
from .scoring import ScoreLedger, is_frame_decided
from .table import TableGeometry, rack_frame
from .validation import PreconditionViolation, RulesEngineError, StateValidator

logger = logging.getLogger(__name__)

InboundEvent = Union[CollisionEvent, PocketEvent]


class StateTransitionError(RulesEngineError):
    """Raised when an operation is called in a state that does not accept it."""

    pass


class TurnStateMachine:
    """Orchestrates the rules engine across the shot lifecycle.

    Features:
    - Shot lifecycle: AWAITING_SHOT -> BALLS_MOVING -> HANDLING_TURN_END
    - Foul detection, pot legality, scoring and respotting per shot
    - Colour nomination and ball-in-hand placement
    - Endgame colour sequence and frame-over detection
    - Outbound notifications through an EventManager
    """

    def __init__(
        self,
        config: Optional[SnookerConfig] = None,
        geometry: Optional[TableGeometry] = None,
        event_manager: Optional[EventManager] = None,
        rack: bool = True,
    ):
        """Initialize the state machine and, by default, rack a frame.

        Args:
            config: Application configuration (defaults if None)
            geometry: Table geometry (derived from ``config.table`` if None)
            event_manager: Event manager to publish through (created if None)
            rack: Whether to set up the opening layout immediately
        """
        self.config = config or SnookerConfig()
        rules = self.config.rules
        self.geometry = geometry or TableGeometry.from_config(self.config.table)
        self.events = event_manager or EventManager(
            max_history_size=rules.event_history_size
        )

        self.foul_detector = FoulDetector(foul_minimum=rules.foul_minimum)
        self.pot_legality = PotLegality(foul_minimum=rules.foul_minimum)
        self.respot = RespotManager(self.geometry)
        self.validator = StateValidator(max_reds=rules.max_reds)
        self.stationary_threshold = rules.stationary_threshold

        self.state = MatchState(
            geometry=self.geometry,
            registry=BallRegistry(),
            ledger=ScoreLedger(num_players=rules.players),
        )
        self._inbound: deque = deque()

        if rack:
            self.new_frame()

        logger.info("TurnStateMachine initialized")

    # =========================================================================
    # Frame lifecycle
    # =========================================================================

    def new_frame(self, balls: Optional[Iterable[Ball]] = None) -> None:
        """Start a new frame.

        Args:
            balls: Opening layout (a standard rack if None)
        """
        layout = (
            list(balls)
            if balls is not None
            else rack_frame(self.geometry, reds=self.config.rules.max_reds)
        )
        self.validator.ensure_valid(layout)
        if not any(b.is_red or b.is_color for b in layout):
            raise PreconditionViolation("Frame layout has no object balls")

        state = self.state
        state.registry.load(layout)
        state.ledger.reset()
        state.endgame.reset()
        state.ball_on = BallOn.red()
        state.current_player = 0
        state.turn_state = TurnState.AWAITING_SHOT
        state.shot = None
        state.shot_count = 0
        state.winner = None
        state.frame_number += 1
        self._clear_proposal()
        self._inbound.clear()

        if state.registry.reds_remaining == 0:
            self._start_endgame_from_layout()

        logger.info(
            f"Frame {state.frame_number} started with {len(state.registry)} balls"
        )
        self.events.emit_event(
            EventType.FRAME_RESET,
            {"frame_number": state.frame_number, "balls": state.registry.to_list()},
        )

    def _start_endgame_from_layout(self) -> None:
        """Custom layouts without reds begin at the lowest colour on the table."""
        state = self.state
        state.endgame.activate()
        while state.registry.color_ball(state.endgame.required_color) is None:
            state.endgame.advance()
        state.ball_on = state.endgame.ball_on

    # =========================================================================
    # Shot lifecycle signals
    # =========================================================================

    def on_shot_released(self) -> ShotContext:
        """The cue ball was struck: start recording a new shot.

        Returns:
            The shot context that will accumulate this shot's events

        Raises:
            StateTransitionError: If a shot cannot be played now
            PreconditionViolation: If no cue ball is in play
        """
        state = self.state
        self._require_state(TurnState.AWAITING_SHOT, "release a shot")
        if state.registry.cue_ball is None:
            raise PreconditionViolation("Shot released with no cue ball in play")

        state.shot_count += 1
        state.shot = ShotContext(
            shot_number=state.shot_count,
            player=state.current_player,
            ball_on=state.ball_on,
        )
        state.turn_state = TurnState.BALLS_MOVING

        logger.debug(
            f"Shot {state.shot_count} by player {state.current_player} "
            f"({state.ball_on} on)"
        )
        self.events.emit_event(
            EventType.SHOT_RELEASED,
            {
                "shot_number": state.shot_count,
                "player": state.current_player,
                "ball_on": state.ball_on.label,
            },
        )
        return state.shot

    def on_collision(self, event: CollisionEvent) -> bool:
        """Record a ball-ball contact reported by the physics collaborator.

        Only the first object ball touched by the cue ball matters; every
        later contact is ignored.

        Returns:
            True if the contact was recorded as the shot's first contact
        """
        state = self.state
        if state.turn_state is not TurnState.BALLS_MOVING:
            logger.debug(f"Ignoring collision outside a shot: {event}")
            return False

        cue = state.registry.cue_ball
        cue_id = cue.id if cue is not None else "cue"
        if not event.involves(cue_id) or state.shot.first_contact is not None:
            return False

        other = state.registry.require(event.other(cue_id))
        recorded = state.shot.record_contact(other)
        if recorded:
            logger.debug(f"Shot {state.shot.shot_number}: first contact {other.label}")
        return recorded

    def on_ball_potted(self, event: PocketEvent) -> Ball:
        """Take a pocketed ball out of play and record it against the shot.

        Raises:
            PreconditionViolation: If no shot is in progress or the ball is
                not in play
        """
        state = self.state
        if state.turn_state is not TurnState.BALLS_MOVING:
            raise PreconditionViolation(
                f"Ball {event.ball_id!r} pocketed while no shot was in progress"
            )

        ball = state.registry.remove(event.ball_id)
        state.shot.record_pot(ball)
        logger.debug(f"Shot {state.shot.shot_number}: {ball.label} potted")
        self.events.emit_event(
            EventType.BALL_POTTED,
            {
                "shot_number": state.shot.shot_number,
                "ball_id": ball.id,
                "pocket_index": event.pocket_index,
            },
        )
        return ball

    def submit_event(self, event: InboundEvent) -> None:
        """Queue a collaborator event for the next ``tick()``."""
        if not isinstance(event, (CollisionEvent, PocketEvent)):
            raise TypeError(f"Unsupported inbound event: {event!r}")
        self._inbound.append(event)

    def tick(
        self,
        velocities: VelocitySnapshot = None,
        positions: Optional[dict[str, Any]] = None,
    ) -> Optional[ShotOutcome]:
        """Consume one host tick.

        Records reported positions, drains queued collision/pocket events in
        arrival order and, when a velocity snapshot shows the table at rest
        during a shot, handles the turn end.

        Args:
            velocities: Velocity snapshot for the stationary check (skipped if None)
            positions: Latest ball positions keyed by ball id

        Returns:
            The turn outcome if the turn ended on this tick, else None

        Raises:
            PreconditionViolation: If a queued event cannot be applied; the
                whole batch is discarded and nothing from it is recorded
        """
        self._check_inbound()

        if positions:
            self.state.registry.update_positions(positions)

        while self._inbound:
            event = self._inbound.popleft()
            if isinstance(event, PocketEvent):
                self.on_ball_potted(event)
            else:
                self.on_collision(event)

        if (
            velocities is not None
            and self.state.turn_state is TurnState.BALLS_MOVING
            and self.is_table_settled(velocities)
        ):
            return self.on_balls_stationary()
        return None

    def _check_inbound(self) -> None:
        """Walk the queued batch against the table without applying it."""
        state = self.state
        in_play = {b.id for b in state.registry}
        moving = state.turn_state is TurnState.BALLS_MOVING
        contact_open = moving and state.shot.first_contact is None
        cue = state.registry.cue_ball
        cue_id = cue.id if cue is not None else "cue"

        problem = None
        for event in self._inbound:
            if isinstance(event, PocketEvent):
                if not moving:
                    problem = (
                        f"Ball {event.ball_id!r} pocketed while no shot was in progress"
                    )
                elif event.ball_id not in in_play:
                    problem = f"Ball {event.ball_id!r} is not in play"
                else:
                    in_play.discard(event.ball_id)
            elif contact_open and event.involves(cue_id):
                other = event.other(cue_id)
                if other not in in_play:
                    problem = f"Ball {other!r} is not in play"
                contact_open = False
            if problem:
                break

        if problem:
            dropped = len(self._inbound)
            self._inbound.clear()
            logger.warning(f"Rejected {dropped} queued event(s): {problem}")
            raise PreconditionViolation(problem)

    def is_table_settled(self, velocities: VelocitySnapshot) -> bool:
        """Pure query: whether a velocity snapshot shows every ball at rest."""
        return balls_stationary(velocities, self.stationary_threshold)

    def on_balls_stationary(self) -> ShotOutcome:
        """The table has settled: judge the shot and pick the next state.

        Returns:
            Summary of the handled turn

        Raises:
            StateTransitionError: If no shot is in progress
            PreconditionViolation: If the reported table breaks an invariant
        """
        self._require_state(TurnState.BALLS_MOVING, "settle the table")
        self.state.turn_state = TurnState.HANDLING_TURN_END
        try:
            return self._handle_turn_end()
        except PreconditionViolation:
            # Nothing has been scored yet; let the host correct its report.
            self.state.turn_state = TurnState.BALLS_MOVING
            raise

    # Alias matching the host-facing name used by the UI shell.
    on_all_balls_stationary = on_balls_stationary

    # =========================================================================
    # Turn end
    # =========================================================================

    def _handle_turn_end(self) -> ShotOutcome:
        state = self.state
        ctx = state.shot
        registry = state.registry
        ledger = state.ledger
        player = state.current_player

        self.validator.ensure_valid(registry)
        if registry.cue_ball is None and not ctx.cue_ball_potted:
            raise PreconditionViolation("Cue ball missing from play but not potted")

        endgame_at_shot = state.endgame.active

        # Judge the shot: contact fouls first, then pots.
        self.foul_detector.evaluate(ctx, state.ball_on, endgame_at_shot)
        legal_pot = self.pot_legality.evaluate(ctx, state)

        points = ledger.process_turn(
            ctx.potted,
            player,
            foul_committed=ctx.foul_committed,
            shot_number=ctx.shot_number,
        )
        foul = None
        if ctx.foul_committed:
            foul = ledger.add_foul(
                player, ctx.foul_points, ctx.foul_reason, ctx.shot_number
            )
            self.events.emit_event(EventType.FOUL_COMMITTED, foul.to_dict())

        # Colours come back unless they were legally cleared in the endgame.
        if endgame_at_shot and legal_pot:
            respotted = {}
        else:
            respotted = self.respot.respot_colors(ctx.potted_colors, registry)
        for ball_id, spot in respotted.items():
            self.events.emit_event(
                EventType.BALL_RESPOTTED,
                {"ball_id": ball_id, "position": spot.to_dict()},
            )

        frame_over = (endgame_at_shot and legal_pot and state.endgame.complete) or (
            is_frame_decided(ledger, registry)
        )

        if frame_over:
            next_state = TurnState.GAME_OVER
        elif ctx.foul_committed:
            self._switch_player()
            next_state = (
                TurnState.BALL_IN_HAND
                if ctx.cue_ball_potted
                else TurnState.AWAITING_SHOT
            )
        elif legal_pot:
            next_state = (
                TurnState.AWAITING_NOMINATION
                if state.ball_on.awaiting_nomination
                else TurnState.AWAITING_SHOT
            )
        else:
            self._switch_player()
            if not state.endgame.active:
                state.ball_on = BallOn.red()
            next_state = TurnState.AWAITING_SHOT

        if not frame_over:
            self._maybe_start_endgame()

        state.turn_state = next_state
        state.shot = None
        self._announce(next_state)

        outcome = ShotOutcome(
            shot_number=ctx.shot_number,
            player=player,
            potted=[b.id for b in ctx.potted],
            legal_pot=legal_pot,
            points_scored=points,
            foul=foul,
            respotted=respotted,
            next_state=next_state,
            next_player=state.current_player,
            ball_on=state.ball_on.label,
            current_break=ledger.current_break,
            endgame_active=state.endgame.active,
            frame_over=frame_over,
            winner=state.winner,
        )
        self.events.emit_event(EventType.TURN_ENDED, outcome.to_dict())
        return outcome

    def _switch_player(self) -> None:
        finished_break = self.state.ledger.current_break
        player = self.state.switch_player()
        logger.debug(f"Player {player} to the table (break ended at {finished_break})")
        self.events.emit_event(
            EventType.PLAYER_SWITCHED,
            {"current_player": player, "finished_break": finished_break},
        )

    def _maybe_start_endgame(self) -> None:
        """Start the colour sequence once no reds remain and a red would be on.

        A player who has just potted the last red still plays a nominated
        colour first; the sequence starts at the turn end after that.
        """
        state = self.state
        if state.endgame.active or state.registry.reds_remaining:
            return
        if not state.ball_on.is_red:
            return
        state.ball_on = state.endgame.activate()
        self.events.emit_event(
            EventType.ENDGAME_STARTED, {"ball_on": state.ball_on.label}
        )

    def _announce(self, next_state: TurnState) -> None:
        state = self.state
        if next_state is TurnState.GAME_OVER:
            state.winner = state.ledger.leader()
            logger.info(
                f"Frame {state.frame_number} over: scores {state.ledger.scores}, "
                f"winner {state.winner}"
            )
            self.events.emit_event(
                EventType.FRAME_OVER,
                {"scores": list(state.ledger.scores), "winner": state.winner},
            )
        elif next_state is TurnState.BALL_IN_HAND:
            self._clear_proposal()
            self.events.emit_event(
                EventType.BALL_IN_HAND,
                {
                    "player": state.current_player,
                    "d_center": self.geometry.d_center.to_dict(),
                    "d_radius": self.geometry.d_radius,
                },
            )
        elif next_state is TurnState.AWAITING_NOMINATION:
            self.events.emit_event(
                EventType.NOMINATION_REQUIRED, {"player": state.current_player}
            )

    # =========================================================================
    # Ball in hand
    # =========================================================================

    def propose_cue_ball(self, position: Union[Vector2D, tuple, dict]) -> bool:
        """Check a prospective cue-ball position without committing it.

        Called every tick while the player drags the cue ball.

        Returns:
            True if the position would be accepted by ``place_cue_ball``
        """
        self._require_state(TurnState.BALL_IN_HAND, "position the cue ball")
        position = Vector2D.coerce(position)
        valid = self.respot.is_valid_cue_placement(position, self.state.registry)
        self.state.proposed_cue_position = position
        self.state.proposed_cue_valid = valid
        return valid

    def place_cue_ball(self, position: Union[Vector2D, tuple, dict]) -> bool:
        """Confirm the cue-ball placement.

        Invalid positions are rejected without changing state; the player
        keeps the ball in hand until a valid position is confirmed.

        Returns:
            True if the cue ball was placed
        """
        self._require_state(TurnState.BALL_IN_HAND, "place the cue ball")
        position = Vector2D.coerce(position)
        ball = self.respot.place_cue_ball(position, self.state.registry)
        if ball is None:
            logger.debug(f"Rejected cue-ball placement at {position.to_tuple()}")
            return False

        self._clear_proposal()
        self.state.turn_state = TurnState.AWAITING_SHOT
        logger.debug(f"Cue ball placed at {position.to_tuple()}")
        self.events.emit_event(
            EventType.CUE_BALL_PLACED, {"position": position.to_dict()}
        )
        return True

    def _clear_proposal(self) -> None:
        self.state.proposed_cue_position = None
        self.state.proposed_cue_valid = False

    # =========================================================================
    # Nomination
    # =========================================================================

    def nominate_color(self, color: Union[BallColor, str]) -> BallOn:
        """Declare which colour is on after a red has been potted.

        Args:
            color: One of the six colours, by enum or name

        Returns:
            The new ball on

        Raises:
            StateTransitionError: If no nomination is pending
            ValueError: If ``color`` is not a colour ball in play
        """
        self._require_state(TurnState.AWAITING_NOMINATION, "nominate a colour")
        color = BallColor.parse(color)
        if not color.is_object_color:
            raise ValueError(f"{color.value} cannot be nominated")
        if self.state.registry.color_ball(color) is None:
            raise ValueError(f"{color.value} is not on the table")

        self.state.ball_on = BallOn.nominated(color)
        self.state.turn_state = TurnState.AWAITING_SHOT
        logger.debug(f"Player {self.state.current_player} nominates {color.value}")
        self.events.emit_event(
            EventType.COLOR_NOMINATED,
            {"player": self.state.current_player, "color": color.value},
        )
        return self.state.ball_on

    # =========================================================================
    # Read accessors
    # =========================================================================

    def get_score(self, player: int) -> int:
        return self.state.ledger.get_score(player)

    def get_ball_on(self) -> BallOn:
        return self.state.ball_on

    def get_game_state(self) -> TurnState:
        return self.state.turn_state

    @property
    def current_player(self) -> int:
        return self.state.current_player

    def snapshot(self) -> dict[str, Any]:
        """Serializable view of the frame."""
        data = self.state.to_dict()
        data["proposed_cue_position"] = (
            self.state.proposed_cue_position.to_dict()
            if self.state.proposed_cue_position
            else None
        )
        data["proposed_cue_valid"] = self.state.proposed_cue_valid
        return data

    def _require_state(self, expected: TurnState, action: str) -> None:
        actual = self.state.turn_state
        if actual is not expected:
            raise StateTransitionError(
                f"Cannot {action} in state {actual.value} "
                f"(expected {expected.value})"
            )
