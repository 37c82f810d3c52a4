"""Tests for the turn state machine.

Covers the shot lifecycle, fouls and scoring through the engine, ball in
hand, nomination, the endgame sequence and frame-over detection.
"""

import pytest

from snooker.core.coordinates import Vector2D
from snooker.core.events import EventType
from snooker.core.models import (
    BallColor,
    BallOn,
    CollisionEvent,
    PocketEvent,
    TurnState,
)
from snooker.core.turn_state import StateTransitionError, TurnStateMachine
from snooker.core.validation import PreconditionViolation

BLUE_TO_SHOOT = BallOn.nominated(BallColor.BLUE)


@pytest.fixture()
def blue_on(engine, play_shot):
    """Player 0 has potted a red and nominated blue."""
    play_shot(engine, "red_1", ["red_1"])
    engine.nominate_color("blue")
    return engine


class TestFrameSetup:
    def test_initial_state(self, engine):
        assert engine.get_game_state() is TurnState.AWAITING_SHOT
        assert engine.get_ball_on() == BallOn.red()
        assert engine.current_player == 0
        assert engine.get_score(0) == engine.get_score(1) == 0
        assert engine.state.registry.reds_remaining == 15
        assert engine.state.frame_number == 1
        assert not engine.state.endgame.active

    def test_new_frame_resets_everything(self, engine, play_shot):
        play_shot(engine, "red_1", ["red_1"])
        engine.nominate_color("pink")
        play_shot(engine, "pink")

        engine.new_frame()

        assert engine.get_score(0) == 0
        assert engine.state.ledger.highest_breaks == [0, 0]
        assert engine.current_player == 0
        assert engine.get_ball_on() == BallOn.red()
        assert engine.state.registry.reds_remaining == 15
        assert engine.state.frame_number == 2
        assert engine.state.shot_count == 0

    def test_layout_without_reds_starts_endgame(self, engine, layout):
        engine.new_frame(layout([BallColor.BLUE, BallColor.PINK, BallColor.BLACK]))

        assert engine.state.endgame.active
        assert engine.get_ball_on() == BallOn.sequence(BallColor.BLUE)

    def test_layout_without_object_balls(self, engine, layout):
        with pytest.raises(PreconditionViolation):
            engine.new_frame(layout())
        assert engine.state.frame_number == 1

    def test_inconsistent_layout(self, engine, layout):
        balls = layout([BallColor.BLUE, BallColor.BLUE])
        with pytest.raises(PreconditionViolation):
            engine.new_frame(balls)


class TestShotLifecycle:
    def test_release_moves_balls(self, engine):
        ctx = engine.on_shot_released()

        assert engine.get_game_state() is TurnState.BALLS_MOVING
        assert ctx.shot_number == 1
        assert ctx.player == 0
        assert ctx.ball_on == BallOn.red()

    def test_cannot_release_twice(self, engine):
        engine.on_shot_released()
        with pytest.raises(StateTransitionError):
            engine.on_shot_released()

    def test_cannot_settle_without_shot(self, engine):
        with pytest.raises(StateTransitionError):
            engine.on_balls_stationary()

    def test_only_first_cue_contact_counts(self, engine):
        engine.on_shot_released()

        assert not engine.on_collision(CollisionEvent("red_1", "red_2"))
        assert engine.on_collision(CollisionEvent("red_1", "cue"))
        assert not engine.on_collision(CollisionEvent("cue", "black"))
        assert engine.state.shot.first_contact.id == "red_1"

    def test_collisions_outside_a_shot_are_ignored(self, engine):
        assert not engine.on_collision(CollisionEvent("cue", "red_1"))

    def test_collision_with_unknown_ball(self, engine):
        engine.on_shot_released()
        with pytest.raises(PreconditionViolation):
            engine.on_collision(CollisionEvent("cue", "red_99"))

    def test_pot_outside_a_shot(self, engine):
        with pytest.raises(PreconditionViolation):
            engine.on_ball_potted(PocketEvent("red_1"))

    def test_potted_ball_leaves_play(self, engine):
        engine.on_shot_released()
        engine.on_ball_potted(PocketEvent("red_3", pocket_index=2))

        assert "red_3" not in engine.state.registry
        with pytest.raises(PreconditionViolation):
            engine.on_ball_potted(PocketEvent("red_3"))

    def test_missing_cue_ball_must_be_reported(self, engine):
        engine.on_shot_released()
        engine.on_collision(CollisionEvent("cue", "red_1"))
        engine.state.registry.remove("cue")

        with pytest.raises(PreconditionViolation, match="Cue ball missing"):
            engine.on_balls_stationary()
        assert engine.get_game_state() is TurnState.BALLS_MOVING

    def test_tick_drains_events_and_settles(self, engine):
        engine.on_shot_released()
        engine.submit_event(CollisionEvent("cue", "red_1"))
        engine.submit_event(PocketEvent("red_1", pocket_index=5))

        assert engine.tick(velocities={"cue": (2.0, 0.0)}) is None
        assert engine.get_game_state() is TurnState.BALLS_MOVING
        assert "red_1" not in engine.state.registry

        outcome = engine.tick(
            velocities={"cue": (0.01, 0.0)},
            positions={"cue": Vector2D(400.0, 300.0)},
        )
        assert outcome is not None
        assert outcome.legal_pot
        assert engine.state.registry.cue_ball.position == Vector2D(400.0, 300.0)

    def test_tick_without_velocities_never_settles(self, engine):
        engine.on_shot_released()
        assert engine.tick() is None
        assert engine.get_game_state() is TurnState.BALLS_MOVING

    def test_bad_event_rejects_whole_batch(self, engine):
        engine.on_shot_released()
        engine.submit_event(CollisionEvent("cue", "red_1"))
        engine.submit_event(PocketEvent("red_1", pocket_index=5))
        engine.submit_event(PocketEvent("red_99", pocket_index=5))

        with pytest.raises(PreconditionViolation, match="red_99"):
            engine.tick(velocities={"cue": (0.0, 0.0)})

        assert "red_1" in engine.state.registry
        assert engine.state.shot.first_contact is None
        assert engine.state.shot.potted == []
        assert engine.get_game_state() is TurnState.BALLS_MOVING

        engine.submit_event(CollisionEvent("cue", "red_1"))
        engine.submit_event(PocketEvent("red_1", pocket_index=5))
        outcome = engine.tick(velocities={"cue": (0.0, 0.0)})
        assert outcome.legal_pot
        assert outcome.potted == ["red_1"]

    def test_double_pot_in_batch_is_rejected(self, engine):
        engine.on_shot_released()
        engine.submit_event(PocketEvent("red_2"))
        engine.submit_event(PocketEvent("red_2"))

        with pytest.raises(PreconditionViolation):
            engine.tick()
        assert "red_2" in engine.state.registry

    def test_unknown_first_contact_in_batch(self, engine):
        engine.on_shot_released()
        engine.submit_event(CollisionEvent("red_42", "cue"))
        engine.submit_event(PocketEvent("red_3"))

        with pytest.raises(PreconditionViolation, match="red_42"):
            engine.tick()
        assert "red_3" in engine.state.registry
        assert engine.state.shot.first_contact is None

    def test_submit_rejects_unknown_events(self, engine):
        with pytest.raises(TypeError):
            engine.submit_event({"type": "collision"})

    def test_is_table_settled(self, engine):
        assert engine.is_table_settled([(0.0, 0.1)])
        assert not engine.is_table_settled([(0.0, 0.5)])


class TestScoringAndFouls:
    def test_red_pot_requires_nomination(self, engine, play_shot):
        outcome = play_shot(engine, "red_1", ["red_1"])

        assert outcome.legal_pot
        assert outcome.points_scored == 1
        assert outcome.next_state is TurnState.AWAITING_NOMINATION
        assert engine.get_ball_on() == BallOn.any_color()
        assert engine.get_game_state() is TurnState.AWAITING_NOMINATION
        assert engine.current_player == 0
        assert engine.get_score(0) == 1

    def test_two_reds_in_one_shot(self, engine, play_shot):
        outcome = play_shot(engine, "red_1", ["red_1", "red_2"])
        assert outcome.points_scored == 2
        assert engine.state.registry.reds_remaining == 13

    def test_nomination(self, blue_on):
        assert blue_on.get_ball_on() == BLUE_TO_SHOOT
        assert blue_on.get_game_state() is TurnState.AWAITING_SHOT

    def test_nomination_rejects_bad_colours(self, engine, play_shot):
        play_shot(engine, "red_1", ["red_1"])

        with pytest.raises(ValueError):
            engine.nominate_color("red")
        with pytest.raises(ValueError):
            engine.nominate_color("purple")
        assert engine.get_game_state() is TurnState.AWAITING_NOMINATION

    def test_nomination_only_after_red(self, engine):
        with pytest.raises(StateTransitionError):
            engine.nominate_color(BallColor.BLUE)

    def test_nominated_colour_builds_break(self, blue_on, play_shot):
        outcome = play_shot(blue_on, "blue", ["blue"])

        assert outcome.legal_pot
        assert outcome.current_break == 6
        assert outcome.respotted["blue"] == blue_on.geometry.spot_for(BallColor.BLUE)
        assert blue_on.get_ball_on() == BallOn.red()
        assert blue_on.get_score(0) == 6
        assert blue_on.state.ledger.highest_breaks == [6, 0]
        assert blue_on.current_player == 0

    def test_miss_ends_break_and_switches(self, blue_on, play_shot):
        outcome = play_shot(blue_on, "blue")

        assert not outcome.legal_pot
        assert outcome.foul is None
        assert outcome.next_player == 1
        assert blue_on.state.ledger.current_break == 0
        assert blue_on.get_ball_on() == BallOn.red()

    def test_no_contact_awards_four_to_opponent(self, engine, play_shot):
        outcome = play_shot(engine)

        assert outcome.foul.points == 4
        assert outcome.foul.reason == "no contact"
        assert engine.get_score(1) == 4
        assert engine.get_score(0) == 0
        assert engine.current_player == 1
        assert engine.get_game_state() is TurnState.AWAITING_SHOT
        assert engine.get_ball_on() == BallOn.red()

    def test_wrong_ball_first(self, engine, play_shot):
        outcome = play_shot(engine, "black")

        assert outcome.foul.points == 7
        assert engine.get_score(1) == 7

    def test_wrong_colour_potted_keeps_ball_on(self, blue_on, play_shot):
        outcome = play_shot(blue_on, "blue", ["black"])

        assert not outcome.legal_pot
        assert outcome.foul.points == 4
        assert blue_on.get_score(1) == 4
        assert blue_on.get_score(0) == 1
        assert blue_on.get_ball_on() == BLUE_TO_SHOOT
        assert outcome.respotted == {
            "black": blue_on.geometry.spot_for(BallColor.BLACK)
        }
        assert blue_on.current_player == 1

    def test_two_colours_is_foul_of_highest(self, blue_on, play_shot):
        outcome = play_shot(blue_on, "blue", ["blue", "pink"])

        assert not outcome.legal_pot
        assert outcome.points_scored == 0
        assert outcome.foul.points == 6
        assert blue_on.get_score(1) == 6
        assert set(outcome.respotted) == {"blue", "pink"}

    def test_fouled_turn_scores_no_pots(self, engine, play_shot):
        outcome = play_shot(engine, "red_1", ["red_1", "black"])

        assert outcome.points_scored == 0
        assert outcome.foul.points == 7
        assert engine.get_score(0) == 0
        assert engine.state.registry.reds_remaining == 14
        assert "black" in engine.state.registry

    def test_one_foul_per_shot(self, engine, play_shot):
        play_shot(engine, None, ["cue"])

        assert len(engine.state.ledger.foul_history) == 1
        assert engine.get_score(1) == 4

    @pytest.mark.parametrize(
        ("first_contact", "potted", "points"),
        [
            ("red_1", ["yellow", "black", "cue"], 7),
            ("yellow", ["yellow", "black"], 7),
            ("red_1", ["red_1", "black", "cue"], 7),
            ("pink", ["green", "cue"], 6),
        ],
    )
    def test_combined_fouls_award_highest_penalty(
        self, engine, play_shot, first_contact, potted, points
    ):
        outcome = play_shot(engine, first_contact, potted)

        assert not outcome.legal_pot
        assert outcome.points_scored == 0
        assert outcome.foul.points == points
        assert len(engine.state.ledger.foul_history) == 1
        assert engine.get_score(1) == points
        assert engine.get_score(0) == 0
        assert engine.get_ball_on() == BallOn.red()

    def test_foul_events_published(self, engine, play_shot):
        fouls = []
        engine.events.subscribe_to_events(
            EventType.FOUL_COMMITTED, lambda t, d: fouls.append(d)
        )
        play_shot(engine, "pink")

        assert len(fouls) == 1
        assert fouls[0]["points"] == 6
        assert fouls[0]["awarded_to"] == 1


class TestBallInHand:
    @pytest.fixture()
    def in_hand(self, engine, play_shot):
        outcome = play_shot(engine, "red_1", ["red_1", "cue"])
        assert outcome.next_state is TurnState.BALL_IN_HAND
        return engine

    def test_cue_ball_potted(self, in_hand):
        assert in_hand.get_game_state() is TurnState.BALL_IN_HAND
        assert in_hand.state.registry.cue_ball is None
        assert in_hand.current_player == 1
        assert in_hand.get_score(1) == 4
        assert in_hand.state.registry.reds_remaining == 14

    def test_cannot_shoot_while_in_hand(self, in_hand):
        with pytest.raises(StateTransitionError):
            in_hand.on_shot_released()

    def test_proposal_is_polled(self, in_hand):
        assert not in_hand.propose_cue_ball((300.0, 250.0))
        assert in_hand.snapshot()["proposed_cue_valid"] is False
        assert in_hand.propose_cue_ball({"x": 150.0, "y": 250.0})
        assert in_hand.snapshot()["proposed_cue_position"] == {"x": 150.0, "y": 250.0}
        assert in_hand.get_game_state() is TurnState.BALL_IN_HAND
        assert in_hand.state.registry.cue_ball is None

    def test_invalid_placement_is_rejected(self, in_hand):
        assert not in_hand.place_cue_ball(Vector2D(195.0, 250.0))
        assert in_hand.get_game_state() is TurnState.BALL_IN_HAND

    def test_valid_placement(self, in_hand, play_shot):
        assert in_hand.place_cue_ball(Vector2D(150.0, 250.0))

        assert in_hand.get_game_state() is TurnState.AWAITING_SHOT
        assert in_hand.state.registry.cue_ball.position == Vector2D(150.0, 250.0)
        assert in_hand.state.proposed_cue_position is None

        outcome = play_shot(in_hand, "red_2", ["red_2"])
        assert outcome.player == 1
        assert in_hand.get_score(1) == 5

    def test_placement_only_when_in_hand(self, engine):
        with pytest.raises(StateTransitionError):
            engine.place_cue_ball(Vector2D(150.0, 250.0))
        with pytest.raises(StateTransitionError):
            engine.propose_cue_ball(Vector2D(150.0, 250.0))


class TestEndgame:
    def test_last_red_then_colour_starts_sequence(self, engine, layout, play_shot):
        engine.new_frame(layout(list(BallColor)[2:], reds=1))

        play_shot(engine, "red_1", ["red_1"])
        assert not engine.state.endgame.active
        engine.nominate_color("black")

        outcome = play_shot(engine, "black", ["black"])

        assert outcome.endgame_active
        assert engine.state.endgame.active
        assert engine.get_ball_on() == BallOn.sequence(BallColor.YELLOW)
        assert "black" in engine.state.registry
        assert engine.get_score(0) == 8
        assert engine.current_player == 0

    def test_missed_colour_after_last_red(self, engine, layout, play_shot):
        engine.new_frame(layout(list(BallColor)[2:], reds=1))
        play_shot(engine, "red_1", ["red_1"])
        engine.nominate_color("blue")

        play_shot(engine, "blue")

        assert engine.state.endgame.active
        assert engine.current_player == 1
        assert engine.get_ball_on() == BallOn.sequence(BallColor.YELLOW)

    def test_sequence_pots_stay_down(self, engine, layout, play_shot):
        engine.new_frame(layout(list(BallColor)[2:]))

        outcome = play_shot(engine, "yellow", ["yellow"])

        assert outcome.legal_pot
        assert outcome.respotted == {}
        assert "yellow" not in engine.state.registry
        assert engine.get_ball_on() == BallOn.sequence(BallColor.GREEN)

    def test_wrong_pot_is_respotted(self, engine, layout, play_shot):
        engine.new_frame(layout(list(BallColor)[2:]))

        outcome = play_shot(engine, "yellow", ["green"])

        assert outcome.foul.points == 4
        assert "green" in engine.state.registry
        assert engine.get_ball_on() == BallOn.sequence(BallColor.YELLOW)
        assert engine.state.endgame.active

    def test_pink_then_black_ends_frame(self, engine, layout, play_shot):
        engine.new_frame(layout([BallColor.PINK, BallColor.BLACK]))
        assert engine.get_ball_on() == BallOn.sequence(BallColor.PINK)

        outcome = play_shot(engine, "pink", ["pink"])
        assert not outcome.frame_over
        assert engine.get_ball_on() == BallOn.sequence(BallColor.BLACK)
        assert engine.state.endgame.required_color is BallColor.BLACK

        outcome = play_shot(engine, "black", ["black"])
        assert outcome.frame_over
        assert outcome.winner == 0
        assert engine.get_game_state() is TurnState.GAME_OVER
        assert engine.get_score(0) == 13

        with pytest.raises(StateTransitionError):
            engine.on_shot_released()
        assert engine.get_score(0) == 13

    def test_endgame_never_deactivates(self, engine, layout, play_shot):
        engine.new_frame(layout([BallColor.BLUE, BallColor.PINK, BallColor.BLACK]))

        play_shot(engine)
        play_shot(engine, "black", ["blue"])
        play_shot(engine, "blue")

        assert engine.state.endgame.active


class TestFrameOver:
    def test_frame_decided_by_score(self, engine, layout, play_shot):
        events = []
        engine.events.subscribe_to_events(
            EventType.FRAME_OVER, lambda t, d: events.append(d)
        )
        engine.new_frame(layout([BallColor.YELLOW, BallColor.GREEN]))
        engine.state.ledger.scores = [30, 0]

        outcome = play_shot(engine, "yellow")

        assert outcome.frame_over
        assert outcome.winner == 0
        assert engine.get_game_state() is TurnState.GAME_OVER
        assert events == [{"scores": [30, 0], "winner": 0}]

    def test_close_frame_continues(self, engine, layout, play_shot):
        engine.new_frame(layout([BallColor.YELLOW, BallColor.GREEN]))
        engine.state.ledger.scores = [3, 0]

        outcome = play_shot(engine, "yellow")

        assert not outcome.frame_over
        assert engine.get_game_state() is TurnState.AWAITING_SHOT

    def test_foul_can_decide_frame(self, engine, layout, play_shot):
        engine.new_frame(layout([BallColor.BLACK]))
        engine.state.ledger.scores = [0, 4]

        outcome = play_shot(engine)

        assert outcome.frame_over
        assert outcome.winner == 1
        assert engine.get_score(1) == 8


def test_engine_uses_configured_rules(config, play_shot):
    config.rules.foul_minimum = 5
    config.rules.max_reds = 6
    engine = TurnStateMachine(config=config)

    assert engine.state.registry.reds_remaining == 6
    outcome = play_shot(engine)
    assert outcome.foul.points == 5


def test_snapshot(engine):
    snapshot = engine.snapshot()
    assert snapshot["state"] == "awaiting_shot"
    assert snapshot["ball_on"] == "red"
    assert snapshot["scores"] == [0, 0]
    assert len(snapshot["balls"]) == 22
    assert snapshot["proposed_cue_position"] is None
