"""Tests for pot legality and ball-on progression."""

import pytest

from snooker.core.coordinates import Vector2D
from snooker.core.legality import PotLegality
from snooker.core.models import Ball, BallColor, BallOn

ORIGIN = Vector2D(0.0, 0.0)


def red(i=1):
    return Ball.red(i, ORIGIN)


def colour(color):
    return Ball.colored(color, ORIGIN)


class TestPotLegality:
    @pytest.fixture()
    def legality(self):
        return PotLegality()

    def test_nothing_potted(self, legality, match_state, shot_context):
        ctx = shot_context(BallOn.red(), first_contact=red())

        assert not legality.evaluate(ctx, match_state)
        assert match_state.ball_on == BallOn.red()
        assert not ctx.foul_committed

    def test_reds_potted_with_red_on(self, legality, match_state, shot_context):
        ctx = shot_context(BallOn.red(), first_contact=red(1), potted=[red(1), red(2)])

        assert legality.evaluate(ctx, match_state)
        assert match_state.ball_on == BallOn.any_color()
        assert match_state.ball_on.awaiting_nomination

    def test_colour_potted_with_red_on(self, legality, match_state, shot_context):
        ctx = shot_context(
            BallOn.red(),
            first_contact=red(),
            potted=[red(), colour(BallColor.PINK)],
        )

        assert not legality.evaluate(ctx, match_state)
        assert ctx.foul_points == 6
        assert match_state.ball_on == BallOn.red()

    def test_nominated_colour_potted(self, legality, match_state, shot_context):
        match_state.ball_on = BallOn.nominated(BallColor.BLUE)
        blue = colour(BallColor.BLUE)
        ctx = shot_context(match_state.ball_on, first_contact=blue, potted=[blue])

        assert legality.evaluate(ctx, match_state)
        assert match_state.ball_on == BallOn.red()

    def test_red_potted_with_colour_on(self, legality, match_state, shot_context):
        match_state.ball_on = BallOn.nominated(BallColor.BLUE)
        ctx = shot_context(
            match_state.ball_on, first_contact=colour(BallColor.BLUE), potted=[red()]
        )

        assert not legality.evaluate(ctx, match_state)
        assert ctx.foul_points == 4
        assert match_state.ball_on == BallOn.nominated(BallColor.BLUE)

    def test_other_colour_potted_with_colour_on(
        self, legality, match_state, shot_context
    ):
        match_state.ball_on = BallOn.nominated(BallColor.BLUE)
        ctx = shot_context(
            match_state.ball_on,
            first_contact=colour(BallColor.BLUE),
            potted=[colour(BallColor.BLACK)],
        )

        assert not legality.evaluate(ctx, match_state)
        assert ctx.foul_points == 4
        assert match_state.ball_on == BallOn.nominated(BallColor.BLUE)

    @pytest.mark.parametrize(
        ("colors", "points"),
        [
            ((BallColor.YELLOW, BallColor.GREEN), 3),
            ((BallColor.BLUE, BallColor.PINK), 6),
            ((BallColor.YELLOW, BallColor.BROWN, BallColor.BLACK), 7),
        ],
    )
    def test_several_colours_is_foul_of_highest(
        self, legality, match_state, shot_context, colors, points
    ):
        match_state.ball_on = BallOn.nominated(colors[0])
        balls = [colour(c) for c in colors]
        ctx = shot_context(match_state.ball_on, first_contact=balls[0], potted=balls)

        assert not legality.evaluate(ctx, match_state)
        assert ctx.foul_points == points
        assert match_state.ball_on == BallOn.nominated(colors[0])

    def test_fouled_shot_never_pots_legally(self, legality, match_state, shot_context):
        ctx = shot_context(BallOn.red(), potted=[red()])
        ctx.commit_foul(4, "no contact")

        assert not legality.evaluate(ctx, match_state)
        assert match_state.ball_on == BallOn.red()
        assert ctx.foul_reason == "no contact"

    @pytest.mark.parametrize(
        ("ball_on", "potted", "points"),
        [
            (BallOn.red(), [red(), colour(BallColor.BLACK)], 7),
            (BallOn.red(), [colour(BallColor.YELLOW), colour(BallColor.PINK)], 6),
            (BallOn.nominated(BallColor.BLUE), [red()], 4),
        ],
    )
    def test_pot_foul_raises_earlier_foul(
        self, legality, match_state, shot_context, ball_on, potted, points
    ):
        match_state.ball_on = ball_on
        ctx = shot_context(ball_on, potted=potted)
        ctx.commit_foul(4, "cue ball potted")

        assert not legality.evaluate(ctx, match_state)
        assert ctx.foul_points == points
        assert match_state.ball_on == ball_on

    def test_earlier_higher_foul_is_kept(self, legality, match_state, shot_context):
        ctx = shot_context(BallOn.red(), potted=[colour(BallColor.GREEN)])
        ctx.commit_foul(7, "wrong ball first: hit black with red on")

        assert not legality.evaluate(ctx, match_state)
        assert ctx.foul_points == 7
        assert ctx.foul_reason.startswith("wrong ball first")


class TestEndgameLegality:
    @pytest.fixture()
    def endgame_state(self, match_state):
        match_state.ball_on = match_state.endgame.activate()
        return match_state

    def test_required_colour_advances_sequence(
        self, endgame_state, shot_context
    ):
        yellow = colour(BallColor.YELLOW)
        ctx = shot_context(endgame_state.ball_on, first_contact=yellow, potted=[yellow])

        assert PotLegality().evaluate(ctx, endgame_state)
        assert endgame_state.ball_on == BallOn.sequence(BallColor.GREEN)
        assert endgame_state.endgame.index == 1

    def test_wrong_colour_is_foul(self, endgame_state, shot_context):
        ctx = shot_context(
            endgame_state.ball_on,
            first_contact=colour(BallColor.YELLOW),
            potted=[colour(BallColor.PINK)],
        )

        assert not PotLegality().evaluate(ctx, endgame_state)
        assert ctx.foul_points == 6
        assert endgame_state.endgame.index == 0
        assert endgame_state.ball_on == BallOn.sequence(BallColor.YELLOW)

    def test_wrong_low_colour_costs_minimum(self, endgame_state, shot_context):
        endgame_state.endgame.index = 3
        endgame_state.ball_on = endgame_state.endgame.ball_on
        ctx = shot_context(
            endgame_state.ball_on,
            first_contact=colour(BallColor.BLUE),
            potted=[colour(BallColor.YELLOW)],
        )

        assert not PotLegality().evaluate(ctx, endgame_state)
        assert ctx.foul_points == 4

    def test_black_finishes_the_sequence(self, endgame_state, shot_context):
        endgame_state.endgame.index = 5
        endgame_state.ball_on = endgame_state.endgame.ball_on
        black = colour(BallColor.BLACK)
        ctx = shot_context(endgame_state.ball_on, first_contact=black, potted=[black])

        assert PotLegality().evaluate(ctx, endgame_state)
        assert endgame_state.endgame.complete
        assert endgame_state.endgame.active
