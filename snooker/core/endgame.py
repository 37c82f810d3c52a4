"""Colour clearance once the reds are gone."""

import logging
from typing import Optional

from .models import OBJECT_COLORS, BallColor, BallOn

logger = logging.getLogger(__name__)

COLOR_SEQUENCE: tuple[BallColor, ...] = OBJECT_COLORS


class EndgameSequencer:
    """Tracks the fixed yellow-to-black potting order of the endgame.

    Activation is one-way for the lifetime of a frame; only a new frame
    (``reset``) returns the sequencer to its inactive state.
    """

    def __init__(self) -> None:
        self.active = False
        self.index = 0

    def activate(self) -> BallOn:
        """Start the endgame and return the first ball on (yellow).

        Activating an already active sequencer leaves its position unchanged.
        """
        if not self.active:
            self.active = True
            self.index = 0
            logger.info("All reds cleared: colours now in sequence")
        return self.ball_on

    @property
    def complete(self) -> bool:
        return self.active and self.index >= len(COLOR_SEQUENCE)

    @property
    def required_color(self) -> Optional[BallColor]:
        """Colour that must be struck and potted next, if any."""
        if not self.active or self.complete:
            return None
        return COLOR_SEQUENCE[self.index]

    @property
    def ball_on(self) -> BallOn:
        color = self.required_color
        if color is None:
            raise RuntimeError("No colour is on: endgame inactive or finished")
        return BallOn.sequence(color)

    @property
    def remaining(self) -> list[BallColor]:
        """Colours still to be potted, in order."""
        if not self.active:
            return list(COLOR_SEQUENCE)
        return list(COLOR_SEQUENCE[self.index :])

    def advance(self) -> bool:
        """Move past the colour just potted.

        Returns:
            True if that was the last colour (the frame is over)
        """
        if not self.active:
            raise RuntimeError("Cannot advance an inactive endgame")
        if self.complete:
            return True
        potted = COLOR_SEQUENCE[self.index]
        self.index += 1
        logger.debug(f"Endgame: {potted.value} cleared, {len(self.remaining)} left")
        return self.complete

    def reset(self) -> None:
        """Return to the pre-endgame state for a new frame."""
        self.active = False
        self.index = 0
