"""State validation for the ball registry.

Checks the table invariants before a turn end is handled: at most one cue
ball, no more than the racked number of reds, one ball per colour and unique
ids. A failed check means the physics collaborator reported an inconsistent
table, which is surfaced to the caller as ``PreconditionViolation``.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from .models import Ball, BallKind

logger = logging.getLogger(__name__)


class RulesEngineError(Exception):
    """Base exception for rules engine errors."""

    pass


class PreconditionViolation(RulesEngineError):
    """Raised when the collaborator's report breaks an engine precondition."""

    pass


@dataclass
class ValidationResult:
    """Result of state validation."""

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: str) -> None:
        """Add an error message.

        Args:
            error: Error message to add
        """
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning message.

        Args:
            warning: Warning message to add
        """
        self.warnings.append(warning)


class StateValidator:
    """Validates the set of balls in play against the table invariants."""

    def __init__(self, max_reds: int = 15):
        """Initialize validator.

        Args:
            max_reds: Number of reds racked for the frame
        """
        self.max_reds = max_reds

    def validate(self, balls: Iterable[Ball]) -> ValidationResult:
        """Validate the balls currently in play.

        Args:
            balls: Balls in play

        Returns:
            Validation result with any errors and warnings
        """
        result = ValidationResult()
        balls = list(balls)

        ids = Counter(b.id for b in balls)
        for ball_id, count in ids.items():
            if count > 1:
                result.add_error(f"Ball id {ball_id!r} is in play {count} times")

        kinds = Counter(b.kind for b in balls)
        if kinds[BallKind.CUE] > 1:
            result.add_error(f"{kinds[BallKind.CUE]} cue balls in play")
        if kinds[BallKind.RED] > self.max_reds:
            result.add_error(
                f"{kinds[BallKind.RED]} reds in play (maximum {self.max_reds})"
            )

        colors = Counter(b.color for b in balls if b.kind is BallKind.COLOR)
        for color, count in colors.items():
            if count > 1:
                result.add_error(f"{count} {color.value} balls in play")

        if kinds[BallKind.CUE] == 0:
            result.add_warning("No cue ball in play")

        return result

    def ensure_valid(self, balls: Iterable[Ball]) -> ValidationResult:
        """Validate and raise if any invariant is broken.

        Raises:
            PreconditionViolation: If validation finds errors
        """
        result = self.validate(balls)
        for warning in result.warnings:
            logger.debug(f"Table state warning: {warning}")
        if not result.is_valid:
            raise PreconditionViolation("; ".join(result.errors))
        return result
