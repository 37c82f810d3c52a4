"""Snooker trainer: turn and scoring rules engine with a local HTTP surface."""

__version__ = "0.1.0"
