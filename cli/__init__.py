"""CLI module for FloatScribe."""

from .types import Language

__all__ = ["Language"]
