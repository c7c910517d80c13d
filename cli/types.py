"""Shared CLI type definitions for FloatScribe."""

from enum import Enum


class Language(str, Enum):
    """Sprachen für die Transkription."""

    en = "en"
    nl = "nl"
