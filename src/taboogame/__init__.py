"""taboogame — round/turn engine for a two-team Taboo party game."""

__version__ = "0.1.0"
