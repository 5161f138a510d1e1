"""Two-player card matching game engine."""

__version__ = "1.0.0"
