"""Real-time repetition counting and form feedback for bodyweight exercises."""

__version__ = "0.1.0"
