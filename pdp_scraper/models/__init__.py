"""Models package initialization."""
