"""Ground truth management for text classifier training data."""

__version__ = "0.0.2"
