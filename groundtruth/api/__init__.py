"""FastAPI backend for ground truth management."""
