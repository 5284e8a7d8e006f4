"""FastAPI endpoints."""
