"""Pydantic models for wire, storage and API shapes."""
