"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    vibeframe_env: str = "development"
    vibeframe_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Model routing
    model_cheap: str = "claude-haiku-4-5-20251001"
    model_mid: str = "claude-sonnet-4-5-20250929"
    model_frontier: str = "claude-opus-4-5-20251101"

    # Generation
    generation_max_tokens: int = 16000
    generation_timeout_seconds: float = 120.0
    title_timeout_seconds: float = 15.0

    # Storage
    data_dir: str = "data"
    session_store: str = "file"  # file | memory

    # Canvas
    canvas_debounce_seconds: float = 0.3
    canvas_background: str = "#ffffff"
    canvas_grid_size: int = 20

    # Workflow catalog used for new conversations
    workflow_version: str = "v2"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
