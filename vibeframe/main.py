"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vibeframe import __version__
from vibeframe.config import settings

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.vibeframe_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="VibeFrame",
        description="Conversational wireframe generation — workflow engine, element reconciliation and canvas sync",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Load step catalogs so registration errors surface at startup
    _register_catalogs()

    from vibeframe.api.router import api_router

    app.include_router(api_router)

    return app


def _register_catalogs() -> None:
    from vibeframe.workflow.catalog import catalog_versions

    versions = catalog_versions()
    if settings.workflow_version not in versions:
        raise RuntimeError(
            f"WORKFLOW_VERSION={settings.workflow_version!r} is not one of {', '.join(versions)}"
        )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
