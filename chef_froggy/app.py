from __future__ import annotations

from fastapi import FastAPI

from chef_froggy.config import Settings, build_catalog, build_generator, load_settings
from chef_froggy.llm import LLM
from chef_froggy.routes import Kitchen, router


def create_app(settings: Settings | None = None, llm: LLM | None = None) -> FastAPI:
    """Build the API. `llm` overrides the HttpLLM built from settings."""
    resolved = settings or load_settings()

    app = FastAPI(title="Chef Froggy")
    app.state.settings = resolved
    app.state.kitchen = Kitchen(build_generator(resolved, llm), build_catalog(resolved))
    app.include_router(router, prefix="/api")
    return app
