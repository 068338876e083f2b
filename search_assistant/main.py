# Run from project root: uvicorn search_assistant.main:app --reload

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from search_assistant.api.routes import router
from search_assistant.core.config import LOG_LEVEL, load_settings
from search_assistant.core.log_setup import configure_logging
from search_assistant.services.providers import Providers, build_providers

configure_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(providers: Providers | None = None) -> FastAPI:
    """Build the ASGI app. Without injected providers they are built from the environment at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "providers", None) is None
        if owned:
            app.state.providers = build_providers(load_settings())
        logger.info("Search assistant booting...")
        yield
        if owned:
            await app.state.providers.aclose()

    app = FastAPI(title="Search Assistant Backend", lifespan=lifespan)
    if providers is not None:
        app.state.providers = providers
    app.include_router(router)
    return app


app = create_app()
