"""FastAPI application entrypoint for the pet service."""

import logging

from fastapi import FastAPI

from petstore.api.pets import router as pets_router
from petstore.core.config import get_settings
from petstore.core.errors import register_error_handlers
from petstore.core.logging_config import configure_logging
from petstore.db import models as _models  # noqa: F401

settings = get_settings()
configure_logging(settings.log_level)
logging.getLogger(__name__).info("Starting pet service with settings=%s", settings.safe_for_logging())

app = FastAPI(title="Petstore")
register_error_handlers(app)
app.include_router(pets_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Health check stub endpoint for service readiness."""
    return {"status": "ok"}
