import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from dialectica.api.routes import cancel_running_debates, router
from dialectica.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# LIFESPAN: Startup and Shutdown Logic
# =============================================================================
#
# - Everything BEFORE 'yield' runs once on startup
# - Everything AFTER 'yield' runs once on shutdown
#
# Debates live only as long as their stream, so there is nothing to set up.
# On shutdown, debates still streaming are cancelled instead of being left
# to finish against a closed server.
#
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""

    # === STARTUP ===
    logger.info(
        f"Dialectica ready: model={settings.openai_model}, "
        f"turns={settings.dialectica_turns}, "
        f"search={'serpapi' if settings.serpapi_key else 'mock'}"
        f"{'' if settings.search_enabled else ' (disabled)'}, "
        f"strict_citations={settings.strict_citations}"
    )
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; /api/debate will refuse requests")

    yield

    # === SHUTDOWN ===
    await cancel_running_debates()


app = FastAPI(
    title="Dialectica",
    description="Streams an evidence-grounded proponent vs. critic debate with a judge verdict",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Serve the static frontend, if there is one
# Mounted last so /api and /health take precedence over files
public_dir = Path(settings.public_dir)
if public_dir.is_dir():
    app.mount("/", StaticFiles(directory=str(public_dir), html=True), name="static")
    logger.info(f"Serving static frontend from {public_dir.resolve()}")
else:
    logger.info(f"No static frontend at {public_dir}, serving API only")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
