import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_app_settings
from src.db.database import init_db
from src.logging_config import setup_logging
from src.routers import predict as predict_router

# Configure logging VERY early
app_settings = get_app_settings()
setup_logging(app_settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("OCEAN Profile Engine API started.")
    yield
    logger.info("OCEAN Profile Engine API shutting down.")


app = FastAPI(title="OCEAN Profile Engine - Main API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in app_settings.cors_origins.split(",") if origin.strip()],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# --- Include Routers ---
app.include_router(predict_router.router, prefix="/api/v1", tags=["prediction"])


@app.get("/health", tags=["Health Check"])
async def health():
    """
    Liveness check. Does not touch the database or external providers.
    """
    return {"status": "ok", "message": "OCEAN Profile Engine is running."}


if __name__ == "__main__":
    import uvicorn
    # Run with `uvicorn main:app --reload` from the project root directory
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
