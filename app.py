import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from activities import router as activities_router
from config import CORS_ALLOWED_ORIGINS, LOG_LEVEL, PORT
from core.api import get_runtime
from core.startup import StatsRuntime
from stats import router as stats_router

# Basic logging configuration
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


# --- Application Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the runtime on startup and release it on shutdown.

    A runtime already attached to ``app.state`` (e.g. by tests) is used as-is.
    """
    owns_runtime = getattr(app.state, "runtime", None) is None
    if owns_runtime:
        try:
            app.state.runtime = await StatsRuntime.start()
            logger.info("Application startup completed successfully.")
        except Exception as e:
            logger.critical(
                "CRITICAL: Failed to initialize application during startup: %s",
                str(e),
                exc_info=True,
            )
            raise
    try:
        yield
    finally:
        if owns_runtime:
            await app.state.runtime.stop()
            app.state.runtime = None
            logger.info("Application shutdown completed successfully")


def create_app() -> FastAPI:
    app = FastAPI(title="Activity Stats", lifespan=lifespan)

    # CORS Middleware Configuration
    if CORS_ALLOWED_ORIGINS:
        origins = CORS_ALLOWED_ORIGINS
        logger.info("CORS configured with specific origins: %s", origins)
    else:
        # Development fallback - allow localhost and common dev ports
        origins = [
            "http://localhost:3000",
            "http://localhost:8080",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:8080",
        ]
        logger.warning(
            "CORS_ALLOWED_ORIGINS not set. Using development defaults: %s",
            origins,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(stats_router)
    app.include_router(activities_router)

    @app.get("/api/health")
    async def health(request: Request):
        """Report whether the database answers a ping."""
        database = get_runtime(request).database
        healthy = database is None or await database.ping()
        return JSONResponse(
            status_code=(
                status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE
            ),
            content={"status": "ok" if healthy else "degraded", "database": healthy},
        )

    # --- Global Exception Handlers ---
    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: HTTPException):
        """Handle 404 Not Found errors."""
        logger.warning("404 Not Found: %s. Detail: %s", request.url, exc.detail)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Not found", "detail": exc.detail},
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception):
        """Handle 500 Internal Server Error errors."""
        error_id = str(uuid.uuid4())
        logger.error(
            "Internal Server Error (ID: %s): Request %s %s failed. Exception: %s",
            error_id,
            request.method,
            request.url,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "error_id": error_id,
                "detail": str(exc),
            },
        )

    return app


app = create_app()


# --- Main Execution Block ---
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=PORT,
        log_level=LOG_LEVEL.lower(),
    )
