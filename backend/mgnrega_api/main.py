import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import OperationalError

from mgnrega_api.api.routes import router as api_router, AVAILABLE_ROUTES
from mgnrega_api.core.config import settings
from mgnrega_api.core.errors import MissingParameter
from mgnrega_api.db.database import Base, engine
from mgnrega_api.models.dataset import DistrictData  # noqa: F401  registers the table

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("mgnrega_api")

app = FastAPI(title="MGNREGA Goa Dashboard API", version=settings.VERSION)

# Try to create tables (safe)
try:
    Base.metadata.create_all(bind=engine)
except OperationalError as e:
    logger.warning("⚠️ Database connection failed, continuing without DB cache: %s", e)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGIN.split(",")],
    allow_credentials=settings.CORS_ORIGIN != "*",
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


def _now():
    return datetime.now(timezone.utc).isoformat()


@app.middleware("http")
async def time_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Response-Time"] = f"{duration_ms:.0f}ms"
    logger.info("📤 %s %s - %d - %.0fms", request.method, request.url.path, response.status_code, duration_ms)
    return response


@app.exception_handler(MissingParameter)
async def missing_parameter_handler(request: Request, exc: MissingParameter):
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": exc.kind,
            "message": exc.message,
            "timestamp": _now(),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "error": "NotFound",
                "message": f"Cannot {request.method} {request.url.path}",
                "availableRoutes": AVAILABLE_ROUTES,
                "timestamp": _now(),
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": "HTTPError", "message": str(exc.detail), "timestamp": _now()},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("❌ Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if settings.ENVIRONMENT == "development" else "Something went wrong"
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "InternalServerError",
            "message": message,
            "timestamp": _now(),
        },
    )


# Include your API routes
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("mgnrega_api.main:app", host="0.0.0.0", port=5000)
