"""FastAPI application factory."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request

# Load .env file from project root (must be before other imports)
load_dotenv()
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from starlette.exceptions import HTTPException as StarletteHTTPException  # noqa: E402

from rescue.api.routes import geocode, requests  # noqa: E402
from rescue.services.geocoding import NominatimGeocoder  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared geocoding client; close it on shutdown."""
    geocoder = NominatimGeocoder()
    app.state.geocoder = geocoder
    logger.info("Rescue API started")
    try:
        yield
    finally:
        await geocoder.aclose()


app = FastAPI(
    title="Flood Rescue API",
    description="Public rescue request intake and coordinator listing",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(requests.router, prefix="/api")
app.include_router(geocode.router, prefix="/api")


# Every error body is ``{"error": message}``.


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse({"error": f"Dữ liệu không hợp lệ: {message}"}, status_code=400)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
