"""
FastAPI application for the AI Style Image Generator.

Run with: python main.py serve --reload
"""

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from dotenv import load_dotenv

from src.api.deps import close_auth_client
from src.api.rate_limit import limiter
from src.api.routes import config, generate, generations, health, profile
from src.core.cloudwatch_logging import setup_cloudwatch_logging, flush_cloudwatch_logging
from src.core.config import SupabaseConfig
from src.core.errors import AppError
from src.core.image_generator import ImageConfig
from src.db.engine import init_db, close_db


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Application starting up...")

    # CloudWatch logging (generation pipeline logs only, opt-in via CLOUDWATCH_ENABLED=true)
    setup_cloudwatch_logging()

    if ImageConfig().validate():
        logger.info("AI gateway API key configured")
    else:
        logger.warning("No AI gateway API key found - image generation disabled")

    if SupabaseConfig().validate():
        logger.info("Supabase auth configured")
    else:
        logger.warning("Supabase auth not configured - bearer tokens cannot be verified")

    await init_db()

    yield

    await close_auth_client()
    await close_db()
    logger.info("Application shutting down...")
    flush_cloudwatch_logging()


app = FastAPI(
    title="AI Style Image Generator API",
    description="""
Turn prompts into styled images and keep them in a personal gallery.

## Workflow
1. **POST** `/api/v1/generations` - Create a pending generation (prompt + style)
2. **POST** `/api/v1/generate-image` - Generate the image; the record ends `completed` or `failed`
3. **GET** `/api/v1/generations` - List your 20 newest generations
4. **DELETE** `/api/v1/generations/{id}` - Remove a generation
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


# Reject requests with unexpected Host headers
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(","),
)

# Only the configured frontend origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv(
        "CORS_ORIGINS", "http://localhost:8080,http://localhost:5173"
    ).split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "apikey", "x-client-info"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(config.router, prefix="/api/v1")
app.include_router(profile.router, prefix="/api/v1")
app.include_router(generations.router, prefix="/api/v1")
app.include_router(generate.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    """Point at the API documentation."""
    return {
        "message": "AI Style Image Generator API",
        "docs": "/docs",
        "redoc": "/redoc",
    }
