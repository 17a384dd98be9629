"""Expense Insights API main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from expense_insights.api.deps import get_optional_provider
from expense_insights.config import settings
from expense_insights.core.middleware import RequestLoggingMiddleware
from expense_insights.services.llm_provider import LLMProviderBase

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info(
        "Starting Expense Insights API",
        env=settings.app_env,
        llm_provider=settings.llm_provider,
    )
    yield
    logger.info("Shutting down Expense Insights API")


app = FastAPI(
    title="Expense Insights API",
    description="AI spending insights, budget suggestions and expense categorization",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    redirect_slashes=False,
)

# ── Middleware ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health Check ──────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check():
    """Liveness probe: always returns healthy if the process is running."""
    return {"status": "healthy", "version": VERSION}


@app.get("/ready", tags=["system"])
async def readiness_check(
    provider: LLMProviderBase | None = Depends(get_optional_provider),
):
    """Readiness probe: reports whether the LLM provider is configured."""
    if provider is None:
        return {"status": "degraded", "checks": {"api": "ok", "llm": "not_configured"}}
    return {
        "status": "ready",
        "checks": {"api": "ok", "llm": "ok", "model": provider.get_model_name()},
    }


# ── API Routes ────────────────────────────────────
from expense_insights.api.v1 import categorize, insights  # noqa: E402

app.include_router(insights.router, prefix="/api/v1/ai-insights", tags=["ai-insights"])
app.include_router(categorize.router, prefix="/api/v1/categorize-expense", tags=["categorization"])
