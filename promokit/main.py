"""
Promokit API - job producer and polling endpoints.

The worker side lives in `promokit.worker.dispatcher`.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promokit.core.config import get_settings
from promokit.core.database import Database
from promokit.core.middleware import BodySizeLimitMiddleware
from promokit.jobs.views import router as jobs_router

settings = get_settings()
API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    await Database.connect()
    yield
    await Database.disconnect()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
## Promokit API

Asynchronous generation of promo assets: spreadsheet import, brand and product
scraping, rendered previews, PDF flyers, social images, HTML emails, co-op
reports and ZIP bundles.

Create a job, then poll `GET /jobs/{job_id}` until `status` is `done` or `failed`.
    """,
    lifespan=lifespan,
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(BodySizeLimitMiddleware)

app.include_router(jobs_router, prefix=API_PREFIX)


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if Database.client else "disconnected",
        "version": settings.APP_VERSION,
    }
