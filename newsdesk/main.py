import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from newsdesk.cache import cache
from newsdesk.config import settings
from newsdesk.exceptions import NotFoundError, ResourceConflictError
from newsdesk.middleware import TimingMiddleware
from newsdesk.routers import metrics, news

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The app keeps serving from the database when Redis is unreachable.
    try:
        await cache.connect()
    except Exception as exc:
        logger.warning("Cache unavailable, continuing without it: %s", exc)
    yield
    await cache.disconnect()


app = FastAPI(
    title="Newsdesk API",
    description="CRUD service for news with authors and tags",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error mapping
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning("Not found: %s", exc.message)
    return JSONResponse(status_code=404, content=exc.to_dict())


@app.exception_handler(ResourceConflictError)
async def conflict_handler(request: Request, exc: ResourceConflictError):
    logger.warning("Conflict: %s (%s)", exc.message, exc.details)
    return JSONResponse(status_code=409, content=exc.to_dict())


# Routers
app.include_router(news.router)
app.include_router(metrics.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
