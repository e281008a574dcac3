import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from article_api.config import settings
from article_api.database import engine
from article_api.exceptions import register_exception_handlers
from article_api.logging_config import configure_logging
from article_api.middleware import RequestTimingMiddleware
from article_api.routers import articles, auth, categories

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging()
    logger.info("Starting Simple Article API (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await engine.dispose()

app = FastAPI(
    title="Simple Article API",
    description="Articles and categories behind JWT authentication",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(articles.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
