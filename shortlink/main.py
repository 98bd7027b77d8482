from contextlib import asynccontextmanager
from fastapi import FastAPI

from .api.error_handlers import register_error_handlers
from .api.v1 import links
from .database import create_tables, engine
from .redis import redis_client
from . import models  # noqa: F401  registers tables on Base.metadata

from .observability import PrometheusMiddleware, metrics_endpoint
from .logging_config import setup_logging

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    await create_tables()
    await redis_client.connect()
    yield
    # Shutdown logic
    await redis_client.close()
    await engine.dispose()

setup_logging()

app = FastAPI(
    title="Short Link",
    description="Allocates unique short aliases for long links",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)
register_error_handlers(app)

app.add_route("/metrics", metrics_endpoint)

app.include_router(links.router, prefix="/v1")

@app.get("/health")
async def health():
    return {"status": "ok"}
