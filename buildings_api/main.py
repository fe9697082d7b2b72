import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from buildings_api.lib.config import settings
from buildings_api.lib.database import check_connection, create_tables, engine
from buildings_api.lib.errors import register_error_handlers
from buildings_api.lib.logging_config import configure_logging
from buildings_api.features.health.routes import router as health_router
from buildings_api.features.buildings.routes import router as buildings_router

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await check_connection()
    logger.info("Database connection established")
    if settings.create_tables_on_startup:
        await create_tables()
        logger.info("Tables verified / created")

    yield

    await engine.dispose()
    logger.info("Database connection closed")


app = FastAPI(
    title="Buildings API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health_router, prefix="/api")
app.include_router(buildings_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Buildings API", "docs": "/docs"}


if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
