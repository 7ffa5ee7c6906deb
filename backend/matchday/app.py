from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from matchday.config import config, environment
from matchday.database import database
from matchday.logic.errors import MatchdayError
from matchday.routes import competitions, fixtures
from matchday.utils.alembic import alembic_run_migrations
from matchday.utils.logging import logger


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await database.connect()
    if config.auto_run_migrations:
        alembic_run_migrations()

    logger.info(f"Started matchday in {environment.value} mode")
    yield
    await database.disconnect()


routers = {
    "Competitions": competitions.router,
    "Fixtures": fixtures.router,
}

app = FastAPI(
    title="Matchday API",
    summary="Standings, group stages and knockout brackets driven by fixture results",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in config.cors_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MatchdayError)
async def matchday_error_handler(_: Request, exc: MatchdayError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


for tag, router in routers.items():
    app.include_router(router, tags=[tag])
