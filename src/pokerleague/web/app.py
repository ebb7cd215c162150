from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from ..config import LeagueSettings
from ..features.round import LeagueManager, create_league_routers
from ..features.round.concurrency import shutdown_executor


@asynccontextmanager
async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    shutdown_executor()


def create_app(settings: LeagueSettings | None = None, manager: LeagueManager | None = None) -> FastAPI:
    settings = settings or LeagueSettings.from_env()
    manager = manager or LeagueManager(default_costs=settings.default_costs)

    application = FastAPI(title="Poker League", lifespan=_lifespan)
    application.state.manager = manager
    application.state.settings = settings

    @application.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    application.include_router(create_league_routers(manager, default_tables=settings.default_tables))

    def _custom_openapi() -> dict[str, object]:  # pragma: no cover - exercised via docs
        if application.openapi_schema:
            return application.openapi_schema
        application.openapi_schema = get_openapi(
            title=application.title,
            version="1.0.0",
            description=application.description,
            routes=application.routes,
        )
        return application.openapi_schema

    application.openapi = _custom_openapi  # type: ignore[method-assign]
    return application


app = create_app()


def main(settings: LeagueSettings | None = None) -> None:  # pragma: no cover - runner
    import uvicorn

    from ..log_config import setup_logging

    settings = settings or LeagueSettings.from_env()
    setup_logging(settings.log_level, settings.log_dir)
    uvicorn.run(create_app(settings), host=settings.bind, port=settings.port, log_config=None)


if __name__ == "__main__":  # pragma: no cover
    main()
