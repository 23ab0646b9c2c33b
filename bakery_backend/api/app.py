"""
HTTP wiring for the GraphQL API.

Routes:
- `POST /graphql`: queries and mutations.
- `GET /graphql`: GraphiQL explorer page.
- `GET /health`: plain-text liveness probe.

The executor (and therefore the connection pool) is created by the caller and
shared by every request; it is closed when the application shuts down.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from strawberry.fastapi import GraphQLRouter

from bakery_backend import __version__
from bakery_backend.api.context import AppContext
from bakery_backend.api.schema import schema
from bakery_backend.infrastructure.executor import AbstractExecutor
from bakery_backend.utils.logging import get_logger

log = get_logger(__name__)

GRAPHQL_PATH = "/graphql"
HEALTH_PATH = "/health"


def create_app(executor: AbstractExecutor, graphql_ide: bool = True) -> FastAPI:
    """
    Build the FastAPI application serving the GraphQL schema.

    Parameters
    ----------
    executor : AbstractExecutor
        Shared query executor (live pool or scripted).
    graphql_ide : bool
        Whether `GET /graphql` serves the GraphiQL explorer.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("GraphQL server starting", extra={"path": GRAPHQL_PATH})
        try:
            yield
        finally:
            executor.close()
            log.info("GraphQL server stopped")

    async def get_context() -> AppContext:
        return AppContext(executor)

    router = GraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql" if graphql_ide else None,
    )

    app = FastAPI(title="Bakery Backend", version=__version__, lifespan=lifespan)
    app.include_router(router, prefix=GRAPHQL_PATH)

    @app.get(HEALTH_PATH, response_class=PlainTextResponse)
    def health() -> str:
        return "OK"

    return app


__all__ = ["create_app", "GRAPHQL_PATH", "HEALTH_PATH"]
