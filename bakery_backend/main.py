from __future__ import annotations

import sys
from typing import NoReturn, Optional

import typer
import uvicorn

from bakery_backend import demo as flows
from bakery_backend.api.app import create_app
from bakery_backend.config import Settings, get_settings
from bakery_backend.errors import BakeryBackendError
from bakery_backend.infrastructure.db_factory import apply_schema, get_sync_connection, open_executor
from bakery_backend.reporter import print_demo_results
from bakery_backend.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Bakery Backend CLI.")

log = get_logger(__name__)


def _startup() -> Settings:
    """Load settings and configure logging, aborting with a diagnostic on failure."""
    try:
        settings = get_settings()
    except BakeryBackendError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return settings


def _abort(exc: BakeryBackendError) -> NoReturn:
    log.error(str(exc))
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = _startup()
    typer.echo(
        f"DB={settings.safe_dsn} | "
        f"pool=({settings.db_pool_min_size},{settings.db_pool_max_size}) "
        f"env={settings.app_env} server={settings.server_host}:{settings.server_port}"
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create the bakery and chef tables if they do not exist.
    """
    settings = _startup()
    try:
        conn = get_sync_connection(settings)
        try:
            apply_schema(conn)
        finally:
            conn.close()
    except BakeryBackendError as exc:
        _abort(exc)
    typer.echo(f"Schema applied to {settings.postgres_database}.")


@app.command()
def demo(
    reset_only: bool = typer.Option(
        False,
        "--reset-only",
        help="Only clear both tables; skip the demonstration flows.",
    ),
) -> None:
    """
    Run the CRUD, relationship and raw-query flows against the configured store.
    """
    settings = _startup()
    try:
        executor = open_executor(settings)
        try:
            if reset_only:
                results = {"cleared": flows.reset(executor)}
            else:
                results = flows.run_all(executor)
        finally:
            executor.close()
    except BakeryBackendError as exc:
        _abort(exc)
    print_demo_results(results)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from settings)."),
) -> None:
    """
    Serve the GraphQL API (POST /graphql, GraphiQL on GET /graphql, GET /health).
    """
    settings = _startup()
    try:
        executor = open_executor(settings)
    except BakeryBackendError as exc:
        _abort(exc)

    bind_host = host or settings.server_host
    bind_port = port or settings.server_port
    typer.echo(f"GraphiQL explorer at http://{bind_host}:{bind_port}/graphql")
    uvicorn.run(
        create_app(executor),
        host=bind_host,
        port=bind_port,
        log_config=None,
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
