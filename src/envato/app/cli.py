from __future__ import annotations

"""envato.app.cli
=================
Command-line interface powered by Typer.

Usage examples
--------------
$ envato-client identity                              # show who the token belongs to
$ envato-client get /v1/market/total-items.json       # raw GET against any path
$ envato-client item 2833226                          # catalog item details
$ envato-client search "landing page" --site codecanyon.net
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import dotenv
import typer
from typing_extensions import Annotated

from .api import EnvatoClient
from ..core.errors import EnvatoError, HttpError

dotenv.load_dotenv()

app = typer.Typer(add_completion=False, help="Envato Market API client")


class LogLevel(str, Enum):
    OFF = "OFF"
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


TokenOption = Annotated[
    Optional[str],
    typer.Option("--token", help="Personal or OAuth token. Defaults to ENVATO_TOKEN."),
]
ConcurrencyOption = Annotated[
    Optional[int],
    typer.Option("--concurrency", min=0, help="Maximum simultaneous requests (0 = unlimited)."),
]


@app.callback()
def main(
    log_level: Annotated[
        Optional[LogLevel],
        typer.Option("--log-level", help="Set log level (OFF, CRITICAL, ERROR, WARNING, INFO, DEBUG). Default: OFF"),
    ] = None,
) -> None:
    """Root command callback to configure logging if requested."""
    if log_level in (None, LogLevel.OFF):
        return

    level = logging.getLevelNamesMapping().get(log_level.value, logging.INFO)

    package_name = __package__.split(".", 1)[0] if __package__ else "envato"
    logger = logging.getLogger(package_name)

    # Avoid stacking console handlers when invoked repeatedly in one process
    has_stream = any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
    if not has_stream:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)

    logger.propagate = False
    logger.setLevel(level)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _run(
    token: Optional[str],
    concurrency: Optional[int],
    call: Callable[[EnvatoClient], Awaitable[Any]],
) -> Any:
    async def _main() -> Any:
        async with EnvatoClient(token, concurrency=concurrency) as client:
            client.on("ratelimit", lambda ms: typer.echo(f"Rate limited; waiting {ms / 1000:.0f}s", err=True))
            return await call(client)

    try:
        return asyncio.run(_main())
    except ValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)
    except HttpError as e:
        typer.echo(f"Request failed: {e}", err=True)
        raise typer.Exit(code=1)
    except EnvatoError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command(help="Show the account id, scopes and ttl of the token.")
def identity(token: TokenOption = None) -> None:
    ident = _run(token, None, lambda client: client.get_identity())
    typer.echo(f"User ID: {ident.user_id}")
    if ident.client_id:
        typer.echo(f"Client ID: {ident.client_id}")
    typer.echo(f"Scopes: {', '.join(ident.scopes) or '-'}")
    typer.echo(f"TTL: {ident.ttl}s")


@app.command(help="Send a GET request to an API path and print the JSON response.")
def get(
    path: str = typer.Argument(..., help="API path, e.g. /v3/market/catalog/item?id=2833226"),
    token: TokenOption = None,
) -> None:
    _echo_json(_run(token, None, lambda client: client.get(path)))


@app.command(help="Show a catalog item by id.")
def item(
    id: int = typer.Argument(..., help="Numeric item id"),
    token: TokenOption = None,
) -> None:
    _echo_json(_run(token, None, lambda client: client.catalog.get_item(id)))


@app.command(help="Search catalog items.")
def search(
    term: str = typer.Argument(..., help="Search term"),
    site: Optional[str] = typer.Option(None, help="Marketplace domain, e.g. themeforest.net"),
    page_size: int = typer.Option(10, "--page-size", min=1, max=100, help="Results per page (default: 10)"),
    token: TokenOption = None,
    concurrency: ConcurrencyOption = None,
) -> None:
    result = _run(
        token,
        concurrency,
        lambda client: client.catalog.search_items(term=term, site=site, page_size=page_size),
    )
    matches = result.get("matches", []) if isinstance(result, dict) else []
    typer.echo(f"{'ID':>10} {'Sales':>7}  Name")
    for match in matches:
        typer.echo(f"{match.get('id', '-'):>10} {match.get('number_of_sales', '-'):>7}  {match.get('name', '-')}")


if __name__ == "__main__":  # pragma: no cover
    app()
