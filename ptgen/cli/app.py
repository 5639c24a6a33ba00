"""Command line interface for the PT-Gen API."""
from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import typer

from .client import create_client


DEFAULT_API_BASE = "http://localhost:8787"

app = typer.Typer(help="Generate PT descriptions through a PT-Gen service.")


def _api_base_option() -> typer.Option:
    return typer.Option(
        DEFAULT_API_BASE,
        "--api-base",
        help="Base URL for the PT-Gen API service.",
        show_default=True,
        envvar="PTGEN_API_BASE",
    )


def _apikey_option() -> typer.Option:
    return typer.Option(
        None,
        "--apikey",
        help="API key forwarded as the apikey query parameter.",
        envvar="PTGEN_APIKEY",
    )


def _query(api_base: str, params: dict[str, Any]) -> dict[str, Any]:
    with create_client(api_base) as client:
        try:
            response = client.get("/", params={k: v for k, v in params.items() if v is not None})
        except httpx.HTTPError as exc:
            typer.echo(f"Request failed: {exc}", err=True)
            raise typer.Exit(code=1) from exc
    try:
        payload = response.json()
    except ValueError as exc:
        typer.echo(f"Unexpected response ({response.status_code}): {response.text[:200]}", err=True)
        raise typer.Exit(code=1) from exc
    return payload if isinstance(payload, dict) else {"success": False, "error": "Unexpected response"}


def _finish(payload: dict[str, Any], *, format_only: bool = False) -> None:
    if not payload.get("success"):
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        raise typer.Exit(code=1)
    if format_only:
        typer.echo(payload.get("format", ""))
        return
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command()
def gen(
    url: Optional[str] = typer.Argument(None, help="Subject page URL on a supported site."),
    site: Optional[str] = typer.Option(None, help="Site key, used together with --sid."),
    sid: Optional[str] = typer.Option(None, help="Subject id on the chosen site."),
    format_only: bool = typer.Option(
        False,
        "--format-only/--full",
        help="Print only the rendered description.",
        show_default=True,
    ),
    apikey: Optional[str] = _apikey_option(),
    api_base: str = _api_base_option(),
) -> None:
    """Resolve a subject and print its description envelope."""

    if not url and not (site and sid):
        typer.echo("Provide a URL or both --site and --sid.", err=True)
        raise typer.Exit(code=2)

    payload = _query(api_base, {"url": url, "site": site, "sid": sid, "apikey": apikey})
    _finish(payload, format_only=format_only)


@app.command()
def search(
    query: str = typer.Argument(..., help="Free-text search query."),
    source: str = typer.Option("douban", help="Search source (douban, imdb or bangumi).", show_default=True),
    apikey: Optional[str] = _apikey_option(),
    api_base: str = _api_base_option(),
) -> None:
    """Search a source and print the candidate list."""

    payload = _query(api_base, {"search": query, "source": source, "apikey": apikey})
    _finish(payload)
