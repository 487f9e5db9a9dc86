"""CLI principal (Typer).

Comandos:
- `fetch`: resuelve y renderiza un avatar a disco, mostrando la traza de decisiones.
- `serve`: levanta la API HTTP con uvicorn.
- `endpoints`: lista el catálogo de endpoints.
- `doctor`: diagnósticos de entorno (ver `cli.doctor`).
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cli import doctor
from cli.ui_components import build_endpoints_table, build_events_table, print_banner
from core.config import AppSettings
from core.observability import configure_logging
from core.services.avatar_pipeline import render_avatar
from core.services.catalog import CATALOG, get_asset

app = typer.Typer(no_args_is_help=True, help="Resolve game/profile identifiers into avatar PNGs.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


@app.command()
def fetch(
    endpoint: str = typer.Argument(..., help="Endpoint del catálogo, p.ej. minecraft/face."),
    user: str = typer.Argument(..., help="Username, tag o handle."),
    size: Optional[int] = typer.Option(None, "--size", "-s", min=1, help="Lado de la imagen de salida."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Ruta del PNG (por defecto <familia>-<user>.png)."),
    trace: bool = typer.Option(True, "--trace/--no-trace", help="Mostrar la traza de eventos."),
) -> None:
    """Render one avatar and write it as PNG."""

    settings = AppSettings()
    configure_logging(settings.log_level)

    asset = get_asset(endpoint)
    if asset is None:
        raise typer.BadParameter(f"unknown endpoint {endpoint!r}; see `endpoints`")

    result = asyncio.run(render_avatar(settings=settings, asset=asset, identifier=user, size=size))

    if trace:
        _console.print(build_events_table(result.context.events))

    if not result.ok:
        kind = result.failure.value if result.failure else "failed"
        _console.print(f"[red]{kind}[/red] {result.detail or asset.label + ' not found'}")
        raise typer.Exit(code=1)

    output = output or Path(f"{asset.family}-{user.replace('#', '-')}.png")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.image or b"")
    _console.print(
        f"[green]OK[/green] {output} ({result.size or 'native'} px, via {result.texture_provider})"
    )


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host (por defecto AVATAR_API_HOST)."),
    port: Optional[int] = typer.Option(None, help="Puerto (por defecto AVATAR_API_PORT)."),
) -> None:
    """Serve the HTTP API."""

    import uvicorn  # noqa: PLC0415

    from api.app import create_app  # noqa: PLC0415

    settings = AppSettings()
    configure_logging(settings.log_level)
    print_banner(_console)
    uvicorn.run(create_app(settings), host=host or settings.host, port=port or settings.port)


@app.command()
def endpoints() -> None:
    """List the catalogued avatar endpoints."""

    settings = AppSettings()
    _console.print(build_endpoints_table(CATALOG.values(), settings))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
