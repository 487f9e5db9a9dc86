"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import io

import PIL
import typer
from PIL import Image, features
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, get_user_env_file, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

_UPSTREAMS: dict[str, str] = {
    "PlayerDB": "https://playerdb.co",
    "Mojang session": "https://sessionserver.mojang.com",
    "Crafatar": "https://crafatar.com",
    "Roblox users": "https://users.roblox.com",
    "Steam community": "https://steamcommunity.com",
    "GitHub API": "https://api.github.com",
    "Chess.com API": "https://api.chess.com",
    "ow-api": "https://ow-api.com",
}


async def _check_http(settings: AppSettings, url: str) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


async def _check_all(settings: AppSettings) -> list[tuple[str, bool, str]]:
    results = await asyncio.gather(*(_check_http(settings, url) for url in _UPSTREAMS.values()))
    return [(name, ok, detail) for name, (ok, detail) in zip(_UPSTREAMS, results)]


def _check_imaging() -> tuple[bool, str]:
    """Encode a tiny RGBA PNG and make sure JPEG decoding is available."""

    try:
        buffer = io.BytesIO()
        Image.new("RGBA", (8, 8), (0, 0, 0, 0)).save(buffer, format="PNG")
        if not features.check("jpg"):
            return False, "Pillow built without JPEG support (Steam avatars are JPEG)"
        return True, f"Pillow {PIL.__version__}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="avatar-api Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("User config", "OK", str(get_user_env_file()))
    table.add_row("Provider timeout", "OK", f"{settings.provider_timeout_seconds:g}s per call")
    table.add_row("Fan-out", "ON" if settings.fanout else "OFF", "parallel provider chains")

    ok_img, detail_img = _check_imaging()
    table.add_row("Imaging", "OK" if ok_img else "FAIL", detail_img)

    # Connectivity (best-effort)
    for name, ok, detail in asyncio.run(_check_all(settings)):
        table.add_row(name, "OK" if ok else "FAIL", detail)

    _console.print(table)

    if not ok_img:
        _console.print("\n[yellow]Note:[/yellow] reinstall Pillow with JPEG/PNG codecs enabled.")


@app.command(name="configure")
def configure() -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = AppSettings()

    timeout = typer.prompt(
        "Per-provider timeout (seconds)",
        default=str(settings.provider_timeout_seconds),
        show_default=True,
    ).strip()
    fanout = typer.confirm("Query providers in parallel (fan-out)?", default=settings.fanout)
    max_size = typer.prompt(
        "Max output size (px)",
        default=str(settings.max_output_size),
        show_default=True,
    ).strip()

    try:
        if float(timeout) <= 0 or int(max_size) <= 0:
            raise ValueError
    except ValueError:
        raise typer.BadParameter("timeout and max size must be positive numbers") from None

    env_path = write_user_env_vars(
        {
            "AVATAR_API_PROVIDER_TIMEOUT_SECONDS": timeout,
            "AVATAR_API_FANOUT": "true" if fanout else "false",
            "AVATAR_API_MAX_OUTPUT_SIZE": max_size,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
