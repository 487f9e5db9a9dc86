"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import logging
from typing import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import AppSettings
from core.observability import PipelineEvent
from core.services.catalog import AssetDefinition

_LEVEL_STYLES = {
    logging.DEBUG: "dim",
    logging.INFO: "cyan",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
}


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("avatar-api", style="bold cyan")
    subtitle = Text("Identificador • Proveedores • Composición", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_events_table(events: Iterable[PipelineEvent]) -> Table:
    """Traza de decisiones de un request (proveedores, fallbacks, estados)."""

    table = Table(title="Pipeline events")
    table.add_column("Level", no_wrap=True)
    table.add_column("Event", style="white", no_wrap=True)
    table.add_column("Details", style="magenta")
    for event in events:
        style = _LEVEL_STYLES.get(event.level, "white")
        details = " ".join(f"{k}={v}" for k, v in event.fields.items())
        table.add_row(Text(event.level_name, style=style), event.name, details)
    return table


def build_endpoints_table(assets: Iterable[AssetDefinition], settings: AppSettings) -> Table:
    table = Table(title="Avatar endpoints")
    table.add_column("Route", style="cyan", no_wrap=True)
    table.add_column("Identity chain", style="white")
    table.add_column("Resampling", style="green")
    table.add_column("Default size", style="white")
    table.add_column("Native max", style="white")
    table.add_column("Cache", style="dim")
    for asset in assets:
        cfg = settings.asset(asset.family)
        table.add_row(
            f"/api/{asset.route}",
            "skipped" if asset.skips_identity else "yes",
            cfg.resampling.value,
            str(cfg.default_size or "native"),
            str(cfg.max_native_size or "-"),
            cfg.cache_policy.label(),
        )
    return table
