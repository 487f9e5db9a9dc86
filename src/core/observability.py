"""Request-scoped observability.

Every pipeline decision (provider selected, fallback triggered, size clamped,
state transition) is emitted through a `RequestContext`. The event is kept on
the request, so the CLI and the HTTP layer can show the trail, and is logged
with structured `extra` fields instead of free-form console output.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("avatar_api.pipeline")


@dataclass(frozen=True)
class PipelineEvent:
    level: int
    name: str
    fields: dict[str, Any]

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)


@dataclass
class RequestContext:
    """Context owned by exactly one request."""

    asset: str
    identifier: str
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    events: list[PipelineEvent] = field(default_factory=list)

    def emit(self, level: int, name: str, **fields: Any) -> PipelineEvent:
        event = PipelineEvent(level=level, name=name, fields=fields)
        self.events.append(event)
        logger.log(
            level,
            "%s %s",
            name,
            " ".join(f"{k}={v}" for k, v in fields.items()),
            extra={
                "request_id": self.request_id,
                "asset": self.asset,
                "event": name,
                "fields": fields,
            },
        )
        return event

    def find(self, name: str) -> list[PipelineEvent]:
        return [e for e in self.events if e.name == name]


def configure_logging(level: str = "INFO", *, rich: bool = True) -> None:
    """Install a root handler once (Rich for terminals, plain otherwise)."""

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return

    handler: logging.Handler
    if rich:
        from rich.logging import RichHandler  # noqa: PLC0415

        handler = RichHandler(rich_tracebacks=False, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root.addHandler(handler)
    root.setLevel(level.upper())
