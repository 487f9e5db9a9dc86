"""Avatar pipeline orchestration.

One request walks a small state machine:

    START -> RESOLVING_IDENTITY -> LOCATING_TEXTURE -> COMPOSITING -> DONE

and any state may end in FAILED(kind). Provider `Unavailable` outcomes never
reach this level: the resolver and the locator absorb them and only report
the aggregate (`Success`, `NotFound` or `Restricted`). Retries exist only as
"next provider in the ordered list".
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

import httpx

from adapters.http_client import HttpTextureFetcher, build_async_client
from core.config import AppSettings
from core.domain.identifiers import InvalidIdentifier, parse_identifier
from core.domain.models import ParsedIdentifier
from core.domain.results import IdentityMatch, Restricted, Success
from core.interfaces.provider import TextureQuery
from core.observability import RequestContext
from core.services.catalog import AssetDefinition
from core.services.identity_resolver import IdentityResolver
from core.services.image_compositor import CompositionError, compose, resolve_output_size
from core.services.texture_locator import TextureLocator


class PipelineState(str, Enum):
    START = "start"
    RESOLVING_IDENTITY = "resolving_identity"
    LOCATING_TEXTURE = "locating_texture"
    COMPOSITING = "compositing"
    DONE = "done"
    FAILED = "failed"


class FailureKind(str, Enum):
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    RESTRICTED = "restricted"
    PROCESSING_ERROR = "processing_error"


@dataclass
class AvatarResult:
    """Outcome of one pipeline run."""

    context: RequestContext
    state: PipelineState = PipelineState.START
    image: bytes | None = None
    failure: FailureKind | None = None
    detail: str | None = None
    size: int | None = None
    size_clamped: bool = False
    canonical_id: str | None = None
    texture_provider: str | None = None
    history: list[PipelineState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.DONE and self.image is not None


class AvatarPipeline:
    def __init__(
        self,
        *,
        asset: AssetDefinition,
        settings: AppSettings,
        client: httpx.AsyncClient,
    ) -> None:
        self._asset = asset
        self._settings = settings
        self._client = client

    def _move(self, result: AvatarResult, state: PipelineState) -> None:
        result.history.append(state)
        result.state = state
        result.context.emit(logging.DEBUG, "state", state=state.value)

    def _fail(
        self,
        result: AvatarResult,
        kind: FailureKind,
        detail: str | None = None,
        *,
        cause: BaseException | None = None,
    ) -> AvatarResult:
        result.failure = kind
        result.detail = detail
        self._move(result, PipelineState.FAILED)
        level = logging.WARNING if kind is FailureKind.PROCESSING_ERROR else logging.INFO
        fields = {"kind": kind.value, "detail": detail or ""}
        if cause is not None:
            # Library text stays in the log, never in the response.
            fields["cause"] = f"{type(cause).__name__}: {cause}"
        result.context.emit(level, "failed", **fields)
        return result

    async def run(
        self,
        identifier: str | None,
        *,
        size: int | None = None,
        context: RequestContext | None = None,
    ) -> AvatarResult:
        context = context or RequestContext(asset=self._asset.route, identifier=identifier or "")
        result = AvatarResult(context=context)
        self._move(result, PipelineState.START)

        try:
            parsed = parse_identifier(identifier)
        except InvalidIdentifier as exc:
            return self._fail(result, FailureKind.BAD_REQUEST, str(exc))

        asset_settings = self._settings.asset(self._asset.family)
        decision = resolve_output_size(size, asset_settings, self._settings)
        result.size = decision.size
        result.size_clamped = decision.clamped
        if decision.clamped:
            context.emit(
                logging.INFO,
                "size_clamped",
                requested=decision.requested,
                size=decision.size,
                limit=decision.limit,
            )

        identity: IdentityMatch | None = None
        if not self._asset.skips_identity:
            self._move(result, PipelineState.RESOLVING_IDENTITY)
            identity_outcome = await self._resolver().resolve(parsed, context)
            if isinstance(identity_outcome.result, Restricted):
                return self._fail(result, FailureKind.RESTRICTED, identity_outcome.result.reason)
            if not isinstance(identity_outcome.result, Success):
                return self._fail(result, FailureKind.NOT_FOUND)
            identity = identity_outcome.result.value
            result.canonical_id = identity.canonical_id

        self._move(result, PipelineState.LOCATING_TEXTURE)
        texture_outcome = await self._locator().locate(
            self._query(parsed, identity, decision.size),
            identity=identity,
            context=context,
        )
        if isinstance(texture_outcome.result, Restricted):
            return self._fail(result, FailureKind.RESTRICTED, texture_outcome.result.reason)
        if not isinstance(texture_outcome.result, Success):
            return self._fail(result, FailureKind.NOT_FOUND)
        texture = texture_outcome.result.value
        result.texture_provider = texture_outcome.result.provider

        self._move(result, PipelineState.COMPOSITING)
        spec = self._asset.composition(decision.size, asset_settings.resampling)
        try:
            result.image = await asyncio.to_thread(compose, texture.data or b"", spec)
        except CompositionError as exc:
            return self._fail(result, FailureKind.PROCESSING_ERROR, str(exc), cause=exc.__cause__)

        self._move(result, PipelineState.DONE)
        context.emit(
            logging.INFO,
            "rendered",
            provider=result.texture_provider,
            size=result.size or "native",
            bytes=len(result.image),
        )
        return result

    def _resolver(self) -> IdentityResolver:
        assert self._asset.identity is not None
        return IdentityResolver(
            self._asset.identity(self._client),
            timeout=self._settings.provider_timeout_seconds,
            parallel=self._settings.fanout,
        )

    def _locator(self) -> TextureLocator:
        return TextureLocator(
            self._asset.textures(self._client),
            fetch=HttpTextureFetcher(self._client),
            timeout=self._settings.provider_timeout_seconds,
            parallel=self._settings.fanout,
        )

    @staticmethod
    def _query(parsed: ParsedIdentifier, identity: IdentityMatch | None, size: int | None) -> TextureQuery:
        return TextureQuery(
            identifier=parsed,
            canonical_id=identity.canonical_id if identity is not None else None,
            size=size,
        )


async def render_avatar(
    *,
    settings: AppSettings,
    asset: AssetDefinition,
    identifier: str | None,
    size: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    context: RequestContext | None = None,
) -> AvatarResult:
    """Run the pipeline with a client owned by this request only."""

    async with build_async_client(settings, transport=transport) as client:
        pipeline = AvatarPipeline(asset=asset, settings=settings, client=client)
        return await pipeline.run(identifier, size=size, context=context)
