"""Texture location with freshness precedence.

Candidate order is by freshness tier, not by latency:

    authoritative live source -> secondary directories -> cached mirror

A texture URL returned as a byproduct of identity resolution joins the chain
as a secondary candidate, so it is preferred over the mirror but never over a
live authoritative answer. The authoritative source failing (usually rate
limiting) is a fallback trigger, logged at INFO.

A located URL is downloaded within the same step; a failed download is a
failure of that candidate and the chain moves on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from core.domain.models import TextureRef
from core.domain.results import (
    IdentityMatch,
    NotFound,
    ProviderResult,
    Restricted,
    Success,
    Unavailable,
)
from core.interfaces.provider import FreshnessTier, TextureProvider, TextureQuery
from core.observability import RequestContext
from core.services.fallback import ChainOutcome, call_with_budget, describe, first_success

Fetcher = Callable[[TextureRef], Awaitable[ProviderResult[bytes]]]

IDENTITY_HINT_PROVIDER = "identity-hint"


@dataclass(frozen=True)
class HintTextureProvider:
    """Wraps a texture URL obtained while resolving the identity."""

    hint: TextureRef
    name: str = IDENTITY_HINT_PROVIDER
    tier: FreshnessTier = FreshnessTier.SECONDARY
    requires_canonical_id: bool = False

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        return Success(value=self.hint, provider=self.hint.source or self.name)


def order_candidates(
    providers: Sequence[TextureProvider],
    *,
    hint: TextureRef | None = None,
) -> list[TextureProvider]:
    """Stable sort by tier; the hint goes after configured secondaries."""

    candidates: list[TextureProvider] = list(providers)
    if hint is not None:
        candidates.append(HintTextureProvider(hint=hint))
    return sorted(candidates, key=lambda p: int(p.tier))


class TextureLocator:
    def __init__(
        self,
        providers: Sequence[TextureProvider],
        *,
        fetch: Fetcher,
        timeout: float | None = None,
        parallel: bool = False,
    ) -> None:
        self._providers = list(providers)
        self._fetch = fetch
        self._timeout = timeout
        self._parallel = parallel

    async def locate(
        self,
        query: TextureQuery,
        *,
        identity: IdentityMatch | None = None,
        context: RequestContext | None = None,
    ) -> ChainOutcome[TextureRef]:
        hint = identity.texture_hint if identity is not None else None
        candidates = []
        for provider in order_candidates(self._providers, hint=hint):
            if provider.requires_canonical_id and not query.canonical_id:
                if context is not None:
                    context.emit(logging.DEBUG, "texture_skipped", provider=provider.name)
                continue
            candidates.append(provider)

        async def attempt(provider: TextureProvider) -> ProviderResult[TextureRef]:
            located = await call_with_budget(
                provider.locate_texture(query),
                provider=provider.name,
                timeout=self._timeout,
            )
            if not isinstance(located, Success):
                return located
            return await self._materialize(located.value, provider.name)

        def on_attempt(provider: TextureProvider, result: ProviderResult[TextureRef]) -> None:
            if context is None:
                return
            if isinstance(result, Success):
                level = logging.INFO
                name = "texture_attempt"
            elif isinstance(result, (Unavailable, Restricted)):
                level = logging.INFO
                name = "texture_fallback"
            else:
                level = logging.DEBUG
                name = "texture_attempt"
            context.emit(
                level,
                name,
                provider=provider.name,
                tier=provider.tier.name.lower(),
                **describe(result),
            )

        outcome = await first_success(
            candidates,
            attempt,
            name_of=lambda p: p.name,
            parallel=self._parallel,
            on_attempt=on_attempt,
        )
        if context is not None and isinstance(outcome.result, Success):
            context.emit(logging.INFO, "texture_located", provider=outcome.result.provider)
        return outcome

    async def _materialize(self, ref: TextureRef, provider: str) -> ProviderResult[TextureRef]:
        if ref.data is not None:
            return Success(value=ref.model_copy(update={"source": ref.source or provider}), provider=provider)

        fetched = await call_with_budget(self._fetch(ref), provider=provider, timeout=self._timeout)
        if isinstance(fetched, Success):
            return Success(
                value=TextureRef(data=fetched.value, format=ref.format, source=ref.source or provider),
                provider=provider,
            )
        if isinstance(fetched, NotFound):
            return NotFound(provider=provider)
        return fetched
