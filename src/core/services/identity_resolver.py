"""Identity resolution: raw identifier -> canonical account id.

Providers are ordered fastest / most convenient first and most authoritative
(or most robust) last. The first success short-circuits even when a later
provider might be "more correct"; exhaustion is reported as `NotFound`.
"""

from __future__ import annotations

import logging
from typing import Sequence

from core.domain.models import ParsedIdentifier
from core.domain.results import IdentityMatch, ProviderResult, Success, Unavailable
from core.interfaces.provider import IdentityProvider
from core.observability import RequestContext
from core.services.fallback import ChainOutcome, call_with_budget, describe, first_success


class IdentityResolver:
    def __init__(
        self,
        providers: Sequence[IdentityProvider],
        *,
        timeout: float | None = None,
        parallel: bool = False,
    ) -> None:
        self._providers = list(providers)
        self._timeout = timeout
        self._parallel = parallel

    @property
    def providers(self) -> list[IdentityProvider]:
        return list(self._providers)

    async def resolve(
        self,
        identifier: ParsedIdentifier,
        context: RequestContext | None = None,
    ) -> ChainOutcome[IdentityMatch]:
        async def attempt(provider: IdentityProvider) -> ProviderResult[IdentityMatch]:
            return await call_with_budget(
                provider.resolve_identity(identifier),
                provider=provider.name,
                timeout=self._timeout,
            )

        def on_attempt(provider: IdentityProvider, result: ProviderResult[IdentityMatch]) -> None:
            if context is None:
                return
            level = logging.INFO if isinstance(result, (Success, Unavailable)) else logging.DEBUG
            context.emit(level, "identity_attempt", provider=provider.name, **describe(result))

        outcome = await first_success(
            self._providers,
            attempt,
            name_of=lambda p: p.name,
            parallel=self._parallel,
            on_attempt=on_attempt,
        )
        if context is not None and isinstance(outcome.result, Success):
            context.emit(
                logging.INFO,
                "identity_resolved",
                provider=outcome.result.provider,
                canonical_id=outcome.result.value.canonical_id,
            )
        return outcome
