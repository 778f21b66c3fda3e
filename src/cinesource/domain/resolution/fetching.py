"""Consult one source for one entity: cache first, then a rate-limited fetch."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cinesource.domain.ports.sources import (
    SourceAuthError,
    SourceParseError,
    SourceRateLimitedError,
    SourceUnavailableError,
)
from cinesource.domain.resolution.contracts import AttemptOutcome, SourceAttempt

if TYPE_CHECKING:
    from datetime import datetime

    from cinesource.domain.model import Candidate, EntityKey
    from cinesource.domain.resolution.cache import ResponseCache
    from cinesource.domain.resolution.ratelimit import SourceRateLimiter
    from cinesource.domain.resolution.registry import RegisteredSource

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Consultation:
    """What one source contributed for one entity, successful or not."""

    attempt: SourceAttempt
    candidates: tuple[Candidate, ...] = ()
    fetched_at: datetime | None = None


class SourceConsultant:
    """Turns every source failure into an attempt record instead of an exception.

    ``disabled`` is shared by all entities of a run: once a source rejects our
    credentials it is not called again until the next run.
    """

    def __init__(self, cache: ResponseCache, rate_limiter: SourceRateLimiter) -> None:
        self._cache = cache
        self._rate_limiter = rate_limiter

    async def consult(
        self,
        source: RegisteredSource,
        entity_key: EntityKey,
        *,
        disabled: set[str],
    ) -> Consultation:
        if source.name in disabled:
            return self._failed(source, AttemptOutcome.DISABLED, "disabled for this run")

        # Store I/O is blocking; keep it off the event loop shared by all workers.
        cached = await asyncio.to_thread(self._cache.get, source.name, entity_key)
        if cached is not None:
            log.debug("%s: cache hit for %s", source.name, entity_key)
            return Consultation(
                attempt=SourceAttempt(
                    source_id=source.name,
                    pool=source.pool,
                    outcome=AttemptOutcome.CACHED,
                    candidates=len(cached.payload),
                ),
                candidates=cached.payload,
                fetched_at=cached.fetched_at,
            )

        try:
            fetched = await self._rate_limiter.call(source.name, lambda: source.fetch(entity_key))
        except SourceAuthError as exc:
            disabled.add(source.name)
            log.warning("%s rejected credentials; disabling it for this run: %s", source.name, exc)
            return self._failed(source, AttemptOutcome.AUTH_FAILED, str(exc))
        except SourceRateLimitedError as exc:
            log.info("%s still rate limited after retry; skipping %s", source.name, entity_key)
            return self._failed(source, AttemptOutcome.RATE_LIMITED, str(exc))
        except SourceParseError as exc:
            log.warning("%s returned an unusable payload for %s: %s", source.name, entity_key, exc)
            return self._failed(source, AttemptOutcome.PARSE_FAILED, str(exc))
        except SourceUnavailableError as exc:
            log.info("%s unavailable for %s: %s", source.name, entity_key, exc)
            return self._failed(source, AttemptOutcome.UNAVAILABLE, str(exc))
        except Exception as exc:
            log.exception("%s failed unexpectedly for %s", source.name, entity_key)
            return self._failed(
                source, AttemptOutcome.UNAVAILABLE, f"{type(exc).__name__}: {exc}"
            )

        await asyncio.to_thread(
            self._cache.put,
            source.name,
            entity_key,
            fetched.candidates,
            fetched_at=fetched.fetched_at,
            ttl=source.registration.cache_ttl,
        )
        log.debug(
            "%s: fetched %d candidates for %s", source.name, len(fetched.candidates), entity_key
        )
        return Consultation(
            attempt=SourceAttempt(
                source_id=source.name,
                pool=source.pool,
                outcome=AttemptOutcome.FETCHED,
                candidates=len(fetched.candidates),
                parse_errors=tuple(
                    error.field for error in fetched.parse_errors if error.field is not None
                ),
            ),
            candidates=fetched.candidates,
            fetched_at=fetched.fetched_at,
        )

    @staticmethod
    def _failed(source: RegisteredSource, outcome: AttemptOutcome, detail: str) -> Consultation:
        return Consultation(
            attempt=SourceAttempt(
                source_id=source.name,
                pool=source.pool,
                outcome=outcome,
                detail=detail,
            )
        )
