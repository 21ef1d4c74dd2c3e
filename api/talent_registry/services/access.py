from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from fastapi import Depends
from opentelemetry import trace

from talent_registry.core.auth import CLIENT_ROLES, Viewer
from talent_registry.services.repository import get_repository

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class AccessStore(Protocol):
    async def has_network_access(self, employer_id: str) -> bool: ...

    async def applied_candidate_ids(self, employer_id: str, candidate_ids: list[str]) -> set[str]: ...


@dataclass(slots=True, frozen=True)
class NetworkAccessFact:
    employer_id: str | None
    has_network_access: bool


@dataclass(slots=True, frozen=True)
class RelationshipFact:
    employer_id: str | None
    candidate_id: str
    has_applied: bool


NO_NETWORK_ACCESS = NetworkAccessFact(employer_id=None, has_network_access=False)


class AccessFacts:
    """Network-access gate and relationship lookup for a single request.

    Results are memoised on the instance, which lives only as long as the
    request that created it. Store failures resolve to ``False``.
    """

    def __init__(self, store: AccessStore) -> None:
        self._store = store
        self._network: dict[str, bool] = {}
        self._applied: dict[tuple[str, str], bool] = {}

    async def network_access(self, viewer: Viewer) -> NetworkAccessFact:
        if viewer.id is None or viewer.role not in CLIENT_ROLES:
            return NO_NETWORK_ACCESS

        employer_id = viewer.id
        if employer_id not in self._network:
            with tracer.start_as_current_span("access.network") as span:
                span.set_attribute("employer.id", employer_id)
                try:
                    self._network[employer_id] = bool(await self._store.has_network_access(employer_id))
                except Exception:
                    logger.warning("network access lookup failed employer_id=%s", employer_id, exc_info=True)
                    self._network[employer_id] = False
        return NetworkAccessFact(employer_id=employer_id, has_network_access=self._network[employer_id])

    async def relationship(self, viewer: Viewer, candidate_id: str) -> RelationshipFact:
        if viewer.id is None or viewer.role not in CLIENT_ROLES:
            return RelationshipFact(employer_id=None, candidate_id=candidate_id, has_applied=False)

        key = (viewer.id, candidate_id)
        if key not in self._applied:
            await self.prime_relationships(viewer, [candidate_id])
        return RelationshipFact(employer_id=viewer.id, candidate_id=candidate_id, has_applied=self._applied[key])

    async def prime_relationships(self, viewer: Viewer, candidate_ids: list[str]) -> None:
        """Resolve relationship facts for many candidates with one lookup."""
        if viewer.id is None or viewer.role not in CLIENT_ROLES:
            return

        employer_id = viewer.id
        missing = sorted({cid for cid in candidate_ids if (employer_id, cid) not in self._applied})
        if not missing:
            return

        with tracer.start_as_current_span("access.relationship") as span:
            span.set_attribute("employer.id", employer_id)
            span.set_attribute("candidate.count", len(missing))
            try:
                applied = await self._store.applied_candidate_ids(employer_id, missing)
            except Exception:
                logger.warning(
                    "relationship lookup failed employer_id=%s candidates=%s",
                    employer_id,
                    len(missing),
                    exc_info=True,
                )
                applied = set()

        for candidate_id in missing:
            self._applied[(employer_id, candidate_id)] = candidate_id in applied


def get_access_facts(repository=Depends(get_repository)) -> AccessFacts:
    return AccessFacts(repository)
