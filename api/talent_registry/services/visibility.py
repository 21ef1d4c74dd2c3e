from __future__ import annotations

from collections.abc import Iterable

from talent_registry.core.auth import Principal, Viewer
from talent_registry.services.access import AccessFacts
from talent_registry.services.redaction import RedactionDecision, evaluate
from talent_registry.services.repository import ParticipantRecord, TargetProfile


async def resolve_decision(
    viewer: Viewer,
    target: TargetProfile | ParticipantRecord,
    facts: AccessFacts,
) -> RedactionDecision:
    network_access = await facts.network_access(viewer)
    relationship = await facts.relationship(viewer, target.user_id)
    return evaluate(viewer, target, network_access, relationship)


async def resolve_for_principal(
    principal: Principal,
    target: TargetProfile | ParticipantRecord,
    facts: AccessFacts,
) -> tuple[Viewer, RedactionDecision]:
    viewer = Viewer.for_target(principal, target.user_id)
    return viewer, await resolve_decision(viewer, target, facts)


async def prime_for_principal(
    principal: Principal,
    targets: Iterable[TargetProfile | ParticipantRecord],
    facts: AccessFacts,
) -> None:
    """Resolve relationship facts for every target of a list surface in one lookup."""
    viewer = Viewer(id=principal.subject, role=principal.role, is_owner_of_target=False)
    await facts.prime_relationships(viewer, [target.user_id for target in targets])
