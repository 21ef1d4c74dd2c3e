from __future__ import annotations

from dataclasses import dataclass

from talent_registry.core.auth import CLIENT_ROLES, Viewer, ViewerRole
from talent_registry.services.access import NetworkAccessFact, RelationshipFact
from talent_registry.services.display_names import InitialsMode, select_initials_mode
from talent_registry.services.repository import ParticipantRecord, TargetProfile


@dataclass(slots=True, frozen=True)
class RedactionDecision:
    redact_contact: bool
    redact_media: bool
    anonymize_name: bool
    initials_mode: InitialsMode

    @property
    def redacts_anything(self) -> bool:
        return self.redact_contact or self.redact_media or self.anonymize_name


def evaluate(
    viewer: Viewer,
    target: TargetProfile | ParticipantRecord,
    network_access: NetworkAccessFact,
    relationship: RelationshipFact,
) -> RedactionDecision:
    """Decide which field groups of ``target`` the viewer may see.

    Rules are checked in order and the first match wins:

    1. the owner sees everything;
    2. admins see everything;
    3. other professionals see nothing identifying;
    4. employers and agencies with network access see everything once the
       candidate has applied to one of their jobs; without an application
       they see the name unless the candidate chose anonymity, but never
       contact details or media; without network access they see nothing
       identifying;
    5. anyone else (anonymous or unknown roles) sees nothing identifying.
    """
    mode = select_initials_mode(target.first_name, target.last_name, target.custom_initials)

    if viewer.is_owner_of_target or viewer.role == ViewerRole.ADMIN:
        return _visible(mode)

    if viewer.role in CLIENT_ROLES:
        if network_access.has_network_access and relationship.has_applied:
            return _visible(mode)
        if network_access.has_network_access:
            return RedactionDecision(
                redact_contact=True,
                redact_media=True,
                anonymize_name=bool(target.is_anonymous),
                initials_mode=mode,
            )

    return _redacted(mode)


def _visible(mode: InitialsMode) -> RedactionDecision:
    return RedactionDecision(redact_contact=False, redact_media=False, anonymize_name=False, initials_mode=mode)


def _redacted(mode: InitialsMode) -> RedactionDecision:
    return RedactionDecision(redact_contact=True, redact_media=True, anonymize_name=True, initials_mode=mode)
