from __future__ import annotations

from talent_registry.schemas.candidates import CandidateCardOut, CandidateCardUserOut
from talent_registry.schemas.conversations import ParticipantOut
from talent_registry.schemas.profiles import RedactedProfileOut, RedactedUserOut
from talent_registry.services.display_names import clean_custom_initials, full_name, resolve_display
from talent_registry.services.redaction import RedactionDecision
from talent_registry.services.repository import ParticipantRecord, TargetProfile


def materialize(target: TargetProfile, decision: RedactionDecision) -> RedactedProfileOut:
    first_name, last_name, display_name = _project_name(target, decision)
    return RedactedProfileOut(
        id=target.profile_id,
        bio=target.bio,
        title=target.title,
        preferred_role=target.title,
        skills=list(target.skills),
        experience=[dict(item) for item in target.experience],
        certifications=[dict(item) for item in target.certifications],
        location=target.location,
        availability=target.availability,
        resume_url=None if decision.redact_media else target.resume_url,
        profile_views=target.profile_views,
        work_locations=list(target.work_locations),
        open_to_relocation=target.open_to_relocation,
        years_of_experience=target.years_of_experience,
        what_im_seeking=target.what_im_seeking,
        why_i_enjoy_this_work=target.why_i_enjoy_this_work,
        what_sets_me_apart=target.what_sets_me_apart,
        ideal_environment=target.ideal_environment,
        seeking_opportunities=list(target.seeking_opportunities),
        pay_range_min=target.pay_range_min,
        pay_range_max=target.pay_range_max,
        pay_type=target.pay_type,
        additional_photos=[] if decision.redact_media else list(target.additional_photos),
        media_urls=list(target.media_urls),
        open_to_work=target.open_to_work,
        employment_type=target.employment_type,
        user=RedactedUserOut(
            id=target.user_id,
            first_name=first_name,
            last_name=last_name,
            display_name=display_name,
            image=None if decision.redact_media else target.image,
            role=target.role,
            created_at=target.created_at,
            email="" if decision.redact_contact else (target.email or ""),
            phone_number=None if decision.redact_contact else target.phone_number,
            is_anonymous=decision.anonymize_name,
            preferred_anonymity=target.is_anonymous,
            custom_initials=clean_custom_initials(target.custom_initials),
            dont_contact_me=target.dont_contact_me,
        ),
    )


def materialize_card(target: TargetProfile, decision: RedactionDecision) -> CandidateCardOut:
    first_name, last_name, display_name = _project_name(target, decision)
    return CandidateCardOut(
        id=target.profile_id,
        title=target.title,
        location=target.location,
        skills=list(target.skills),
        years_of_experience=target.years_of_experience,
        work_locations=list(target.work_locations),
        open_to_relocation=target.open_to_relocation,
        open_to_work=target.open_to_work,
        pay_range_min=target.pay_range_min,
        pay_range_max=target.pay_range_max,
        pay_type=target.pay_type,
        user=CandidateCardUserOut(
            id=target.user_id,
            first_name=first_name,
            last_name=last_name,
            display_name=display_name,
            image=None if decision.redact_media else target.image,
            is_anonymous=decision.anonymize_name,
            custom_initials=clean_custom_initials(target.custom_initials),
        ),
    )


def materialize_participant(participant: ParticipantRecord, decision: RedactionDecision | None) -> ParticipantOut:
    """Project a conversation participant; ``None`` means the participant is never redacted."""
    if decision is None:
        first_name = participant.first_name or ""
        last_name = participant.last_name or ""
        display_name = full_name(participant.first_name, participant.last_name)
        image = participant.image
        is_anonymous = False
    else:
        first_name, last_name, display_name = _project_name(participant, decision)
        image = None if decision.redact_media else participant.image
        is_anonymous = decision.anonymize_name

    return ParticipantOut(
        id=participant.user_id,
        first_name=first_name,
        last_name=last_name,
        display_name=display_name,
        image=image,
        role=participant.role,
        is_anonymous=is_anonymous,
        custom_initials=clean_custom_initials(participant.custom_initials),
        company_name=participant.company_name,
        title=participant.title,
    )


def display_name_for(target: TargetProfile | ParticipantRecord, decision: RedactionDecision) -> str:
    return _project_name(target, decision)[2]


def _project_name(target: TargetProfile | ParticipantRecord, decision: RedactionDecision) -> tuple[str, str, str]:
    if decision.anonymize_name:
        display = resolve_display(
            target.first_name,
            target.last_name,
            target.custom_initials,
            decision.initials_mode,
        )
        return display, "", display
    return target.first_name or "", target.last_name or "", full_name(target.first_name, target.last_name)
