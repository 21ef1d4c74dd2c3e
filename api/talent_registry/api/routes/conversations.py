from fastapi import APIRouter, Depends, HTTPException, status

from talent_registry.core.auth import Principal
from talent_registry.core.security import get_human_principal
from talent_registry.schemas.conversations import ConversationOut, MessageOut
from talent_registry.services.access import AccessFacts, get_access_facts
from talent_registry.services.materializer import materialize_participant
from talent_registry.services.repository import (
    ConversationRecord,
    RepositoryNotFoundError,
    RepositoryUnavailableError,
    get_repository,
)
from talent_registry.services.visibility import prime_for_principal, resolve_for_principal

router = APIRouter()


@router.get("", response_model=list[ConversationOut])
async def list_conversations(
    principal=Depends(get_human_principal),
    repository=Depends(get_repository),
    facts: AccessFacts = Depends(get_access_facts),
) -> list[ConversationOut]:
    try:
        conversations = await repository.list_conversations(principal.subject)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    await prime_for_principal(principal, [conversation.professional for conversation in conversations], facts)
    return [await _project_conversation(conversation, principal, facts) for conversation in conversations]


@router.get("/{conversation_id}", response_model=ConversationOut)
async def get_conversation(
    conversation_id: str,
    principal=Depends(get_human_principal),
    repository=Depends(get_repository),
    facts: AccessFacts = Depends(get_access_facts),
) -> ConversationOut:
    try:
        conversation = await repository.get_conversation(conversation_id)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except RepositoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    if principal.subject not in {conversation.client.user_id, conversation.professional.user_id}:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="access denied")

    try:
        await repository.mark_conversation_read(conversation_id=conversation.id, reader_id=principal.subject)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return await _project_conversation(conversation, principal, facts)


async def _project_conversation(
    conversation: ConversationRecord,
    principal: Principal,
    facts: AccessFacts,
) -> ConversationOut:
    # Only the professional side carries a candidate profile; clients are shown as-is.
    _, decision = await resolve_for_principal(principal, conversation.professional, facts)
    professional = materialize_participant(conversation.professional, decision)
    client = materialize_participant(conversation.client, None)

    messages = [
        MessageOut(
            id=message.id,
            content=message.content,
            read=message.read,
            created_at=message.created_at,
            sender=professional if message.sender.user_id == conversation.professional.user_id
            else materialize_participant(message.sender, None),
        )
        for message in conversation.messages
    ]
    return ConversationOut(
        id=conversation.id,
        status=conversation.status,
        last_message_at=conversation.last_message_at,
        created_at=conversation.created_at,
        unread_count=conversation.unread_count,
        client=client,
        professional=professional,
        messages=messages,
    )
