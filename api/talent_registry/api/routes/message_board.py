from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from talent_registry.core.auth import Principal
from talent_registry.core.security import get_human_principal
from talent_registry.schemas.message_board import ReplyOut, ThreadDetailOut, ThreadOut
from talent_registry.services.access import AccessFacts, get_access_facts
from talent_registry.services.materializer import display_name_for
from talent_registry.services.repository import (
    RepositoryNotFoundError,
    RepositoryUnavailableError,
    ThreadRecord,
    get_repository,
)
from talent_registry.services.visibility import prime_for_principal, resolve_for_principal

router = APIRouter()


@router.get("/threads", response_model=list[ThreadOut])
async def list_threads(
    principal=Depends(get_human_principal),
    repository=Depends(get_repository),
    facts: AccessFacts = Depends(get_access_facts),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> list[ThreadOut]:
    try:
        threads = await repository.list_message_board_threads(viewer_id=principal.subject, limit=limit, offset=offset)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    await prime_for_principal(principal, [thread.author for thread in threads], facts)
    return [ThreadOut(**await _thread_fields(thread, principal, facts)) for thread in threads]


@router.get("/threads/{thread_id}", response_model=ThreadDetailOut)
async def get_thread(
    thread_id: str,
    principal=Depends(get_human_principal),
    repository=Depends(get_repository),
    facts: AccessFacts = Depends(get_access_facts),
) -> ThreadDetailOut:
    try:
        thread = await repository.get_message_board_thread(thread_id, viewer_id=principal.subject)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except RepositoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    await prime_for_principal(principal, [thread.author, *(reply.author for reply in thread.replies)], facts)

    replies: list[ReplyOut] = []
    for reply in thread.replies:
        viewer, decision = await resolve_for_principal(principal, reply.author, facts)
        replies.append(
            ReplyOut(
                id=reply.id,
                content=reply.content,
                author_display_name=display_name_for(reply.author, decision),
                created_at=reply.created_at,
                updated_at=reply.updated_at,
                is_author=viewer.is_owner_of_target,
                like_count=reply.like_count,
                is_liked=reply.is_liked,
            )
        )
    return ThreadDetailOut(
        **await _thread_fields(thread, principal, facts),
        content=thread.content,
        replies=replies,
    )


async def _thread_fields(thread: ThreadRecord, principal: Principal, facts: AccessFacts) -> dict[str, Any]:
    viewer, decision = await resolve_for_principal(principal, thread.author, facts)
    return {
        "id": thread.id,
        "title": thread.title,
        "author_display_name": display_name_for(thread.author, decision),
        "created_at": thread.created_at,
        "last_reply_at": thread.last_reply_at,
        "is_pinned": thread.is_pinned,
        "is_locked": thread.is_locked,
        "reply_count": thread.reply_count,
        "participant_count": thread.participant_count,
        "like_count": thread.like_count,
        "is_liked": thread.is_liked,
        "is_author": viewer.is_owner_of_target,
    }
