"""Completion API routes.

Handlers are ``async def`` so they run on the event loop that owns the
engine's timers and websocket.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from sarthi.api.schemas import (
    BufferUpdateRequest,
    BufferUpdateResponse,
    CommitRequest,
    CommitResponse,
    CompletionRequest,
    CompletionResponse,
    SuggestionResponse,
)

router = APIRouter(tags=["completion"])


@router.post("/buffer", response_model=BufferUpdateResponse)
async def update_buffer(request: Request, body: BufferUpdateRequest) -> BufferUpdateResponse:
    """Store the editor buffer for the next re-tokenization."""
    engine = request.app.state.engine
    engine.set_buffer(body.text, body.language)
    if body.reindex:
        engine.reindex()
    return BufferUpdateResponse(status="ok", indexed_identifiers=engine.index.size)


@router.post("/complete", response_model=CompletionResponse)
async def complete(request: Request, body: CompletionRequest) -> CompletionResponse:
    """Return ranked suggestions for the word ending at the caret."""
    engine = request.app.state.engine
    suggestions = engine.complete(body.text_before_caret, body.language)

    return CompletionResponse(
        prefix=engine.extract_prefix(body.text_before_caret),
        suggestions=[
            SuggestionResponse(
                text=s.text,
                description=s.description,
                insert_text=s.insert_text,
                source_kind=s.source_kind.value,
                label=s.label,
                priority=s.priority,
            )
            for s in suggestions
        ],
        remote_connected=engine.connected,
    )


@router.post("/commit", response_model=CommitResponse)
async def commit(request: Request, body: CommitRequest) -> CommitResponse:
    """Translate a chosen suggestion into an editor replacement."""
    engine = request.app.state.engine
    result = engine.commit(body.insert_text)
    return CommitResponse(insert_text=result.insert_text, replace_length=result.replace_length)
