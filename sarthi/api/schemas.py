"""Pydantic response/request models for the API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class BufferUpdateRequest(BaseModel):
    """Full buffer snapshot from the editor."""

    text: str
    language: Optional[str] = None
    reindex: bool = False


class BufferUpdateResponse(BaseModel):
    status: str
    indexed_identifiers: int


class CompletionRequest(BaseModel):
    """Text on the caret line, up to the caret."""

    text_before_caret: str = Field(..., max_length=10_000)
    language: Optional[str] = None


class SuggestionResponse(BaseModel):
    """A single completion candidate."""

    text: str
    description: str
    insert_text: str
    source_kind: str
    label: str
    priority: int


class CompletionResponse(BaseModel):
    """Ranked suggestions for one edit."""

    prefix: Optional[str] = None
    suggestions: list[SuggestionResponse]
    remote_connected: bool


class CommitRequest(BaseModel):
    """Insert text of the suggestion the user picked."""

    insert_text: str


class CommitResponse(BaseModel):
    insert_text: str
    replace_length: int


class RemoteStatusResponse(BaseModel):
    phase: str
    connected: bool
    reconnect_attempts: int
    cached_suggestions: int


class StatusResponse(BaseModel):
    """Engine statistics."""

    running: bool
    language: str
    indexed_identifiers: int
    remote: RemoteStatusResponse
