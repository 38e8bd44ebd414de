"""Outbound request for the next round of a generation thread."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sitegen.conversation import turns_to_wire
from sitegen.types import GenerateRequest

if TYPE_CHECKING:
    from sitegen.session import Session


def build_request(session: Session, description: str, answers: str | None = None) -> GenerateRequest:
    """Build the body for POST /api/generate-website.

    Call with the session *after* begin_round so its history already holds
    the outbound turn. Optional keys are omitted, not sent as null.
    """
    request: GenerateRequest = {"description": answers or description}
    if session.thread_id:
        request["thread_id"] = session.thread_id
    if session.history:
        request["messages"] = turns_to_wire(session.history)
    return request
