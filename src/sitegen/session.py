"""Generation session: state value, transitions, and the round driver.

The state machine itself is pure: ``begin_round``, ``apply_event`` and
``fail`` take a ``Session`` and return a new one. ``SessionController``
owns the one mutable slot, runs rounds against the backend stream, and
drops transitions from rounds that were superseded by ``reset`` or a
newer ``generate``.
"""

from __future__ import annotations

import functools
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable

import httpx

from sitegen.client import ApiError, stream_generation
from sitegen.config import ClientConfig
from sitegen.conversation import Role, Turn, append_debug, append_turn, turns_from_wire
from sitegen.request import build_request
from sitegen.types import GenerateRequest, ProgressEventDict

DEFAULT_ERROR = "Generation failed"
UNKNOWN_ERROR = "Unknown error occurred"
FALLBACK_QUESTION = "Could you tell me more about the website you want?"
AWAITING_INPUT_PROGRESS = 5


class Status(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    AWAITING_INPUT = "awaiting_input"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Page:
    html: str
    css: str


@dataclass(frozen=True)
class GenerationResult:
    pages: dict[str, Page]
    folder_path: str
    business_plan: str | None = None
    image_urls: dict[str, str] = field(default_factory=dict)
    saved_files: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_wire(cls, data: dict) -> GenerationResult:
        """Build from a completed event's ``data``.

        Missing or wrongly-shaped pieces get empty defaults.
        """
        pages = {}
        for name, page in _mapping(data.get("pages")).items():
            page = _mapping(page)
            pages[str(name)] = Page(html=_text(page.get("html")) or "", css=_text(page.get("css")) or "")
        return cls(
            pages=pages,
            folder_path=_text(data.get("folder_path")) or "",
            business_plan=_text(data.get("business_plan")),
            image_urls=_mapping(data.get("image_urls")),
            saved_files=_mapping(data.get("saved_files")),
        )


@dataclass(frozen=True)
class Session:
    status: Status = Status.IDLE
    thread_id: str | None = None
    progress: int = 0
    current_step: str = ""
    message: str = ""
    history: tuple[Turn, ...] = ()
    pending_questions: tuple[str, ...] = ()
    business_plan: str | None = None
    result: GenerationResult | None = None
    last_error: str | None = None

    @property
    def is_generating(self) -> bool:
        return self.status == Status.GENERATING

    @property
    def needs_input(self) -> bool:
        return self.status == Status.AWAITING_INPUT


def initial_session() -> Session:
    return Session()


# ── Transitions ─────────────────────────────────────────────────


def _progress_value(value: object) -> int | None:
    """Server progress as a 0-100 int; None when absent or not a number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return max(0, min(100, int(value)))


def _text(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def _mapping(value: object) -> dict:
    return dict(value) if isinstance(value, dict) else {}


def _questions(value: object) -> tuple[str, ...]:
    """Pending questions from an event. A bare string is one question."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return (FALLBACK_QUESTION,)
    return tuple(q for q in value if isinstance(q, str) and q) or (FALLBACK_QUESTION,)


def begin_round(session: Session, description: str, answers: str | None = None) -> Session:
    """Enter GENERATING and record the outbound human turn.

    With a thread and answers, the answers are the new turn. Without a
    thread, the description opens the conversation. With a thread and no
    answers nothing is appended: the server already has that turn.
    """
    history = session.history
    if answers and session.thread_id:
        history = append_turn(history, Role.HUMAN, answers)
    elif not session.thread_id:
        history = append_turn(history, Role.HUMAN, description)

    return replace(
        session,
        status=Status.GENERATING,
        progress=0,
        last_error=None,
        pending_questions=(),
        result=None,
        history=history,
    )


def apply_event(session: Session, event: ProgressEventDict) -> tuple[Session, bool]:
    """Apply one progress event. Returns (new_session, round_finished).

    Input requests, completion and failure are checked before generic
    progress because a terminal event may also carry a percentage.
    """
    status = event.get("status")
    thread_id = _text(event.get("thread_id")) or session.thread_id
    message = _text(event.get("message")) or session.message

    if status == "awaiting_input" and not event.get("ready"):
        questions = _questions(event.get("questions"))
        messages = event.get("messages")
        history = turns_from_wire(messages) if isinstance(messages, list) else session.history
        return replace(
            session,
            status=Status.AWAITING_INPUT,
            pending_questions=questions,
            business_plan=_text(event.get("business_plan")) or session.business_plan,
            thread_id=thread_id,
            history=history,
            message=message,
            progress=_progress_value(event.get("progress")) or AWAITING_INPUT_PROGRESS,
        ), True

    data = event.get("data")
    if status == "completed" and isinstance(data, dict) and data:
        return replace(
            session,
            status=Status.COMPLETED,
            progress=100,
            current_step="complete",
            message=message,
            result=GenerationResult.from_wire(data),
            thread_id=thread_id,
            pending_questions=(),
        ), True

    progress = _progress_value(event.get("progress"))
    session = replace(
        session,
        progress=session.progress if progress is None else progress,
        current_step=_text(event.get("step")) or session.current_step,
        message=message,
    )
    if status == "failed":
        return fail(session, _text(event.get("error")) or DEFAULT_ERROR), True
    return session, False


def fail(session: Session, error: str, message: str | None = None) -> Session:
    return replace(
        session,
        status=Status.FAILED,
        last_error=error or UNKNOWN_ERROR,
        pending_questions=(),
        result=None,
        message=session.message if message is None else message,
    )


# ── Round driver ────────────────────────────────────────────────


StreamFn = Callable[[GenerateRequest], Iterable[dict]]

_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.StreamError, httpx.InvalidURL, ApiError)


class SessionController:
    """Holds the current Session and runs generation rounds.

    ``stream`` is called with the request body and must return the
    decoded event iterator (normally ``client.stream_generation`` bound
    to a base URL). ``on_change`` sees every committed Session;
    ``on_event`` sees every event of a live round before it is applied.
    """

    def __init__(
        self,
        stream: StreamFn,
        on_change: Callable[[Session], None] | None = None,
        on_event: Callable[[dict], None] | None = None,
    ) -> None:
        self._stream = stream
        self.on_change = on_change
        self.on_event = on_event
        self._session = initial_session()
        self._lock = threading.Lock()
        # Held while on_change runs so a stale round cannot report after reset
        self._notify_lock = threading.RLock()
        # Bumped by every generate and reset; a round may only commit while
        # its own token is current.
        self._round = 0

    @classmethod
    def from_config(cls, config: ClientConfig, on_change=None) -> SessionController:
        """Controller bound to the configured backend, with the debug log when set."""
        stream = functools.partial(_config_stream, config)
        on_event = functools.partial(append_debug, config.debug_log) if config.debug_log else None
        return cls(stream, on_change=on_change, on_event=on_event)

    @property
    def session(self) -> Session:
        with self._lock:
            return self._session

    def generate(self, description: str, answers: str | None = None) -> Session:
        """Run one round to its end and return the resulting Session.

        Ends in AWAITING_INPUT, COMPLETED or FAILED, or stays GENERATING
        when the server closes the stream without a terminal event.
        """
        with self._lock:
            self._round += 1
            token = self._round
            started = begin_round(self._session, description, answers)
            self._session = started
        self._notify(token, started)

        request = build_request(started, description, answers)
        events = None
        try:
            events = iter(self._stream(request))
            for event in events:
                if not self._is_current(token):
                    break
                if self.on_event:
                    self.on_event(event)
                done = self._commit(token, lambda s, e=event: apply_event(s, e))
                if done is None or done:
                    break
        except _TRANSPORT_ERRORS as e:
            self._commit(token, lambda s: (fail(s, str(e) or UNKNOWN_ERROR), True))
        finally:
            close = getattr(events, "close", None)
            if close is not None:
                close()
        return self.session

    def reset(self) -> Session:
        """Back to an empty IDLE session. Any in-flight round becomes stale."""
        with self._lock:
            self._round += 1
            token = self._round
            self._session = initial_session()
            session = self._session
        self._notify(token, session)
        return session

    def _is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._round

    def _commit(
        self,
        token: int,
        transition: Callable[[Session], tuple[Session, bool]],
    ) -> bool | None:
        """Apply a transition if the round is still current.

        Returns the round-finished flag, or None when the round is stale
        and the transition was discarded.
        """
        with self._lock:
            if token != self._round:
                return None
            session, done = transition(self._session)
            self._session = session
        self._notify(token, session)
        return done

    def _notify(self, token: int, session: Session) -> None:
        """Report a committed Session unless its round was superseded first."""
        if not self.on_change:
            return
        with self._notify_lock:
            if self._is_current(token):
                self.on_change(session)


def _config_stream(config: ClientConfig, request: GenerateRequest) -> Iterable[dict]:
    return stream_generation(config.base_url, request, timeout=config.timeout)
