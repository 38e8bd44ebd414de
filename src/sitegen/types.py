from __future__ import annotations

from typing import NotRequired, TypedDict


class MessageDict(TypedDict):
    role: str  # "human" | "ai" on the way out; the server may also send "user"/"assistant"
    content: str


class PageDict(TypedDict):
    html: str
    css: str


class ResultDict(TypedDict):
    pages: dict[str, PageDict]
    folder_path: str
    business_plan: NotRequired[str]
    image_urls: NotRequired[dict[str, str]]
    saved_files: NotRequired[dict[str, str]]


class GenerateRequest(TypedDict):
    description: str
    thread_id: NotRequired[str]
    messages: NotRequired[list[MessageDict]]


class ProgressEventDict(TypedDict):
    step: NotRequired[str]
    status: NotRequired[str]
    progress: NotRequired[int | float]
    message: NotRequired[str]
    error: NotRequired[str]
    ready: NotRequired[bool]
    questions: NotRequired[list[str]]
    business_plan: NotRequired[str]
    thread_id: NotRequired[str]
    messages: NotRequired[list[MessageDict]]
    data: NotRequired[ResultDict]


class WebsiteDict(TypedDict):
    folder_path: NotRequired[str]
    name: NotRequired[str]
    created_at: NotRequired[str]
    pages: NotRequired[list[str]]
