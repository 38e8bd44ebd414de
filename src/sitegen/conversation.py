from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from sitegen.types import MessageDict

ROLE_COLORS = {
    "human": "\033[32m",   # green
    "ai": "\033[36m",      # cyan
    "system": "\033[35m",  # magenta
}
RESET = "\033[0m"
BOLD = "\033[1m"

# Display labels for the backend's workflow steps; unknown steps show nothing.
STEP_MESSAGES = {
    "business_gathering": "Understanding your requirements...",
    "planning": "Planning website structure...",
    "image_description": "Designing custom image prompts...",
    "image_generation": "Generating images...",
    "html_generation": "Creating HTML & CSS...",
    "file_storage": "Saving your website files...",
}


class Role(str, Enum):
    HUMAN = "human"
    AI = "ai"


_AI_ALIASES = {"ai", "assistant"}


@dataclass(frozen=True)
class Turn:
    role: Role
    content: str


def normalize_role(role: str | None) -> Role:
    """Map server role labels onto the two-role vocabulary ('assistant' → AI)."""
    if role and role.lower() in _AI_ALIASES:
        return Role.AI
    return Role.HUMAN


def append_turn(history: tuple[Turn, ...], role: Role, content: str) -> tuple[Turn, ...]:
    return history + (Turn(role, content),)


def turns_from_wire(messages: list[MessageDict]) -> tuple[Turn, ...]:
    """Server-supplied history, order preserved, roles normalized.

    Entries that are not objects, or whose role is not a string, are skipped.
    """
    turns = []
    for m in messages:
        if not isinstance(m, dict) or not isinstance(m.get("role"), str):
            continue
        content = m.get("content")
        turns.append(Turn(normalize_role(m["role"]), content if isinstance(content, str) else ""))
    return tuple(turns)


def turns_to_wire(history: tuple[Turn, ...]) -> list[MessageDict]:
    return [{"role": t.role.value, "content": t.content} for t in history]


def format_questions(questions: tuple[str, ...] | list[str]) -> str:
    """Numbered question list shown when the generator asks for details."""
    lines = [f"{i}. {q}" for i, q in enumerate(questions, start=1)]
    return "I need a few more details to create the perfect website for you:\n\n" + "\n".join(lines)


def render_turn(role: str, content: str) -> str:
    color = ROLE_COLORS.get(role, "\033[37m")  # default white
    return f"{BOLD}{color}[{role}]{RESET} {content}"


def append_debug(path: Path, entry: dict) -> None:
    with open(path, "a") as f:
        f.write(json.dumps(entry) + "\n")
        f.flush()
