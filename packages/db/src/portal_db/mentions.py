# This project was developed with assistance from AI tools.
"""@mention tokenizer and directory resolver for comment bodies.

Handles are matched against the mentionable-users directory in three tiers:

1. exact email local part (case-insensitive)
2. email local part starting with the handle
3. any word of the display name starting with the handle

Within a tier the first entry in directory order wins. Handles that resolve
to nobody are left as literal text and produce no recipient.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

MENTION_PATTERN = re.compile(r"@([\w.-]+)")


class DirectoryEntry(Protocol):
    email: str
    name: str


@dataclass(frozen=True)
class Mention:
    handle: str
    email: str
    name: str


def extract_handles(body: str) -> list[str]:
    """Handles in order of appearance, without the leading ``@``.

    Trailing dots and dashes are sentence punctuation, not part of the handle.
    """
    handles = []
    for match in MENTION_PATTERN.finditer(body or ""):
        handle = match.group(1).rstrip(".-")
        if handle:
            handles.append(handle)
    return handles


def _local_part(email: str) -> str:
    return (email or "").split("@", 1)[0].casefold()


def _tiers(handle: str):
    key = handle.casefold()
    yield lambda entry: _local_part(entry.email) == key
    yield lambda entry: _local_part(entry.email).startswith(key)
    yield lambda entry: any(
        word.casefold().startswith(key) for word in (entry.name or "").split()
    )


def resolve_handle(handle: str, directory: Sequence[DirectoryEntry]) -> DirectoryEntry | None:
    """Best directory match for a single handle, or None."""
    for matches in _tiers(handle):
        for entry in directory:
            if matches(entry):
                return entry
    return None


def resolve_mentions(body: str, directory: Sequence[DirectoryEntry]) -> list[Mention]:
    """Resolve every handle in ``body``; one Mention per distinct email."""
    seen: set[str] = set()
    mentions = []
    for handle in extract_handles(body):
        entry = resolve_handle(handle, directory)
        if entry is None:
            continue
        email = entry.email.strip().lower()
        if email in seen:
            continue
        seen.add(email)
        mentions.append(Mention(handle=handle, email=email, name=entry.name or entry.email))
    return mentions


def normalize_emails(emails: Iterable[str | None]) -> list[str]:
    """Lowercase, strip and de-duplicate, preserving order and dropping blanks."""
    out: list[str] = []
    for email in emails:
        clean = (email or "").strip().lower()
        if clean and clean not in out:
            out.append(clean)
    return out
