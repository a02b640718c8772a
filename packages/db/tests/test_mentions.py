# This project was developed with assistance from AI tools.
"""Tests for @mention extraction and directory resolution."""

from dataclasses import dataclass

from portal_db.mentions import (
    extract_handles,
    normalize_emails,
    resolve_handle,
    resolve_mentions,
)


@dataclass(frozen=True)
class DirectoryUser:
    email: str
    name: str


DIRECTORY = [
    DirectoryUser(email="casey@portal.test", name="Casey Morgan"),
    DirectoryUser(email="caseyann@portal.test", name="Casey Ann Brooks"),
    DirectoryUser(email="tara.lead@portal.test", name="Tara Singh"),
    DirectoryUser(email="ivan@portal.test", name="Ivan Petrov"),
]


def test_extract_handles_in_order():
    assert extract_handles("ping @casey and @tara.lead please") == ["casey", "tara.lead"]


def test_extract_handles_strips_sentence_punctuation():
    assert extract_handles("Thanks @ivan.") == ["ivan"]
    assert extract_handles("cc @casey- see above") == ["casey"]


def test_extract_handles_empty_body():
    assert extract_handles("") == []
    assert extract_handles(None) == []


def test_exact_local_part_beats_prefix():
    """@casey matches casey@ exactly, not caseyann@ by prefix."""
    assert resolve_handle("casey", DIRECTORY).email == "casey@portal.test"


def test_local_part_prefix_match():
    assert resolve_handle("tara", DIRECTORY).email == "tara.lead@portal.test"


def test_name_word_prefix_match():
    assert resolve_handle("petr", DIRECTORY).email == "ivan@portal.test"
    assert resolve_handle("Brooks", DIRECTORY).email == "caseyann@portal.test"


def test_unknown_handle_resolves_to_nobody():
    assert resolve_handle("zed", DIRECTORY) is None


def test_resolve_mentions_dedupes_by_email():
    mentions = resolve_mentions("@casey @CASEY @ivan @nobody", DIRECTORY)
    assert [m.email for m in mentions] == ["casey@portal.test", "ivan@portal.test"]
    assert mentions[0].name == "Casey Morgan"
    assert mentions[0].handle == "casey"


def test_normalize_emails():
    assert normalize_emails([" A@X.com", "a@x.com", None, "", "b@x.com"]) == [
        "a@x.com",
        "b@x.com",
    ]
