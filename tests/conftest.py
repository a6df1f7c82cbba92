"""
Shared pytest fixtures for authormatch tests.

Provides:
- PublicationAuthor / OrcidAuthor records (compared by identity)
- The four-step ORCID pipeline used by the scenario tests
- Sample dict records for config-driven runs
"""

from dataclasses import dataclass
from typing import List

import pytest

from authormatch.matching import (
    AuthorMatch,
    MatcherStep,
    abbreviations_matcher,
    find_matches,
    string_ignore_case_matcher,
)


@dataclass(eq=False)
class PublicationAuthor:
    full_name: str

    @classmethod
    def of(cls, *names: str) -> List["PublicationAuthor"]:
        return [cls(n) for n in names]


@dataclass(eq=False)
class OrcidAuthor:
    given_name: str
    family_name: str
    credit_name: str
    orcid: str

    @property
    def full_name(self) -> str:
        return f"{self.given_name} {self.family_name}"

    @property
    def inverted_full_name(self) -> str:
        return f"{self.family_name} {self.given_name}"


def orcid_steps() -> List[MatcherStep]:
    """Full name, inverted full name, ordered tokens, then credit name."""
    return [
        string_ignore_case_matcher(lambda a: a.full_name, lambda o: o.full_name)
        .name("fullName")
        .build(),
        string_ignore_case_matcher(lambda a: a.full_name, lambda o: o.inverted_full_name)
        .name("invertedFullName")
        .build(),
        abbreviations_matcher(lambda a: a.full_name, lambda o: o.full_name)
        .name("orderedTokens")
        .build(),
        string_ignore_case_matcher(lambda a: a.full_name, lambda o: o.credit_name)
        .name("creditName")
        .build(),
    ]


def get_matches(authors, candidates, logger=None) -> List[AuthorMatch]:
    return find_matches(authors, candidates, orcid_steps(), logger=logger)


def check_match(matches: List[AuthorMatch], name: str, orcid: str) -> bool:
    return any(m.base.full_name == name and m.enriching.orcid == orcid for m in matches)


@pytest.fixture
def mixed_authors():
    """Data for DOI 10.1111/jbi.14978."""
    authors = PublicationAuthor.of("Marco Ferrante", "Gabor L. Lövei", "Andy G. Howe")
    candidates = [
        OrcidAuthor("Marco", "Ferrante", "", "0000-0003-2421-396X"),
        OrcidAuthor("Gabor", "Lövei", "", "0000-0002-6467-9812"),
        OrcidAuthor("Andrew", "Howe", "Andy G. Howe", "0000-0002-7460-5227"),
    ]
    return authors, candidates


@pytest.fixture
def base_records() -> List[dict]:
    return [
        {"full_name": "Marco Ferrante"},
        {"full_name": "Gabor L. Lövei"},
        {"full_name": "Andy G. Howe"},
    ]


@pytest.fixture
def orcid_records() -> List[dict]:
    return [
        {"given_name": "Marco", "family_name": "Ferrante", "orcid": "0000-0003-2421-396X"},
        {"given_name": "Gabor", "family_name": "Lövei", "orcid": "0000-0002-6467-9812"},
        {
            "given_name": "Andrew",
            "family_name": "Howe",
            "credit_name": "Andy G. Howe",
            "orcid": "0000-0002-7460-5227",
        },
    ]
