"""
application.candidates - The last set of search results a user can refer to.

A search tool replaces the whole set; detail and instructions tools resolve
"2" or "Chicken Biryani" against it. Resolution never guesses: anything that
is not an in-range number or an exact (case-insensitive) title raises
ReferenceNotFound.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from meal_assistant.domain.exceptions import ReferenceNotFound
from meal_assistant.domain.models import RecipeHit

MAX_CANDIDATES = 5


@dataclass(frozen=True)
class Candidate:
    number: int
    external_id: int
    title: str


class CandidateSet:
    """Immutable numbered mapping 1..N -> Candidate, N <= MAX_CANDIDATES."""

    def __init__(self, candidates: Iterable[Candidate] = ()):
        entries = {c.number: c for c in candidates}
        if len(entries) > MAX_CANDIDATES:
            raise ValueError(
                f"A candidate set holds at most {MAX_CANDIDATES} entries, got {len(entries)}"
            )
        if sorted(entries) != list(range(1, len(entries) + 1)):
            raise ValueError("Candidate numbers must run 1..N without gaps")
        self._entries = entries

    @classmethod
    def from_hits(cls, hits: Iterable[RecipeHit]) -> CandidateSet:
        """Number provider hits 1..N in provider order, keeping at most five."""
        candidates = []
        for number, hit in enumerate(hits, start=1):
            if number > MAX_CANDIDATES:
                break
            candidates.append(
                Candidate(number=number, external_id=hit.recipe_id, title=hit.title)
            )
        return cls(candidates)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Candidate]:
        return (self._entries[n] for n in sorted(self._entries))

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CandidateSet):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        titles = ", ".join(f"{c.number}={c.title!r}" for c in self)
        return f"CandidateSet({titles})"

    def get(self, number: int) -> Optional[Candidate]:
        return self._entries.get(number)

    def resolve(self, reference: str) -> Candidate:
        """Resolve a user reference to a candidate.

        Accepts a bare number ("2", "#2", "2.") within 1..len(self), or a
        title that matches case-insensitively. Raises ReferenceNotFound
        otherwise.
        """
        text = str(reference).strip()
        number = _parse_number(text)
        if number is not None:
            candidate = self._entries.get(number)
            if candidate is not None:
                return candidate
            raise ReferenceNotFound(text, available=len(self))

        wanted = text.casefold()
        for candidate in self:
            if candidate.title.strip().casefold() == wanted:
                return candidate
        raise ReferenceNotFound(text, available=len(self))


def _parse_number(text: str) -> Optional[int]:
    stripped = text.lstrip("#").rstrip(".").strip()
    if re.fullmatch(r"[0-9]+", stripped):
        return int(stripped)
    return None
