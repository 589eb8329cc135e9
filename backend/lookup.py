"""Resolve a free-text query to one mukkadam.

Names and mobiles are not unique across the roster, so several matches are
narrowed by village, then crew size, then listed one by one.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from availability import NotFoundError

logger = logging.getLogger(__name__)


class Step(str, Enum):
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    RESOLVED = "resolved"
    BY_VILLAGE = "by_village"
    BY_CREW_SIZE = "by_crew_size"
    BY_MOBILE = "by_mobile"


@dataclass(frozen=True)
class Choice:
    value: str
    candidates: tuple

    @property
    def count(self) -> int:
        return len(self.candidates)


@dataclass(frozen=True)
class SearchResult:
    step: Step
    candidates: tuple = ()
    choices: tuple[Choice, ...] = field(default_factory=tuple)
    selected: object | None = None


def _crew_size_key(value: str):
    try:
        return (0, int(str(value).strip()), "")
    except ValueError:
        return (1, 0, str(value))


def _partition(candidates, attr: str) -> list[Choice]:
    groups: dict[str, list] = {}
    for candidate in candidates:
        groups.setdefault(getattr(candidate, attr), []).append(candidate)
    return [Choice(value, tuple(items)) for value, items in groups.items()]


def _by_village(candidates) -> SearchResult:
    choices = _partition(candidates, "village")
    if len(choices) == 1:
        return _by_crew_size(candidates)
    return SearchResult(Step.BY_VILLAGE, tuple(candidates), tuple(choices))


def _by_crew_size(candidates) -> SearchResult:
    choices = sorted(_partition(candidates, "crew_size"), key=lambda c: _crew_size_key(c.value))
    if len(choices) == 1:
        return _by_mobile(candidates)
    return SearchResult(Step.BY_CREW_SIZE, tuple(candidates), tuple(choices))


def _by_mobile(candidates) -> SearchResult:
    return SearchResult(Step.BY_MOBILE, tuple(candidates))


def match(query: str, roster) -> list:
    """Digits-only queries match mobiles, anything else matches names."""
    query = query.strip().lower()
    if query.isascii() and query.isdigit():
        return [m for m in roster if query in (m.mobile or "")]
    return [m for m in roster if query in (m.name or "").lower()]


def search(query: str | None, roster) -> SearchResult:
    if not query or not query.strip():
        return SearchResult(Step.EMPTY)

    matches = match(query, roster)
    logger.info(f"Search '{query.strip()}' matched {len(matches)} mukkadam(s)")
    if not matches:
        return SearchResult(Step.NOT_FOUND)
    if len(matches) == 1:
        return SearchResult(Step.RESOLVED, tuple(matches), selected=matches[0])
    return _by_village(matches)


def _choose(result: SearchResult, step: Step, value: str) -> tuple:
    if result.step != step:
        raise NotFoundError(f"Cannot choose by {step.value} while at {result.step.value}")
    for choice in result.choices:
        if str(choice.value) == str(value):
            return choice.candidates
    raise NotFoundError(f"'{value}' is not one of the offered choices")


def choose_village(result: SearchResult, village: str) -> SearchResult:
    return _by_crew_size(_choose(result, Step.BY_VILLAGE, village))


def choose_crew_size(result: SearchResult, crew_size: str) -> SearchResult:
    return _by_mobile(_choose(result, Step.BY_CREW_SIZE, crew_size))


def select(result: SearchResult, mukkadam_id: int) -> SearchResult:
    for candidate in result.candidates:
        if candidate.id == mukkadam_id:
            return replace(result, step=Step.RESOLVED, candidates=(candidate,), choices=(), selected=candidate)
    raise NotFoundError(f"Mukkadam {mukkadam_id} is not among the candidates")
