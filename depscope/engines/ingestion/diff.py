"""Set difference between a stored and a freshly fetched dependency list."""

from __future__ import annotations

from collections.abc import Iterable

from depscope.engines.ingestion.models import ScoredDependency

SCORE_TOLERANCE = 1e-9


def scores_equal(a: float, b: float) -> bool:
    return abs(a - b) <= SCORE_TOLERANCE


def dependencies_equal(a: ScoredDependency, b: ScoredDependency) -> bool:
    return a.name == b.name and scores_equal(a.score, b.score) and a.updated_at == b.updated_at


def _only_in(
    side: Iterable[ScoredDependency],
    other: dict[str, ScoredDependency],
) -> list[ScoredDependency]:
    result: list[ScoredDependency] = []
    for dep in side:
        match = other.get(dep.name)
        if match is None or not dependencies_equal(dep, match):
            result.append(dep)
    return result


def diff_dependencies(
    current: list[ScoredDependency],
    incoming: list[ScoredDependency],
) -> tuple[list[ScoredDependency], list[ScoredDependency]]:
    """Return ``(only_in_current, only_in_incoming)`` keyed by dependency name.

    A name present on both sides with a different score or date shows up
    in *both* outputs: callers delete the old row and insert the new one.
    Output order follows input order, membership does not depend on it.
    """
    by_name_current = {dep.name: dep for dep in current}
    by_name_incoming = {dep.name: dep for dep in incoming}
    return _only_in(current, by_name_incoming), _only_in(incoming, by_name_current)
