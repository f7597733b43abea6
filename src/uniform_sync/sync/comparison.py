"""Side-by-side comparison of two projects' component lists.

Pure functions over already-fetched ``Component`` lists; no I/O happens
here. A failed fetch upstream arrives as an empty list.

Classification per row:

============================  ===============  ===============
Situation                     A                B
============================  ===============  ===============
A.updated > B.updated         newer            older
A.updated < B.updated         older            newer
equal instants                same             same
either timestamp unknown      incomparable     incomparable
only A has it                 sole             absent
only B has it                 absent           sole
============================  ===============  ===============
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models import ComparisonRow, Component, Freshness

logger = logging.getLogger(__name__)


def index_components(components: Iterable[Component]) -> dict[str, Component]:
    """Index components by id.

    Duplicate ids keep the last entry encountered. The vendor list endpoint
    is not known to guarantee unique ids, so duplicates are logged and
    tolerated rather than rejected.
    """
    index: dict[str, Component] = {}
    for component in components:
        if component.id in index:
            logger.debug("Duplicate component id %s, keeping last", component.id)
        index[component.id] = component
    return index


def classify(
    a: Component | None, b: Component | None
) -> tuple[Freshness, Freshness]:
    """Return the (A, B) freshness pair for one component id."""
    if a is None and b is None:
        raise ValueError("at least one side must hold the component")
    if b is None:
        return Freshness.SOLE, Freshness.ABSENT
    if a is None:
        return Freshness.ABSENT, Freshness.SOLE
    if a.last_updated is None or b.last_updated is None:
        return Freshness.INCOMPARABLE, Freshness.INCOMPARABLE
    if a.last_updated > b.last_updated:
        return Freshness.NEWER, Freshness.OLDER
    if b.last_updated > a.last_updated:
        return Freshness.OLDER, Freshness.NEWER
    return Freshness.SAME, Freshness.SAME


def build_comparison_table(
    list_a: Iterable[Component], list_b: Iterable[Component]
) -> list[ComparisonRow]:
    """Merge two component lists into one row per distinct id.

    Args:
        list_a: Components of project A.
        list_b: Components of project B.

    Returns:
        Rows for the union of ids, sorted by component id.
    """
    index_a = index_components(list_a)
    index_b = index_components(list_b)

    rows: list[ComparisonRow] = []
    for component_id in sorted(index_a.keys() | index_b.keys()):
        a = index_a.get(component_id)
        b = index_b.get(component_id)
        freshness_a, freshness_b = classify(a, b)
        rows.append(
            ComparisonRow(
                component_id=component_id,
                a=a,
                b=b,
                freshness_a=freshness_a,
                freshness_b=freshness_b,
            )
        )
    return rows


def filter_rows(
    rows: Iterable[ComparisonRow], search_term: str | None
) -> list[ComparisonRow]:
    """Keep rows whose component id contains *search_term* (case-insensitive)."""
    term = (search_term or "").strip().lower()
    if not term:
        return list(rows)
    return [row for row in rows if term in row.component_id.lower()]
