# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Member ranking for "best available" pickers.
Pure function. Ordering relies on Python's stable sort, so members that tie
keep the order the roster was supplied in.
"""

from typing import Callable, Optional, Sequence

from allocation.models.domain import Member, Role

# Caller-supplied ranking hook, e.g. an expertise matcher. Higher is better.
MatchScorer = Callable[[Member, Optional[Role]], float]


def rank_members(
    members: Sequence[Member],
    available: dict[str, float],
    role: Optional[Role] = None,
    scorer: Optional[MatchScorer] = None,
) -> list[tuple[Member, float, Optional[float]]]:
    """
    Return (member, available_capacity, score) triples, best first.
    `members` must be in roster order.
    """
    rows = [
        (m, available[m.id], scorer(m, role) if scorer is not None else None)
        for m in members
    ]
    if scorer is not None:
        rows.sort(key=lambda row: (-row[2], -row[1]))
    else:
        rows.sort(key=lambda row: -row[1])
    return rows
