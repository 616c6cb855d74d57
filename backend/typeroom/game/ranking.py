from __future__ import annotations

from typing import Iterable

from .models import Participant


def compute_rankings(participants: Iterable[Participant]) -> list[dict]:
    """Rank participants by wpm, highest first.

    Equal wpm keeps roster order. Every participant must already have
    final results.
    """
    entries = []
    for p in participants:
        r = p.final_results
        if r is None:
            raise ValueError(f"participant {p.id} has no final results")
        entries.append(
            {
                "id": p.id,
                "username": p.username,
                "wpm": r.wpm,
                "rawWpm": r.raw_wpm,
                "accuracy": r.accuracy,
                "charactersTyped": r.characters_typed,
                "completionPercentage": r.completion_percentage,
            }
        )

    # list.sort is stable with reverse=True as well.
    entries.sort(key=lambda e: e["wpm"], reverse=True)
    for idx, entry in enumerate(entries):
        entry["rank"] = idx + 1
    return entries
