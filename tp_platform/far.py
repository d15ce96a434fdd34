"""
tp_platform/far.py
==================
FAR (Functions, Assets, Risks) profiling and profile similarity.

Profile score  = Σ item weights / (3 × 21) × 100      (LOW=1, MEDIUM=2, HIGH=3)
Similarity     = (1 − Σ |weight_a − weight_b| / 42) × 100
"""
from __future__ import annotations
from typing import Dict, Iterator, Optional, Tuple

from .constants import (
    FAR_BASELINES, FAR_FUNCTIONS, FAR_ASSETS, FAR_RISKS,
    RISK_WEIGHTS, FAR_ITEM_COUNT, MAX_RISK_DIFF,
)
from .formatting import round_int
from .types import CompanyFinancials, FARProfile, UnknownFunctionalProfileError

_GROUPS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("functions", FAR_FUNCTIONS),
    ("assets", FAR_ASSETS),
    ("risks", FAR_RISKS),
)


def _items(profile: FARProfile) -> Iterator[Tuple[str, str, str]]:
    for group, keys in _GROUPS:
        levels: Dict[str, str] = getattr(profile, group)
        for key in keys:
            yield group, key, levels[key]


def far_score(profile: FARProfile) -> int:
    total = sum(RISK_WEIGHTS[level] for _, _, level in _items(profile))
    max_total = RISK_WEIGHTS["HIGH"] * FAR_ITEM_COUNT
    return round_int(total / max_total * 100)


def create_far_profile(profile: str, financials: Optional[CompanyFinancials] = None) -> FARProfile:
    """
    Baseline FAR profile for a functional category.

    ``financials`` is accepted for call-site symmetry with the scoring pass;
    the regulatory baseline does not vary with the statement figures.
    Raises UnknownFunctionalProfileError for a category outside the table.
    """
    try:
        baseline = FAR_BASELINES[profile]
    except KeyError:
        raise UnknownFunctionalProfileError(f"No FAR baseline for functional profile {profile!r}") from None

    far = FARProfile(
        functions=dict(baseline["functions"]),
        assets=dict(baseline["assets"]),
        risks=dict(baseline["risks"]),
        overall_profile=profile,
        score=0,
    )
    far.score = far_score(far)
    return far


def calculate_far_similarity(a: FARProfile, b: FARProfile) -> int:
    total_diff = 0
    comparisons = 0
    for (group, key, level_a) in _items(a):
        level_b = getattr(b, group)[key]
        total_diff += abs(RISK_WEIGHTS[level_a] - RISK_WEIGHTS[level_b])
        comparisons += 1

    max_diff = comparisons * MAX_RISK_DIFF
    return round_int((1 - total_diff / max_diff) * 100)


def far_differences(a: FARProfile, b: FARProfile) -> Dict[str, int]:
    """Per-item weight gap (0-2), keyed "group.item"; only non-zero gaps."""
    out: Dict[str, int] = {}
    for group, key, level_a in _items(a):
        diff = abs(RISK_WEIGHTS[level_a] - RISK_WEIGHTS[getattr(b, group)[key]])
        if diff:
            out[f"{group}.{key}"] = diff
    return out
