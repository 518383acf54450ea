# roadmap.py

import math
from typing import Dict, List, Mapping, Sequence, Tuple

from .config import TOP_EXPANDED
from .errors import DataIntegrityError
from .models import (
    Offering,
    Phase,
    PhaseGroup,
    RoadmapEntry,
    ScoredOffering,
    SubCategoryGroup,
)

PHASE_ORDER = (Phase.A, Phase.B, Phase.C)
DEFAULT_PHASE = Phase.B
OTHER_SUB_CATEGORY = "Other"

PHASE_LABELS = {
    Phase.A: (
        "Phase 1: Quick Wins",
        "Fixed-scope engagements with well-defined deliverables, ready to start immediately",
    ),
    Phase.B: (
        "Phase 2: Discovery & Build",
        "Require a discovery phase to scope, followed by focused implementation",
    ),
    Phase.C: (
        "Phase 3: Strategic Initiatives",
        "Complex, high-impact programs requiring detailed assessment and phased delivery",
    ),
}

ENGAGEMENT_LABELS = {
    Phase.A: "Fixed Scope",
    Phase.B: "Discovery + Fixed",
    Phase.C: "T-Shirt Sizing",
}

# (minimum relevance, tier), checked top down
MATCH_TIERS = ((70, "strong"), (40, "good"), (20, "fair"), (0, "weak"))


def relevance(score: int, max_score: int) -> int:
    """Score as a whole percentage of max_score, rounding halves up."""
    return int(math.floor(100 * score / max(max_score, 1) + 0.5))


def match_tier(percentage: int) -> str:
    for floor, tier in MATCH_TIERS:
        if percentage >= floor:
            return tier
    return MATCH_TIERS[-1][1]


def attach_offerings(
    ranking: Sequence[Tuple[str, int]], offerings_by_id: Mapping[str, Offering]
) -> List[ScoredOffering]:
    missing = [offering_id for offering_id, _ in ranking if offering_id not in offerings_by_id]
    if missing:
        raise DataIntegrityError(
            [f"decision rule references unknown offering {offering_id}" for offering_id in missing]
        )
    return [
        ScoredOffering(offering=offerings_by_id[offering_id], score=total)
        for offering_id, total in ranking
    ]


def max_score(scored: Sequence[ScoredOffering]) -> int:
    return max([s.score for s in scored] + [1])


def _group_phase(
    scored: Sequence[ScoredOffering], top: int, denominator: int
) -> List[SubCategoryGroup]:
    groups: Dict[str, List[ScoredOffering]] = {}
    for item in scored:
        groups.setdefault(item.offering.sub_category or OTHER_SUB_CATEGORY, []).append(item)

    ordered = sorted(
        groups.items(), key=lambda kv: max(s.score for s in kv[1]), reverse=True
    )

    result = []
    for sub_category, members in ordered:
        entries = []
        for position, item in enumerate(members):
            pct = relevance(item.score, denominator)
            entries.append(
                RoadmapEntry(
                    offering=item.offering,
                    score=item.score,
                    relevance=pct,
                    match_tier=match_tier(pct),
                    expanded=position < top,
                )
            )
        result.append(
            SubCategoryGroup(
                sub_category=sub_category,
                max_score=max(s.score for s in members),
                entries=entries,
            )
        )
    return result


def compose(
    ranking: Sequence[Tuple[str, int]],
    offerings_by_id: Mapping[str, Offering],
    top_expanded: int = TOP_EXPANDED,
) -> List[PhaseGroup]:
    """
    Arrange ranked offerings into the phased roadmap.

    Phases come in fixed A, B, C order and are dropped when empty; offerings
    without a phase land in B. Inside a phase, sub-category groups are ordered
    by their best score and keep the ranking order of their members. The
    first ``top_expanded`` members of each group are flagged expanded.

    :param ranking: (offering_id, score) pairs as returned by scoring.score.
    :param offerings_by_id: Offering lookup covering every ranked id.
    :param top_expanded: How many offerings per group are expanded by default.
    :return: Ordered list of PhaseGroup.
    """
    scored = attach_offerings(ranking, offerings_by_id)
    denominator = max_score(scored)

    by_phase: Dict[Phase, List[ScoredOffering]] = {phase: [] for phase in PHASE_ORDER}
    for item in scored:
        by_phase[item.offering.phase or DEFAULT_PHASE].append(item)

    phases = []
    for phase in PHASE_ORDER:
        members = by_phase[phase]
        if not members:
            continue
        label, description = PHASE_LABELS[phase]
        phases.append(
            PhaseGroup(
                phase=phase,
                label=label,
                description=description,
                groups=_group_phase(members, top_expanded, denominator),
                total=len(members),
            )
        )
    return phases
