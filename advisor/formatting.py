# formatting.py

from typing import List

from .models import PhaseGroup, RoadmapEntry
from .roadmap import ENGAGEMENT_LABELS

DETAIL_FIELDS = (
    ("rationale", "Why it matters"),
    ("inclusions", "What's included"),
    ("deliverables", "Key deliverables"),
    ("delivery_method", "How it's delivered"),
)


def _title(entry: RoadmapEntry) -> str:
    offering = entry.offering
    number = f"#{offering.display_order} - " if offering.display_order else ""
    return f"{number}{offering.title}"


def format_entry(entry: RoadmapEntry) -> List[str]:
    """
    Expanded entries carry every descriptive field, collapsed ones a single
    summary line.
    """
    offering = entry.offering
    headline = f"**{_title(entry)}** ({entry.relevance}% match, {offering.category})"
    if not entry.expanded:
        return [f"- {headline}"]

    lines = [f"- {headline}"]
    for field, label in DETAIL_FIELDS:
        value = getattr(offering, field)
        if value:
            lines.append(f"    - _{label}:_ {value}")
    return lines


def format_roadmap_in_markdown(phases: List[PhaseGroup]) -> str:
    if not phases:
        return "No specific recommendations were generated from these responses."

    lines = []
    for phase in phases:
        lines.append(
            f"## {phase.label} (Category {phase.phase.value}, "
            f"{ENGAGEMENT_LABELS[phase.phase]})"
        )
        lines.append(phase.description)
        for group in phase.groups:
            lines.append("")
            lines.append(f"### {group.sub_category}")
            for entry in group.entries:
                lines.extend(format_entry(entry))
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"
