"""Discovery call agenda markdown."""

from __future__ import annotations

import re

from backend.models.enums import GapPriority
from backend.models.system_spec import AgendaItem, SystemSpecOutput

DEFAULT_ITEM_MINUTES = 15

OBJECTIVES = [
    "Fill information gaps from questionnaire",
    "Map core delivery process in detail",
    "Validate system priorities",
    "Confirm tool access and integration readiness",
]

VALIDATION_CHECKLIST = [
    "Understood core delivery process",
    "Identified owner-only tasks clearly",
    "Confirmed tool access (CRM, PM, etc.)",
    "Agreed on P0 system priorities",
    "Scheduled Week 2 check-in",
]


def item_minutes(item: AgendaItem) -> int:
    """Leading integer of the duration label ('20 minutes' -> 20)."""
    match = re.match(r"\s*(\d+)", item.duration)
    minutes = int(match.group(1)) if match else 0
    return minutes or DEFAULT_ITEM_MINUTES


def render_discovery_agenda(spec: SystemSpecOutput) -> str:
    lines: list[str] = []
    client = spec.client_info

    lines.append("# Discovery Call Agenda")
    lines.append("")
    lines.append(f"**Client:** {client.company}")
    lines.append(f"**Contact:** {client.name} ({client.email})")
    lines.append("")

    lines.append("## Objectives")
    lines.append("")
    lines.extend(f"{idx}. {objective}" for idx, objective in enumerate(OBJECTIVES, start=1))
    lines.append("")

    total = sum(item_minutes(item) for item in spec.follow_up_discovery_agenda)
    lines.append(f"**Estimated Duration:** {total} minutes")
    lines.append("")
    lines.append("---")
    lines.append("")

    for idx, item in enumerate(spec.follow_up_discovery_agenda, start=1):
        lines.append(f"## {idx}. {item.topic} ({item.duration})")
        lines.append("")
        lines.extend(f"- [ ] {q}" for q in item.questions)
        lines.append("")

    if spec.gaps:
        lines.append("## Critical Information Gaps")
        lines.append("")
        lines.append("*Must resolve before building:*")
        lines.append("")
        for gap in spec.gaps:
            if gap.priority != GapPriority.CRITICAL:
                continue
            lines.append(f"### {gap.question}")
            lines.append(f"**Why:** {gap.reason}")
            lines.append("")
            lines.append("**Questions to ask:**")
            lines.extend(f"- [ ] {q}" for q in gap.discovery_questions)
            lines.append("")

    lines.append("## Validation Checklist")
    lines.append("")
    lines.append("*Confirm these before ending call:*")
    lines.append("")
    lines.extend(f"- [ ] {item}" for item in VALIDATION_CHECKLIST)
    lines.append("")

    return "\n".join(lines)
