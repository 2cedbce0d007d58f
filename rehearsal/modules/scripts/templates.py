from __future__ import annotations

from copy import deepcopy

_CATEGORY_LABELS = {
    "mental-health": "Mental Health Scenarios",
    "social-situations": "Social Situations",
    "difficult-conversations": "Difficult Conversations",
}

# (id, title, description, nathan level) per category
_ENTRIES = {
    "mental-health": (
        ("therapy-first-time", "First Therapy Session", "Overthinking every word", 65),
        ("medication-stigma", "Taking Medication", "Secret pill organization", 78),
        ("family-dinner-anxiety", "Family Dinner Anxiety", "Rehearsing small talk", 71),
    ),
    "social-situations": (
        ("party-exit-strategy", "Party Exit Planning", "47 escape routes", 82),
        ("coffee-order-practice", "Coffee Shop Rehearsal", "Ordering without panic", 68),
        ("phone-call-prep", "Phone Call Preparation", "Script for pizza delivery", 75),
    ),
    "difficult-conversations": (
        ("addiction-intervention", "Addiction Conversation", "147 ways to show you care", 89),
        ("substance-concern", "Expressing Concern", "Without judgment flowchart", 91),
        ("recovery-support", "Supporting Recovery", "Being helpful vs enabling", 94),
    ),
}

SCRIPT_TEMPLATES: dict[str, list[dict]] = {
    category: [
        {
            "id": template_id,
            "title": title,
            "description": description,
            "nathan_level": level,
            "category": _CATEGORY_LABELS[category],
        }
        for template_id, title, description, level in entries
    ]
    for category, entries in _ENTRIES.items()
}


def list_templates() -> dict[str, list[dict]]:
    return deepcopy(SCRIPT_TEMPLATES)
