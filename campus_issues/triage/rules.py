"""
Keyword and routing tables used by the triage engine.

All tables are immutable. Order matters: categories are evaluated in the
order listed in CATEGORY_KEYWORDS and the first match wins.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from ..enums import Category, Department

CATEGORY_KEYWORDS: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (
        Category.TECHNOLOGY,
        (
            "projector",
            "computer",
            "laptop",
            "wifi",
            "internet",
            "network",
            "printer",
            "software",
            "hardware",
            "screen",
            "monitor",
            "keyboard",
            "mouse",
        ),
    ),
    (
        Category.FURNITURE,
        (
            "desk",
            "chair",
            "table",
            "furniture",
            "broken chair",
            "broken desk",
            "wobbly",
            "drawer",
        ),
    ),
    (
        Category.UTILITIES,
        (
            "water",
            "cooler",
            "ac",
            "heating",
            "electricity",
            "power",
            "light",
            "bulb",
            "fan",
            "ventilation",
        ),
    ),
    (
        Category.FACILITIES,
        (
            "restroom",
            "toilet",
            "clean",
            "cleaning",
            "trash",
            "garbage",
            "leak",
            "plumbing",
            "door",
            "window",
            "lock",
        ),
    ),
    (
        Category.ACADEMIC,
        (
            "marker",
            "whiteboard",
            "blackboard",
            "chalk",
            "book",
            "textbook",
            "supplies",
            "stationery",
        ),
    ),
)

# Any of these makes an issue critical regardless of category
URGENT_KEYWORDS: Tuple[str, ...] = (
    "fire",
    "flood",
    "electrical",
    "hazard",
    "emergency",
    "urgent",
    "critical",
    "security",
)

HIGH_PRIORITY_KEYWORDS: Tuple[str, ...] = (
    "wifi down",
    "no internet",
    "projector not working",
    "broken",
    "leaking",
    "flooding",
)

# Only counts as high priority for technology issues
TECHNOLOGY_OUTAGE_PHRASE = "not working"

MEDIUM_PRIORITY_CATEGORIES = frozenset({Category.UTILITIES, Category.FACILITIES})

DEPARTMENT_ROUTES: Mapping[Category, Department] = MappingProxyType(
    {
        Category.TECHNOLOGY: Department.IT,
        Category.FURNITURE: Department.MAINTENANCE,
        Category.UTILITIES: Department.FACILITIES,
        Category.FACILITIES: Department.FACILITIES,
        Category.ACADEMIC: Department.ACADEMIC,
        Category.OTHER: Department.ADMIN,
    }
)

FALLBACK_DEPARTMENT = Department.ADMIN
