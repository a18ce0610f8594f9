"""
Triage engine for incoming disruption reports.

This module is pure: it has no database or web imports and can be tested in
isolation or called from the CLI.

Three steps, applied in order at report time:

Classify
    The combined lowercase text is scanned against the category keyword
    tables in declaration order. The first category with any matching
    keyword wins; otherwise ``other``.

Prioritize
    Urgent keywords always win (``critical``). Then high-priority phrases,
    or a technology issue that is "not working" (``high``). Utilities and
    facilities issues default to ``medium``, everything else to ``low``.

Route
    Static category -> department map, ``admin`` for anything unknown.

Public API
----------
    result = triage(title, description)
    # TriageResult(category=..., priority=..., department=...)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..enums import Category, Department, Priority
from .rules import (
    CATEGORY_KEYWORDS,
    DEPARTMENT_ROUTES,
    FALLBACK_DEPARTMENT,
    HIGH_PRIORITY_KEYWORDS,
    MEDIUM_PRIORITY_CATEGORIES,
    TECHNOLOGY_OUTAGE_PHRASE,
    URGENT_KEYWORDS,
)


@dataclass(frozen=True)
class TriageResult:
    category: Category
    priority: Priority
    department: Department


def _combined_text(title: str, description: str) -> str:
    return f"{title or ''} {description or ''}".lower()


def categorize(title: str, description: str) -> Category:
    """Return the first category whose keywords occur in the report text."""
    text = _combined_text(title, description)

    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category

    return Category.OTHER


def prioritize(title: str, description: str, category: Category) -> Priority:
    """Derive a priority from the report text and its category."""
    text = _combined_text(title, description)

    if any(keyword in text for keyword in URGENT_KEYWORDS):
        return Priority.CRITICAL

    if any(keyword in text for keyword in HIGH_PRIORITY_KEYWORDS) or (
        category == Category.TECHNOLOGY and TECHNOLOGY_OUTAGE_PHRASE in text
    ):
        return Priority.HIGH

    if category in MEDIUM_PRIORITY_CATEGORIES:
        return Priority.MEDIUM

    return Priority.LOW


def assign_department(
    category: Optional[Union[Category, str]],
    priority: Optional[Priority] = None,
) -> Department:
    """Map a category to its owning department.

    ``priority`` is accepted for call-site symmetry but does not affect routing.
    """
    try:
        key = Category(category)
    except ValueError:
        return FALLBACK_DEPARTMENT
    return DEPARTMENT_ROUTES.get(key, FALLBACK_DEPARTMENT)


def triage(title: str, description: str) -> TriageResult:
    """Classify, prioritize and route a report in one call."""
    category = categorize(title, description)
    priority = prioritize(title, description, category)
    department = assign_department(category, priority)
    return TriageResult(category=category, priority=priority, department=department)
