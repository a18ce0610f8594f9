"""
Triage: categorization, prioritization and department routing.
"""

from .engine import TriageResult, assign_department, categorize, prioritize, triage

__all__ = [
    "TriageResult",
    "assign_department",
    "categorize",
    "prioritize",
    "triage",
]
