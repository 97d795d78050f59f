"""
Display ordering and list sections for each entity.

All functions are pure: they return new lists and rely on ``sorted`` being
stable, so equal keys keep their stored order and repeated calls on the same
input give the same result.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Tuple

from .models import (
    Assignment,
    Certificate,
    CollegeProject,
    Course,
    EventItem,
    ImportantItem,
    Placement,
    Project,
)

PRIORITY_ORDER: Dict[str, int] = {"High": 1, "Medium": 2, "Low": 3}
COURSE_STATUS_ORDER: Dict[str, int] = {"In Progress": 1, "Not Started": 2}


def sort_assignments(items: Sequence[Assignment]) -> List[Assignment]:
    """Incomplete first, then by due date ascending."""
    return sorted(items, key=lambda a: (a.completed, a.due_date))


def sort_projects(items: Sequence[Project]) -> List[Project]:
    return sorted(items, key=lambda p: p.due_date)


def sort_college_projects(items: Sequence[CollegeProject]) -> List[CollegeProject]:
    return sorted(items, key=lambda p: p.due_date)


def sort_placements(items: Sequence[Placement]) -> List[Placement]:
    """Most recent application first."""
    return sorted(items, key=lambda p: p.application_date, reverse=True)


def sort_certificates(items: Sequence[Certificate]) -> List[Certificate]:
    """Most recently issued first."""
    return sorted(items, key=lambda c: c.issue_date, reverse=True)


def _course_key(c: Course) -> Tuple[bool, int, str]:
    status_rank = 0 if c.completed else COURSE_STATUS_ORDER.get(c.status, 99)
    return (c.completed, status_rank, c.title.casefold())


def sort_courses(items: Sequence[Course]) -> List[Course]:
    """Active courses first (In Progress before Not Started), then by title."""
    return sorted(items, key=_course_key)


def sort_important(items: Sequence[ImportantItem]) -> List[ImportantItem]:
    """High, Medium, Low; then earliest due date, undated items last."""

    def key(i: ImportantItem) -> Tuple[int, bool, datetime]:
        return (
            PRIORITY_ORDER.get(i.priority, 99),
            i.due_date is None,
            i.due_date or datetime.max,
        )

    return sorted(items, key=key)


def is_past_event(event: EventItem, today: date) -> bool:
    """An event is past once its start day is before today."""
    return event.start_date.date() < today


def sort_events(items: Sequence[EventItem], today: Optional[date] = None) -> List[EventItem]:
    """Upcoming events first, then past ones; each group by start day ascending."""
    day = today or date.today()
    return sorted(items, key=lambda e: (is_past_event(e, day), e.start_date.date()))


# Sections -----------------------------------------------------------------


def assignment_sections(items: Sequence[Assignment]) -> Dict[str, List[Assignment]]:
    ordered = sort_assignments(items)
    return {
        "upcoming": [a for a in ordered if not a.completed],
        "completed": [a for a in ordered if a.completed],
    }


def course_sections(items: Sequence[Course]) -> Dict[str, List[Course]]:
    ordered = sort_courses(items)
    return {
        "active": [c for c in ordered if not c.completed],
        "completed": [c for c in ordered if c.completed],
    }


def event_sections(items: Sequence[EventItem], today: Optional[date] = None) -> Dict[str, List[EventItem]]:
    day = today or date.today()
    ordered = sort_events(items, day)
    return {
        "upcoming": [e for e in ordered if not is_past_event(e, day)],
        "past": [e for e in ordered if is_past_event(e, day)],
    }


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        return f"{n}th"
    return f"{n}" + {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


# PUBLIC_INTERFACE
def due_date_label(due: datetime, today: Optional[date] = None) -> str:
    """
    Human label for an assignment due date.

    Returns 'Overdue', 'Due Today', 'Due Tomorrow', 'Due in N days' (up to a
    week out) or 'Due <Month Dth, YYYY>', e.g. 'Due March 18th, 2025'.
    """
    day = today or date.today()
    diff = (due.date() - day).days
    if diff < 0:
        return "Overdue"
    if diff == 0:
        return "Due Today"
    if diff == 1:
        return "Due Tomorrow"
    if diff <= 7:
        return f"Due in {diff} days"
    return f"Due {due:%B} {_ordinal(due.day)}, {due.year}"
