from __future__ import annotations

from datetime import date
from typing import List, Optional

from .entities import (
    ASSIGNMENTS,
    CERTIFICATES,
    COLLEGE_PROJECTS,
    COURSES,
    EVENTS,
    IMPORTANT,
    PLACEMENTS,
    PROJECTS,
)
from .repositories import EntityRepository
from .schemas import DashboardOut, DashboardStat
from .sorting import is_past_event
from .storage import KeyValueStore

ACTIVE_PLACEMENT_STATUSES = {"Applied", "Interviewing"}


# PUBLIC_INTERFACE
def build_dashboard(store: KeyValueStore, username: str, today: Optional[date] = None) -> DashboardOut:
    """
    Compute the overview tiles for one user.

    Counts are taken over records read fresh from storage; nothing is cached.
    """
    day = today or date.today()

    def records(spec) -> List:
        return EntityRepository(store, username, spec).all()

    assignments = records(ASSIGNMENTS)
    projects = records(PROJECTS)
    college_projects = records(COLLEGE_PROJECTS)
    placements = records(PLACEMENTS)
    certificates = records(CERTIFICATES)
    courses = records(COURSES)
    important = records(IMPORTANT)
    events = records(EVENTS)

    stats = [
        DashboardStat(
            title="Upcoming Assignments",
            value=sum(1 for a in assignments if not a.completed and a.due_date.date() >= day),
            href="/dashboard/assignments",
            description="Due soon or today",
        ),
        DashboardStat(
            title="Active Personal Projects",
            value=sum(1 for p in projects if p.status == "In Progress"),
            href="/dashboard/projects",
            description="In progress",
        ),
        DashboardStat(
            title="Active College Projects",
            value=sum(1 for p in college_projects if p.status == "In Progress"),
            href="/dashboard/college-projects",
            description="In progress",
        ),
        DashboardStat(
            title="Active Placements",
            value=sum(1 for p in placements if p.status in ACTIVE_PLACEMENT_STATUSES),
            href="/dashboard/placements",
            description="Applications/Interviews",
        ),
        DashboardStat(
            title="Total Certificates",
            value=len(certificates),
            href="/dashboard/certificates",
            description="Earned",
        ),
        DashboardStat(
            title="Courses In Progress",
            value=sum(1 for c in courses if c.status == "In Progress"),
            href="/dashboard/courses",
            description="Currently learning",
        ),
        DashboardStat(
            title="Open Important Items",
            value=sum(1 for i in important if not i.completed),
            href="/dashboard/important",
            description="Still to do",
        ),
        DashboardStat(
            title="Upcoming Events",
            value=sum(1 for e in events if not is_past_event(e, day)),
            href="/dashboard/events",
            description="Today or later",
        ),
    ]
    return DashboardOut(user_name=username, stats=stats)
