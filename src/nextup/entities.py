"""
Registry of tracked entities.

Each EntitySpec ties an entity slug (also the storage key suffix and the URL
segment) to its record model, payload schemas, ordering and search fields.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type

from . import sorting
from .models import (
    Assignment,
    Certificate,
    CollegeProject,
    Course,
    EventItem,
    ImportantItem,
    Placement,
    Project,
    StoredModel,
)
from .schemas import (
    AssignmentCreate,
    AssignmentUpdate,
    CertificateCreate,
    CertificateUpdate,
    CollegeProjectCreate,
    CollegeProjectUpdate,
    CourseCreate,
    CourseUpdate,
    EventCreate,
    EventUpdate,
    ImportantItemCreate,
    ImportantItemUpdate,
    PlacementCreate,
    PlacementUpdate,
    ProjectCreate,
    ProjectUpdate,
)

Toggle = Callable[[Any], Dict[str, Any]]


@dataclass(frozen=True)
class EntitySpec:
    """
    Static description of one entity kind.

    Fields:
    - slug: storage key suffix and URL segment, e.g. 'college-projects'
    - label: singular display label used in messages, e.g. 'College project'
    - model: record model (includes id)
    - create_schema / update_schema: request payloads
    - sort: display ordering
    - sections: optional named sub-lists for list responses
    - section_names: keys produced by sections
    - status_label: optional per-record display label, e.g. "Due Tomorrow"
    - search_fields: attributes matched by the list 'q' filter
    - toggle: optional completion toggle returning the fields to change
    """

    slug: str
    label: str
    model: Type[StoredModel]
    create_schema: Type[StoredModel]
    update_schema: Type[StoredModel]
    sort: Callable[[Sequence[Any]], List[Any]]
    search_fields: Tuple[str, ...]
    sections: Optional[Callable[[Sequence[Any]], Dict[str, List[Any]]]] = None
    section_names: Tuple[str, ...] = ()
    status_label: Optional[Callable[[Any], str]] = None
    toggle: Optional[Toggle] = None

    @property
    def has_completed(self) -> bool:
        return "completed" in self.model.model_fields

    def storage_key(self, username: str) -> str:
        return f"{username}-{self.slug}"


def _flip_completed(record: Any) -> Dict[str, Any]:
    return {"completed": not record.completed}


def _assignment_label(record: Assignment) -> str:
    return "Completed" if record.completed else sorting.due_date_label(record.due_date)


def _toggle_course(record: Course) -> Dict[str, Any]:
    if record.completed:
        return {"status": "In Progress", "completion_date": None}
    return {"status": "Completed", "completion_date": datetime.now(timezone.utc)}


ASSIGNMENTS = EntitySpec(
    slug="assignments",
    label="Assignment",
    model=Assignment,
    create_schema=AssignmentCreate,
    update_schema=AssignmentUpdate,
    sort=sorting.sort_assignments,
    sections=sorting.assignment_sections,
    section_names=("upcoming", "completed"),
    search_fields=("description", "tags"),
    status_label=_assignment_label,
    toggle=_flip_completed,
)

PROJECTS = EntitySpec(
    slug="projects",
    label="Project",
    model=Project,
    create_schema=ProjectCreate,
    update_schema=ProjectUpdate,
    sort=sorting.sort_projects,
    search_fields=("description", "details", "notes", "tags"),
)

COLLEGE_PROJECTS = EntitySpec(
    slug="college-projects",
    label="College project",
    model=CollegeProject,
    create_schema=CollegeProjectCreate,
    update_schema=CollegeProjectUpdate,
    sort=sorting.sort_college_projects,
    search_fields=("description", "details", "notes", "course", "team_members", "tags"),
)

PLACEMENTS = EntitySpec(
    slug="placements",
    label="Placement",
    model=Placement,
    create_schema=PlacementCreate,
    update_schema=PlacementUpdate,
    sort=sorting.sort_placements,
    search_fields=("company", "role", "notes"),
)

CERTIFICATES = EntitySpec(
    slug="certificates",
    label="Certificate",
    model=Certificate,
    create_schema=CertificateCreate,
    update_schema=CertificateUpdate,
    sort=sorting.sort_certificates,
    search_fields=("title", "issuing_organization", "skills", "notes"),
)

COURSES = EntitySpec(
    slug="courses",
    label="Course",
    model=Course,
    create_schema=CourseCreate,
    update_schema=CourseUpdate,
    sort=sorting.sort_courses,
    sections=sorting.course_sections,
    section_names=("active", "completed"),
    search_fields=("title", "platform", "notes"),
    toggle=_toggle_course,
)

IMPORTANT = EntitySpec(
    slug="important",
    label="Item",
    model=ImportantItem,
    create_schema=ImportantItemCreate,
    update_schema=ImportantItemUpdate,
    sort=sorting.sort_important,
    search_fields=("title", "description", "tags"),
    toggle=_flip_completed,
)

EVENTS = EntitySpec(
    slug="events",
    label="Event",
    model=EventItem,
    create_schema=EventCreate,
    update_schema=EventUpdate,
    sort=sorting.sort_events,
    sections=sorting.event_sections,
    section_names=("upcoming", "past"),
    search_fields=("title", "description", "location"),
)

ALL_ENTITIES: Tuple[EntitySpec, ...] = (
    ASSIGNMENTS,
    PROJECTS,
    COLLEGE_PROJECTS,
    PLACEMENTS,
    CERTIFICATES,
    COURSES,
    IMPORTANT,
    EVENTS,
)

ENTITIES_BY_SLUG: Dict[str, EntitySpec] = {spec.slug: spec for spec in ALL_ENTITIES}


def _colliding_name_suffixes(slugs: Sequence[str]) -> Tuple[str, ...]:
    """
    Name endings that would make '<name>-<slug>' equal another user's key.

    'alice-college' + '-projects' reads back as 'alice' + '-college-projects'.
    """
    known = set(slugs)
    suffixes = []
    for slug in slugs:
        parts = slug.split("-")
        for i in range(1, len(parts)):
            if "-".join(parts[i:]) in known:
                suffixes.append("-" + "-".join(parts[:i]))
    return tuple(suffixes)


RESERVED_NAME_SUFFIXES: Tuple[str, ...] = _colliding_name_suffixes([spec.slug for spec in ALL_ENTITIES])
