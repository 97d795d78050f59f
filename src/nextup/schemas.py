"""
Request payloads for every entity.

Create schemas carry the full record minus ``id``; update schemas make every
field optional so that only the fields a client sends are changed. Sending an
explicit ``null`` clears an optional field.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import ConfigDict, Field

from .models import (
    AssignmentBase,
    CertificateBase,
    CollegeProjectBase,
    CollegeProjectStatus,
    CourseBase,
    CourseStatus,
    DateTimeValue,
    EventBase,
    ImportantItemBase,
    Link,
    OptionalDateTime,
    OptionalText,
    PlacementBase,
    PlacementStatus,
    Priority,
    ProjectBase,
    ProjectStatus,
    RequiredText,
    StoredModel,
    TextList,
)


def _example(example: dict) -> ConfigDict:
    return ConfigDict(json_schema_extra={"example": example})


# PUBLIC_INTERFACE
class AssignmentCreate(AssignmentBase):
    """Schema for creating an assignment."""

    model_config = _example(
        {"description": "Essay", "dueDate": "2025-01-01", "tags": ["english"], "completed": False}
    )


# PUBLIC_INTERFACE
class AssignmentUpdate(StoredModel):
    """Partial update of an assignment."""

    description: Optional[RequiredText] = None
    due_date: Optional[DateTimeValue] = None
    tags: Optional[TextList] = None
    notes: OptionalText = None
    completed: Optional[bool] = None


# PUBLIC_INTERFACE
class ProjectCreate(ProjectBase):
    """Schema for creating a personal project. ``completed`` is derived from ``status``."""

    model_config = _example(
        {"description": "Portfolio site", "dueDate": "2025-03-01", "status": "In Progress", "tags": ["web"]}
    )


# PUBLIC_INTERFACE
class ProjectUpdate(StoredModel):
    """Partial update of a personal project."""

    description: Optional[RequiredText] = None
    details: OptionalText = None
    notes: OptionalText = None
    due_date: Optional[DateTimeValue] = None
    tags: Optional[TextList] = None
    status: Optional[ProjectStatus] = None


# PUBLIC_INTERFACE
class CollegeProjectCreate(CollegeProjectBase):
    """Schema for creating a college project."""

    model_config = _example(
        {
            "description": "Compiler design mini project",
            "course": "CS402",
            "teamMembers": ["Asha", "Ravi"],
            "dueDate": "2025-04-15",
            "status": "Planning",
        }
    )


# PUBLIC_INTERFACE
class CollegeProjectUpdate(StoredModel):
    """Partial update of a college project."""

    description: Optional[RequiredText] = None
    details: OptionalText = None
    notes: OptionalText = None
    course: OptionalText = None
    team_members: Optional[TextList] = None
    due_date: Optional[DateTimeValue] = None
    tags: Optional[TextList] = None
    status: Optional[CollegeProjectStatus] = None


# PUBLIC_INTERFACE
class PlacementCreate(PlacementBase):
    """Schema for creating a placement application."""

    model_config = _example(
        {
            "company": "Acme",
            "role": "Backend Intern",
            "status": "Applied",
            "applicationDate": "2025-02-10",
            "link": "acme.example/jobs/42",
        }
    )


# PUBLIC_INTERFACE
class PlacementUpdate(StoredModel):
    """Partial update of a placement application."""

    company: Optional[RequiredText] = None
    role: Optional[RequiredText] = None
    status: Optional[PlacementStatus] = None
    application_date: Optional[DateTimeValue] = None
    interview_date: OptionalDateTime = None
    link: Link = None
    notes: OptionalText = None


# PUBLIC_INTERFACE
class CertificateCreate(CertificateBase):
    """Schema for adding a certificate."""

    model_config = _example(
        {
            "title": "Cloud Practitioner",
            "issuingOrganization": "AWS",
            "issueDate": "2024-11-20",
            "skills": "cloud, billing",
        }
    )


# PUBLIC_INTERFACE
class CertificateUpdate(StoredModel):
    """Partial update of a certificate."""

    title: Optional[RequiredText] = None
    issuing_organization: Optional[RequiredText] = None
    issue_date: Optional[DateTimeValue] = None
    expiration_date: OptionalDateTime = None
    credential_id: OptionalText = None
    credential_url: Link = None
    skills: Optional[TextList] = None
    notes: OptionalText = None


# PUBLIC_INTERFACE
class CourseCreate(CourseBase):
    """Schema for creating a course. ``completionDate`` is kept only for completed courses."""

    model_config = _example(
        {"title": "Deep Learning", "platform": "Coursera", "status": "In Progress", "link": "coursera.org/dl"}
    )


# PUBLIC_INTERFACE
class CourseUpdate(StoredModel):
    """Partial update of a course."""

    title: Optional[RequiredText] = None
    platform: Optional[RequiredText] = None
    status: Optional[CourseStatus] = None
    completion_date: OptionalDateTime = None
    link: Link = None
    certificate_url: Link = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: OptionalText = None


# PUBLIC_INTERFACE
class ImportantItemCreate(ImportantItemBase):
    """Schema for creating an important item."""

    model_config = _example({"title": "Renew passport", "priority": "High", "dueDate": "2025-06-30"})


# PUBLIC_INTERFACE
class ImportantItemUpdate(StoredModel):
    """Partial update of an important item."""

    title: Optional[RequiredText] = None
    description: OptionalText = None
    due_date: OptionalDateTime = None
    tags: Optional[TextList] = None
    priority: Optional[Priority] = None
    completed: Optional[bool] = None


# PUBLIC_INTERFACE
class EventCreate(EventBase):
    """Schema for creating an event. ``endDate`` may not precede ``startDate``."""

    model_config = _example(
        {"title": "Hackathon", "startDate": "2025-05-03", "endDate": "2025-05-04", "location": "Main hall"}
    )


# PUBLIC_INTERFACE
class EventUpdate(StoredModel):
    """Partial update of an event."""

    title: Optional[RequiredText] = None
    description: OptionalText = None
    start_date: Optional[DateTimeValue] = None
    end_date: OptionalDateTime = None
    location: OptionalText = None
    link: Link = None


# PUBLIC_INTERFACE
class SessionLogin(StoredModel):
    """Payload to log in under a display name."""

    model_config = _example({"name": "Alice Smith"})

    name: RequiredText = Field(..., description="Display name; namespaces every stored record")


# PUBLIC_INTERFACE
class SessionOut(StoredModel):
    """The current session."""

    name: str
    initials: str


# PUBLIC_INTERFACE
class DashboardStat(StoredModel):
    """One overview tile on the dashboard."""

    title: str
    value: int
    href: str
    description: Optional[str] = None


# PUBLIC_INTERFACE
class DashboardOut(StoredModel):
    """Dashboard overview for the current user."""

    user_name: str
    stats: List[DashboardStat]
