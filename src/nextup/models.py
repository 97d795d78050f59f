"""
Record models for every tracked entity.

Records are stored as JSON objects with camelCase keys (``dueDate``,
``issuingOrganization``...) inside one JSON array per user and entity.
Status-bearing records recompute ``completed`` from ``status`` whenever they
are validated, so the flag always agrees with the status once read through
these models.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .utils import normalize_link, parse_datetime, split_list, strip_or_none


def _require_text(value: str) -> str:
    s = value.strip()
    if not s:
        raise ValueError("must not be empty")
    return s


RequiredText = Annotated[str, AfterValidator(_require_text)]
OptionalText = Annotated[Optional[str], BeforeValidator(strip_or_none)]
TextList = Annotated[List[str], BeforeValidator(split_list)]
Link = Annotated[Optional[str], BeforeValidator(normalize_link)]
DateTimeValue = Annotated[datetime, BeforeValidator(parse_datetime)]
OptionalDateTime = Annotated[Optional[datetime], BeforeValidator(parse_datetime)]

ProjectStatus = Literal["Planning", "In Progress", "Completed", "On Hold"]
CollegeProjectStatus = Literal["Planning", "In Progress", "Completed", "Submitted", "Graded"]
PlacementStatus = Literal[
    "Applied",
    "Interviewing",
    "Offer Received",
    "Offer Accepted",
    "Offer Declined",
    "Rejected",
    "Withdrawn",
]
CourseStatus = Literal["Not Started", "In Progress", "Completed"]
Priority = Literal["Low", "Medium", "High"]


class StoredModel(BaseModel):
    """Base for all records and payloads: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_storage(self) -> Dict[str, Any]:
        """Return the JSON-ready dict written to storage (camelCase, no nulls)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StatusTracked(StoredModel):
    """
    Mixin for records whose ``completed`` flag is derived from ``status``.

    Subclasses declare ``status`` and the set of statuses counting as done.
    """

    COMPLETED_STATUSES: ClassVar[FrozenSet[str]] = frozenset()

    completed: bool = Field(default=False, description="Derived from status; read-only")

    @model_validator(mode="after")
    def derive_completed(self) -> "StatusTracked":
        self.completed = getattr(self, "status", None) in self.COMPLETED_STATUSES
        return self


# Assignments -------------------------------------------------------------


class AssignmentBase(StoredModel):
    description: RequiredText = Field(..., description="What has to be handed in")
    due_date: DateTimeValue = Field(..., description="Due date as ISO8601")
    tags: TextList = Field(default_factory=list, description="Free-form tags")
    notes: OptionalText = Field(default=None, description="Optional notes")
    completed: bool = Field(default=False, description="Completion status flag")


# PUBLIC_INTERFACE
class Assignment(AssignmentBase):
    """An assignment with a due date; completion is toggled directly."""

    id: str


# Personal projects -------------------------------------------------------


class ProjectBase(StatusTracked):
    COMPLETED_STATUSES: ClassVar[FrozenSet[str]] = frozenset({"Completed"})

    description: RequiredText = Field(..., description="Project name/description")
    details: OptionalText = None
    notes: OptionalText = None
    due_date: DateTimeValue
    tags: TextList = Field(default_factory=list)
    status: ProjectStatus = "Planning"


# PUBLIC_INTERFACE
class Project(ProjectBase):
    """A personal project; completed when status is Completed."""

    id: str


# College projects --------------------------------------------------------


class CollegeProjectBase(StatusTracked):
    COMPLETED_STATUSES: ClassVar[FrozenSet[str]] = frozenset({"Completed", "Submitted", "Graded"})

    description: RequiredText
    details: OptionalText = None
    notes: OptionalText = None
    course: OptionalText = None
    team_members: TextList = Field(default_factory=list)
    due_date: DateTimeValue
    tags: TextList = Field(default_factory=list)
    status: CollegeProjectStatus = "Planning"


# PUBLIC_INTERFACE
class CollegeProject(CollegeProjectBase):
    """A college project; completed once Completed, Submitted or Graded."""

    id: str


# Placements --------------------------------------------------------------


class PlacementBase(StatusTracked):
    COMPLETED_STATUSES: ClassVar[FrozenSet[str]] = frozenset(
        {"Offer Accepted", "Offer Declined", "Rejected", "Withdrawn"}
    )

    company: RequiredText
    role: RequiredText
    status: PlacementStatus = "Applied"
    application_date: DateTimeValue
    interview_date: OptionalDateTime = None
    link: Link = None
    notes: OptionalText = None


# PUBLIC_INTERFACE
class Placement(PlacementBase):
    """A placement application; completed once it reaches a final outcome."""

    id: str


# Certificates ------------------------------------------------------------


class CertificateBase(StoredModel):
    title: RequiredText
    issuing_organization: RequiredText
    issue_date: DateTimeValue
    expiration_date: OptionalDateTime = None
    credential_id: OptionalText = None
    credential_url: Link = None
    skills: TextList = Field(default_factory=list)
    notes: OptionalText = None


# PUBLIC_INTERFACE
class Certificate(CertificateBase):
    """An earned certificate. Certificates carry no completion flag."""

    id: str


# Courses -----------------------------------------------------------------


class CourseBase(StatusTracked):
    COMPLETED_STATUSES: ClassVar[FrozenSet[str]] = frozenset({"Completed"})

    title: RequiredText
    platform: RequiredText
    status: CourseStatus = "Not Started"
    completion_date: OptionalDateTime = None
    link: Link = None
    certificate_url: Link = None
    rating: Optional[int] = Field(default=None, ge=1, le=5, description="1-5 star rating")
    notes: OptionalText = None

    @model_validator(mode="after")
    def drop_completion_date(self) -> "CourseBase":
        # completionDate only means something for finished courses
        if self.status != "Completed":
            self.completion_date = None
        return self


# PUBLIC_INTERFACE
class Course(CourseBase):
    """An online or university course; completed when status is Completed."""

    id: str


# Important items ---------------------------------------------------------


class ImportantItemBase(StoredModel):
    title: RequiredText
    description: OptionalText = None
    due_date: OptionalDateTime = None
    tags: TextList = Field(default_factory=list)
    priority: Priority = "Medium"
    completed: bool = False


# PUBLIC_INTERFACE
class ImportantItem(ImportantItemBase):
    """A prioritised reminder with an optional deadline."""

    id: str


# Events ------------------------------------------------------------------


class EventBase(StoredModel):
    title: RequiredText
    description: OptionalText = None
    start_date: DateTimeValue
    end_date: OptionalDateTime = None
    location: OptionalText = None
    link: Link = None

    @model_validator(mode="after")
    def check_dates(self) -> "EventBase":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End Date cannot be before Start Date.")
        return self


# PUBLIC_INTERFACE
class EventItem(EventBase):
    """A dated event; past or upcoming is derived from its start date."""

    id: str
