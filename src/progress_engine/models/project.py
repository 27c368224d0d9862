"""Project entity graph consumed by the calculation engine.

Defines the Project -> Phase -> Activity hierarchy together with typed
task dependencies, documents and resources. The graph is built outside
the engine (from persisted data or a template) and handed in as a whole;
the engine treats it as read-only input.

Field names are snake_case; every model also accepts the camelCase keys
produced by the front end (``projectId``, ``percentComplete``, ...), and
``model_dump(by_alias=True)`` writes them back in that form.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Iterator

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntityModel(BaseModel):
    """Base model shared by all entities in the project graph."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ProjectStatus(str, Enum):
    """Lifecycle status for a project.

    States:
        planning: Project is being scoped and scheduled.
        in_progress: Work is underway.
        on_hold: Work temporarily suspended.
        completed: All phases finished.
        cancelled: Project abandoned.
    """

    planning = "planning"
    in_progress = "in_progress"
    on_hold = "on_hold"
    completed = "completed"
    cancelled = "cancelled"


class ActivityStatus(str, Enum):
    """Execution status of a single activity.

    States:
        not_started: No work recorded yet.
        in_progress: Work has started.
        completed: Activity finished.
        blocked: Activity cannot proceed due to an external factor.
        overdue: Activity has passed its planned end without finishing.
    """

    not_started = "not_started"
    in_progress = "in_progress"
    completed = "completed"
    blocked = "blocked"
    overdue = "overdue"


class DependencyType(str, Enum):
    """Relationship type between a predecessor and a successor activity.

    Attributes:
        FINISH_TO_START: Successor starts after the predecessor finishes.
        START_TO_START: Successor starts after the predecessor starts.
        FINISH_TO_FINISH: Successor finishes after the predecessor finishes.
        START_TO_FINISH: Successor finishes after the predecessor starts.
    """

    FINISH_TO_START = "FS"
    START_TO_START = "SS"
    FINISH_TO_FINISH = "FF"
    START_TO_FINISH = "SF"


# Integer codes used by older exports of the front end
_LEGACY_DEPENDENCY_CODES: dict[int, DependencyType] = {
    1: DependencyType.FINISH_TO_START,
    2: DependencyType.START_TO_START,
    3: DependencyType.FINISH_TO_FINISH,
    4: DependencyType.START_TO_FINISH,
}


class ResourceType(str, Enum):
    """Category of a schedulable resource."""

    team = "team"
    equipment = "equipment"
    material = "material"
    specialist = "specialist"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class TaskDependency(EntityModel):
    """Directed edge between two activities.

    Dependencies are stored on the successor activity's ``dependencies``
    list; the predecessor may live in any phase of the project.

    Attributes:
        dependency_id: Unique identifier of the dependency.
        predecessor_id: Activity that drives the successor.
        successor_id: Activity constrained by the predecessor.
        dependency_type: Relationship type.
        lag_time: Delay in days; negative values are lead time.
    """

    dependency_id: str
    predecessor_id: str
    successor_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag_time: float = 0.0

    @field_validator("dependency_type", mode="before")
    @classmethod
    def coerce_dependency_type(cls, v: Any) -> Any:
        """Accept legacy integer codes and member names."""
        if isinstance(v, bool):
            return v
        if isinstance(v, int):
            if v not in _LEGACY_DEPENDENCY_CODES:
                raise ValueError(f"Unknown dependency type code: {v}")
            return _LEGACY_DEPENDENCY_CODES[v]
        if isinstance(v, str) and v.upper() in DependencyType.__members__:
            return DependencyType[v.upper()]
        return v


def _check_date_order(start: datetime, end: datetime, start_name: str, end_name: str) -> None:
    if end < start:
        raise ValueError(f"{end_name} must not be before {start_name}")


class Document(EntityModel):
    """Document attached to an activity."""

    document_id: str
    activity_id: str
    document_name: str
    file_name: str
    version: int = 1
    upload_date: UTCDateTime
    uploader_id: str
    file_size: int = Field(default=0, ge=0)
    file_type: str = ""
    url: str | None = None
    description: str | None = None


class Resource(EntityModel):
    """Schedulable resource referenced by id from activities.

    Only the identifier takes part in calculations; the remaining fields
    are carried through for consumers such as the Gantt view.
    """

    resource_id: str
    resource_name: str
    resource_type: ResourceType = ResourceType.team
    availability: float = Field(default=1.0, ge=0.0, le=1.0)
    cost: float | None = None
    skills: list[str] = Field(default_factory=list)
    is_active: bool = True


class Activity(EntityModel):
    """Leaf unit of work within a phase.

    Attributes:
        activity_id: Unique identifier across the whole project.
        phase_id: Owning phase.
        activity_name: Display name.
        duration: Planned duration in days.
        start_date: Planned start.
        end_date: Planned end.
        actual_start_date: Recorded start, if any.
        actual_end_date: Recorded end, if any.
        percent_complete: Authoritative completion fraction (0.0-1.0).
        weight: Optional explicit effort weight; see ``effective_weight``.
        assigned_resources: Resource IDs booked by this activity.
        dependencies: Dependencies in which this activity is the successor.
        documents: Attached documents.
        is_on_critical_path: Critical path annotation for rendering.
        status: Execution status.
        notes: Free-text notes.
    """

    activity_id: str
    phase_id: str | None = None
    activity_name: str
    duration: float = Field(ge=0)
    start_date: UTCDateTime
    end_date: UTCDateTime
    actual_start_date: UTCDateTime | None = None
    actual_end_date: UTCDateTime | None = None
    percent_complete: float = Field(default=0.0, ge=0.0, le=1.0)
    weight: float | None = Field(default=None, ge=0)
    assigned_resources: list[str] = Field(default_factory=list)
    dependencies: list[TaskDependency] = Field(default_factory=list)
    documents: list[Document] = Field(default_factory=list)
    is_on_critical_path: bool = False
    status: ActivityStatus = ActivityStatus.not_started
    notes: str | None = None

    @field_validator("assigned_resources")
    @classmethod
    def dedupe_resources(cls, v: list[str]) -> list[str]:
        """Collapse repeated resource IDs, keeping first-seen order."""
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_dates(self) -> Activity:
        _check_date_order(self.start_date, self.end_date, "start_date", "end_date")
        return self


class Phase(EntityModel):
    """Weighted stage of a project.

    ``completion`` is whatever the data source stored; the engine always
    recomputes it from the activities.
    """

    phase_id: str
    project_id: str | None = None
    phase_name: str
    weight: float = Field(default=0.0, ge=0)
    start_date: UTCDateTime
    end_date: UTCDateTime
    actual_start_date: UTCDateTime | None = None
    actual_end_date: UTCDateTime | None = None
    completion: float = 0.0
    activities: list[Activity] = Field(default_factory=list)
    order: int = 0

    @model_validator(mode="after")
    def check_dates(self) -> Phase:
        _check_date_order(self.start_date, self.end_date, "start_date", "end_date")
        return self


class Project(EntityModel):
    """Root aggregate of the project graph.

    ``overall_completion`` is informational only and is never read by the
    engine.
    """

    project_id: str
    project_name: str
    project_owner: str = ""
    main_contractor: str = ""
    planned_start_date: UTCDateTime
    planned_end_date: UTCDateTime
    actual_start_date: UTCDateTime | None = None
    actual_end_date: UTCDateTime | None = None
    status: ProjectStatus = ProjectStatus.planning
    overall_completion: float = 0.0
    phases: list[Phase] = Field(default_factory=list)
    created_at: UTCDateTime = Field(default_factory=_utcnow)
    updated_at: UTCDateTime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def check_dates(self) -> Project:
        _check_date_order(
            self.planned_start_date,
            self.planned_end_date,
            "planned_start_date",
            "planned_end_date",
        )
        return self

    def iter_activities(self) -> Iterator[Activity]:
        """Yield every activity in phase order, then activity order."""
        for phase in self.phases:
            yield from phase.activities

    def iter_dependencies(self) -> Iterator[TaskDependency]:
        """Yield every dependency stored anywhere in the project."""
        for activity in self.iter_activities():
            yield from activity.dependencies


def effective_weight(activity: Activity) -> float:
    """Return the effort weight used in completion roll-ups.

    An explicit ``weight`` wins (including an explicit zero); otherwise the
    activity's duration doubles as its effort weight.
    """
    if activity.weight is not None:
        return activity.weight
    return activity.duration
