"""Result types produced by the calculation engine.

Every result is a frozen pydantic model, separate from the input graph,
so a report can be cached or shared between threads without copying.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from progress_engine.models.project import Resource, TaskDependency


class ResultModel(BaseModel):
    """Base model for immutable calculation results."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class HealthStatus(str, Enum):
    """Overall health classification of a project.

    States:
        healthy: No risk factors triggered.
        at_risk: Schedule slipping; attention needed.
        critical: Severe slippage or overdue critical path work.
    """

    healthy = "healthy"
    at_risk = "at_risk"
    critical = "critical"


class PhaseCompletion(ResultModel):
    """Per-phase roll-up entry of a progress report.

    Attributes:
        phase_id: Phase identifier.
        phase_name: Phase display name.
        completion: Weighted completion of the phase's activities (0.0-1.0).
        weight: Phase weight within the project.
        contribution_to_overall: ``completion * weight``.
        on_schedule: Whether actual completion is within tolerance of the
            time-elapsed plan.
        days_ahead: Schedule variance in days; negative when behind.
    """

    phase_id: str
    phase_name: str
    completion: float
    weight: float
    contribution_to_overall: float
    on_schedule: bool
    days_ahead: float


class ProjectHealth(ResultModel):
    """Health assessment of a project.

    Attributes:
        status: Health classification.
        risk_factors: Triggered risk descriptions.
        recommendations: One recommendation per risk factor, same order.
        schedule_variance: Weighted schedule variance in days.
        budget_variance: Budget variance; always 0.0 as the graph holds no
            cost data.
    """

    status: HealthStatus
    risk_factors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    schedule_variance: float = 0.0
    budget_variance: float = 0.0


class ProgressCalculation(ResultModel):
    """Complete progress report for a project."""

    project_id: str
    overall_completion: float
    phase_completions: list[PhaseCompletion]
    calculated_at: datetime
    critical_path: list[str]
    project_health: ProjectHealth


class ActivitySchedule(ResultModel):
    """CPM dates of one activity, in days from the project start.

    Attributes:
        activity_id: Activity identifier.
        early_start: Earliest possible start.
        early_finish: Earliest possible finish.
        late_start: Latest start that does not delay the project.
        late_finish: Latest finish that does not delay the project.
        total_float: ``late_start - early_start``.
        is_critical: Whether the total float is zero within tolerance.
    """

    activity_id: str
    early_start: float
    early_finish: float
    late_start: float
    late_finish: float
    total_float: float
    is_critical: bool


class CriticalPathResult(ResultModel):
    """Outcome of a CPM forward/backward pass.

    Attributes:
        critical_path: Critical activity IDs in discovery order (phase
            order, then activity order); not guaranteed topological.
        project_duration: Maximum early finish across all activities.
        schedule: CPM dates keyed by activity ID.
    """

    critical_path: list[str] = Field(default_factory=list)
    project_duration: float = 0.0
    schedule: dict[str, ActivitySchedule] = Field(default_factory=dict)

    @property
    def critical_ids(self) -> frozenset[str]:
        """Critical activity IDs as a set for membership lookups."""
        return frozenset(self.critical_path)

    def is_critical(self, activity_id: str) -> bool:
        """Return whether the given activity is on the critical path."""
        entry = self.schedule.get(activity_id)
        return entry is not None and entry.is_critical


class ConflictPeriod(ResultModel):
    """Window during which two bookings of a resource overlap."""

    start: datetime
    end: datetime


class ResourceConflict(ResultModel):
    """A resource booked by two activities at the same time.

    Attributes:
        resource_id: Double-booked resource.
        conflicting_activities: The two activity IDs, in discovery order.
        conflict_period: Overlap window.
    """

    resource_id: str
    conflicting_activities: tuple[str, str]
    conflict_period: ConflictPeriod


class GanttTaskType(str, Enum):
    """Level of a row in the Gantt view."""

    project = "project"
    phase = "phase"
    activity = "activity"


class GanttBaseline(ResultModel):
    """Planned dates shown as the baseline bar."""

    start: datetime
    end: datetime


class GanttTask(ResultModel):
    """One row of the Gantt view."""

    id: str
    name: str
    start: datetime
    end: datetime
    progress: float
    type: GanttTaskType
    parent: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    is_on_critical_path: bool = False
    baseline: GanttBaseline | None = None


class GanttTimeline(ResultModel):
    """Overall date range covered by the Gantt tasks."""

    start: datetime
    end: datetime
    total_days: int


class GanttData(ResultModel):
    """Data needed to render a Gantt chart of a project."""

    tasks: list[GanttTask]
    resources: list[Resource] = Field(default_factory=list)
    dependencies: list[TaskDependency] = Field(default_factory=list)
    timeline: GanttTimeline


class BaselineComparison(ResultModel):
    """Differences between a project and its baseline plan.

    Attributes:
        schedule_variance_days: Planned end slip in days; positive when the
            current plan finishes later than the baseline.
        scope_changes: Human-readable descriptions of added, removed or
            re-estimated activities.
        milestones_at_risk: Phase IDs whose end date moved past the baseline.
    """

    schedule_variance_days: float
    scope_changes: list[str] = Field(default_factory=list)
    milestones_at_risk: list[str] = Field(default_factory=list)
