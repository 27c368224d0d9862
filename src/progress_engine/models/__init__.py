"""Data models for Progress Engine.

Exports the project entity graph consumed by the engine and the result
types it produces.
"""

from __future__ import annotations

from progress_engine.models.project import (
    Activity,
    ActivityStatus,
    DependencyType,
    Document,
    Phase,
    Project,
    ProjectStatus,
    Resource,
    ResourceType,
    TaskDependency,
    effective_weight,
)
from progress_engine.models.report import (
    ActivitySchedule,
    BaselineComparison,
    ConflictPeriod,
    CriticalPathResult,
    GanttData,
    GanttTask,
    GanttTaskType,
    HealthStatus,
    PhaseCompletion,
    ProgressCalculation,
    ProjectHealth,
    ResourceConflict,
)

__all__ = [
    # Project graph
    "Activity",
    "ActivityStatus",
    "DependencyType",
    "Document",
    "Phase",
    "Project",
    "ProjectStatus",
    "Resource",
    "ResourceType",
    "TaskDependency",
    "effective_weight",
    # Results
    "ActivitySchedule",
    "BaselineComparison",
    "ConflictPeriod",
    "CriticalPathResult",
    "GanttData",
    "GanttTask",
    "GanttTaskType",
    "HealthStatus",
    "PhaseCompletion",
    "ProgressCalculation",
    "ProjectHealth",
    "ResourceConflict",
]
