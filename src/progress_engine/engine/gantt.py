"""Gantt chart data assembly.

Turns a project graph into the flat task list a Gantt renderer consumes:
one row for the project, one per phase and one per activity, linked by
``parent``. Drawing the chart is left to the caller.
"""

from __future__ import annotations

import math
from typing import Iterable

from progress_engine.engine.critical_path import calculate_critical_path
from progress_engine.engine.progress import (
    SECONDS_PER_DAY,
    calculate_overall_progress,
    calculate_phase_completion,
)
from progress_engine.models.project import Project, Resource
from progress_engine.models.report import (
    CriticalPathResult,
    GanttBaseline,
    GanttData,
    GanttTask,
    GanttTaskType,
    GanttTimeline,
)


def build_gantt_data(
    project: Project,
    critical_path: CriticalPathResult | None = None,
    resources: Iterable[Resource] = (),
) -> GanttData:
    """Build the Gantt view of a project.

    Args:
        project: Project graph. Not modified.
        critical_path: Previously computed critical path of the project;
            calculated when omitted.
        resources: Resource records to pass through to the renderer.

    Returns:
        ``GanttData`` with tasks in project, phase, activity order and a
        timeline spanning every task.

    Raises:
        CyclicDependencyError: If ``critical_path`` is omitted and the
            dependencies form a cycle.
    """
    if critical_path is None:
        critical_path = calculate_critical_path(project)

    tasks: list[GanttTask] = [
        GanttTask(
            id=project.project_id,
            name=project.project_name,
            start=project.planned_start_date,
            end=project.planned_end_date,
            progress=calculate_overall_progress(project),
            type=GanttTaskType.project,
            baseline=GanttBaseline(
                start=project.planned_start_date,
                end=project.planned_end_date,
            ),
        )
    ]

    for phase in project.phases:
        tasks.append(
            GanttTask(
                id=phase.phase_id,
                name=phase.phase_name,
                start=phase.start_date,
                end=phase.end_date,
                progress=calculate_phase_completion(phase),
                type=GanttTaskType.phase,
                parent=project.project_id,
                baseline=GanttBaseline(start=phase.start_date, end=phase.end_date),
            )
        )
        for activity in phase.activities:
            tasks.append(
                GanttTask(
                    id=activity.activity_id,
                    name=activity.activity_name,
                    start=activity.start_date,
                    end=activity.end_date,
                    progress=activity.percent_complete,
                    type=GanttTaskType.activity,
                    parent=phase.phase_id,
                    dependencies=[dep.predecessor_id for dep in activity.dependencies],
                    resources=list(activity.assigned_resources),
                    is_on_critical_path=critical_path.is_critical(activity.activity_id),
                    baseline=GanttBaseline(
                        start=activity.start_date,
                        end=activity.end_date,
                    ),
                )
            )

    timeline_start = min(task.start for task in tasks)
    timeline_end = max(task.end for task in tasks)
    total_days = math.ceil(
        (timeline_end - timeline_start).total_seconds() / SECONDS_PER_DAY
    )

    return GanttData(
        tasks=tasks,
        resources=list(resources),
        dependencies=list(project.iter_dependencies()),
        timeline=GanttTimeline(
            start=timeline_start,
            end=timeline_end,
            total_days=total_days,
        ),
    )
