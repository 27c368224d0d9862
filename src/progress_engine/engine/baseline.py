"""Baseline comparison.

Compares the current state of a project with a saved baseline copy of the
same project. Activities and phases are matched by ID.
"""

from __future__ import annotations

import structlog

from progress_engine.engine.progress import SECONDS_PER_DAY
from progress_engine.models.project import Activity, Project
from progress_engine.models.report import BaselineComparison

logger = structlog.get_logger(__name__)


def _activities_by_id(project: Project) -> dict[str, Activity]:
    activities: dict[str, Activity] = {}
    for activity in project.iter_activities():
        activities.setdefault(activity.activity_id, activity)
    return activities


def compare_to_baseline(current: Project, baseline: Project) -> BaselineComparison:
    """Compare a project with its baseline plan.

    Args:
        current: Project as it stands now.
        baseline: Baseline snapshot of the same project.

    Returns:
        ``BaselineComparison`` with the planned end slip in days, scope
        changes (activities added, removed or re-estimated) and the phases
        whose end date moved past the baseline.
    """
    schedule_variance_days = (
        current.planned_end_date - baseline.planned_end_date
    ).total_seconds() / SECONDS_PER_DAY

    current_activities = _activities_by_id(current)
    baseline_activities = _activities_by_id(baseline)

    scope_changes: list[str] = []
    for aid, activity in current_activities.items():
        original = baseline_activities.get(aid)
        if original is None:
            scope_changes.append(f"Added activity {aid} ({activity.activity_name})")
        elif activity.duration != original.duration:
            scope_changes.append(
                f"Duration of {aid} changed from {original.duration:g} "
                f"to {activity.duration:g} days"
            )
    for aid, original in baseline_activities.items():
        if aid not in current_activities:
            scope_changes.append(f"Removed activity {aid} ({original.activity_name})")

    baseline_phase_ends = {phase.phase_id: phase.end_date for phase in baseline.phases}
    milestones_at_risk = [
        phase.phase_id
        for phase in current.phases
        if phase.phase_id in baseline_phase_ends
        and phase.end_date > baseline_phase_ends[phase.phase_id]
    ]

    logger.debug(
        "baseline_compared",
        project_id=current.project_id,
        schedule_variance_days=schedule_variance_days,
        scope_changes=len(scope_changes),
        milestones_at_risk=len(milestones_at_risk),
    )

    return BaselineComparison(
        schedule_variance_days=schedule_variance_days,
        scope_changes=scope_changes,
        milestones_at_risk=milestones_at_risk,
    )
