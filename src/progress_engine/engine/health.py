"""Project health assessment.

Classifies a project as ``healthy``, ``at_risk`` or ``critical`` from its
phase roll-ups and critical path. Each triggered rule adds one risk factor
and exactly one matching recommendation, in the same order.

Rules:

- A phase that is off schedule and more than ``PHASE_DELAY_THRESHOLD_DAYS``
  behind puts the project at least ``at_risk``.
- With such a phase present, a weighted schedule variance
  (Σ days_ahead × phase weight) below ``-CRITICAL_VARIANCE_DAYS`` makes it
  ``critical``.
- Without such a phase, a weighted variance below
  ``-PHASE_DELAY_THRESHOLD_DAYS`` still puts it ``at_risk``.
- Any overdue activity on the critical path makes it ``critical``.

The thresholds are fixed and deliberately not configurable.
"""

from __future__ import annotations

from collections.abc import Collection

import structlog

from progress_engine.models.project import ActivityStatus, Project
from progress_engine.models.report import HealthStatus, PhaseCompletion, ProjectHealth

logger = structlog.get_logger(__name__)

PHASE_DELAY_THRESHOLD_DAYS = 7.0
CRITICAL_VARIANCE_DAYS = 14.0

_SEVERITY = {
    HealthStatus.healthy: 0,
    HealthStatus.at_risk: 1,
    HealthStatus.critical: 2,
}


def _escalate(current: HealthStatus, target: HealthStatus) -> HealthStatus:
    return target if _SEVERITY[target] > _SEVERITY[current] else current


def calculate_weighted_schedule_variance(
    phase_completions: list[PhaseCompletion],
) -> float:
    """Σ(days_ahead × weight) across all phases."""
    return sum(pc.days_ahead * pc.weight for pc in phase_completions)


def assess_project_health(
    project: Project,
    phase_completions: list[PhaseCompletion],
    critical_ids: Collection[str],
) -> ProjectHealth:
    """Assess the overall health of a project.

    Args:
        project: Project graph, used for activity statuses.
        phase_completions: Phase roll-ups for the same project.
        critical_ids: IDs of the activities on the critical path.

    Returns:
        ``ProjectHealth`` with status, risk factors, recommendations and
        the weighted schedule variance.
    """
    risk_factors: list[str] = []
    recommendations: list[str] = []
    status = HealthStatus.healthy

    schedule_variance = calculate_weighted_schedule_variance(phase_completions)

    phases_at_risk = [
        pc
        for pc in phase_completions
        if not pc.on_schedule and pc.days_ahead < -PHASE_DELAY_THRESHOLD_DAYS
    ]
    if phases_at_risk:
        risk_factors.append(f"{len(phases_at_risk)} phase(s) behind schedule")
        recommendations.append("Review resource allocation for delayed phases")
        status = _escalate(status, HealthStatus.at_risk)
        if schedule_variance < -CRITICAL_VARIANCE_DAYS:
            status = _escalate(status, HealthStatus.critical)
    elif schedule_variance < -PHASE_DELAY_THRESHOLD_DAYS:
        risk_factors.append(
            f"Weighted schedule variance of {schedule_variance:.1f} days"
        )
        recommendations.append("Re-baseline the schedule and agree a recovery plan")
        status = _escalate(status, HealthStatus.at_risk)

    overdue_critical = [
        activity.activity_id
        for activity in project.iter_activities()
        if activity.activity_id in critical_ids
        and activity.status is ActivityStatus.overdue
    ]
    if overdue_critical:
        risk_factors.append("Critical path activities are overdue")
        recommendations.append("Prioritize critical path activities immediately")
        status = _escalate(status, HealthStatus.critical)

    if status is not HealthStatus.healthy:
        logger.info(
            "project_health_degraded",
            project_id=project.project_id,
            status=status.value,
            phases_at_risk=[pc.phase_id for pc in phases_at_risk],
            overdue_critical=overdue_critical,
            schedule_variance=round(schedule_variance, 2),
        )

    return ProjectHealth(
        status=status,
        risk_factors=risk_factors,
        recommendations=recommendations,
        schedule_variance=schedule_variance,
        budget_variance=0.0,
    )
