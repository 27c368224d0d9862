"""Progress Calculation Engine.

Rolls leaf-level ``percent_complete`` values up into phase and project
completion, and compares them with a time-elapsed plan:

- **Phase completion**: Σ(activity completion × effective weight) /
  Σ effective weight, where the effective weight is the explicit
  activity weight or, failing that, its duration.
- **Overall completion**: Σ(phase completion × phase weight) / Σ phase
  weight, so projects whose phase weights do not sum to 1.0 still
  normalise correctly.
- **Planned progress**: fraction of the phase's planned window that has
  elapsed at ``now``, clamped to [0, 1].

Every function here is pure. ``now`` is the only time input and defaults
to the current UTC time; pass it explicitly for reproducible results.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

import structlog

from progress_engine.engine.critical_path import calculate_critical_path
from progress_engine.engine.health import assess_project_health
from progress_engine.models.project import (
    Activity,
    Phase,
    Project,
    effective_weight,
    ensure_utc,
)
from progress_engine.models.report import PhaseCompletion, ProgressCalculation

logger = structlog.get_logger(__name__)

# A phase within this fraction of its planned progress is still on schedule
ON_SCHEDULE_TOLERANCE = 0.05

SECONDS_PER_DAY = 24 * 60 * 60


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return ensure_utc(now)


def calculate_weighted_completion(activities: Iterable[Activity]) -> float:
    """Weighted average completion of a group of activities.

    Args:
        activities: Activities to roll up.

    Returns:
        Completion in [0, 1]; 0.0 when there are no activities or their
        total effective weight is zero.
    """
    total_weighted = 0.0
    total_weight = 0.0
    for activity in activities:
        weight = effective_weight(activity)
        total_weighted += activity.percent_complete * weight
        total_weight += weight

    return total_weighted / total_weight if total_weight > 0 else 0.0


def calculate_phase_completion(phase: Phase) -> float:
    """Completion of a phase derived from its activities.

    The stored ``phase.completion`` is ignored.
    """
    return calculate_weighted_completion(phase.activities)


def calculate_overall_progress(project: Project) -> float:
    """Weighted completion of the whole project.

    Args:
        project: Project graph.

    Returns:
        Σ(phase completion × phase weight) normalised by the sum of the
        phase weights present; 0.0 for a project without phases or with
        all-zero phase weights.
    """
    total_weighted = 0.0
    total_weight = 0.0
    for phase in project.phases:
        total_weighted += calculate_phase_completion(phase) * phase.weight
        total_weight += phase.weight

    return total_weighted / total_weight if total_weight > 0 else 0.0


def calculate_planned_progress(
    start: datetime,
    end: datetime,
    now: datetime,
) -> float:
    """Fraction of a planned window that has elapsed.

    Returns 0.0 at or before ``start`` and 1.0 at or after ``end``, which
    also covers a zero-length window.
    """
    start, end, now = ensure_utc(start), ensure_utc(end), ensure_utc(now)
    if now <= start:
        return 0.0
    if now >= end:
        return 1.0
    return (now - start).total_seconds() / (end - start).total_seconds()


def is_phase_on_schedule(phase: Phase, now: datetime | None = None) -> bool:
    """Whether a phase's completion keeps up with its elapsed time.

    A phase is on schedule when its completion is no more than
    ``ON_SCHEDULE_TOLERANCE`` below its planned progress.
    """
    now = _resolve_now(now)
    planned = calculate_planned_progress(phase.start_date, phase.end_date, now)
    return calculate_phase_completion(phase) >= planned - ON_SCHEDULE_TOLERANCE


def calculate_schedule_variance(phase: Phase, now: datetime | None = None) -> float:
    """Schedule variance of a phase in days.

    ``(actual completion - planned progress) × phase duration``; positive
    when the phase is ahead of plan, negative when behind.
    """
    now = _resolve_now(now)
    planned = calculate_planned_progress(phase.start_date, phase.end_date, now)
    duration_days = (phase.end_date - phase.start_date).total_seconds() / SECONDS_PER_DAY
    return (calculate_phase_completion(phase) - planned) * duration_days


def calculate_phase_completions(
    project: Project,
    now: datetime | None = None,
) -> list[PhaseCompletion]:
    """Per-phase roll-up entries, in phase order."""
    now = _resolve_now(now)
    completions: list[PhaseCompletion] = []
    for phase in project.phases:
        completion = calculate_phase_completion(phase)
        completions.append(
            PhaseCompletion(
                phase_id=phase.phase_id,
                phase_name=phase.phase_name,
                completion=completion,
                weight=phase.weight,
                contribution_to_overall=completion * phase.weight,
                on_schedule=is_phase_on_schedule(phase, now),
                days_ahead=calculate_schedule_variance(phase, now),
            )
        )
    return completions


def generate_progress_report(
    project: Project,
    now: datetime | None = None,
) -> ProgressCalculation:
    """Generate the full progress report of a project.

    Computes the phase roll-ups, the overall completion and the critical
    path, then assesses project health from both. The project graph is not
    modified.

    Args:
        project: Fully populated project graph.
        now: Reference time for schedule checks. Defaults to the current
            UTC time.

    Returns:
        ``ProgressCalculation`` stamped with the time of computation.

    Raises:
        CyclicDependencyError: If the activity dependencies form a cycle.
    """
    now = _resolve_now(now)

    phase_completions = calculate_phase_completions(project, now)
    overall_completion = calculate_overall_progress(project)
    critical_path = calculate_critical_path(project)
    project_health = assess_project_health(
        project,
        phase_completions,
        critical_path.critical_ids,
    )

    report = ProgressCalculation(
        project_id=project.project_id,
        overall_completion=overall_completion,
        phase_completions=phase_completions,
        calculated_at=datetime.now(timezone.utc),
        critical_path=critical_path.critical_path,
        project_health=project_health,
    )

    logger.info(
        "progress_report_generated",
        project_id=project.project_id,
        overall_completion=round(overall_completion, 4),
        phases=len(phase_completions),
        critical_activities=len(critical_path.critical_path),
        health=project_health.status.value,
    )

    return report
