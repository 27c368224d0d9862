"""Calculation engine for Progress Engine.

This module implements the weighted progress roll-up, project health
assessment, critical path calculation, resource conflict detection,
Gantt data assembly and baseline comparison. Every function is pure and
stateless; none of them modifies the project graph it is given.
"""

from __future__ import annotations

from progress_engine.engine.baseline import compare_to_baseline
from progress_engine.engine.critical_path import (
    FLOAT_TOLERANCE,
    DependencyGraph,
    calculate_critical_path,
    mark_critical_path,
)
from progress_engine.engine.gantt import build_gantt_data
from progress_engine.engine.health import (
    CRITICAL_VARIANCE_DAYS,
    PHASE_DELAY_THRESHOLD_DAYS,
    assess_project_health,
)
from progress_engine.engine.progress import (
    ON_SCHEDULE_TOLERANCE,
    calculate_overall_progress,
    calculate_phase_completion,
    calculate_phase_completions,
    calculate_planned_progress,
    calculate_schedule_variance,
    calculate_weighted_completion,
    generate_progress_report,
    is_phase_on_schedule,
)
from progress_engine.engine.resources import detect_conflicts

__all__ = [
    # Progress
    "ON_SCHEDULE_TOLERANCE",
    "calculate_overall_progress",
    "calculate_phase_completion",
    "calculate_phase_completions",
    "calculate_planned_progress",
    "calculate_schedule_variance",
    "calculate_weighted_completion",
    "generate_progress_report",
    "is_phase_on_schedule",
    # Health
    "CRITICAL_VARIANCE_DAYS",
    "PHASE_DELAY_THRESHOLD_DAYS",
    "assess_project_health",
    # Critical path
    "FLOAT_TOLERANCE",
    "DependencyGraph",
    "calculate_critical_path",
    "mark_critical_path",
    # Resources
    "detect_conflicts",
    # Gantt / baseline
    "build_gantt_data",
    "compare_to_baseline",
]
