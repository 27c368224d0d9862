"""Resource conflict detection.

Finds resources booked by two activities whose planned windows overlap.
Overlap is strict: a booking ending exactly when another starts is not a
conflict. Each resource's bookings are compared pairwise, which is fine
for the handful of bookings a single resource normally carries.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import NamedTuple

import structlog

from progress_engine.models.project import Project
from progress_engine.models.report import ConflictPeriod, ResourceConflict

logger = structlog.get_logger(__name__)


class Booking(NamedTuple):
    """Planned use of a resource by one activity."""

    activity_id: str
    start: datetime
    end: datetime


def build_resource_schedule(project: Project) -> dict[str, list[Booking]]:
    """Group bookings by resource ID, in activity discovery order."""
    schedule: dict[str, list[Booking]] = defaultdict(list)
    for activity in project.iter_activities():
        for resource_id in activity.assigned_resources:
            schedule[resource_id].append(
                Booking(activity.activity_id, activity.start_date, activity.end_date)
            )
    return dict(schedule)


def detect_conflicts(project: Project) -> list[ResourceConflict]:
    """Detect double-booked resources across a project.

    Args:
        project: Project graph. Not modified.

    Returns:
        One ``ResourceConflict`` per overlapping pair of bookings on the
        same resource, ordered by resource first appearance and then by
        booking order.
    """
    conflicts: list[ResourceConflict] = []

    for resource_id, bookings in build_resource_schedule(project).items():
        for i, first in enumerate(bookings):
            for second in bookings[i + 1:]:
                if first.start < second.end and second.start < first.end:
                    conflicts.append(
                        ResourceConflict(
                            resource_id=resource_id,
                            conflicting_activities=(
                                first.activity_id,
                                second.activity_id,
                            ),
                            conflict_period=ConflictPeriod(
                                start=max(first.start, second.start),
                                end=min(first.end, second.end),
                            ),
                        )
                    )

    if conflicts:
        logger.info(
            "resource_conflicts_detected",
            project_id=project.project_id,
            count=len(conflicts),
            resources=sorted({c.resource_id for c in conflicts}),
        )

    return conflicts
