"""Shared pytest fixtures for Progress Engine tests.

Provides factory fixtures that build small project graphs anchored on a
fixed start date, so schedule checks can use explicit ``now`` values
expressed in days from that anchor.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable

import pytest

from progress_engine.models import (
    Activity,
    ActivityStatus,
    DependencyType,
    Phase,
    Project,
    TaskDependency,
)

BASE_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def day(offset: float) -> datetime:
    """Datetime ``offset`` days after the fixture anchor date."""
    return BASE_DATE + timedelta(days=offset)


@pytest.fixture
def at_day() -> Callable[[float], datetime]:
    """Convert a day offset into an absolute datetime."""
    return day


@pytest.fixture
def make_activity() -> Callable[..., Activity]:
    """Factory for activities.

    ``depends_on`` lists predecessor IDs; each becomes a dependency of
    ``dependency_type`` with ``lag`` days. Planned dates default to
    ``start_day`` .. ``start_day + duration``.
    """

    def _make(
        activity_id: str,
        duration: float = 1.0,
        *,
        percent_complete: float = 0.0,
        weight: float | None = None,
        start_day: float = 0.0,
        end_day: float | None = None,
        resources: Iterable[str] = (),
        depends_on: Iterable[str] = (),
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
        lag: float = 0.0,
        status: ActivityStatus = ActivityStatus.not_started,
    ) -> Activity:
        if end_day is None:
            end_day = start_day + duration
        return Activity(
            activity_id=activity_id,
            activity_name=f"Activity {activity_id}",
            duration=duration,
            start_date=day(start_day),
            end_date=day(end_day),
            percent_complete=percent_complete,
            weight=weight,
            assigned_resources=list(resources),
            dependencies=[
                TaskDependency(
                    dependency_id=f"{pred}->{activity_id}",
                    predecessor_id=pred,
                    successor_id=activity_id,
                    dependency_type=dependency_type,
                    lag_time=lag,
                )
                for pred in depends_on
            ],
            status=status,
        )

    return _make


@pytest.fixture
def make_phase() -> Callable[..., Phase]:
    """Factory for phases spanning ``start_day`` .. ``end_day``."""

    def _make(
        phase_id: str,
        activities: Iterable[Activity] = (),
        *,
        weight: float = 1.0,
        start_day: float = 0.0,
        end_day: float = 10.0,
    ) -> Phase:
        return Phase(
            phase_id=phase_id,
            phase_name=f"Phase {phase_id}",
            weight=weight,
            start_date=day(start_day),
            end_date=day(end_day),
            activities=list(activities),
        )

    return _make


@pytest.fixture
def make_project() -> Callable[..., Project]:
    """Factory for projects holding the given phases."""

    def _make(
        phases: Iterable[Phase] = (),
        *,
        project_id: str = "proj-1",
        start_day: float = 0.0,
        end_day: float = 100.0,
    ) -> Project:
        return Project(
            project_id=project_id,
            project_name=f"Project {project_id}",
            planned_start_date=day(start_day),
            planned_end_date=day(end_day),
            phases=list(phases),
        )

    return _make
