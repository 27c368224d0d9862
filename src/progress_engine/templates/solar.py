"""Solar rooftop installation project template.

Builds a complete project graph for a standard solar installation:
four weighted phases laid end to end, their activities with planned
dates and default resources, and the standard dependency network
linking them.

Phase layout (share of the planned timeline, equal to the phase weight):

- Planning & Permitting (15%): activities run one after another.
- Procurement & Logistics (10%): activities run in parallel over the
  whole phase.
- Construction & Installation (65%): the four roof works run in parallel
  for 60% of the phase, then the electrical activities run in sequence.
- Testing & Handover (10%): activities run one after another.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from progress_engine.engine.progress import SECONDS_PER_DAY
from progress_engine.models.project import (
    Activity,
    DependencyType,
    Phase,
    Project,
    ProjectStatus,
    TaskDependency,
    ensure_utc,
)

ROOF_WORK_SHARE = 0.6
BASE_DURATION_DAYS = 120
BASE_CAPACITY_KW = 100
LARGE_SYSTEM_KW = 500


@dataclass(frozen=True)
class PhaseTemplate:
    """Definition of one template phase."""

    key: str
    name: str
    weight: float
    activities: tuple[str, ...]


SOLAR_PHASES: tuple[PhaseTemplate, ...] = (
    PhaseTemplate(
        key="planning",
        name="Planning & Permitting",
        weight=0.15,
        activities=(
            "Kick-off & Scope Verification",
            "Detailed Survey & Site Assessment",
            "Engineering Design Approval by PWA",
            "Building Modification Permit",
            "Electrical Installation Permit",
            "Environmental Impact Assessment",
            "Grid Connection Application",
        ),
    ),
    PhaseTemplate(
        key="procurement",
        name="Procurement & Logistics",
        weight=0.10,
        activities=(
            "PV Module Procurement",
            "Inverter System Procurement",
            "Electrical Components Procurement",
            "Mounting System Procurement",
            "Delivery Coordination",
            "Quality Inspection of Materials",
        ),
    ),
    PhaseTemplate(
        key="construction",
        name="Construction & Installation",
        weight=0.65,
        activities=(
            "Work on Clear Water Tank Roof 1",
            "Work on Clear Water Tank Roof 2",
            "Work on Administration Building Roof",
            "Work on Carport Roof",
            "DC Electrical System Installation",
            "AC Electrical System Installation",
            "Complete DC and AC Electrical System Interconnection",
            "Safety System Installation",
            "Monitoring System Setup",
        ),
    ),
    PhaseTemplate(
        key="testing",
        name="Testing & Handover",
        weight=0.10,
        activities=(
            "Pre-Commissioning Test",
            "Commissioning Test",
            "Performance Testing",
            "Safety Testing",
            "Grid Connection Testing",
            "Documentation & Handover",
            "Training & Knowledge Transfer",
            "Warranty Registration",
        ),
    ),
)

DEFAULT_RESOURCES: dict[str, list[str]] = {
    # Planning
    "Kick-off & Scope Verification": ["project-manager", "client-representative"],
    "Detailed Survey & Site Assessment": ["surveyor", "engineer"],
    "Engineering Design Approval by PWA": ["design-engineer", "pwa-liaison"],
    "Building Modification Permit": ["permit-specialist"],
    "Electrical Installation Permit": ["electrical-engineer", "permit-specialist"],
    "Environmental Impact Assessment": ["environmental-consultant"],
    "Grid Connection Application": ["grid-connection-specialist"],
    # Procurement
    "PV Module Procurement": ["procurement-manager"],
    "Inverter System Procurement": ["procurement-manager", "electrical-engineer"],
    "Electrical Components Procurement": ["procurement-manager"],
    "Mounting System Procurement": ["procurement-manager", "structural-engineer"],
    "Delivery Coordination": ["logistics-coordinator"],
    "Quality Inspection of Materials": ["quality-inspector"],
    # Construction
    "Work on Clear Water Tank Roof 1": ["installation-crew-1", "crane-1", "safety-supervisor"],
    "Work on Clear Water Tank Roof 2": ["installation-crew-2", "crane-1", "safety-supervisor"],
    "Work on Administration Building Roof": ["installation-crew-1", "crane-1", "safety-supervisor"],
    "Work on Carport Roof": ["installation-crew-2", "crane-1", "safety-supervisor"],
    "DC Electrical System Installation": ["electrical-team-1", "electrician-supervisor"],
    "AC Electrical System Installation": ["electrical-team-1", "electrician-supervisor"],
    "Complete DC and AC Electrical System Interconnection": [
        "electrical-team-1",
        "electrical-engineer",
    ],
    "Safety System Installation": ["safety-specialist", "electrical-team-1"],
    "Monitoring System Setup": ["monitoring-specialist", "it-technician"],
    # Testing
    "Pre-Commissioning Test": ["commissioning-engineer", "electrical-team-1"],
    "Commissioning Test": ["commissioning-engineer", "quality-inspector"],
    "Performance Testing": ["performance-analyst", "commissioning-engineer"],
    "Safety Testing": ["safety-inspector", "electrical-team-1"],
    "Grid Connection Testing": ["grid-connection-specialist", "electrical-engineer"],
    "Documentation & Handover": ["project-manager", "documentation-specialist"],
    "Training & Knowledge Transfer": ["training-specialist", "operations-manager"],
    "Warranty Registration": ["warranty-specialist", "project-manager"],
}

FALLBACK_RESOURCE = "general-contractor"


def get_default_resources(activity_name: str) -> list[str]:
    """Default resource IDs for a template activity name."""
    return list(DEFAULT_RESOURCES.get(activity_name, [FALLBACK_RESOURCE]))


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def _make_activity(
    phase_id: str,
    index: int,
    name: str,
    start: datetime,
    end: datetime,
) -> Activity:
    return Activity(
        activity_id=f"{phase_id}-a{index + 1:02d}",
        phase_id=phase_id,
        activity_name=name,
        duration=_days_between(start, end),
        start_date=start,
        end_date=end,
        assigned_resources=get_default_resources(name),
    )


def _sequential_activities(
    phase_id: str,
    names: tuple[str, ...],
    phase_start: datetime,
    phase_end: datetime,
    first_index: int = 0,
) -> list[Activity]:
    """Split a window into back-to-back activities of equal length.

    The last activity always ends on ``phase_end``; rounding up the slot
    length may leave the final slots shorter.
    """
    slot_days = math.ceil(_days_between(phase_start, phase_end) / len(names))
    activities: list[Activity] = []
    for i, name in enumerate(names):
        start = min(phase_start + timedelta(days=i * slot_days), phase_end)
        if i == len(names) - 1:
            end = phase_end
        else:
            end = min(start + timedelta(days=slot_days), phase_end)
        activities.append(_make_activity(phase_id, first_index + i, name, start, end))
    return activities


def _parallel_activities(
    phase_id: str,
    names: tuple[str, ...],
    start: datetime,
    end: datetime,
) -> list[Activity]:
    return [
        _make_activity(phase_id, i, name, start, end) for i, name in enumerate(names)
    ]


def _construction_activities(
    phase_id: str,
    names: tuple[str, ...],
    phase_start: datetime,
    phase_end: datetime,
) -> list[Activity]:
    roof_names = tuple(name for name in names if "Roof" in name)
    electrical_names = tuple(name for name in names if "Roof" not in name)

    roof_days = math.ceil(_days_between(phase_start, phase_end) * ROOF_WORK_SHARE)
    electrical_start = phase_start + timedelta(days=roof_days)

    activities = _parallel_activities(phase_id, roof_names, phase_start, electrical_start)
    activities.extend(
        _sequential_activities(
            phase_id,
            electrical_names,
            electrical_start,
            phase_end,
            first_index=len(roof_names),
        )
    )
    return activities


def _dependency(
    predecessor: Activity,
    successor: Activity,
    dependency_type: DependencyType = DependencyType.FINISH_TO_START,
) -> TaskDependency:
    return TaskDependency(
        dependency_id=f"dep-{predecessor.activity_id}-{successor.activity_id}",
        predecessor_id=predecessor.activity_id,
        successor_id=successor.activity_id,
        dependency_type=dependency_type,
        lag_time=0,
    )


def create_standard_dependencies(phases: list[Phase]) -> list[TaskDependency]:
    """Standard dependency network of a solar project.

    - FS from the last activity of each phase to the first of the next.
    - FS from every roof work to the DC installation.
    - FS from the DC installation to the AC installation.
    - FF from both installations to the DC/AC interconnection.

    Args:
        phases: Phases in execution order.

    Returns:
        The dependencies; they are not attached to any activity.
    """
    dependencies: list[TaskDependency] = []

    populated = [phase for phase in phases if phase.activities]
    for current, following in zip(populated, populated[1:]):
        dependencies.append(_dependency(current.activities[-1], following.activities[0]))

    construction = next(
        (phase for phase in phases if "Construction" in phase.phase_name), None
    )
    if construction is None:
        return dependencies

    def find(fragment: str) -> Activity | None:
        return next(
            (a for a in construction.activities if fragment in a.activity_name), None
        )

    roof_work = [a for a in construction.activities if "Roof" in a.activity_name]
    dc_install = find("DC Electrical")
    ac_install = find("AC Electrical")
    interconnection = find("Interconnection")

    if dc_install is not None:
        for roof in roof_work:
            dependencies.append(_dependency(roof, dc_install))

    if dc_install is not None and ac_install is not None:
        dependencies.append(_dependency(dc_install, ac_install))

        if interconnection is not None:
            for source in (dc_install, ac_install):
                dependencies.append(
                    _dependency(source, interconnection, DependencyType.FINISH_TO_FINISH)
                )

    return dependencies


def create_solar_project(
    project_name: str,
    planned_start_date: datetime,
    planned_end_date: datetime,
    project_owner: str = "",
    main_contractor: str = "",
    project_id: str | None = None,
) -> Project:
    """Create a solar installation project from the template.

    Phases are laid end to end, each lasting its weight's share of the
    planned timeline (rounded up to whole days), so the last phase may end
    slightly after ``planned_end_date``. The standard dependencies are
    attached to their successor activities.

    Args:
        project_name: Display name of the project.
        planned_start_date: Planned start.
        planned_end_date: Planned end.
        project_owner: Owning organisation.
        main_contractor: Main contractor.
        project_id: Identifier to use; a UUID is generated when omitted.

    Returns:
        A fully populated ``Project`` in ``planning`` status.

    Raises:
        ValueError: If the planned end is not after the planned start.
    """
    start = ensure_utc(planned_start_date)
    end = ensure_utc(planned_end_date)
    if end <= start:
        raise ValueError("planned_end_date must be after planned_start_date")

    project_id = project_id or str(uuid.uuid4())
    total_days = math.ceil(_days_between(start, end))

    phases: list[Phase] = []
    phase_start = start
    for order, template in enumerate(SOLAR_PHASES, start=1):
        phase_end = phase_start + timedelta(days=math.ceil(total_days * template.weight))
        phase_id = f"{project_id}-{template.key}"

        if template.key == "procurement":
            activities = _parallel_activities(
                phase_id, template.activities, phase_start, phase_end
            )
        elif template.key == "construction":
            activities = _construction_activities(
                phase_id, template.activities, phase_start, phase_end
            )
        else:
            activities = _sequential_activities(
                phase_id, template.activities, phase_start, phase_end
            )

        phases.append(
            Phase(
                phase_id=phase_id,
                project_id=project_id,
                phase_name=template.name,
                weight=template.weight,
                start_date=phase_start,
                end_date=phase_end,
                activities=activities,
                order=order,
            )
        )
        phase_start = phase_end

    activities_by_id = {a.activity_id: a for phase in phases for a in phase.activities}
    for dep in create_standard_dependencies(phases):
        activities_by_id[dep.successor_id].dependencies.append(dep)

    return Project(
        project_id=project_id,
        project_name=project_name,
        project_owner=project_owner,
        main_contractor=main_contractor,
        planned_start_date=start,
        planned_end_date=end,
        status=ProjectStatus.planning,
        phases=phases,
    )


def estimate_project_duration(system_capacity_kw: float) -> int:
    """Estimated duration in days, scaling linearly from 120 days per 100 kW.

    Small systems never go below half the base duration.
    """
    scale = system_capacity_kw / BASE_CAPACITY_KW
    return math.ceil(BASE_DURATION_DAYS * max(0.5, scale))


def get_recommended_resources(system_capacity_kw: float) -> list[str]:
    """Recommended resource IDs for a system of the given capacity."""
    resources = [
        "project-manager",
        "site-supervisor",
        "safety-supervisor",
        "quality-inspector",
    ]
    if system_capacity_kw > LARGE_SYSTEM_KW:
        resources.extend(
            [
                "installation-crew-1",
                "installation-crew-2",
                "electrical-team-1",
                "electrical-team-2",
                "crane-1",
                "crane-2",
            ]
        )
    else:
        resources.extend(["installation-crew-1", "electrical-team-1", "crane-1"])
    return resources
